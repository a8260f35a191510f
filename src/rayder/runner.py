# runner.py
from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable, List, Mapping, Optional

from .commands import run_task
from .errors import CommandFailure
from .gate import CompletionPolicy, CompletionRecord, unmet_dependencies
from .model import Task, Workflow
from .results import ResultAggregator, RunReport, TaskResult
from .slots import DEFAULT_CAPACITY, ConcurrencySlot
from .ui.console import Console

logger = logging.getLogger(__name__)

# (task, variables) -> None, raising CommandFailure when the task fails
TaskExecutor = Callable[[Task, Mapping[str, str]], None]


class Orchestrator:
    """
    Single top-to-bottom pass over a workflow.

    - Sequential tasks run inline and block the pass.
    - Parallel tasks take a ConcurrencySlot, go to the pool, and the pass
      moves on at once; their futures are joined after the last task.
    - Each task is gated exactly once against the CompletionRecord. An
      unmet dependency means a skip, never a wait.
    - A failed task is recorded and the pass continues.
    """

    def __init__(
        self,
        workflow: Workflow,
        variables: Mapping[str, str],
        *,
        capacity: int = DEFAULT_CAPACITY,
        policy: CompletionPolicy = CompletionPolicy.ANY_TERMINAL,
        executor: TaskExecutor = run_task,
        console: Optional[Console] = None,
    ):
        self.workflow = workflow
        self.variables = variables
        self.policy = policy
        self.executor = executor
        self.slot = ConcurrencySlot(capacity)
        self.record = CompletionRecord()
        self.aggregator = ResultAggregator(console)

    def _execute(self, task: Task, result: TaskResult) -> None:
        """Run one task to a terminal state and record its completion."""
        self.aggregator.started(result)
        try:
            self.executor(task, self.variables)
        except CommandFailure as e:
            self.aggregator.failed(result, e)
            self.record.mark(task.name, succeeded=False)
        else:
            self.aggregator.succeeded(result)
            self.record.mark(task.name, succeeded=True)

    def _execute_in_slot(self, task: Task, result: TaskResult) -> None:
        try:
            self._execute(task, result)
        finally:
            self.slot.release(task.name)

    def run(self) -> RunReport:
        logger.debug(
            "running %d task(s) %s (capacity=%d, policy=%s)",
            len(self.workflow.tasks),
            self.workflow.task_names(),
            self.slot.capacity,
            self.policy.value,
        )
        in_flight: List[Future] = []

        with ThreadPoolExecutor(
            max_workers=self.slot.capacity, thread_name_prefix="rayder"
        ) as pool:
            for task in self.workflow.tasks:
                result = self.aggregator.register(task.name)

                missing = unmet_dependencies(task, self.record, self.policy)
                if missing:
                    logger.debug("skip %r, unmet: %s", task.name, list(missing))
                    self.aggregator.skipped(result, missing)
                    continue

                if task.parallel:
                    self.slot.acquire(task.name)
                    in_flight.append(pool.submit(self._execute_in_slot, task, result))
                else:
                    self._execute(task, result)

            logger.debug("pass finished, joining %d parallel task(s)", len(in_flight))
            wait(in_flight)

        # Surface anything other than a CommandFailure from background units.
        for fut in in_flight:
            fut.result()

        return self.aggregator.summarize()


def run_workflow(
    workflow: Workflow,
    variables: Mapping[str, str],
    *,
    capacity: int = DEFAULT_CAPACITY,
    policy: CompletionPolicy = CompletionPolicy.ANY_TERMINAL,
    executor: TaskExecutor = run_task,
    console: Optional[Console] = None,
) -> RunReport:
    """Run every task of `workflow` once and return the report."""
    return Orchestrator(
        workflow,
        variables,
        capacity=capacity,
        policy=policy,
        executor=executor,
        console=console,
    ).run()
