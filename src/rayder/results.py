# results.py
from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .errors import CommandFailure, InvalidTransition
from .ui.console import Console, get_console


class TaskStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (TaskStatus.SKIPPED, TaskStatus.SUCCEEDED, TaskStatus.FAILED)


_ALLOWED = {
    TaskStatus.PENDING: {TaskStatus.SKIPPED, TaskStatus.RUNNING},
    TaskStatus.RUNNING: {TaskStatus.SUCCEEDED, TaskStatus.FAILED},
}


@dataclass
class TaskResult:
    name: str
    status: TaskStatus = TaskStatus.PENDING
    error: Optional[CommandFailure] = None
    missing: tuple[str, ...] = ()   # unmet dependencies, for skips
    started_at: Optional[float] = None
    finished_at: Optional[float] = None

    @property
    def duration(self) -> Optional[float]:
        if self.started_at is None or self.finished_at is None:
            return None
        return self.finished_at - self.started_at


@dataclass
class RunReport:
    """Outcome of one pass, in declaration order."""
    results: List[TaskResult] = field(default_factory=list)

    @property
    def failed(self) -> List[str]:
        return [r.name for r in self.results if r.status is TaskStatus.FAILED]

    @property
    def skipped(self) -> List[str]:
        return [r.name for r in self.results if r.status is TaskStatus.SKIPPED]

    @property
    def succeeded(self) -> bool:
        return not self.failed

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1

    def status_of(self, name: str) -> TaskStatus:
        """Status of the first task declared under `name`."""
        for r in self.results:
            if r.name == name:
                return r.status
        raise KeyError(name)


class ResultAggregator:
    """
    Tracks the lifecycle of every task and reports each transition.

    PENDING -> SKIPPED | RUNNING, RUNNING -> SUCCEEDED | FAILED.
    Safe to call from background units.
    """

    def __init__(self, console: Console | None = None):
        self.console = console or get_console()
        self._results: List[TaskResult] = []
        self._lock = threading.Lock()

    def register(self, name: str) -> TaskResult:
        result = TaskResult(name=name)
        with self._lock:
            self._results.append(result)
        return result

    def _move(self, result: TaskResult, new: TaskStatus) -> None:
        with self._lock:
            if new not in _ALLOWED.get(result.status, set()):
                raise InvalidTransition(
                    f"task {result.name!r}: {result.status.value} -> {new.value}"
                )
            result.status = new

    def skipped(self, result: TaskResult, missing: tuple[str, ...] = ()) -> None:
        self._move(result, TaskStatus.SKIPPED)
        result.missing = missing
        self.console.print_task_skipped(result.name)

    def started(self, result: TaskResult) -> None:
        self._move(result, TaskStatus.RUNNING)
        result.started_at = time.monotonic()
        self.console.print_task_running(result.name)

    def succeeded(self, result: TaskResult) -> None:
        result.finished_at = time.monotonic()
        self._move(result, TaskStatus.SUCCEEDED)
        self.console.print_task_completed(result.name)

    def failed(self, result: TaskResult, error: CommandFailure) -> None:
        result.finished_at = time.monotonic()
        result.error = error
        self._move(result, TaskStatus.FAILED)
        self.console.print_task_failed(result.name, str(error))

    def report(self) -> RunReport:
        with self._lock:
            return RunReport(results=list(self._results))

    def summarize(self) -> RunReport:
        """Emit the single summary line and return the final report."""
        report = self.report()
        self.console.print_summary(report.succeeded)
        return report

