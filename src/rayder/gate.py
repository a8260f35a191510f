# gate.py
from __future__ import annotations

import threading
from enum import Enum
from typing import Dict, Tuple

from .model import Task


class CompletionPolicy(str, Enum):
    """
    What a finished dependency must look like to unblock its dependents.

    ANY_TERMINAL: success or failure both count (reference behavior).
    SUCCESS_ONLY: only a successful run counts.
    """
    ANY_TERMINAL = "any"
    SUCCESS_ONLY = "success"


class CompletionRecord:
    """
    Task name -> succeeded?, for every task that reached a terminal state.

    Shared between the control thread and background units; every access
    goes through one lock. Entries are only ever added.
    """

    def __init__(self) -> None:
        self._done: Dict[str, bool] = {}
        self._lock = threading.Lock()

    def mark(self, name: str, succeeded: bool) -> None:
        with self._lock:
            # A later task with a duplicate name may finish too; keep the
            # first terminal state so the record stays monotonic.
            self._done.setdefault(name, succeeded)

    def is_completed(self, name: str) -> bool:
        with self._lock:
            return name in self._done

    def succeeded(self, name: str) -> bool:
        with self._lock:
            return self._done.get(name, False)

    def snapshot(self) -> Dict[str, bool]:
        with self._lock:
            return dict(self._done)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._done


def _satisfied(name: str, record: CompletionRecord, policy: CompletionPolicy) -> bool:
    if policy is CompletionPolicy.SUCCESS_ONLY:
        return record.succeeded(name)
    return record.is_completed(name)


def unmet_dependencies(
    task: Task,
    record: CompletionRecord,
    policy: CompletionPolicy = CompletionPolicy.ANY_TERMINAL,
) -> Tuple[str, ...]:
    """Required names that do not currently satisfy `policy`, in declared order."""
    return tuple(d for d in task.required if not _satisfied(d, record, policy))


def runnable(
    task: Task,
    record: CompletionRecord,
    policy: CompletionPolicy = CompletionPolicy.ANY_TERMINAL,
) -> bool:
    """
    True iff every required task is satisfied right now.

    There is no waiting: the caller evaluates this once per task and a
    False answer means the task is skipped for the rest of the run.
    """
    return not unmet_dependencies(task, record, policy)
