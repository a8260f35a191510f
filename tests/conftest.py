import threading
import time

import pytest

from rayder.errors import CommandFailure
from rayder.model import Task
from rayder.ui.console import Console


@pytest.fixture
def console():
    return Console(color=False)


def task(name, *cmds, parallel=False, silent=False, required=()):
    return Task(
        name=name,
        cmds=tuple(cmds) or ("true",),
        parallel=parallel,
        silent=silent,
        required=tuple(required),
    )


class RecordingExecutor:
    """
    Stand-in for the shell: records when each task ran.

    A task whose first command is "fail" raises CommandFailure. Optional
    per-task hooks run in the middle of the task.
    """

    def __init__(self, delay=0.0, hooks=None):
        self.delay = delay
        self.hooks = hooks or {}
        self.calls = []
        self.intervals = {}
        self._lock = threading.Lock()

    def __call__(self, t, variables):
        start = time.monotonic()
        with self._lock:
            self.calls.append(t.name)
        hook = self.hooks.get(t.name)
        if hook is not None:
            hook()
        if self.delay:
            time.sleep(self.delay)
        end = time.monotonic()
        with self._lock:
            self.intervals[t.name] = (start, end)
        if t.cmds and t.cmds[0] == "fail":
            raise CommandFailure(task=t.name, cmd="fail", exit_code=1)
