# commands.py
from __future__ import annotations

import logging
import re
import subprocess
from typing import Mapping, Sequence

from .errors import CommandFailure
from .model import Task

logger = logging.getLogger(__name__)

SHELL = "/bin/sh"

_PLACEHOLDER = re.compile(r"\{\{([^{}]+)\}\}")


def render(cmd: str, variables: Mapping[str, str]) -> str:
    """
    Replace every {{name}} with variables[name].

    Unknown names are left exactly as written.
    """
    def _sub(m: re.Match) -> str:
        return variables.get(m.group(1), m.group(0))

    return _PLACEHOLDER.sub(_sub, cmd)


def run_command(task_name: str, cmd: str, *, silent: bool = False) -> None:
    """
    Run one already-rendered command through the shell and wait for it.

    Non-silent output goes straight to our own stdout/stderr (inherited
    file descriptors, nothing buffered). Raises CommandFailure on a
    non-zero exit, when the shell cannot be started, or when the command
    cannot be passed to it at all (e.g. an embedded NUL byte).
    """
    sink = subprocess.DEVNULL if silent else None
    try:
        proc = subprocess.run(
            [SHELL, "-c", cmd],
            stdout=sink,
            stderr=sink,
        )
    except (OSError, ValueError) as e:
        logger.debug("could not start %r for task %r: %s", cmd, task_name, e)
        raise CommandFailure(task=task_name, cmd=cmd, exit_code=None) from e

    if proc.returncode != 0:
        raise CommandFailure(task=task_name, cmd=cmd, exit_code=proc.returncode)


def run_commands(
    name: str,
    cmds: Sequence[str],
    variables: Mapping[str, str],
    *,
    silent: bool = False,
) -> None:
    """Run cmds in order, stopping at the first failure (fail-fast)."""
    for raw in cmds:
        cmd = render(raw, variables)
        logger.debug("[%s] $ %s", name, cmd)
        run_command(name, cmd, silent=silent)


def run_task(task: Task, variables: Mapping[str, str]) -> None:
    """Default task executor used by the orchestrator."""
    run_commands(task.name, task.cmds, variables, silent=task.silent)
