# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple


@dataclass(frozen=True)
class Task:
    """
    A workflow module: shell commands + dependencies + execution flags.

    Names are unique by convention only; nothing enforces it.
    `required` holds task names, not references, and is evaluated once
    when the pass reaches this task.
    """
    name: str
    cmds: Tuple[str, ...] = ()

    silent: bool = False       # discard child stdout/stderr
    parallel: bool = False     # dispatch as a background unit

    required: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Workflow:
    """Ordered tasks plus default variables for a single run."""
    tasks: Tuple[Task, ...] = ()
    vars: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    usage: Optional[str] = None

    def task_names(self) -> list[str]:
        return [t.name for t in self.tasks]
