# errors.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class RayderError(Exception):
    """Base class for every error raised by rayder."""


@dataclass
class ConfigError(RayderError):
    """
    The workflow document could not be read or does not describe a workflow.

    Fatal: raised before any task is dispatched.
    """
    path: Path
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass
class CommandFailure(RayderError):
    """
    One command in a task exited non-zero (or could not be started).

    The remaining commands of that task are never run.
    """
    task: str
    cmd: str
    exit_code: int | None

    def __str__(self) -> str:
        if self.exit_code is None:
            return f"[{self.task}] command could not be started: {self.cmd}"
        return f"[{self.task}] command failed (exit={self.exit_code}): {self.cmd}"


class InvalidTransition(RayderError):
    """A task result was moved between states the lifecycle does not allow."""
