"""Console output formatting utilities for rayder."""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Mapping, Optional

import click

BANNER = r"""
                         __
   _____________  ______/ /__  _____
  / ___/ __  / / / / __  / _ \/ ___/
 / /  / /_/ / /_/ / /_/ /  __/ /
/_/   \____/\___ /\____/\___/_/
           /____/

                   - v{version}
"""

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class Console:
    """
    Centralized status output.

    Every status line goes to stderr so that child command output on
    stdout stays clean. Lines are written under a lock because background
    tasks report from their own threads.
    """

    def __init__(self, debug: bool = False, color: Optional[bool] = None):
        """
        Initialize console formatter.

        Args:
            debug: If True, show failure details and stack traces
            color: Force color on/off; None lets click decide per stream
        """
        self.debug = debug
        self.color = color
        self._lock = threading.Lock()

    def _emit(self, line: str) -> None:
        with self._lock:
            click.echo(line, err=True, color=self.color)

    def _status(self, message: str, *, level_fg: str = "yellow") -> None:
        stamp = click.style(datetime.now().strftime(TIME_FORMAT), fg="yellow")
        level = click.style("INFO", fg=level_fg)
        self._emit(f"[{stamp}] [{level}] {message}")

    @staticmethod
    def _module(name: str) -> str:
        return f"Module '{click.style(name, fg='cyan')}'"

    def print_banner(self, version: str) -> None:
        """Print the startup banner."""
        self._emit(click.style(BANNER.format(version=version), fg="white"))

    def print_task_running(self, name: str) -> None:
        self._status(f"{self._module(name)} {click.style('running', fg='yellow')} ⚡")

    def print_task_completed(self, name: str) -> None:
        self._status(f"{self._module(name)} {click.style('completed', fg='green')} ✅")

    def print_task_failed(self, name: str, reason: str) -> None:
        """
        Print task failure message.

        Args:
            name: Task name
            reason: The command failure, shown only in debug mode
        """
        self._status(
            f"{self._module(name)} {click.style('errored', fg='red')} ❌",
            level_fg="red",
        )
        if self.debug and reason:
            self._emit(f"  {reason}")

    def print_task_skipped(self, name: str) -> None:
        self._status(
            f"Skipping {self._module(name)} because required tasks are incomplete",
            level_fg="red",
        )

    def print_summary(self, succeeded: bool) -> None:
        """Print the one line run summary."""
        if succeeded:
            self._status("All modules completed successfully ✅")
        else:
            self._status("Errors occurred during execution. Exiting program ❌", level_fg="red")

    def print_usage(self, usage: Optional[str], variables: Mapping[str, str]) -> None:
        """Print workflow usage text followed by its default variables."""
        self._emit("Usage:")
        self._emit(usage or "")
        self._emit("\nVariables from YAML:")
        for key, value in variables.items():
            if key != "USAGE":
                self._emit(f"{key}: {value}")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        self._emit(f"\n{click.style('ERROR', fg='red')}: {title}")
        self._emit(message)
        for detail in details or []:
            self._emit(f"  {detail}")
        if suggestion:
            self._emit(f"\n{suggestion}")

    def print_exception(self, exc: BaseException) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            with self._lock:
                traceback.print_exception(type(exc), exc, exc.__traceback__)
        else:
            self._emit(f"Error: {exc}")

    def print_info(self, message: str) -> None:
        """Print informational message."""
        self._emit(message)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
