__version__ = "0.0.4"

from .model import Task, Workflow
from .config import load_workflow, parse_workflow, merge_variables, parse_overrides
from .gate import CompletionPolicy, CompletionRecord, runnable
from .slots import ConcurrencySlot
from .runner import Orchestrator, run_workflow
from .errors import RayderError, ConfigError, CommandFailure

__all__ = [
    "Task", "Workflow",
    "load_workflow", "parse_workflow", "merge_variables", "parse_overrides",
    "CompletionPolicy", "CompletionRecord", "runnable",
    "ConcurrencySlot",
    "Orchestrator", "run_workflow",
    "RayderError", "ConfigError", "CommandFailure",
]
