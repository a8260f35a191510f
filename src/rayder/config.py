# config.py
from __future__ import annotations

from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Tuple

import yaml

from .errors import ConfigError
from .model import Task, Workflow

USAGE_TOKENS = ("usage", "USAGE")

# The document is loaded with yaml.BaseLoader, so every scalar arrives as the
# text written in the file. These are the spellings read back as null/bool.
_NULLS = ("", "~", "null", "Null", "NULL")
_TRUE = ("true", "yes", "on", "y")
_FALSE = ("false", "no", "off", "n")


# ----------------------------------------------------------------------
# Workflow loading (YAML file)
# ----------------------------------------------------------------------

def _is_null(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value in _NULLS)


def _str(path: Path, where: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ConfigError(path, f"{where} must be a string, got {type(value).__name__}")
    return value


def _str_list(path: Path, where: str, value: Any) -> Tuple[str, ...]:
    if _is_null(value):
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, list):
        raise ConfigError(path, f"{where} must be a list, got {type(value).__name__}")
    return tuple(_str(path, f"{where} item #{i + 1}", v) for i, v in enumerate(value))


def _bool(path: Path, where: str, value: Any) -> bool:
    if _is_null(value):
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in _TRUE:
        return True
    if isinstance(value, str) and value.lower() in _FALSE:
        return False
    raise ConfigError(path, f"{where} must be true or false, got {value!r}")


def _dict_to_task(path: Path, index: int, data: Any) -> Task:
    if not isinstance(data, dict):
        raise ConfigError(path, f"module #{index + 1} must be a mapping")

    name = data.get("name")
    if _is_null(name):
        raise ConfigError(path, f"module #{index + 1} has no name")
    name = _str(path, f"module #{index + 1} name", name)

    return Task(
        name=name,
        cmds=_str_list(path, f"module '{name}' cmds", data.get("cmds")),
        silent=_bool(path, f"module '{name}' silent", data.get("silent")),
        parallel=_bool(path, f"module '{name}' parallel", data.get("parallel")),
        required=_str_list(path, f"module '{name}' required", data.get("required")),
    )


def parse_workflow(data: Any, path: str | Path = "<workflow>") -> Workflow:
    """
    Build a Workflow from an already-deserialized YAML document.

    Expected shape:
      vars:    {NAME: default, ...}
      usage:   "help text"
      modules: [{name, cmds, silent, parallel, required}, ...]
    `tasks` is accepted in place of `modules`. Commands, dependency names
    and variable values must be strings; they are used exactly as given.
    """
    path = Path(path)
    if _is_null(data):
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(path, "workflow must be a YAML mapping")

    raw_vars = data.get("vars")
    if _is_null(raw_vars):
        raw_vars = {}
    if not isinstance(raw_vars, dict):
        raise ConfigError(path, "vars must be a mapping")
    defaults = {
        _str(path, "variable name", k): "" if _is_null(v) else _str(path, f"variable '{k}'", v)
        for k, v in raw_vars.items()
    }

    raw_tasks = data.get("modules", data.get("tasks"))
    if _is_null(raw_tasks):
        raw_tasks = []
    if not isinstance(raw_tasks, list):
        raise ConfigError(path, "modules must be a list")
    tasks = tuple(_dict_to_task(path, i, t) for i, t in enumerate(raw_tasks))

    usage = data.get("usage")
    return Workflow(
        tasks=tasks,
        vars=MappingProxyType(defaults),
        usage=None if _is_null(usage) else _str(path, "usage", usage),
    )


def load_workflow(path: str | Path) -> Workflow:
    """
    Load a workflow from a YAML file path.

    Scalars are kept as their source text (no YAML 1.1 typing), so
    `MASK: 0755` stays "0755" and `cmds: [true]` runs `true`.

    Raises:
      ConfigError if the file is missing, unreadable, not YAML, or not a
      workflow document.
    """
    wf_path = Path(path).expanduser()
    try:
        text = wf_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(wf_path, f"cannot read workflow file: {e.strerror or e}") from e

    try:
        data = yaml.load(text, Loader=yaml.BaseLoader)
    except yaml.YAMLError as e:
        raise ConfigError(wf_path, f"invalid YAML: {e}") from e

    return parse_workflow(data, wf_path)


# ----------------------------------------------------------------------
# Variables
# ----------------------------------------------------------------------

def usage_requested(args: Iterable[str]) -> bool:
    return any(a in USAGE_TOKENS for a in args)


def parse_overrides(args: Iterable[str]) -> Dict[str, str]:
    """
    Collect KEY=VALUE tokens. Splits on the first '='; other tokens are ignored.
    """
    overrides: Dict[str, str] = {}
    for arg in args:
        key, sep, value = arg.partition("=")
        if sep:
            overrides[key] = value
    return overrides


def merge_variables(
    defaults: Mapping[str, str], overrides: Mapping[str, str]
) -> Mapping[str, str]:
    """Overlay overrides on workflow defaults (override wins). Read-only result."""
    merged: Dict[str, str] = dict(defaults)
    merged.update(overrides)
    return MappingProxyType(merged)


def usage_text(workflow: Workflow) -> str:
    """Workflow usage text, falling back to the USAGE variable."""
    if workflow.usage:
        return workflow.usage
    return workflow.vars.get("USAGE", "")


def ignored_arguments(args: Iterable[str]) -> List[str]:
    """Tokens that are neither KEY=VALUE nor a usage request."""
    return [a for a in args if "=" not in a and a not in USAGE_TOKENS]
