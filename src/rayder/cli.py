# cli.py
from __future__ import annotations

import logging
import sys

import click

from rayder import __version__
from rayder.config import (
    ignored_arguments,
    load_workflow,
    merge_variables,
    parse_overrides,
    usage_requested,
    usage_text,
)
from rayder.errors import ConfigError
from rayder.gate import CompletionPolicy
from rayder.runner import run_workflow
from rayder.slots import DEFAULT_CAPACITY
from rayder.ui.console import Console, set_console


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(threadName)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "-w",
    "--workflow",
    "workflow_path",
    required=True,
    type=click.Path(dir_okay=False),
    help="Path to the workflow YAML file",
)
@click.option("-q", "--quiet", is_flag=True, default=False, help="Suppress banner")
@click.option(
    "-p",
    "--parallelism",
    default=DEFAULT_CAPACITY,
    show_default=True,
    type=click.IntRange(min=1),
    help="How many parallel modules may run at the same time",
)
@click.option(
    "--dependency-policy",
    type=click.Choice([p.value for p in CompletionPolicy]),
    default=CompletionPolicy.ANY_TERMINAL.value,
    show_default=True,
    help="'any': a finished dependency unblocks dependents even if it failed; "
    "'success': only a successful one does",
)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.argument("assignments", nargs=-1)
@click.version_option(__version__, prog_name="rayder")
def cli(workflow_path, quiet, parallelism, dependency_policy, debug, assignments):
    """Run a rayder workflow.

    ASSIGNMENTS are KEY=VALUE variable overrides (e.g. DOMAIN=example.host).
    Pass `usage` to print the workflow's usage text and default variables.
    """
    _configure_logging(debug)
    console = Console(debug=debug)
    set_console(console)

    if not quiet:
        console.print_banner(__version__)

    try:
        workflow = load_workflow(workflow_path)
    except ConfigError as e:
        console.print_error(
            "Failed to load workflow",
            str(e),
            suggestion="Usage: rayder -w workflow.yaml [variable assignments e.g. DOMAIN=example.host]",
        )
        sys.exit(1)

    if usage_requested(assignments):
        console.print_usage(usage_text(workflow), workflow.vars)
        sys.exit(0)

    for arg in ignored_arguments(assignments):
        logging.getLogger(__name__).warning("ignoring argument %r (expected KEY=VALUE)", arg)

    variables = merge_variables(workflow.vars, parse_overrides(assignments))

    try:
        report = run_workflow(
            workflow,
            variables,
            capacity=parallelism,
            policy=CompletionPolicy(dependency_policy),
            console=console,
        )
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)

    sys.exit(report.exit_code)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
