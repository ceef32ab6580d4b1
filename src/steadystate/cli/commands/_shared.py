"""Execution plumbing shared by the run and wait commands."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import typer

from steadystate.core.config import SuiteConfig
from steadystate.core.constants import EXIT_CANCELLED
from steadystate.core.errors import SteadyStateError
from steadystate.core.logging import ExecutionContext, get_logger, with_context
from steadystate.execution import CancellationToken

from ..helpers import apply_suite_logging, load_suite_config
from ..output import err_console, print_failure, print_output, print_success

_logger = get_logger("cli")


def load_suite(config_file: Path | None) -> SuiteConfig | None:
    """Load ``config_file`` and apply its logging section, if one was given."""
    if config_file is None:
        return None
    suite = load_suite_config(config_file)
    apply_suite_logging(suite.log, err_console)
    return suite


def execute(
    description: str,
    suite_name: str,
    timeout: float | None,
    call: Callable[[CancellationToken], str],
) -> None:
    """Run ``call`` under a fresh token and map its outcome to an exit code.

    ``call`` receives the token and returns the output to print. Policy
    resolution belongs inside ``call`` so configuration errors get exit code 2
    like any other PolicyConfigurationError.
    """
    token = CancellationToken(timeout)
    ctx = ExecutionContext(suite=suite_name, component="cli")
    try:
        with with_context(ctx):
            output = call(token)
    except SteadyStateError as e:
        print_failure(e)
        raise typer.Exit(e.kind.exit_code) from None
    except KeyboardInterrupt:
        token.cancel("interrupted")
        _logger.warning("interrupted", action=description)
        err_console.print("[magenta]Interrupted[/magenta]")
        raise typer.Exit(EXIT_CANCELLED) from None

    print_output(output)
    print_success(description)
