"""steadystate CLI.

Two commands expose the engine to shell scripts and CI pipelines:

    steadystate run  [OPTIONS] -- COMMAND...   # retry known transient failures
    steadystate wait [OPTIONS] -- COMMAND...   # poll until consistently successful

Global options (--log-level, --log-format, --log-file) are processed by the
app callback before any command runs.

Package structure:
    cli/
    ├── __init__.py       # This file - app assembly
    ├── helpers.py        # Logging state, config loading, option parsing
    ├── output.py         # Rich formatting
    └── commands/
        ├── _shared.py    # Token, context and exit-code plumbing
        ├── run.py        # run command
        └── wait.py       # wait command
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from steadystate import __version__

from . import helpers as helpers
from .commands import run, wait
from .helpers import (
    configure_global_logging,
    set_log_file,
    set_log_format,
    set_log_level,
)
from .output import console, err_console

app = typer.Typer(
    name="steadystate",
    help="Retry flaky infrastructure commands and wait for eventually-consistent state",
    add_completion=False,
)


# =============================================================================
# Global option callbacks
# =============================================================================


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"steadystate v{__version__}")
        raise typer.Exit()


def log_level_callback(value: str | None) -> str | None:
    if value:
        set_log_level(value)
    return value


def log_file_callback(value: Path | None) -> Path | None:
    if value:
        set_log_file(value)
    return value


def log_format_callback(value: str | None) -> str | None:
    if value:
        set_log_format(value)
    return value


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            "-L",
            callback=log_level_callback,
            help="Logging level (DEBUG, INFO, WARNING, ERROR)",
            envvar="STEADYSTATE_LOG_LEVEL",
        ),
    ] = None,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            callback=log_file_callback,
            help="Path for log file output",
            envvar="STEADYSTATE_LOG_FILE",
        ),
    ] = None,
    log_format: Annotated[
        str | None,
        typer.Option(
            "--log-format",
            callback=log_format_callback,
            help="Log format: json, console, or both",
            envvar="STEADYSTATE_LOG_FORMAT",
        ),
    ] = None,
) -> None:
    """steadystate - resilient execution and condition polling."""
    configure_global_logging(err_console)


app.command()(run)
app.command()(wait)


__all__ = [
    "app",
    "main",
    "console",
]
