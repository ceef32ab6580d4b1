"""Rich output formatting for the steadystate CLI.

Command output of a successful action goes to stdout untouched so it can be
piped; everything else (status lines, failure panels) goes to stderr.
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from steadystate.core.errors import FailureKind, SteadyStateError

# =============================================================================
# Shared console instances
# =============================================================================

console = Console()
err_console = Console(stderr=True)


class FailureStyles:
    """Panel title and border colour per failure kind."""

    TITLES: dict[FailureKind, str] = {
        FailureKind.FATAL: "Non-retryable failure",
        FailureKind.EXHAUSTED_RETRIES: "Retries exhausted",
        FailureKind.CONDITION_NEVER_SATISFIED: "Condition never satisfied",
        FailureKind.CONFIGURATION: "Configuration error",
        FailureKind.CANCELLED: "Cancelled",
    }

    COLORS: dict[FailureKind, str] = {
        FailureKind.FATAL: "red",
        FailureKind.EXHAUSTED_RETRIES: "red",
        FailureKind.CONDITION_NEVER_SATISFIED: "red",
        FailureKind.CONFIGURATION: "yellow",
        FailureKind.CANCELLED: "magenta",
    }


def print_failure(error: SteadyStateError) -> None:
    """Render an engine error as a panel on stderr."""
    kind = error.kind
    err_console.print(
        Panel(
            Text(str(error)),
            title=FailureStyles.TITLES.get(kind, "Failure"),
            border_style=FailureStyles.COLORS.get(kind, "red"),
            expand=False,
        )
    )


def print_success(description: str) -> None:
    err_console.print(f"[green]OK[/green] {escape(description)}")


def print_output(output: str) -> None:
    """Write raw command output to stdout without markup or wrapping."""
    if output:
        typer.echo(output, nl=not output.endswith("\n"))
