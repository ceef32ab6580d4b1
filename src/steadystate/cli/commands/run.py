"""Run command: execute a command, retrying known transient failures.

Exit codes:
    0: The command eventually succeeded
    1: Non-retryable failure, or retries exhausted
    2: Invalid options or configuration
    130: Cancelled (Ctrl-C or --timeout)
"""

from __future__ import annotations

from pathlib import Path

import typer

from steadystate.core.config import RetryPolicy
from steadystate.core.constants import PROCESS_DEFAULT_TIMEOUT_SECONDS
from steadystate.core.errors import available_tables, get_known_errors
from steadystate.execution import CancellationToken, CommandAction, run_with_retries

from ..helpers import build_policy, parse_pattern_pairs
from ._shared import execute, load_suite


def run(
    command: list[str] = typer.Argument(
        ...,
        help="Command to run, after '--'",
        metavar="-- COMMAND...",
    ),
    retries: int | None = typer.Option(
        None,
        "--retries",
        "-r",
        min=0,
        help="Retries after the first attempt",
    ),
    delay: float | None = typer.Option(
        None,
        "--delay",
        "-d",
        min=0,
        help="Seconds to wait before the first retry",
    ),
    backoff: float | None = typer.Option(
        None,
        "--backoff",
        min=1.0,
        help="Delay multiplier applied per retry",
    ),
    max_delay: float | None = typer.Option(
        None,
        "--max-delay",
        min=0,
        help="Upper bound on a single delay when backing off",
    ),
    known_error: list[str] = typer.Option(
        [],
        "--known-error",
        "-e",
        help="Retryable error as PATTERN=DESCRIPTION (repeatable)",
    ),
    preset: list[str] = typer.Option(
        [],
        "--preset",
        help=f"Include a built-in known-error table ({', '.join(available_tables())})",
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Suite configuration file with named policies",
    ),
    policy_name: str | None = typer.Option(
        None,
        "--policy",
        "-p",
        help="Name of the retry policy in --config",
    ),
    attempt_timeout: float | None = typer.Option(
        PROCESS_DEFAULT_TIMEOUT_SECONDS,
        "--attempt-timeout",
        min=0,
        help="Seconds before a single attempt is killed and counted as failed",
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        "-t",
        min=0,
        help="Wall-clock limit for all attempts together",
    ),
) -> None:
    """Run COMMAND, retrying only failures that match a known transient error.

    Output matching no known error fails immediately: an unexpected error is
    not hidden behind pointless retries.

    Example:

        steadystate run --retries 3 --delay 15 --preset packer -- packer build build.pkr.hcl
    """
    action = CommandAction(command, timeout_seconds=attempt_timeout)

    def call(token: CancellationToken) -> str:
        suite = load_suite(config_file)
        base = None
        if policy_name is not None:
            if suite is None:
                raise typer.BadParameter("--policy requires --config", param_hint="--policy")
            base = suite.retry_policy(policy_name)

        extra_errors = get_known_errors(*preset)
        extra_errors.update(parse_pattern_pairs(known_error, "--known-error"))
        policy = build_policy(
            RetryPolicy,
            base,
            {
                "max_retries": retries,
                "delay_seconds": delay,
                "backoff_multiplier": backoff,
                "max_delay_seconds": max_delay,
                "known_errors": {**(base.known_errors if base else {}), **extra_errors},
            },
        )
        return run_with_retries(
            action, policy, description=action.name, cancellation=token
        )

    execute(action.name, config_file.stem if config_file else "cli", timeout, call)
