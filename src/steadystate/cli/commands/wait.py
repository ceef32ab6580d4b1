"""Wait command: poll a command until it succeeds consistently.

Exit codes:
    0: The required streak of successful runs was observed
    1: Attempts ran out, or a fatal error pattern matched
    2: Invalid options or configuration
    130: Cancelled (Ctrl-C or --timeout)
"""

from __future__ import annotations

from pathlib import Path

import typer

from steadystate.core.config import PollPolicy
from steadystate.core.constants import PROCESS_DEFAULT_TIMEOUT_SECONDS
from steadystate.execution import CancellationToken, CommandAction, poll_until_consistent

from ..helpers import build_policy, parse_pattern_pairs
from ._shared import execute, load_suite


def wait(
    command: list[str] = typer.Argument(
        ...,
        help="Probe command, after '--'",
        metavar="-- COMMAND...",
    ),
    attempts: int | None = typer.Option(
        None,
        "--attempts",
        "-n",
        min=1,
        help="Probes before giving up",
    ),
    interval: float | None = typer.Option(
        None,
        "--interval",
        "-i",
        min=0,
        help="Seconds between probes",
    ),
    consecutive: int | None = typer.Option(
        None,
        "--consecutive",
        "-k",
        min=1,
        help="Successful probes in a row required",
    ),
    fatal_error: list[str] = typer.Option(
        [],
        "--fatal-error",
        "-f",
        help="Output that makes waiting pointless, as PATTERN=DESCRIPTION (repeatable)",
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
        help="Name of the poll policy in --config",
    ),
    attempt_timeout: float | None = typer.Option(
        PROCESS_DEFAULT_TIMEOUT_SECONDS,
        "--attempt-timeout",
        min=0,
        help="Seconds before a single probe is killed and counted as failed",
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        "-t",
        min=0,
        help="Wall-clock limit for all probes together",
    ),
) -> None:
    """Re-run COMMAND until it exits 0 on enough consecutive probes.

    Any failing probe resets the streak. On give-up, every distinct failure
    seen is listed, not only the last one.

    Example:

        steadystate wait --attempts 30 --interval 2 --consecutive 3 -- kubectl rollout status deploy/web
    """
    probe = CommandAction(command, timeout_seconds=attempt_timeout)

    def call(token: CancellationToken) -> str:
        suite = load_suite(config_file)
        base = None
        if policy_name is not None:
            if suite is None:
                raise typer.BadParameter("--policy requires --config", param_hint="--policy")
            base = suite.poll_policy(policy_name)

        policy = build_policy(
            PollPolicy,
            base,
            {
                "max_attempts": attempts,
                "interval_seconds": interval,
                "required_consecutive_successes": consecutive,
                "fatal_errors": {
                    **(base.fatal_errors if base else {}),
                    **parse_pattern_pairs(fatal_error, "--fatal-error"),
                },
            },
        )
        return poll_until_consistent(
            probe, policy, description=probe.name, cancellation=token
        )

    execute(probe.name, config_file.stem if config_file else "cli", timeout, call)
