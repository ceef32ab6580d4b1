"""Failure kinds for the retry and polling engine.

Every exception raised by the engine carries one ``FailureKind`` so callers
(and the CLI exit-code mapping) can branch on the category without matching
on exception classes.

| Kind | Raised by | Retried | CLI exit |
|------|-----------|---------|----------|
| FATAL | executor, poller | No | 1 |
| EXHAUSTED_RETRIES | executor | budget spent | 1 |
| CONDITION_NEVER_SATISFIED | poller | budget spent | 1 |
| CONFIGURATION | policies, poller | No | 2 |
| CANCELLED | executor, poller | No | 130 |
"""

from __future__ import annotations

from enum import Enum

from steadystate.core.constants import (
    EXIT_ACTION_FAILED,
    EXIT_CANCELLED,
    EXIT_CONFIG_ERROR,
)


class FailureKind(str, Enum):
    """Terminal outcome categories of an engine call."""

    FATAL = "fatal"
    """A failure matched no known transient pattern (or was marked fatal)."""

    EXHAUSTED_RETRIES = "exhausted_retries"
    """Retryable failures consumed the whole retry budget."""

    CONDITION_NEVER_SATISFIED = "condition_never_satisfied"
    """Polling never reached the required consecutive-success streak."""

    CONFIGURATION = "configuration"
    """An invalid policy was detected before any attempt ran."""

    CANCELLED = "cancelled"
    """External cancellation or a wall-clock deadline stopped the loop."""

    @property
    def exit_code(self) -> int:
        """Process exit code the CLI uses for this kind."""
        if self is FailureKind.CONFIGURATION:
            return EXIT_CONFIG_ERROR
        if self is FailureKind.CANCELLED:
            return EXIT_CANCELLED
        return EXIT_ACTION_FAILED
