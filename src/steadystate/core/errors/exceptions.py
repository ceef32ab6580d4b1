"""Exception hierarchy for the retry and polling engine.

All engine exceptions inherit from SteadyStateError, enabling callers to catch
broad (SteadyStateError) or narrow (e.g., ExhaustedRetriesError). Each error's
``str()`` is multi-line and suitable for surfacing directly as a test failure.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from steadystate.core.constants import TRUNCATE_OUTPUT_TAIL_CHARS

from .codes import FailureKind

if TYPE_CHECKING:
    from steadystate.execution.diagnostics import AggregatedFailureReport


def _tail(text: str, limit: int = TRUNCATE_OUTPUT_TAIL_CHARS) -> str:
    if len(text) <= limit:
        return text
    return "..." + text[-limit:]


def _indent(text: str, prefix: str = "    ") -> str:
    return "\n".join(prefix + line for line in text.splitlines())


class SteadyStateError(Exception):
    """Base exception for all engine errors."""

    kind: FailureKind = FailureKind.FATAL

    def __init__(self, message: str, *, description: str = "") -> None:
        super().__init__(message)
        self.description = description


class FatalActionError(SteadyStateError):
    """A failure that must not be retried.

    Raised when a failure matches no known transient pattern, when the action
    marked it fatal, or when a probe failure matches a poll fatal pattern.
    """

    kind = FailureKind.FATAL

    def __init__(
        self,
        description: str,
        reason: str,
        *,
        raw_output: str = "",
        attempts: int = 1,
        failure_reasons: Sequence[str] = (),
    ) -> None:
        self.reason = reason
        self.raw_output = raw_output
        self.attempts = attempts
        self.failure_reasons = tuple(failure_reasons)
        lines = [
            f"'{description}' failed with a non-retryable error on attempt {attempts}: {reason}",
        ]
        if self.failure_reasons:
            lines.append(f"Distinct failure reasons ({len(self.failure_reasons)}):")
            lines.extend(f"  - {r}" for r in self.failure_reasons)
        if raw_output:
            lines.append("Output:")
            lines.append(_indent(_tail(raw_output)))
        super().__init__("\n".join(lines), description=description)


class ExhaustedRetriesError(SteadyStateError):
    """Repeated retryable failures consumed the full retry budget."""

    kind = FailureKind.EXHAUSTED_RETRIES

    def __init__(
        self,
        description: str,
        reason: str,
        *,
        attempts: int,
        failure_reasons: Sequence[str] = (),
        raw_output: str = "",
    ) -> None:
        self.reason = reason
        self.attempts = attempts
        self.failure_reasons = tuple(failure_reasons)
        self.raw_output = raw_output
        lines = [
            f"'{description}' unsuccessful after {attempts} attempts: last error: {reason}",
        ]
        if self.failure_reasons:
            lines.append(f"Distinct failure reasons ({len(self.failure_reasons)}):")
            lines.extend(f"  - {r}" for r in self.failure_reasons)
        if raw_output:
            lines.append("Last output:")
            lines.append(_indent(_tail(raw_output)))
        super().__init__("\n".join(lines), description=description)


class ConditionNeverSatisfiedError(SteadyStateError):
    """Polling never reached the required consecutive-success count."""

    kind = FailureKind.CONDITION_NEVER_SATISFIED

    def __init__(
        self,
        description: str,
        report: AggregatedFailureReport,
        *,
        required_consecutive_successes: int = 1,
    ) -> None:
        self.report = report
        self.required_consecutive_successes = required_consecutive_successes
        header = (
            f"Condition '{description}' not satisfied after {report.total_attempts} attempts "
            f"(required {required_consecutive_successes} consecutive successes)"
        )
        super().__init__(f"{header}\n{report.render()}", description=description)

    @property
    def attempts(self) -> int:
        return self.report.total_attempts


class PolicyConfigurationError(SteadyStateError):
    """An invalid policy or configuration, detected before any attempt runs."""

    kind = FailureKind.CONFIGURATION

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ActionCancelledError(SteadyStateError):
    """External cancellation observed mid-loop. Never retried."""

    kind = FailureKind.CANCELLED

    def __init__(self, description: str, reason: str, *, attempts: int) -> None:
        self.reason = reason
        self.attempts = attempts
        super().__init__(
            f"'{description}' cancelled after {attempts} attempts: {reason}",
            description=description,
        )
