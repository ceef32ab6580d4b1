"""ConditionPoller: wait until an eventually-consistent condition is stable.

Externally observed readiness flaps: a container can pass its readiness probe
once and crash a second later. The poller therefore supports requiring N
*consecutive* successful probes; any failed probe resets the streak. When the
attempt budget runs out, the error carries every distinct failure reason seen
along the way, not just the last one.

State machine per call::

    Polling --streak == required--> Succeeded
    Polling --attempts == max-----> Exhausted  (ConditionNeverSatisfiedError)
    Polling --fatal failure-------> FatalActionError
    Polling --cancelled-----------> ActionCancelledError

Example usage:
    policy = PollPolicy(max_attempts=30, interval_seconds=2, required_consecutive_successes=3)
    pod = poll_until_consistent(probe_pod_ready, policy, description="pod web-0 available")
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import NoReturn, TypeVar

from steadystate.core.config import PollPolicy, check_poll_policy
from steadystate.core.errors import (
    ActionCancelledError,
    ActionOutcome,
    ConditionNeverSatisfiedError,
    ErrorClassifier,
    FatalActionError,
    Success,
)
from steadystate.core.logging import SteadyStateLogger, get_logger

from .cancellation import CancellationToken
from .diagnostics import DiagnosticAggregator
from .retry import require_outcome

T = TypeVar("T")

_logger = get_logger("poller")


@dataclass
class PollState:
    """Mutable state owned by exactly one ``poll`` call."""

    attempts_used: int = 0
    consecutive_successes: int = 0
    seen_failures: DiagnosticAggregator = field(default_factory=DiagnosticAggregator)
    last_raw_output: str = ""


class ConditionPoller:
    """Probes a condition under a PollPolicy.

    Raises PolicyConfigurationError at construction if the policy can never
    succeed, so no probe (and no I/O) is wasted on it.
    """

    def __init__(self, policy: PollPolicy, *, description: str = "condition") -> None:
        check_poll_policy(policy)
        self.policy = policy
        self.description = description
        self._fatal = ErrorClassifier(policy.fatal_errors)

    def poll(
        self,
        probe: Callable[[], ActionOutcome[T]],
        *,
        cancellation: CancellationToken | None = None,
    ) -> T:
        """Probe until the required streak of successes is observed.

        Returns:
            The value of the most recent successful probe.

        Raises:
            ConditionNeverSatisfiedError: Attempts ran out; carries the report.
            FatalActionError: A probe failure was marked fatal or matched fatal_errors.
            ActionCancelledError: ``cancellation`` fired before or between probes.
        """
        token = cancellation or CancellationToken()
        state = PollState()
        required = self.policy.required_consecutive_successes
        log = _logger.bind(condition=self.description)

        while True:
            if token.cancelled:
                self._cancel(state, token, log)

            state.attempts_used += 1
            state.seen_failures.record_attempt()
            outcome = require_outcome(probe(), self.description)
            state.last_raw_output = outcome.raw_output

            if isinstance(outcome, Success):
                state.consecutive_successes += 1
                log.debug(
                    "probe_succeeded",
                    attempt=state.attempts_used,
                    streak=state.consecutive_successes,
                    required=required,
                )
                if state.consecutive_successes >= required:
                    log.info("condition_satisfied", attempts=state.attempts_used)
                    return outcome.value
            else:
                if state.consecutive_successes:
                    log.info(
                        "probe_streak_broken",
                        attempt=state.attempts_used,
                        streak=state.consecutive_successes,
                    )
                state.consecutive_successes = 0
                state.seen_failures.add(outcome.description)
                log.debug("probe_failed", attempt=state.attempts_used, reason=outcome.description)

                hit = self._fatal.match(outcome.text)
                if outcome.fatal or hit is not None:
                    reason = outcome.description if hit is None else f"{hit[1]} ({outcome.description})"
                    log.error("probe_failed_fatal", attempt=state.attempts_used, reason=reason)
                    raise FatalActionError(
                        self.description,
                        reason,
                        raw_output=outcome.raw_output,
                        attempts=state.attempts_used,
                        failure_reasons=state.seen_failures.reasons,
                    )

            if state.attempts_used >= self.policy.max_attempts:
                if token.cancelled:
                    self._cancel(state, token, log)
                report = state.seen_failures.build_report(state.last_raw_output)
                log.error(
                    "condition_never_satisfied",
                    attempts=state.attempts_used,
                    distinct_reasons=len(report.distinct_failure_reasons),
                )
                raise ConditionNeverSatisfiedError(
                    self.description,
                    report,
                    required_consecutive_successes=required,
                )

            if not token.sleep(self.policy.interval_seconds):
                self._cancel(state, token, log)

    def _cancel(self, state: PollState, token: CancellationToken, log: SteadyStateLogger) -> NoReturn:
        reason = token.reason or "cancelled"
        log.warning("poll_cancelled", attempts=state.attempts_used, reason=reason)
        raise ActionCancelledError(self.description, reason, attempts=state.attempts_used)


def poll_until_consistent(
    probe: Callable[[], ActionOutcome[T]],
    policy: PollPolicy,
    *,
    description: str = "condition",
    cancellation: CancellationToken | None = None,
) -> T:
    """Poll ``probe`` under ``policy`` and return the last successful value.

    See ConditionPoller.poll for the errors raised.
    """
    return ConditionPoller(policy, description=description).poll(
        probe, cancellation=cancellation
    )
