"""RetryableExecutor: run an action, retrying only known transient failures.

Flow of one call:

    attempt -> Success            -> return value
            -> Failure, fatal     -> FatalActionError (no more attempts)
            -> Failure, retryable -> sleep delay_for(n), attempt again
                                     ... until max_retries is spent
                                  -> ExhaustedRetriesError

Only failures matching the policy's known_errors table are retried; an
unexpected error is surfaced immediately instead of being hidden behind
minutes of pointless retries.

Example usage:
    from steadystate import RetryPolicy, run_with_retries
    from steadystate.core.errors import PACKER_RETRYABLE_ERRORS
    from steadystate.execution import CommandAction

    policy = RetryPolicy(max_retries=3, delay_seconds=15, known_errors=PACKER_RETRYABLE_ERRORS)
    output = run_with_retries(
        CommandAction(["packer", "build", "build.pkr.hcl"]),
        policy,
        description="packer build",
    )
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from steadystate.core.config import RetryPolicy, check_retry_policy
from steadystate.core.errors import (
    ActionCancelledError,
    ActionOutcome,
    ErrorClassifier,
    ExhaustedRetriesError,
    Failure,
    FatalActionError,
    Success,
)
from steadystate.core.logging import get_logger

from .cancellation import CancellationToken
from .diagnostics import DiagnosticAggregator

T = TypeVar("T")

_logger = get_logger("retry")


def require_outcome(outcome: object, description: str) -> Success[T] | Failure:
    """Reject anything an action returns that is not Success or Failure."""
    if isinstance(outcome, (Success, Failure)):
        return outcome
    raise TypeError(
        f"'{description}' must return Success or Failure, got {type(outcome).__name__}"
    )


class RetryableExecutor:
    """Runs actions under a RetryPolicy.

    The executor keeps no state between ``execute`` calls; the same instance
    may run many actions, from several threads, concurrently.
    """

    def __init__(self, policy: RetryPolicy, *, description: str = "action") -> None:
        check_retry_policy(policy)
        self.policy = policy
        self.description = description
        self._classifier = ErrorClassifier(policy.known_errors)

    def execute(
        self,
        action: Callable[[], ActionOutcome[T]],
        *,
        cancellation: CancellationToken | None = None,
    ) -> T:
        """Run ``action`` until it succeeds, fails fatally, or retries run out.

        Raises:
            FatalActionError: A failure matched no known transient error.
            ExhaustedRetriesError: ``max_retries`` retries all failed transiently.
            ActionCancelledError: ``cancellation`` fired before or between attempts.
        """
        token = cancellation or CancellationToken()
        aggregator = DiagnosticAggregator()
        log = _logger.bind(action=self.description)
        attempt = 0

        while True:
            if token.cancelled:
                log.warning("retry_cancelled", attempts=attempt, reason=token.reason)
                raise ActionCancelledError(
                    self.description, token.reason or "cancelled", attempts=attempt
                )

            attempt += 1
            aggregator.record_attempt()
            log.debug("attempt_started", attempt=attempt, max_attempts=self.policy.max_attempts)
            outcome = require_outcome(action(), self.description)

            if isinstance(outcome, Success):
                log.info("attempt_succeeded", attempt=attempt)
                return outcome.value

            verdict = self._classifier.classify(outcome)
            aggregator.add(verdict.reason)

            if not verdict.retryable:
                log.error("attempt_failed_fatal", attempt=attempt, reason=verdict.reason)
                raise FatalActionError(
                    self.description,
                    verdict.reason,
                    raw_output=outcome.raw_output,
                    attempts=attempt,
                    failure_reasons=aggregator.reasons,
                )

            if attempt > self.policy.max_retries:
                if token.cancelled:
                    log.warning("retry_cancelled", attempts=attempt, reason=token.reason)
                    raise ActionCancelledError(
                        self.description, token.reason or "cancelled", attempts=attempt
                    )
                log.error(
                    "retries_exhausted",
                    attempts=attempt,
                    reason=verdict.reason,
                    distinct_reasons=len(aggregator),
                )
                raise ExhaustedRetriesError(
                    self.description,
                    verdict.reason,
                    attempts=attempt,
                    failure_reasons=aggregator.reasons,
                    raw_output=outcome.raw_output,
                )

            delay = self.policy.delay_for(attempt)
            log.warning(
                "attempt_failed_retrying",
                attempt=attempt,
                reason=verdict.reason,
                pattern=verdict.matched_pattern,
                delay_seconds=delay,
            )
            if not token.sleep(delay):
                log.warning("retry_cancelled", attempts=attempt, reason=token.reason)
                raise ActionCancelledError(
                    self.description, token.reason or "cancelled", attempts=attempt
                )


def run_with_retries(
    action: Callable[[], ActionOutcome[T]],
    policy: RetryPolicy,
    *,
    description: str = "action",
    cancellation: CancellationToken | None = None,
) -> T:
    """Run ``action`` under ``policy`` and return its successful value.

    See RetryableExecutor.execute for the errors raised.
    """
    return RetryableExecutor(policy, description=description).execute(
        action, cancellation=cancellation
    )
