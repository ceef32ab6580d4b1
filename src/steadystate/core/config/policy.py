"""Retry and polling policy models.

Policies are frozen pydantic models: built once from caller configuration
(code, YAML, CLI flags) and borrowed read-only by one engine call.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

from steadystate.core.constants import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_POLL_MAX_ATTEMPTS,
    DEFAULT_REQUIRED_CONSECUTIVE_SUCCESSES,
    DEFAULT_RETRY_DELAY_SECONDS,
)
from steadystate.core.errors.exceptions import PolicyConfigurationError


def _check_patterns(table: Mapping[str, str], field_name: str) -> None:
    if "" in table:
        raise PolicyConfigurationError(f"{field_name} patterns must be non-empty strings")


def _read_only(table: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(table))


class RetryPolicy(BaseModel):
    """How often, and on which errors, an action is re-run."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_retries: int = Field(
        default=DEFAULT_MAX_RETRIES,
        ge=0,
        description="Retries after the first attempt (0 = exactly one attempt)",
    )
    delay_seconds: float = Field(
        default=DEFAULT_RETRY_DELAY_SECONDS,
        ge=0,
        description="Delay before the first retry",
    )
    known_errors: Mapping[str, str] = Field(
        default_factory=dict,
        validate_default=True,
        description="Substring of a transient error -> human description of why it happens",
    )
    backoff_multiplier: float = Field(
        default=1.0,
        ge=1.0,
        description="Delay multiplier per retry (1.0 = fixed delay)",
    )
    max_delay_seconds: float | None = Field(
        default=None,
        ge=0,
        description="Upper bound on any single delay when backing off",
    )

    @field_validator("known_errors", mode="after")
    @classmethod
    def _freeze_known_errors(cls, table: Mapping[str, str]) -> Mapping[str, str]:
        return _read_only(table)

    @field_serializer("known_errors")
    def _dump_known_errors(self, table: Mapping[str, str]) -> dict[str, str]:
        return dict(table)

    @model_validator(mode="after")
    def _validate_delays(self) -> RetryPolicy:
        _check_patterns(self.known_errors, "known_errors")
        if self.max_delay_seconds is not None and self.max_delay_seconds < self.delay_seconds:
            raise PolicyConfigurationError(
                f"max_delay_seconds ({self.max_delay_seconds}) must not be less than "
                f"delay_seconds ({self.delay_seconds})"
            )
        return self

    def delay_for(self, retry_number: int) -> float:
        """Seconds to wait before retry ``retry_number`` (1-indexed)."""
        delay = self.delay_seconds * self.backoff_multiplier ** max(retry_number - 1, 0)
        if self.max_delay_seconds is not None:
            delay = min(delay, self.max_delay_seconds)
        return delay

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1


class PollPolicy(BaseModel):
    """How often a condition is probed and how stable it must be."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_attempts: int = Field(
        default=DEFAULT_POLL_MAX_ATTEMPTS,
        ge=1,
        description="Total probes before giving up",
    )
    interval_seconds: float = Field(
        default=DEFAULT_POLL_INTERVAL_SECONDS,
        ge=0,
        description="Delay between probes",
    )
    required_consecutive_successes: int = Field(
        default=DEFAULT_REQUIRED_CONSECUTIVE_SUCCESSES,
        ge=1,
        description="Successful probes in a row needed to declare the condition stable",
    )
    fatal_errors: Mapping[str, str] = Field(
        default_factory=dict,
        validate_default=True,
        description="Substring of a probe failure that makes waiting pointless -> description",
    )

    @field_validator("fatal_errors", mode="after")
    @classmethod
    def _freeze_fatal_errors(cls, table: Mapping[str, str]) -> Mapping[str, str]:
        return _read_only(table)

    @field_serializer("fatal_errors")
    def _dump_fatal_errors(self, table: Mapping[str, str]) -> dict[str, str]:
        return dict(table)

    @model_validator(mode="after")
    def _validate_consistency(self) -> PollPolicy:
        _check_patterns(self.fatal_errors, "fatal_errors")
        check_poll_policy(self)
        return self


def check_poll_policy(policy: PollPolicy) -> None:
    """Raise PolicyConfigurationError if ``policy`` can never succeed.

    Also called by the poller itself, so policies assembled with
    ``model_construct`` are rejected before the first probe.
    """
    if policy.max_attempts < 1:
        raise PolicyConfigurationError(
            f"max_attempts must be at least 1, got {policy.max_attempts}"
        )
    if policy.required_consecutive_successes < 1:
        raise PolicyConfigurationError(
            "required_consecutive_successes must be at least 1, "
            f"got {policy.required_consecutive_successes}"
        )
    if policy.required_consecutive_successes > policy.max_attempts:
        raise PolicyConfigurationError(
            f"required_consecutive_successes ({policy.required_consecutive_successes}) "
            f"must not exceed max_attempts ({policy.max_attempts})"
        )


def check_retry_policy(policy: RetryPolicy) -> None:
    """Raise PolicyConfigurationError for negative budgets or delays."""
    if policy.max_retries < 0:
        raise PolicyConfigurationError(f"max_retries must be >= 0, got {policy.max_retries}")
    if policy.delay_seconds < 0:
        raise PolicyConfigurationError(f"delay_seconds must be >= 0, got {policy.delay_seconds}")
