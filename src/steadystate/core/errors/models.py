"""Data models for action outcomes and failure classification.

This module provides:
- Success: an attempt that produced a value
- Failure: an attempt that failed, with a description and raw output
- ActionOutcome: the union returned by every action or probe
- ClassificationResult: retryable/fatal verdict for one Failure
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """A successful attempt.

    Attributes:
        value: Typed result handed back to the caller (e.g. a parsed pod,
            an AMI id, command output).
        raw_output: Textual output captured while producing the value.
    """

    value: T
    raw_output: str = ""

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """A failed attempt.

    Attributes:
        description: Short human-readable failure reason. This is what the
            diagnostic report deduplicates on, so keep volatile details
            (timestamps, request ids) out of it where possible.
        raw_output: Full textual output of the attempt (stdout/stderr, API body).
        fatal: The action already knows retrying cannot help; the engine
            stops immediately regardless of known-error tables.
    """

    description: str
    raw_output: str = ""
    fatal: bool = False

    @property
    def ok(self) -> bool:
        return False

    @property
    def text(self) -> str:
        """Description and raw output joined; the haystack for pattern matching."""
        if not self.raw_output:
            return self.description
        return f"{self.description}\n{self.raw_output}"


ActionOutcome = Union[Success[T], Failure]
"""Result of one attempt of an action or probe."""


@dataclass(frozen=True)
class ClassificationResult:
    """Verdict for a single Failure.

    Attributes:
        retryable: Whether the failure matched a known transient pattern.
        reason: Mapped description when retryable, raw failure text otherwise.
        matched_pattern: The pattern that matched, if any.
    """

    retryable: bool
    reason: str
    matched_pattern: str | None = None
