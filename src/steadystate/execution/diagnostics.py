"""Diagnostic aggregation across attempts.

A condition that flaps between two failure modes is far easier to debug
from its history than from its last snapshot. The DiagnosticAggregator keeps
every distinct failure reason in first-seen order, counts repeats, and
renders them into one multi-line message.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from steadystate.core.constants import TRUNCATE_OUTPUT_TAIL_CHARS, TRUNCATE_REASON_CHARS


def _clip(reason: str) -> str:
    if len(reason) <= TRUNCATE_REASON_CHARS:
        return reason
    return reason[:TRUNCATE_REASON_CHARS] + "..."


def _render_reasons(
    reasons: Sequence[str],
    occurrences: Mapping[str, int],
    total_attempts: int,
) -> list[str]:
    if not reasons:
        lines = ["No failures recorded"]
    else:
        lines = [f"Distinct failure reasons ({len(reasons)}):"]
        for index, reason in enumerate(reasons, start=1):
            first, *rest = _clip(reason).splitlines() or [""]
            count = occurrences.get(reason, 1)
            suffix = f" (seen {count} times)" if count > 1 else ""
            lines.append(f"  {index}. {first}{suffix}")
            lines.extend(f"     {line}" for line in rest)
    lines.append(f"Total attempts: {total_attempts}")
    return lines


@dataclass(frozen=True)
class AggregatedFailureReport:
    """Everything known about a polling call at the moment it gave up.

    Attributes:
        total_attempts: Probes executed.
        distinct_failure_reasons: Deduplicated reasons, first-seen order.
        last_raw_output: Raw output of the final probe.
        occurrences: How many failed attempts reported each reason.
    """

    total_attempts: int
    distinct_failure_reasons: tuple[str, ...]
    last_raw_output: str = ""
    occurrences: Mapping[str, int] = field(default_factory=dict)

    def render(self) -> str:
        """Multi-line human-readable form, used as the error message body."""
        lines = _render_reasons(
            self.distinct_failure_reasons, self.occurrences, self.total_attempts
        )
        if self.last_raw_output:
            output = self.last_raw_output
            if len(output) > TRUNCATE_OUTPUT_TAIL_CHARS:
                output = "..." + output[-TRUNCATE_OUTPUT_TAIL_CHARS:]
            lines.append("Last output:")
            lines.extend(f"    {line}" for line in output.splitlines())
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_attempts": self.total_attempts,
            "distinct_failure_reasons": list(self.distinct_failure_reasons),
            "occurrences": dict(self.occurrences),
            "last_raw_output": self.last_raw_output,
        }


class DiagnosticAggregator:
    """Ordered, deduplicating collector of failure reasons.

    Not thread-safe; each engine call owns its own instance.
    """

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}
        self.attempts = 0

    def add(self, description: str) -> bool:
        """Record one failure. Returns True if the reason was new."""
        is_new = description not in self._counts
        self._counts[description] = self._counts.get(description, 0) + 1
        return is_new

    def record_attempt(self) -> None:
        self.attempts += 1

    @property
    def reasons(self) -> tuple[str, ...]:
        """Distinct reasons in first-seen order."""
        return tuple(self._counts)

    def occurrences(self, description: str) -> int:
        return self._counts.get(description, 0)

    def __len__(self) -> int:
        return len(self._counts)

    def __contains__(self, description: object) -> bool:
        return description in self._counts

    def render(self) -> str:
        """One line per distinct reason, then the attempt count."""
        return "\n".join(_render_reasons(self.reasons, self._counts, self.attempts))

    def build_report(self, last_raw_output: str = "") -> AggregatedFailureReport:
        return AggregatedFailureReport(
            total_attempts=self.attempts,
            distinct_failure_reasons=self.reasons,
            last_raw_output=last_raw_output,
            occurrences=dict(self._counts),
        )
