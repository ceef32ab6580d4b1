"""ErrorClassifier: substring-based retryable/fatal decisions.

A caller supplies a table mapping known transient error text (as it appears
in a tool's output) to a human description of why it happens. A failure whose
description or raw output contains any pattern is retryable; everything else
is fatal. Matching is plain, case-sensitive substring search: no regular
expressions, no locale folding.

Patterns are tried in lexicographic order and the first match wins, so the
verdict does not depend on how the caller's mapping happens to be ordered.
"""

from __future__ import annotations

from collections.abc import Mapping

from steadystate.core.logging import get_logger

from .exceptions import PolicyConfigurationError
from .models import ClassificationResult, Failure

_logger = get_logger("classifier")


class ErrorClassifier:
    """Classifies failures against a fixed table of known transient errors.

    The table is copied and sorted at construction; the classifier holds no
    other state, so one instance may be shared freely between threads.
    """

    def __init__(self, known_errors: Mapping[str, str] | None = None) -> None:
        table = dict(known_errors or {})
        if "" in table:
            raise PolicyConfigurationError(
                "known error patterns must be non-empty strings"
            )
        self._patterns: tuple[tuple[str, str], ...] = tuple(sorted(table.items()))

    @property
    def patterns(self) -> tuple[str, ...]:
        """Patterns in the order they are tried."""
        return tuple(pattern for pattern, _ in self._patterns)

    def match(self, text: str) -> tuple[str, str] | None:
        """Return the first ``(pattern, description)`` contained in ``text``."""
        for pattern, description in self._patterns:
            if pattern in text:
                return pattern, description
        return None

    def classify(self, failure: Failure) -> ClassificationResult:
        """Decide whether ``failure`` is retryable."""
        if failure.fatal:
            return ClassificationResult(retryable=False, reason=failure.description)

        hit = self.match(failure.text)
        if hit is None:
            _logger.debug("failure_unmatched", reason=failure.description)
            return ClassificationResult(retryable=False, reason=failure.description)

        pattern, description = hit
        _logger.debug("failure_matched_known_error", pattern=pattern, reason=description)
        return ClassificationResult(
            retryable=True,
            reason=description,
            matched_pattern=pattern,
        )


def classify(
    failure: Failure,
    known_errors: Mapping[str, str] | None = None,
) -> ClassificationResult:
    """Classify a single failure against ``known_errors``.

    An empty or missing table makes every failure fatal.
    """
    return ErrorClassifier(known_errors).classify(failure)
