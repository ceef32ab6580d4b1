"""Tests for steadystate.core.errors.classifier module."""

import pytest

from steadystate.core.errors import (
    ClassificationResult,
    ErrorClassifier,
    Failure,
    PolicyConfigurationError,
    classify,
)

PACKER_LIKE = {
    "Script disconnected unexpectedly": "Packer lost connectivity to AWS",
    "can not open /var/lib/apt/lists": "apt-get failed to update the cache",
}


class TestClassifyMatching:
    """Tests for substring matching against description and raw output."""

    def test_match_in_raw_output_is_retryable(self) -> None:
        """A known pattern anywhere in the raw output makes the failure retryable."""
        failure = Failure(
            "packer build exited with status 1",
            raw_output="==> amazon-ebs: Script disconnected unexpectedly.\nBuild errored",
        )
        result = classify(failure, PACKER_LIKE)
        assert result.retryable is True
        assert result.reason == "Packer lost connectivity to AWS"
        assert result.matched_pattern == "Script disconnected unexpectedly"

    def test_match_in_description_is_retryable(self) -> None:
        """The description is searched as well as the raw output."""
        failure = Failure("E: can not open /var/lib/apt/lists/lock")
        result = classify(failure, PACKER_LIKE)
        assert result.retryable is True
        assert result.reason == "apt-get failed to update the cache"

    def test_no_match_is_fatal_with_raw_description(self) -> None:
        """An unknown error is not retryable and keeps its own description."""
        failure = Failure("syntax error in build.pkr.hcl", raw_output="line 3: unexpected }")
        result = classify(failure, PACKER_LIKE)
        assert result == ClassificationResult(
            retryable=False, reason="syntax error in build.pkr.hcl"
        )

    def test_empty_table_makes_everything_fatal(self) -> None:
        """No known errors means no failure is ever retried."""
        failure = Failure("Script disconnected unexpectedly")
        assert classify(failure, {}).retryable is False
        assert classify(failure).retryable is False

    def test_matching_is_case_sensitive(self) -> None:
        """Patterns are exact substrings; case differences do not match."""
        failure = Failure("script DISCONNECTED unexpectedly")
        assert classify(failure, PACKER_LIKE).retryable is False

    def test_fatal_flag_overrides_a_match(self) -> None:
        """A failure the action marked fatal is never retried."""
        failure = Failure("Script disconnected unexpectedly", fatal=True)
        result = classify(failure, PACKER_LIKE)
        assert result.retryable is False
        assert result.reason == "Script disconnected unexpectedly"
        assert result.matched_pattern is None


class TestClassifierOrdering:
    """Tests for deterministic tie-breaking between overlapping patterns."""

    def test_lexicographically_first_pattern_wins(self) -> None:
        """When several patterns match, the lexicographically smallest one is used."""
        table = {"timeout": "generic timeout", "i/o timeout": "network timeout"}
        failure = Failure("dial tcp 10.0.0.1:443: i/o timeout")
        result = classify(failure, table)
        assert result.matched_pattern == "i/o timeout"
        assert result.reason == "network timeout"

    def test_insertion_order_does_not_matter(self) -> None:
        """Reordering the caller's mapping yields the same verdict."""
        forward = {"a-error": "A", "b-error": "B"}
        backward = {"b-error": "B", "a-error": "A"}
        failure = Failure("saw b-error and a-error")
        assert classify(failure, forward) == classify(failure, backward)

    def test_patterns_property_is_sorted(self) -> None:
        """The classifier exposes patterns in the order they are tried."""
        classifier = ErrorClassifier({"zeta": "z", "alpha": "a", "mid": "m"})
        assert classifier.patterns == ("alpha", "mid", "zeta")


class TestClassifierPurity:
    """Tests that classification has no hidden state."""

    def test_repeated_classification_is_identical(self) -> None:
        """Classifying the same failure twice gives equal results."""
        classifier = ErrorClassifier(PACKER_LIKE)
        failure = Failure("x", raw_output="Script disconnected unexpectedly")
        assert classifier.classify(failure) == classifier.classify(failure)

    def test_table_is_copied_at_construction(self) -> None:
        """Mutating the caller's dict afterwards does not change the classifier."""
        table = {"boom": "transient boom"}
        classifier = ErrorClassifier(table)
        table.clear()
        assert classifier.classify(Failure("boom")).retryable is True

    def test_match_returns_none_without_hit(self) -> None:
        """match() returns None when nothing is contained in the text."""
        assert ErrorClassifier(PACKER_LIKE).match("all good") is None

    def test_empty_pattern_rejected(self) -> None:
        """An empty pattern would match everything and is refused."""
        with pytest.raises(PolicyConfigurationError):
            ErrorClassifier({"": "matches anything"})
