"""Tests for steadystate.execution.cancellation module."""

import threading
import time

import pytest

from steadystate.execution import CancellationToken
from tests.helpers import FakeClock


class TestCancellationToken:
    """Tests for explicit cancellation."""

    def test_new_token_is_live(self) -> None:
        """A fresh token without deadline is not cancelled."""
        token = CancellationToken()
        assert token.cancelled is False
        assert token.reason is None
        assert token.remaining() is None

    def test_cancel_keeps_first_reason(self) -> None:
        """Cancellation is permanent and the first reason wins."""
        token = CancellationToken()
        token.cancel("first")
        token.cancel("second")
        assert token.cancelled is True
        assert token.reason == "first"

    def test_sleep_returns_false_when_cancelled(self) -> None:
        """sleep() on a cancelled token returns False without waiting."""
        token = CancellationToken()
        token.cancel()
        start = time.monotonic()
        assert token.sleep(10) is False
        assert time.monotonic() - start < 1

    def test_zero_sleep_on_live_token(self) -> None:
        """sleep(0) returns True immediately."""
        assert CancellationToken().sleep(0) is True

    def test_cancel_from_other_thread_wakes_sleep(self) -> None:
        """cancel() from another thread interrupts a long sleep."""
        token = CancellationToken()
        timer = threading.Timer(0.05, token.cancel, args=("test timeout",))
        timer.start()
        try:
            start = time.monotonic()
            assert token.sleep(30) is False
            assert time.monotonic() - start < 5
        finally:
            timer.cancel()
        assert token.reason == "test timeout"

    def test_negative_timeout_rejected(self) -> None:
        """A negative deadline is a programming error."""
        with pytest.raises(ValueError):
            CancellationToken(timeout_seconds=-1)


class TestCancellationDeadline:
    """Tests for wall-clock deadlines."""

    def test_deadline_cancels(self) -> None:
        """Passing the deadline counts as cancellation."""
        clock = FakeClock()
        token = CancellationToken(timeout_seconds=10, clock=clock)
        assert token.cancelled is False
        assert token.remaining() == 10

        clock.advance(10)
        assert token.cancelled is True
        assert token.reason == "timed out after 10s"
        assert token.remaining() == 0

    def test_sleep_past_deadline_returns_false(self) -> None:
        """A sleep capped by a deadline that has passed reports cancellation."""
        token = CancellationToken(timeout_seconds=0.01)
        assert token.sleep(30) is False
        assert token.cancelled is True
