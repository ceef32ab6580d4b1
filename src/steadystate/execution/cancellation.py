"""Cooperative cancellation for the retry and polling loops.

The engine blocks only while sleeping between attempts. That sleep is a
``threading.Event.wait`` on a CancellationToken, so another thread (a test
timeout handler, a signal handler, a watchdog) can stop a loop immediately
instead of waiting out the delay.

Example usage:
    token = CancellationToken(timeout_seconds=600)  # wall-clock cap for the whole call
    threading.Timer(30, token.cancel, args=("test aborted",)).start()
    poll_until_consistent(probe, policy, cancellation=token)
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable


class CancellationToken:
    """Cancellation signal with an optional wall-clock deadline.

    A token is cancelled once ``cancel()`` has been called or once its
    deadline has passed, whichever comes first. Cancellation is permanent.
    Tokens are safe to share between threads; a single token may govern
    several engine calls (e.g. all steps of one test).
    """

    def __init__(
        self,
        timeout_seconds: float | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if timeout_seconds is not None and timeout_seconds < 0:
            raise ValueError(f"timeout_seconds must be >= 0, got {timeout_seconds}")
        self._clock = clock
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._reason: str | None = None
        self._timeout_seconds = timeout_seconds
        self._deadline = clock() + timeout_seconds if timeout_seconds is not None else None

    def cancel(self, reason: str = "cancelled") -> None:
        """Cancel the token. Only the first reason is kept."""
        with self._lock:
            if self._reason is None:
                self._reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._deadline is not None and self._clock() >= self._deadline

    @property
    def reason(self) -> str | None:
        """Why the token is cancelled, or None while it is still live."""
        if self._event.is_set():
            return self._reason
        if self._deadline is not None and self._clock() >= self._deadline:
            return f"timed out after {self._timeout_seconds:g}s"
        return None

    def remaining(self) -> float | None:
        """Seconds until the deadline (never negative), or None without one."""
        if self._deadline is None:
            return None
        return max(self._deadline - self._clock(), 0.0)

    def sleep(self, seconds: float) -> bool:
        """Block for ``seconds`` unless cancelled first.

        Returns:
            True if the full delay elapsed and the token is still live,
            False if the token was (or became) cancelled.
        """
        if self.cancelled:
            return False
        wait = seconds
        remaining = self.remaining()
        if remaining is not None and remaining < wait:
            wait = remaining
        if wait > 0:
            self._event.wait(wait)
        return not self.cancelled
