"""Shared test helpers for steadystate tests."""

from collections.abc import Iterable
from typing import Any

from steadystate.core.errors import ActionOutcome, Failure, Success
from steadystate.execution import CancellationToken


class ScriptedAction:
    """Action that replays a fixed sequence of outcomes, counting calls.

    Running past the end of the script is a test bug and raises AssertionError.
    """

    def __init__(self, outcomes: Iterable[ActionOutcome[Any]]) -> None:
        self.outcomes = list(outcomes)
        self.calls = 0

    def __call__(self) -> ActionOutcome[Any]:
        assert self.calls < len(self.outcomes), "action called more often than scripted"
        outcome = self.outcomes[self.calls]
        self.calls += 1
        return outcome


def script(pattern: str, failure: str = "not ready") -> ScriptedAction:
    """Build a probe from a string like ``"FSSFS"`` (S = success, F = failure).

    Successful probes return their 1-based attempt number as value.
    """
    outcomes: list[ActionOutcome[Any]] = []
    for index, char in enumerate(pattern, start=1):
        if char == "S":
            outcomes.append(Success(index))
        elif char == "F":
            outcomes.append(Failure(failure))
        else:
            raise ValueError(f"unexpected script character {char!r}")
    return ScriptedAction(outcomes)


class RecordingToken(CancellationToken):
    """Token whose sleep returns immediately but records every requested delay.

    ``cancel_after`` cancels the token on the given (1-based) sleep.
    """

    def __init__(self, cancel_after: int | None = None) -> None:
        super().__init__()
        self.sleeps: list[float] = []
        self.cancel_after = cancel_after

    def sleep(self, seconds: float) -> bool:
        if self.cancelled:
            return False
        self.sleeps.append(seconds)
        if self.cancel_after is not None and len(self.sleeps) >= self.cancel_after:
            self.cancel("stopped by test")
        return not self.cancelled


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
