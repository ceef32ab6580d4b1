"""Tests for steadystate.execution.poller module."""

import pytest

from steadystate import (
    ActionCancelledError,
    ConditionNeverSatisfiedError,
    ConditionPoller,
    Failure,
    FatalActionError,
    PolicyConfigurationError,
    PollPolicy,
    Success,
    poll_until_consistent,
)
from steadystate.core.errors import FailureKind
from tests.helpers import RecordingToken, ScriptedAction, script


def policy(max_attempts: int, required: int = 1, **kwargs: object) -> PollPolicy:
    return PollPolicy(
        max_attempts=max_attempts,
        interval_seconds=0,
        required_consecutive_successes=required,
        **kwargs,
    )


class TestConditionPollerSuccess:
    """Tests for conditions that become stable."""

    def test_single_success_is_enough_by_default(self) -> None:
        """With required=1 the first success returns its value."""
        probe = script("FFS")
        token = RecordingToken()
        assert poll_until_consistent(probe, policy(5), cancellation=token) == 3
        assert probe.calls == 3
        assert token.sleeps == [0, 0]

    def test_streak_reset_then_success(self) -> None:
        """[S,F,S,S] with required=2 succeeds on attempt 4."""
        probe = script("SFSS")
        result = poll_until_consistent(probe, policy(5, required=2), cancellation=RecordingToken())
        assert result == 4
        assert probe.calls == 4

    def test_most_recent_value_is_returned(self) -> None:
        """Success values may differ across the streak; the last one wins."""
        probe = ScriptedAction([Success({"phase": "Running"}), Success({"phase": "Running", "ip": "10.0.0.7"})])
        result = poll_until_consistent(probe, policy(3, required=2), cancellation=RecordingToken())
        assert result == {"phase": "Running", "ip": "10.0.0.7"}

    def test_required_equal_to_max_demands_every_attempt(self) -> None:
        """required == max_attempts succeeds only when every probe succeeds."""
        assert poll_until_consistent(script("SSS"), policy(3, required=3)) == 3
        with pytest.raises(ConditionNeverSatisfiedError):
            poll_until_consistent(script("SSF"), policy(3, required=3))

    def test_no_sleep_after_final_success(self) -> None:
        """The poller returns as soon as the streak completes."""
        token = RecordingToken()
        poll_until_consistent(script("SS"), policy(5, required=2), cancellation=token)
        assert token.sleeps == [0]

    def test_interval_is_passed_to_sleep(self) -> None:
        """Each pause between probes uses interval_seconds."""
        token = RecordingToken()
        poll_until_consistent(
            script("FFS"),
            PollPolicy(max_attempts=3, interval_seconds=2.5),
            cancellation=token,
        )
        assert token.sleeps == [2.5, 2.5]


class TestConditionPollerExhaustion:
    """Tests for conditions that never stabilize."""

    def test_flapping_condition_is_exhausted(self) -> None:
        """[F,S,S,F,S] with max=5 required=3 never completes a streak."""
        probe = script("FSSFS", failure="pod web-0 not ready")
        token = RecordingToken()
        with pytest.raises(ConditionNeverSatisfiedError) as exc_info:
            poll_until_consistent(
                probe, policy(5, required=3), description="pod web-0 available", cancellation=token
            )

        err = exc_info.value
        assert probe.calls == 5
        assert len(token.sleeps) == 4
        assert err.attempts == 5
        assert err.report.total_attempts == 5
        assert err.report.distinct_failure_reasons == ("pod web-0 not ready",)
        assert err.kind is FailureKind.CONDITION_NEVER_SATISFIED
        message = str(err)
        assert "Condition 'pod web-0 available' not satisfied after 5 attempts" in message
        assert "required 3 consecutive successes" in message
        assert "Distinct failure reasons (1):" in message
        assert "(seen 2 times)" in message
        assert "Total attempts: 5" in message

    def test_distinct_reasons_in_first_seen_order(self) -> None:
        """Each distinct failure is reported once, in the order first seen."""
        probe = ScriptedAction([
            Failure("ImagePullBackOff"),
            Failure("CrashLoopBackOff"),
            Failure("ImagePullBackOff"),
            Failure("Pending"),
        ])
        with pytest.raises(ConditionNeverSatisfiedError) as exc_info:
            poll_until_consistent(probe, policy(4), cancellation=RecordingToken())
        report = exc_info.value.report
        assert report.distinct_failure_reasons == ("ImagePullBackOff", "CrashLoopBackOff", "Pending")
        assert report.occurrences["ImagePullBackOff"] == 2

    def test_last_raw_output_in_report(self) -> None:
        """The report carries the raw output of the final probe."""
        probe = ScriptedAction([
            Failure("not ready", raw_output="status: Pending"),
            Failure("not ready", raw_output="status: ContainerCreating"),
        ])
        with pytest.raises(ConditionNeverSatisfiedError) as exc_info:
            poll_until_consistent(probe, policy(2))
        assert exc_info.value.report.last_raw_output == "status: ContainerCreating"
        assert "status: ContainerCreating" in str(exc_info.value)

    def test_exhausted_while_mid_streak(self) -> None:
        """Running out part-way through a streak still raises."""
        with pytest.raises(ConditionNeverSatisfiedError) as exc_info:
            poll_until_consistent(script("SFS"), policy(3, required=2))
        assert exc_info.value.report.distinct_failure_reasons == ("not ready",)


class TestConditionPollerValidation:
    """Tests for policy validation before any probe runs."""

    def test_required_greater_than_max_rejected_at_construction(self) -> None:
        """Building such a PollPolicy fails immediately."""
        with pytest.raises(PolicyConfigurationError):
            PollPolicy(max_attempts=2, interval_seconds=0, required_consecutive_successes=3)

    def test_unvalidated_policy_rejected_before_probe(self) -> None:
        """A policy built without validation is still checked before probing."""
        bad = PollPolicy.model_construct(
            max_attempts=2,
            interval_seconds=0,
            required_consecutive_successes=3,
            fatal_errors={},
        )
        probe = ScriptedAction([])
        with pytest.raises(PolicyConfigurationError) as exc_info:
            poll_until_consistent(probe, bad)
        assert probe.calls == 0
        assert exc_info.value.kind is FailureKind.CONFIGURATION


class TestConditionPollerFatal:
    """Tests for failures that make waiting pointless."""

    def test_fatal_error_pattern_aborts(self) -> None:
        """A probe failure matching fatal_errors stops polling immediately."""
        probe = ScriptedAction([
            Failure("not ready"),
            Failure("container waiting", raw_output="reason: ErrImagePull"),
        ])
        token = RecordingToken()
        with pytest.raises(FatalActionError) as exc_info:
            poll_until_consistent(
                probe,
                policy(10, fatal_errors={"ErrImagePull": "Image does not exist"}),
                cancellation=token,
            )
        assert probe.calls == 2
        assert exc_info.value.attempts == 2
        assert "Image does not exist" in exc_info.value.reason
        assert len(token.sleeps) == 1

    def test_failure_marked_fatal_aborts(self) -> None:
        """Failure(fatal=True) from a probe stops polling."""
        probe = ScriptedAction([Failure("namespace deleted", fatal=True)])
        with pytest.raises(FatalActionError) as exc_info:
            poll_until_consistent(probe, policy(10))
        assert exc_info.value.reason == "namespace deleted"
        assert probe.calls == 1

    def test_fatal_error_lists_earlier_reasons(self) -> None:
        """The fatal error keeps the failures seen while waiting."""
        probe = ScriptedAction([
            Failure("Pending"),
            Failure("ContainerCreating"),
            Failure("ErrImagePull"),
        ])
        with pytest.raises(FatalActionError) as exc_info:
            poll_until_consistent(
                probe,
                policy(10, fatal_errors={"ErrImagePull": "bad image"}),
                cancellation=RecordingToken(),
            )

        err = exc_info.value
        assert err.failure_reasons == ("Pending", "ContainerCreating", "ErrImagePull")
        message = str(err)
        assert "on attempt 3: bad image (ErrImagePull)" in message
        assert "  - Pending" in message
        assert "  - ContainerCreating" in message


class TestConditionPollerCancellation:
    """Tests for cooperative cancellation."""

    def test_cancelled_during_final_probe(self) -> None:
        """Cancellation observed on the last probe wins over exhaustion."""
        token = RecordingToken()

        def probe() -> Failure:
            token.cancel("timed out after 5s")
            return Failure("not ready")

        with pytest.raises(ActionCancelledError) as exc_info:
            poll_until_consistent(probe, policy(1), cancellation=token)
        assert exc_info.value.attempts == 1
        assert exc_info.value.reason == "timed out after 5s"

    def test_cancel_between_probes(self) -> None:
        """Cancellation during the interval stops before the next probe."""
        probe = script("FFFF")
        token = RecordingToken(cancel_after=1)
        with pytest.raises(ActionCancelledError) as exc_info:
            poll_until_consistent(probe, policy(4), cancellation=token)
        assert probe.calls == 1
        assert exc_info.value.attempts == 1

    def test_poller_instance_is_reusable(self) -> None:
        """State is per call; a poller can be used repeatedly."""
        poller = ConditionPoller(policy(3, required=2))
        assert poller.poll(script("SS")) == 2
        assert poller.poll(script("FSS")) == 3
