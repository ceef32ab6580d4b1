"""Retry and polling engine."""

from steadystate.execution.actions import CommandAction, CommandResult, guarded
from steadystate.execution.cancellation import CancellationToken
from steadystate.execution.diagnostics import AggregatedFailureReport, DiagnosticAggregator
from steadystate.execution.poller import ConditionPoller, PollState, poll_until_consistent
from steadystate.execution.retry import RetryableExecutor, run_with_retries

__all__ = [
    "AggregatedFailureReport",
    "CancellationToken",
    "CommandAction",
    "CommandResult",
    "ConditionPoller",
    "DiagnosticAggregator",
    "PollState",
    "RetryableExecutor",
    "guarded",
    "poll_until_consistent",
    "run_with_retries",
]
