"""steadystate - resilient execution and condition polling for infrastructure tests.

Public entry points:

    from steadystate import run_with_retries, poll_until_consistent

Both take a zero-argument callable returning ``Success`` or ``Failure`` and a
policy, and either return the last successful value or raise a
``SteadyStateError`` subclass whose message lists every distinct failure seen.
"""

__version__ = "0.1.0"

from steadystate.core.config import PollPolicy, RetryPolicy
from steadystate.core.errors import (
    ActionCancelledError,
    ActionOutcome,
    ClassificationResult,
    ConditionNeverSatisfiedError,
    ErrorClassifier,
    ExhaustedRetriesError,
    Failure,
    FatalActionError,
    PolicyConfigurationError,
    SteadyStateError,
    Success,
    classify,
)
from steadystate.execution import (
    CancellationToken,
    CommandAction,
    ConditionPoller,
    DiagnosticAggregator,
    RetryableExecutor,
    guarded,
    poll_until_consistent,
    run_with_retries,
)

__all__ = [
    "__version__",
    "ActionCancelledError",
    "ActionOutcome",
    "CancellationToken",
    "ClassificationResult",
    "CommandAction",
    "ConditionNeverSatisfiedError",
    "ConditionPoller",
    "DiagnosticAggregator",
    "ErrorClassifier",
    "ExhaustedRetriesError",
    "Failure",
    "FatalActionError",
    "PolicyConfigurationError",
    "PollPolicy",
    "RetryPolicy",
    "RetryableExecutor",
    "Success",
    "SteadyStateError",
    "classify",
    "guarded",
    "poll_until_consistent",
    "run_with_retries",
]
