"""Core domain models, configuration, errors and logging."""

from steadystate.core.config import LogConfig, PollPolicy, RetryPolicy, SuiteConfig
from steadystate.core.errors import (
    ActionOutcome,
    ClassificationResult,
    ErrorClassifier,
    Failure,
    FailureKind,
    Success,
)

__all__ = [
    "ActionOutcome",
    "ClassificationResult",
    "ErrorClassifier",
    "Failure",
    "FailureKind",
    "LogConfig",
    "PollPolicy",
    "RetryPolicy",
    "Success",
    "SuiteConfig",
]
