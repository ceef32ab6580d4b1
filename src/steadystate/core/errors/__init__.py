"""Outcome models, failure classification and the engine's error taxonomy."""

from steadystate.core.errors.codes import FailureKind
from steadystate.core.errors.exceptions import (
    ActionCancelledError,
    ConditionNeverSatisfiedError,
    ExhaustedRetriesError,
    FatalActionError,
    PolicyConfigurationError,
    SteadyStateError,
)
from steadystate.core.errors.models import (
    ActionOutcome,
    ClassificationResult,
    Failure,
    Success,
)
from steadystate.core.errors.classifier import ErrorClassifier, classify
from steadystate.core.errors.known_errors import (
    KUBECTL_RETRYABLE_ERRORS,
    PACKER_RETRYABLE_ERRORS,
    TERRAFORM_RETRYABLE_ERRORS,
    available_tables,
    get_known_errors,
)

__all__ = [
    "FailureKind",
    "ActionCancelledError",
    "ConditionNeverSatisfiedError",
    "ExhaustedRetriesError",
    "FatalActionError",
    "PolicyConfigurationError",
    "SteadyStateError",
    "ActionOutcome",
    "ClassificationResult",
    "Failure",
    "Success",
    "ErrorClassifier",
    "classify",
    "KUBECTL_RETRYABLE_ERRORS",
    "PACKER_RETRYABLE_ERRORS",
    "TERRAFORM_RETRYABLE_ERRORS",
    "available_tables",
    "get_known_errors",
]
