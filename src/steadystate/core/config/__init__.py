"""Configuration models for steadystate.

All models are re-exported here so callers can write
``from steadystate.core.config import RetryPolicy``.
"""

from steadystate.core.config.log import LogConfig
from steadystate.core.config.policy import (
    PollPolicy,
    RetryPolicy,
    check_poll_policy,
    check_retry_policy,
)
from steadystate.core.config.suite import SuiteConfig

__all__ = [
    "LogConfig",
    "PollPolicy",
    "RetryPolicy",
    "SuiteConfig",
    "check_poll_policy",
    "check_retry_policy",
]
