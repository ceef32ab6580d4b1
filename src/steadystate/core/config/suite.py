"""Suite configuration: named policies loaded from YAML.

Example ``steadystate.yaml``::

    log:
      level: DEBUG
    retry:
      packer-build:
        max_retries: 3
        delay_seconds: 15
        known_errors:
          "Script disconnected unexpectedly": "Packer lost connectivity to AWS"
    poll:
      pod-ready:
        max_attempts: 30
        interval_seconds: 2
        required_consecutive_successes: 3
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from steadystate.core.errors.exceptions import PolicyConfigurationError

from .log import LogConfig
from .policy import PollPolicy, RetryPolicy


class SuiteConfig(BaseModel):
    """Logging settings plus named retry and poll policies for a test suite."""

    log: LogConfig = Field(default_factory=LogConfig)
    retry: dict[str, RetryPolicy] = Field(default_factory=dict)
    poll: dict[str, PollPolicy] = Field(default_factory=dict)

    @classmethod
    def from_yaml(cls, path: Path) -> SuiteConfig:
        """Load suite configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.model_validate(data or {})

    @classmethod
    def from_yaml_string(cls, yaml_str: str) -> SuiteConfig:
        """Load suite configuration from a YAML string."""
        data = yaml.safe_load(yaml_str)
        return cls.model_validate(data or {})

    def retry_policy(self, name: str) -> RetryPolicy:
        """Look up a named retry policy."""
        try:
            return self.retry[name]
        except KeyError:
            raise PolicyConfigurationError(
                f"no retry policy named '{name}' (defined: {', '.join(sorted(self.retry)) or 'none'})"
            ) from None

    def poll_policy(self, name: str) -> PollPolicy:
        """Look up a named poll policy."""
        try:
            return self.poll[name]
        except KeyError:
            raise PolicyConfigurationError(
                f"no poll policy named '{name}' (defined: {', '.join(sorted(self.poll)) or 'none'})"
            ) from None
