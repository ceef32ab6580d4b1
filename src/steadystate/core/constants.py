"""Global constants for steadystate.

Centralizes magic numbers used throughout the codebase,
making them discoverable, consistent, and easy to modify.
"""

# =============================================================================
# Retry Defaults
# =============================================================================

DEFAULT_MAX_RETRIES = 3
"""Retries after the first attempt when no policy value is given."""

DEFAULT_RETRY_DELAY_SECONDS = 15.0
"""Pause between retries of a transient failure (a Packer build, a terraform init)."""

# =============================================================================
# Polling Defaults
# =============================================================================

DEFAULT_POLL_MAX_ATTEMPTS = 30
"""Probe attempts before a condition is declared never satisfied."""

DEFAULT_POLL_INTERVAL_SECONDS = 2.0
"""Pause between consecutive probes."""

DEFAULT_REQUIRED_CONSECUTIVE_SUCCESSES = 1
"""Successful probes in a row needed to declare a condition stable."""

# =============================================================================
# Process Execution Defaults
# =============================================================================

PROCESS_DEFAULT_TIMEOUT_SECONDS = 300.0
"""Default timeout for a single subprocess attempt (5 minutes)."""

# =============================================================================
# Text Truncation Limits (characters)
# =============================================================================

TRUNCATE_OUTPUT_TAIL_CHARS = 2000
"""Raw output kept on reports and errors; the tail is what explains a failure."""

TRUNCATE_REASON_CHARS = 500
"""Maximum characters of a single failure reason in rendered reports."""

# =============================================================================
# CLI Exit Codes
# =============================================================================

EXIT_ACTION_FAILED = 1
"""Fatal failure, exhausted retries, or condition never satisfied."""

EXIT_CONFIG_ERROR = 2
"""Invalid policy or unreadable configuration file."""

EXIT_CANCELLED = 130
"""Cancelled or wall-clock timeout reached (mirrors SIGINT convention)."""
