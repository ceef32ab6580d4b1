"""Shared utilities for steadystate CLI commands.

This module contains helpers used by both the ``run`` and ``wait`` commands:
- Logging state set by the global options, and its one-time configuration
- Suite configuration loading
- ``PATTERN=DESCRIPTION`` option parsing
- Policy assembly from a base policy plus command-line overrides
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, TypeVar

import typer
import yaml
from pydantic import BaseModel, ValidationError
from rich.console import Console

from steadystate.core.config import LogConfig, SuiteConfig
from steadystate.core.errors import PolicyConfigurationError
from steadystate.core.logging import configure_logging, get_logger

_logger = get_logger("cli")

P = TypeVar("P", bound=BaseModel)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
LOG_FORMATS = ("json", "console", "both")


# =============================================================================
# Logging configuration
# =============================================================================


@dataclass
class CliLoggingConfig:
    """Logging state collected from the global options.

    ``explicit`` records whether any logging option was given on the command
    line (or through its environment variable); only then does it take
    precedence over the ``log`` section of a suite configuration file.
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    file: Path | None = None
    format: Literal["json", "console", "both"] = "console"
    explicit: bool = False
    configured: bool = False


_log_config = CliLoggingConfig()


def set_log_level(level: str) -> None:
    """Set the log level (case-insensitive).

    Raises:
        typer.BadParameter: If ``level`` is not a known level name.
    """
    normalized = level.upper()
    if normalized not in LOG_LEVELS:
        raise typer.BadParameter(f"must be one of {', '.join(LOG_LEVELS)}")
    _log_config.level = normalized  # type: ignore[assignment]
    _log_config.explicit = True


def set_log_file(path: Path | None) -> None:
    _log_config.file = path
    _log_config.explicit = True


def set_log_format(fmt: str) -> None:
    """Set the log format.

    Raises:
        typer.BadParameter: If ``fmt`` is not json, console, or both.
    """
    normalized = fmt.lower()
    if normalized not in LOG_FORMATS:
        raise typer.BadParameter(f"must be one of {', '.join(LOG_FORMATS)}")
    _log_config.format = normalized  # type: ignore[assignment]
    _log_config.explicit = True


def configure_global_logging(console: Console) -> None:
    """Configure logging from the global CLI options, once per process.

    Raises:
        typer.Exit: If the options are inconsistent (format=both without a file).
    """
    if _log_config.configured:
        return
    fmt = _log_config.format
    if _log_config.file is not None and fmt == "console":
        fmt = "both"
    _configure(console, _log_config.level, fmt, _log_config.file)


def apply_suite_logging(log: LogConfig, console: Console) -> None:
    """Reconfigure logging from a suite file unless CLI options were given."""
    if _log_config.explicit:
        return
    _configure(
        console,
        log.level,
        log.format,
        log.file_path,
        max_file_size_mb=log.max_file_size_mb,
        backup_count=log.backup_count,
    )


def _configure(console: Console, level: Any, fmt: Any, file: Path | None, **extra: Any) -> None:
    try:
        configure_logging(level=level, format=fmt, file_path=file, **extra)
    except ValueError as e:
        console.print(f"[red]Logging configuration error:[/red] {e}")
        raise typer.Exit(2) from None
    _log_config.configured = True


def reset_logging_state() -> None:
    """Reset logging state (primarily for testing)."""
    global _log_config
    _log_config = CliLoggingConfig()


# =============================================================================
# Configuration loading
# =============================================================================


def load_suite_config(path: Path) -> SuiteConfig:
    """Load a suite configuration file.

    Raises:
        PolicyConfigurationError: The file is unreadable, not YAML, or invalid.
    """
    try:
        suite = SuiteConfig.from_yaml(path)
    except OSError as e:
        raise PolicyConfigurationError(f"cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise PolicyConfigurationError(f"{path} is not valid YAML: {e}") from e
    except ValidationError as e:
        raise PolicyConfigurationError(f"{path} is not a valid suite configuration:\n{e}") from e
    _logger.debug(
        "suite_config_loaded",
        path=str(path),
        retry_policies=sorted(suite.retry),
        poll_policies=sorted(suite.poll),
    )
    return suite


def parse_pattern_pairs(values: Iterable[str], option: str) -> dict[str, str]:
    """Parse repeated ``PATTERN=DESCRIPTION`` options into a table.

    A value without ``=`` uses the pattern itself as its description.

    Raises:
        typer.BadParameter: A pattern is empty.
    """
    table: dict[str, str] = {}
    for value in values:
        pattern, sep, description = value.partition("=")
        if not pattern:
            raise typer.BadParameter(f"empty pattern in '{value}'", param_hint=option)
        table[pattern] = description if sep and description else pattern
    return table


def build_policy(model: type[P], base: P | None, overrides: Mapping[str, Any]) -> P:
    """Return ``base`` (or model defaults) with non-None ``overrides`` applied.

    Raises:
        PolicyConfigurationError: The merged values violate the policy's constraints.
    """
    data = base.model_dump() if base is not None else {}
    data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise PolicyConfigurationError(str(e)) from e
