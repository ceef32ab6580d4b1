"""Pytest fixtures for steadystate tests."""

import logging
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog

from steadystate.cli import helpers as cli_helpers


@pytest.fixture(autouse=True)
def reset_logging_state() -> Generator[None, None, None]:
    """Reset CLI logging state, structlog and root handlers around each test."""
    cli_helpers.reset_logging_state()
    structlog.reset_defaults()

    root_logger = logging.getLogger()
    original_handlers = root_logger.handlers[:]
    original_level = root_logger.level
    for handler in original_handlers:
        root_logger.removeHandler(handler)

    yield

    cli_helpers.reset_logging_state()
    structlog.reset_defaults()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in original_handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(original_level)


@pytest.fixture
def suite_yaml(tmp_path: Path) -> Path:
    """Write a suite configuration with one retry and one poll policy."""
    path = tmp_path / "infra.yaml"
    path.write_text(
        """
retry:
  flaky:
    max_retries: 2
    delay_seconds: 0
    known_errors:
      "connection reset": "Transient network issue"
poll:
  stable:
    max_attempts: 3
    interval_seconds: 0
    required_consecutive_successes: 2
"""
    )
    return path
