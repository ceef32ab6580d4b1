"""Structured logging infrastructure for steadystate.

Every retry and polling attempt is logged through structlog so that a flaky
infrastructure test leaves a readable trail: which action ran, which attempt
it was, why it failed, and how long the engine waited before trying again.

Example usage:
    from steadystate.core.logging import get_logger, configure_logging, with_context

    # Configure once at startup (the CLI does this for you)
    configure_logging(level="DEBUG", format="console")

    # Get a component-specific logger
    logger = get_logger("retry")
    logger.info("attempt_started", attempt=1)

    # Correlate all engine output of one test case
    ctx = ExecutionContext(suite="k8s", test_name="test_pod_ready")
    with with_context(ctx):
        poll_until_consistent(probe, policy)  # every entry carries suite/test_name/run_id
"""

from __future__ import annotations

import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Literal

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

# Sensitive field patterns that should never be logged. Infrastructure tests
# routinely pass cloud credentials and kubeconfig tokens through actions.
SENSITIVE_PATTERNS = frozenset({
    "api_key",
    "apikey",
    "access_key",
    "token",
    "secret",
    "password",
    "credential",
    "auth",
    "bearer",
    "kubeconfig",
})


@dataclass(frozen=True)
class ExecutionContext:
    """Immutable context for correlating log entries of one test run.

    Parallel test cases often hit the same cluster or cloud account; binding
    a context keeps their interleaved engine output attributable.

    Attributes:
        suite: Name of the test suite or configuration file.
        run_id: Unique identifier for this invocation.
        test_name: Test case currently driving the engine (None outside a test).
        component: Component name for the current operation.
    """

    suite: str
    run_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    test_name: str | None = None
    component: str = "unknown"

    def with_test(self, test_name: str) -> ExecutionContext:
        """Return a copy of this context bound to ``test_name``."""
        return replace(self, test_name=test_name)

    def with_component(self, component: str) -> ExecutionContext:
        """Return a copy of this context bound to ``component``."""
        return replace(self, component=component)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging (None values omitted)."""
        result: dict[str, Any] = {
            "suite": self.suite,
            "run_id": self.run_id,
            "component": self.component,
        }
        if self.test_name is not None:
            result["test_name"] = self.test_name
        return result


# ContextVar keeps contexts isolated between threads and asyncio tasks
_current_context: ContextVar[ExecutionContext | None] = ContextVar(
    "steadystate_context", default=None
)


def get_current_context() -> ExecutionContext | None:
    """Get the current ExecutionContext if set."""
    return _current_context.get()


@contextmanager
def with_context(ctx: ExecutionContext) -> Iterator[ExecutionContext]:
    """Context manager that sets ExecutionContext for the duration of a block.

    Args:
        ctx: The ExecutionContext to use for the block.

    Yields:
        The ExecutionContext that was set.
    """
    token = _current_context.set(ctx)
    try:
        yield ctx
    finally:
        _current_context.reset(token)


def _sanitize_value(key: str, value: Any) -> Any:
    """Return ``"[REDACTED]"`` when ``key`` names a sensitive field."""
    key_lower = key.lower()
    for pattern in SENSITIVE_PATTERNS:
        if pattern in key_lower:
            return "[REDACTED]"
    return value


def _sanitize_event_dict(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor that redacts sensitive fields, one level deep."""
    sanitized: EventDict = {}
    for key, value in event_dict.items():
        if isinstance(value, dict):
            sanitized[key] = {
                k: _sanitize_value(k, v) for k, v in value.items()
            }
        else:
            sanitized[key] = _sanitize_value(key, value)
    return sanitized


def _add_timestamp(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor that adds an ISO8601 UTC timestamp."""
    event_dict["timestamp"] = datetime.now(UTC).isoformat()
    return event_dict


def _add_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor that merges the current ExecutionContext.

    Explicitly bound keys take precedence over context fields.
    """
    ctx = get_current_context()
    if ctx is not None:
        for key, value in ctx.to_dict().items():
            if key not in event_dict:
                event_dict[key] = value
    return event_dict


class SteadyStateLogger:
    """Component logger wrapping structlog.

    The underlying structlog logger is fetched lazily on every call so that
    module-level loggers created at import time still honour a later
    ``configure_logging()``.
    """

    def __init__(self, component: str, **initial_context: Any) -> None:
        self._component = component
        self._context: dict[str, Any] = {"component": component, **initial_context}

    def _get_logger(self) -> structlog.stdlib.BoundLogger:
        logger: structlog.stdlib.BoundLogger = structlog.get_logger().bind(**self._context)
        return logger

    def bind(self, **context: Any) -> SteadyStateLogger:
        """Return a new logger with additional bound context."""
        new_logger = SteadyStateLogger.__new__(SteadyStateLogger)
        new_logger._component = self._component
        new_logger._context = {**self._context, **context}
        return new_logger

    def unbind(self, *keys: str) -> SteadyStateLogger:
        """Return a new logger with ``keys`` removed from the bound context."""
        new_logger = SteadyStateLogger.__new__(SteadyStateLogger)
        new_logger._component = self._component
        new_logger._context = {k: v for k, v in self._context.items() if k not in keys}
        return new_logger

    def debug(self, event: str, **kw: Any) -> None:
        self._get_logger().debug(event, **kw)

    def info(self, event: str, **kw: Any) -> None:
        self._get_logger().info(event, **kw)

    def warning(self, event: str, **kw: Any) -> None:
        self._get_logger().warning(event, **kw)

    def error(self, event: str, **kw: Any) -> None:
        self._get_logger().error(event, **kw)

    def exception(self, event: str, **kw: Any) -> None:
        """Log an error with traceback; call from within an exception handler."""
        self._get_logger().exception(event, **kw)


def _build_processors(
    renderer: Processor,
    include_timestamps: bool,
    include_context: bool,
) -> list[Processor]:
    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        _sanitize_event_dict,
    ]
    if include_context:
        processors.append(_add_context)
    if include_timestamps:
        processors.append(_add_timestamp)
    processors.extend([
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        renderer,
    ])
    return processors


def configure_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO",
    format: Literal["json", "console", "both"] = "console",  # noqa: A002
    file_path: Path | None = None,
    max_file_size_mb: int = 50,
    backup_count: int = 5,
    include_timestamps: bool = True,
    include_context: bool = True,
) -> None:
    """Configure steadystate structured logging.

    Args:
        level: Minimum log level to capture.
        format: "console" for human-readable stderr output, "json" for
            structured output (to ``file_path`` or stdout), "both" for
            console on stderr plus a rotating file (requires file_path).
        file_path: Optional log file path.
        max_file_size_mb: Maximum log file size before rotation (MB).
        backup_count: Number of rotated log files to keep.
        include_timestamps: Whether to include ISO8601 timestamps.
        include_context: Whether to merge the active ExecutionContext.

    Raises:
        ValueError: If format="both" but file_path is not provided.
    """
    if format == "both" and file_path is None:
        raise ValueError("file_path is required when format='both'")

    log_level = getattr(logging, level)
    handlers: list[logging.Handler] = []

    if format in ("console", "both"):
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        handlers.append(console_handler)

    if format in ("json", "both"):
        if file_path is not None:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                file_path,
                maxBytes=max_file_size_mb * 1024 * 1024,
                backupCount=backup_count,
                encoding="utf-8",
            )
            file_handler.setLevel(log_level)
            handlers.append(file_handler)
        else:
            json_handler = logging.StreamHandler(sys.stdout)
            json_handler.setLevel(log_level)
            handlers.append(json_handler)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in handlers:
        root_logger.addHandler(handler)

    renderer: Processor
    if format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    # cache_logger_on_first_use=False: import-time loggers must see later config
    structlog.configure(
        processors=_build_processors(renderer, include_timestamps, include_context),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(component: str, **initial_context: Any) -> SteadyStateLogger:
    """Get a logger bound to ``component`` (e.g. "retry", "poller", "cli")."""
    return SteadyStateLogger(component, **initial_context)


__all__ = [
    "ExecutionContext",
    "SENSITIVE_PATTERNS",
    "SteadyStateLogger",
    "configure_logging",
    "get_current_context",
    "get_logger",
    "with_context",
]
