"""Adapters that turn ordinary code into engine actions.

The engine only understands ``Callable[[], Success | Failure]``. Two
adapters cover the common cases in infrastructure tests:

* ``CommandAction`` runs an external tool (terraform, packer, kubectl...)
  and maps its exit status and merged output to an outcome.
* ``guarded`` wraps a plain function so that exceptions become Failures
  the classifier can inspect, instead of escaping the retry loop.
"""

from __future__ import annotations

import os
import shlex
import subprocess
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TypeVar

from steadystate.core.constants import PROCESS_DEFAULT_TIMEOUT_SECONDS
from steadystate.core.errors import ActionOutcome, Failure, Success
from steadystate.core.logging import get_logger

T = TypeVar("T")

_logger = get_logger("actions")


def guarded(
    fn: Callable[[], T],
    *,
    fatal: tuple[type[BaseException], ...] = (),
) -> Callable[[], ActionOutcome[T]]:
    """Wrap ``fn`` so its return value is a Success and its exceptions are Failures.

    Args:
        fn: Zero-argument callable doing the real work.
        fatal: Exception types that must never be retried. They become
            ``Failure(fatal=True)``.

    The failure description is ``"<ExceptionType>: <message>"`` so known-error
    patterns can match either the type name or the message.
    """

    def action() -> ActionOutcome[T]:
        try:
            value = fn()
        except Exception as exc:
            description = f"{type(exc).__name__}: {exc}"
            return Failure(description, fatal=isinstance(exc, fatal))
        return Success(value)

    action.__name__ = getattr(fn, "__name__", "action")
    return action


def _last_line(output: str) -> str:
    for line in reversed(output.splitlines()):
        if line.strip():
            return line.strip()
    return ""


@dataclass
class CommandResult:
    """Result of one command invocation."""

    returncode: int | None
    output: str
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out


class CommandAction:
    """Run an external command as a retryable action or poll probe.

    stdout and stderr are merged into the outcome's raw output, so known-error
    patterns match wherever the tool printed its message. Exit status 0 is a
    Success whose value is the output; anything else is a Failure. A missing
    executable is a fatal Failure; retrying cannot make it appear.

    Example:
        action = CommandAction(["terraform", "apply", "-auto-approve"], cwd=stack_dir)
        run_with_retries(action, policy, description="terraform apply")
    """

    def __init__(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path | str | None = None,
        env: Mapping[str, str] | None = None,
        timeout_seconds: float | None = PROCESS_DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        if not cmd:
            raise ValueError("cmd must contain at least the executable")
        self.cmd = list(cmd)
        self.cwd = cwd
        self.env = dict(env) if env else None
        self.timeout_seconds = timeout_seconds

    @property
    def name(self) -> str:
        return shlex.join(self.cmd)

    def run(self) -> CommandResult:
        """Run the command once and capture its merged output.

        Raises:
            OSError: The executable could not be started.
        """
        env = {**os.environ, **self.env} if self.env else None
        _logger.debug("command_started", cmd=self.name, cwd=str(self.cwd) if self.cwd else None)
        try:
            proc = subprocess.run(
                self.cmd,
                cwd=self.cwd,
                env=env,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                timeout=self.timeout_seconds,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            output = exc.output or ""
            if isinstance(output, bytes):
                output = output.decode("utf-8", errors="replace")
            _logger.warning("command_timed_out", cmd=self.name, timeout_seconds=self.timeout_seconds)
            return CommandResult(returncode=None, output=output, timed_out=True)

        _logger.debug("command_finished", cmd=self.name, returncode=proc.returncode)
        return CommandResult(returncode=proc.returncode, output=proc.stdout or "")

    def __call__(self) -> ActionOutcome[str]:
        try:
            result = self.run()
        except OSError as exc:
            return Failure(f"'{self.name}' could not be started: {exc}", fatal=True)

        if result.ok:
            return Success(result.output, raw_output=result.output)

        if result.timed_out:
            description = f"'{self.name}' timed out after {self.timeout_seconds:g}s"
        else:
            description = f"'{self.name}' exited with status {result.returncode}"
            last = _last_line(result.output)
            if last:
                description += f": {last}"
        return Failure(description, raw_output=result.output)

    def __repr__(self) -> str:
        return f"CommandAction({self.name!r})"
