# steadystate/cli/commands: one module per CLI command.

from .run import run
from .wait import wait

__all__ = [
    "run",
    "wait",
]
