"""Adapters — bindings for the external tools Blink drives (sh, git).

Public re-exports for convenient access.
"""

from blink.adapters.base import Adapter, ExecutionContext
from blink.adapters.mock import MockAdapter
from blink.adapters.shell.command import ShellCommandAdapter
from blink.adapters.vcs.git import GitAdapter

__all__ = [
    "Adapter",
    "ExecutionContext",
    "GitAdapter",
    "MockAdapter",
    "ShellCommandAdapter",
]
