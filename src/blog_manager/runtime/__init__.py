"""Runtime module for running shell command sequences.

This module provides the virtual shell used by every blog command: one
interpreter process fed an ordered list of commands, with optional
output relaying and reliable cleanup.
"""

from __future__ import annotations

from .errors import (
    ShellError,
    ShellStateError,
    ShellTimeoutError,
    ShellWaitError,
    ShellWriteError,
    SpawnError,
)
from .virtual_shell import CommandRunner, OutputRelay, run_shell

__all__ = [
    "CommandRunner",
    "OutputRelay",
    "run_shell",
    "ShellError",
    "SpawnError",
    "ShellWriteError",
    "ShellWaitError",
    "ShellTimeoutError",
    "ShellStateError",
]
