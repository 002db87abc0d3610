"""Subprocess helpers used to run external commands from scripts.

Lives outside the shell package so that the CLI and tests can share the
validated wrapper without importing the interpreter.
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Sequence
from typing import Any

CommandArg = str | os.PathLike[str]

TIMEOUT_STATUS = 124
NOT_EXECUTABLE_STATUS = 126
NOT_FOUND_STATUS = 127


def _normalize_command(cmd: Sequence[CommandArg]) -> list[str]:
    """Validate and normalize subprocess command arguments.

    Empty arguments are allowed after the program name since scripts pass
    them deliberately (``cmd ""``).
    """
    if not cmd:
        msg = "Command must include at least one argument"
        raise ValueError(msg)

    normalized: list[str] = []
    for arg in cmd:
        if isinstance(arg, os.PathLike):
            value = os.fspath(arg)
        elif isinstance(arg, str):
            value = arg
        else:
            msg = "Command arguments must be strings or os.PathLike"
            raise TypeError(msg)
        normalized.append(value)

    if not normalized[0].strip():
        msg = "Command name cannot be empty or whitespace"
        raise ValueError(msg)

    return normalized


def run_with_validation(
    cmd: Sequence[CommandArg], **kwargs: Any
) -> subprocess.CompletedProcess[Any]:
    """Run subprocess.run with validation to satisfy security lint checks."""
    normalized_cmd = _normalize_command(cmd)
    return subprocess.run(normalized_cmd, **kwargs)  # noqa: S603


def exit_status(returncode: int) -> int:
    """Map a Popen return code to a shell exit status.

    Children killed by a signal report ``128 + signum``.
    """
    if returncode < 0:
        return 128 + abs(returncode)
    return returncode

__all__ = [
    "NOT_EXECUTABLE_STATUS",
    "NOT_FOUND_STATUS",
    "TIMEOUT_STATUS",
    "exit_status",
    "run_with_validation",
]
