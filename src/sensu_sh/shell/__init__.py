"""Bash-subset interpreter that sensu-sh scripts run on."""

from .environ import Environ, VarKind, Variable
from .interp import (
    DEFAULT_EXEC_TIMEOUT,
    ExecHandler,
    HandlerContext,
    Runner,
    default_exec_handler,
)
from .syntax import Script, parse

__all__ = [
    "DEFAULT_EXEC_TIMEOUT",
    "Environ",
    "ExecHandler",
    "HandlerContext",
    "Runner",
    "Script",
    "VarKind",
    "Variable",
    "default_exec_handler",
    "parse",
]
