"""Exec hook that resolves query commands in-process.

Every command the interpreter would run externally is classified once:

- ``query ...``  query over stdin or a named variable
- ``event ...``  query over the session's event document
- ``@NAME ...``  shorthand for ``query ... NAME`` when NAME is a string or
  indexed variable
- anything else, including ``@NAME`` for unknown variables, runs as an
  external program
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from .commands import run_event, run_query
from .context import Session
from .shell.environ import Environ, VarKind
from .shell.interp import ExecHandler, HandlerContext, default_exec_handler


class DispatchKind(Enum):
    QUERY = "query"
    EVENT = "event"
    VARIABLE = "variable"
    EXTERNAL = "external"


@dataclass(frozen=True)
class Dispatch:
    """How one command will run.

    ``args`` are the arguments after the command name, except for
    EXTERNAL where they are the full argv.
    """

    kind: DispatchKind
    args: Tuple[str, ...]
    variable: Optional[str] = None


def classify(args: Sequence[str], env: Environ) -> Dispatch:
    """Decide how to run the command ``args``."""
    name, rest = args[0], tuple(args[1:])
    if name == "query":
        return Dispatch(DispatchKind.QUERY, rest)
    if name == "event":
        return Dispatch(DispatchKind.EVENT, rest)
    if name.startswith("@") and name != "@":
        variable = name[1:]
        if env.get(variable).kind in (VarKind.STRING, VarKind.INDEXED):
            return Dispatch(DispatchKind.VARIABLE, rest, variable=variable)
    return Dispatch(DispatchKind.EXTERNAL, tuple(args))


class Dispatcher:
    """Exec handler for a script run.

    Args:
        session: Event document and settings for the run
        fallback: Handler for external commands (default: the
            interpreter's handler with the session's exec timeout)
    """

    def __init__(self, session: Session, fallback: Optional[ExecHandler] = None):
        self.session = session
        self.fallback = fallback or default_exec_handler(
            session.settings.exec_timeout
        )

    def __call__(self, ctx: HandlerContext, args: List[str]) -> int:
        dispatch = classify(args, ctx.env)
        if dispatch.kind is DispatchKind.QUERY:
            return run_query(ctx, dispatch.args)
        if dispatch.kind is DispatchKind.EVENT:
            return run_event(ctx, dispatch.args, self.session.event)
        if dispatch.kind is DispatchKind.VARIABLE:
            return run_query(ctx, dispatch.args, force_var=dispatch.variable)
        return self.fallback(ctx, list(dispatch.args))


__all__ = ["Dispatch", "DispatchKind", "Dispatcher", "classify"]
