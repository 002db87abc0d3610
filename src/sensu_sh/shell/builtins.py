"""Builtin commands run inside the interpreter."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Dict, List

import click

from .syntax import ASSIGN_RE, NAME_RE

if TYPE_CHECKING:
    from .interp import HandlerContext, Runner

Builtin = Callable[["Runner", "HandlerContext", List[str]], int]

BUILTINS: Dict[str, Builtin] = {}


class ExitScript(Exception):
    """Raised by ``exit`` and by ``set -e`` to unwind a running script."""

    def __init__(self, status: int):
        super().__init__(status)
        self.status = status


def builtin(name: str) -> Callable[[Builtin], Builtin]:
    def register(func: Builtin) -> Builtin:
        BUILTINS[name] = func
        return func

    return register


def _error(ctx: "HandlerContext", name: str, message: str) -> None:
    click.echo(f"{name}: {message}", file=ctx.stderr)


@builtin(":")
@builtin("true")
def true_(runner, ctx, args):
    return 0


@builtin("false")
def false_(runner, ctx, args):
    return 1


@builtin("echo")
def echo(runner, ctx, args):
    """echo [-n] [ARG...]"""
    words = args[1:]
    newline = True
    while words and words[0] == "-n":
        newline = False
        words = words[1:]
    ctx.stdout.write(" ".join(words) + ("\n" if newline else ""))
    return 0


@builtin("exit")
def exit_(runner, ctx, args):
    if len(args) > 2:
        _error(ctx, "exit", "too many arguments")
        return 1
    if len(args) == 1:
        raise ExitScript(runner.last_status)
    try:
        status = int(args[1])
    except ValueError:
        _error(ctx, "exit", f"{args[1]}: numeric argument required")
        raise ExitScript(2)
    raise ExitScript(status & 0xFF)


@builtin("export")
def export(runner, ctx, args):
    """export [NAME[=VALUE]...]; with no names, list exported variables."""
    names = [a for a in args[1:] if a != "-n"]
    if not names:
        for name, value in sorted(runner.env.exported().items()):
            ctx.stdout.write(f'declare -x {name}="{value}"\n')
        return 0

    status = 0
    for item in names:
        m = ASSIGN_RE.match(item)
        if m is not None and m.group(2) is None:
            name = m.group(1)
            runner.env.set_string(name, item[m.end() :])
        elif NAME_RE.fullmatch(item):
            name = item
        else:
            _error(ctx, "export", f"`{item}': not a valid identifier")
            status = 1
            continue
        runner.env.export(name)
    return status


@builtin("unset")
def unset(runner, ctx, args):
    status = 0
    for name in args[1:]:
        if name in ("-v", "-f"):
            continue
        if not NAME_RE.fullmatch(name):
            _error(ctx, "unset", f"`{name}': not a valid identifier")
            status = 1
            continue
        runner.env.unset(name)
    return status


@builtin("set")
def set_(runner, ctx, args):
    """set [-e|+e] [-o errexit|+o errexit] [-- ARG...]"""
    rest = args[1:]
    while rest:
        opt = rest.pop(0)
        if opt == "--":
            runner.params = list(rest)
            return 0
        if opt in ("-e", "+e"):
            runner.errexit = opt == "-e"
        elif opt in ("-o", "+o") and rest and rest[0] == "errexit":
            rest.pop(0)
            runner.errexit = opt == "-o"
        elif opt.startswith(("-", "+")):
            _error(ctx, "set", f"{opt}: invalid option")
            return 2
        else:
            runner.params = [opt, *rest]
            return 0
    return 0


@builtin("shift")
def shift(runner, ctx, args):
    count = 1
    if len(args) > 1:
        try:
            count = int(args[1])
        except ValueError:
            _error(ctx, "shift", f"{args[1]}: numeric argument required")
            return 1
    if count < 0 or count > len(runner.params):
        return 1
    runner.params = runner.params[count:]
    return 0


@builtin("cd")
def cd(runner, ctx, args):
    if len(args) > 2:
        _error(ctx, "cd", "too many arguments")
        return 1
    target = args[1] if len(args) == 2 else runner.env.get("HOME").value
    if not target:
        _error(ctx, "cd", "HOME not set")
        return 1
    path = Path(runner.dir, target).resolve()
    if not path.is_dir():
        _error(ctx, "cd", f"{target}: No such file or directory")
        return 1
    runner.env.set_string("OLDPWD", runner.dir)
    runner.dir = os.fspath(path)
    runner.env.set_string("PWD", runner.dir)
    return 0


__all__ = ["BUILTINS", "ExitScript", "builtin"]
