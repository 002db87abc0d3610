"""Script runner with a pluggable exec handler.

The runner expands words, runs builtins itself, and hands every other
command to its exec handler. The default handler spawns an external
program; embedders wrap it to resolve some command names in-process.
"""

from __future__ import annotations

import io
import os
import shutil
import subprocess
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, TextIO, Tuple

import click

from ..process_utils import (
    NOT_EXECUTABLE_STATUS,
    NOT_FOUND_STATUS,
    TIMEOUT_STATUS,
    exit_status,
    run_with_validation,
)
from .builtins import BUILTINS, ExitScript
from .environ import Environ
from .syntax import (
    AndOr,
    Assign,
    CmdSubst,
    Command,
    Lit,
    ParamExp,
    Pipeline,
    Script,
    Word,
)

DEFAULT_EXEC_TIMEOUT = 5.0


@dataclass
class HandlerContext:
    """What an exec handler sees of the command it is asked to run."""

    env: Environ
    stdin: TextIO
    stdout: TextIO
    stderr: TextIO
    dir: str


ExecHandler = Callable[[HandlerContext, List[str]], int]


def _find_program(name: str, ctx: HandlerContext) -> Optional[str]:
    if "/" in name:
        path = os.path.join(ctx.dir, name)
        return path if os.path.exists(path) else None
    search = ctx.env.get("PATH").value or None
    return shutil.which(name, path=search)


def default_exec_handler(timeout: float = DEFAULT_EXEC_TIMEOUT) -> ExecHandler:
    """Return a handler that runs commands as external programs.

    Output is captured and copied to the command's streams. A program
    that runs longer than ``timeout`` seconds is killed.

    Args:
        timeout: Wall-clock ceiling per external command, in seconds
    """

    def handler(ctx: HandlerContext, args: List[str]) -> int:
        name = args[0]
        program = _find_program(name, ctx)
        if program is None:
            click.echo(f"{name}: command not found", file=ctx.stderr)
            return NOT_FOUND_STATUS

        try:
            result = run_with_validation(
                args,
                executable=program,
                input=ctx.stdin.read(),
                capture_output=True,
                text=True,
                errors="replace",
                cwd=ctx.dir,
                env=ctx.env.exported(),
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            click.echo(
                f"{name}: timed out after {timeout:g} seconds", file=ctx.stderr
            )
            return TIMEOUT_STATUS
        except OSError as e:
            click.echo(f"{name}: {e.strerror or e}", file=ctx.stderr)
            return NOT_EXECUTABLE_STATUS

        ctx.stdout.write(result.stdout)
        ctx.stderr.write(result.stderr)
        return exit_status(result.returncode)

    return handler


class Runner:
    """Runs parsed scripts.

    Args:
        exec_handler: Called for every non-builtin command
        env: Variable table (default: built from os.environ)
        stdin: Standard input for the script
        stdout: Standard output for the script
        stderr: Standard error for the script
        params: Positional parameters ($1, $2, ...)
        name: Value of $0
        dir: Working directory for external commands
    """

    def __init__(
        self,
        exec_handler: Optional[ExecHandler] = None,
        env: Optional[Environ] = None,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
        params: Sequence[str] = (),
        name: str = "sensu-sh",
        dir: Optional[str] = None,
    ):
        self.exec_handler = exec_handler or default_exec_handler()
        self.env = env if env is not None else Environ.from_os()
        self.stdin = stdin if stdin is not None else io.StringIO()
        self.stdout = stdout if stdout is not None else io.StringIO()
        self.stderr = stderr if stderr is not None else io.StringIO()
        self.params = list(params)
        self.name = name
        self.dir = dir or os.getcwd()
        self.last_status = 0
        self.errexit = False
        self._subst_status: Optional[int] = None

    def subshell(self, stdout: TextIO) -> "Runner":
        """Return a runner that shares nothing mutable with this one."""
        sub = Runner(
            exec_handler=self.exec_handler,
            env=self.env.copy(),
            stdin=self.stdin,
            stdout=stdout,
            stderr=self.stderr,
            params=self.params,
            name=self.name,
            dir=self.dir,
        )
        sub.last_status = self.last_status
        sub.errexit = self.errexit
        return sub

    def run(self, script: Script) -> int:
        """Run a script to completion and return its exit status."""
        try:
            for statement in script.statements:
                status, checked = self._run_and_or(statement)
                if status != 0 and checked and self.errexit:
                    raise ExitScript(status)
        except ExitScript as e:
            self.last_status = e.status
        return self.last_status

    # -- lists and pipelines --------------------------------------------

    def _run_and_or(self, node: AndOr) -> Tuple[int, bool]:
        """Run an and-or list.

        Returns:
            (status, checked) where checked is False when ``set -e`` must
            ignore the failure (it came from a negated pipeline or from a
            pipeline that was not the last one run in the list).
        """
        last = len(node.pipelines) - 1
        status = self._run_pipeline(node.pipelines[0])
        ran = 0
        steps = zip(node.ops, node.pipelines[1:])
        for i, (op, pipeline) in enumerate(steps, 1):
            if (op == "&&") == (status == 0):
                status = self._run_pipeline(pipeline)
                ran = i
        checked = ran == last and not node.pipelines[ran].negated
        return status, checked

    def _run_pipeline(self, pipeline: Pipeline) -> int:
        stdin = self.stdin
        status = 0
        for i, command in enumerate(pipeline.commands):
            is_last = i == len(pipeline.commands) - 1
            stdout = self.stdout if is_last else io.StringIO()
            status = self._run_command(command, stdin, stdout)
            if not is_last:
                stdout.seek(0)
                stdin = stdout
        if pipeline.negated:
            status = 0 if status else 1
        self.last_status = status
        return status

    def _run_command(
        self, command: Command, stdin: TextIO, stdout: TextIO
    ) -> int:
        self._subst_status = None
        args = [field for word in command.args for field in self.expand(word)]

        if not args:
            for assign in command.assigns:
                self._assign(self.env, assign)
            return self._subst_status or 0

        env = self.env
        if command.assigns:
            env = self.env.copy()
            for assign in command.assigns:
                self._assign(env, assign)
                env.export(assign.name)

        ctx = HandlerContext(
            env=env, stdin=stdin, stdout=stdout, stderr=self.stderr, dir=self.dir
        )
        builtin = BUILTINS.get(args[0])
        if builtin is not None:
            return builtin(self, ctx, args)
        return self.exec_handler(ctx, args)

    def _assign(self, env: Environ, assign: Assign) -> None:
        if assign.items is not None:
            items = [f for word in assign.items for f in self.expand(word)]
            env.set_indexed(assign.name, items)
            return
        value = self.expand_string(assign.value)
        if assign.index is not None:
            try:
                env.set_item(assign.name, assign.index, value)
            except IndexError as e:
                click.echo(f"{self.name}: {e}", file=self.stderr)
            return
        env.set_string(assign.name, value)

    # -- expansion ------------------------------------------------------

    def expand(self, word: Word) -> List[str]:
        """Expand a word into fields.

        Unquoted expansions are split on whitespace; quoted ``"$@"`` and
        ``"${a[@]}"`` produce one field per element. A word made only of
        unquoted expansions that expand to nothing produces no field.
        """
        fields: List[str] = []
        cur = ""
        have = False
        for part in word.parts:
            if isinstance(part, Lit):
                cur += part.text
                have = have or part.quoted or bool(part.text)
                continue

            if isinstance(part, ParamExp) and part.quoted and part.splits_fields:
                values = self._param_values(part)
                if values:
                    cur += values[0]
                    for value in values[1:]:
                        fields.append(cur)
                        cur = value
                    have = True
                continue

            text = self._part_text(part)
            if part.quoted:
                cur += text
                have = True
                continue

            pieces = text.split()
            if not pieces:
                continue
            if text[0].isspace() and have:
                fields.append(cur)
                cur = ""
            cur += pieces[0]
            have = True
            for piece in pieces[1:]:
                fields.append(cur)
                cur = piece
            if text[-1].isspace():
                fields.append(cur)
                cur = ""
                have = False
        if have:
            fields.append(cur)
        return fields

    def expand_string(self, word: Optional[Word]) -> str:
        """Expand a word without field splitting, as in assignments."""
        if word is None:
            return ""
        out = []
        for part in word.parts:
            if isinstance(part, Lit):
                out.append(part.text)
            else:
                out.append(self._part_text(part))
        return "".join(out)

    def _part_text(self, part) -> str:
        if isinstance(part, CmdSubst):
            return self._command_output(part.script)
        if part.is_list:
            return " ".join(self._param_values(part))
        return self._param_value(part)

    def _param_values(self, part: ParamExp) -> List[str]:
        if part.name in ("@", "*"):
            return list(self.params)
        return self.env.get(part.name).elements()

    def _param_value(self, part: ParamExp) -> str:
        name = part.name
        if name == "?":
            return str(self.last_status)
        if name == "#":
            return str(len(self.params))
        if name == "0":
            return self.name
        if name.isdigit():
            n = int(name)
            return self.params[n - 1] if n <= len(self.params) else ""

        var = self.env.get(name)
        if part.index is None:
            return var.scalar()
        items = var.elements()
        index = int(part.index)
        if index < 0:
            index += len(items)
        return items[index] if 0 <= index < len(items) else ""

    def _command_output(self, script: Script) -> str:
        out = io.StringIO()
        status = self.subshell(out).run(script)
        self._subst_status = status
        return out.getvalue().rstrip("\n")


__all__ = [
    "DEFAULT_EXEC_TIMEOUT",
    "ExecHandler",
    "HandlerContext",
    "Runner",
    "default_exec_handler",
]
