"""``query`` - run a jq query over stdin or a shell variable."""

from __future__ import annotations

import io
from typing import Optional, Sequence

import click

from ..query import QueryFilter
from ..shell.interp import HandlerContext
from .options import USAGE_STATUS, filter_options, parse_args, to_filter_options


@click.command("query", add_help_option=False)
@click.option(
    "-R",
    "-raw-input",
    "--raw-input",
    "raw_input",
    is_flag=True,
    help="Read raw input as a string.",
)
@filter_options
@click.argument("args", nargs=-1)
def query_command(**params):
    """Run QUERY (default ".") against SOURCE.

    SOURCE is "-" for standard input (the default) or the name of a shell
    variable. Without -R, the input is read as a stream of YAML or JSON
    documents and the query runs once per document.
    """


def run_query(
    ctx: HandlerContext, args: Sequence[str], force_var: Optional[str] = None
) -> int:
    """Run ``query ARGS...``.

    Args:
        ctx: The command's environment and streams
        args: Arguments after the command name
        force_var: Variable appended as the input source (``@NAME`` form)

    Returns:
        Exit status
    """
    params, status = parse_args(query_command, ctx, args)
    if params is None:
        return status

    positional = list(params["args"]) or ["."]
    if force_var is not None:
        positional.append(force_var)
    if len(positional) > 2:
        click.echo(
            "query: too many arguments to query: expected 0..2", file=ctx.stderr
        )
        return USAGE_STATUS

    query_text = positional[0]
    source = positional[1] if len(positional) == 2 else "-"
    if source == "-":
        stream = ctx.stdin
    else:
        stream = io.StringIO(ctx.env.get(source).text())

    qf = QueryFilter(to_filter_options(params), ctx.stdout, ctx.stderr, "query")
    return qf.run_stream(query_text, stream)
