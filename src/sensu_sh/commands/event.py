"""``event`` - run a jq query over the session's event document."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

import click

from ..query import QueryFilter
from ..shell.interp import HandlerContext
from .options import USAGE_STATUS, filter_options, parse_args, to_filter_options


@click.command("event", add_help_option=False)
@filter_options
@click.argument("args", nargs=-1)
def event_command(**params):
    """Run QUERY (default ".") against the event document."""


def run_event(
    ctx: HandlerContext, args: Sequence[str], event: Mapping[str, Any]
) -> int:
    """Run ``event ARGS...`` against the loaded event document."""
    params, status = parse_args(event_command, ctx, args)
    if params is None:
        return status

    positional = params["args"]
    if len(positional) > 1:
        click.echo(
            "event: too many arguments to event: expected 0..1", file=ctx.stderr
        )
        return USAGE_STATUS
    query_text = positional[0] if positional else "."

    qf = QueryFilter(to_filter_options(params), ctx.stdout, ctx.stderr, "event")
    return qf.run_value(query_text, event)
