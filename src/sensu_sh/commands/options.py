"""Argument parsing shared by the ``query`` and ``event`` commands.

Both commands are click commands used only for their parsers: the
interpreter hands over an argv, and the parsed parameters drive a
QueryFilter. Options accept single-dash long names (``-json``) as well
as the usual double-dash ones.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

import click

from ..models import FilterOptions
from ..shell.interp import HandlerContext

HELP_STATUS = 2
USAGE_STATUS = 1


def filter_options(func):
    """Attach the output flags shared by query and event."""
    func = click.option(
        "-p",
        "-pretty",
        "--pretty",
        "pretty",
        is_flag=True,
        help="Pretty-print JSON.",
    )(func)
    func = click.option(
        "-Y",
        "-yaml",
        "--yaml",
        "emit_yaml",
        is_flag=True,
        help="Output YAML instead of JSON or text.",
    )(func)
    func = click.option(
        "-j",
        "-json",
        "--json",
        "emit_json",
        is_flag=True,
        help="Print output as JSON.",
    )(func)
    func = click.option(
        "-h",
        "-help",
        "--help",
        "show_help",
        is_flag=True,
        help="Show this message.",
    )(func)
    return func


def parse_args(
    command: click.Command, ctx: HandlerContext, args: Sequence[str]
) -> tuple[Optional[Dict[str, Any]], int]:
    """Parse argv for an in-script command.

    Usage errors and help are written to the command's stderr.

    Returns:
        (params, status). params is None when the command must stop with
        the returned status.
    """
    name = command.name
    try:
        parsed = command.make_context(name, list(args))
    except click.UsageError as e:
        click.echo(f"{name}: {e.format_message()}", file=ctx.stderr)
        if e.ctx is not None:
            click.echo(e.ctx.get_usage(), file=ctx.stderr)
        return None, USAGE_STATUS

    if parsed.params["show_help"]:
        click.echo(parsed.get_help(), file=ctx.stderr)
        return None, HELP_STATUS
    return parsed.params, 0


def to_filter_options(params: Dict[str, Any]) -> FilterOptions:
    return FilterOptions(
        emit_json=params["emit_json"],
        emit_yaml=params["emit_yaml"],
        pretty=params["pretty"],
        raw_input=params.get("raw_input", False),
    )
