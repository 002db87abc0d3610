"""sensu-sh CLI entry point."""

import io
import sys

import click

from ..context import Session, resolve_settings
from ..dispatch import Dispatcher
from ..documents import load_event
from ..errors import DocumentError, ScriptSyntaxError
from ..script import inline_script, read_script
from ..shell.environ import Environ
from ..shell.interp import Runner

HELP_STATUS = 2


def _show_help(ctx, param, value):
    if not value or ctx.resilient_parsing:
        return
    click.echo(ctx.get_help())
    ctx.exit(HELP_STATUS)


def _fail(ctx: click.Context, message: str) -> None:
    click.echo(f"sensu-sh: {message}", err=True)
    ctx.exit(1)


@click.command(
    add_help_option=False,
    context_settings=dict(allow_interspersed_args=False),
)
@click.option(
    "-h",
    "-help",
    "--help",
    is_flag=True,
    expose_value=False,
    is_eager=True,
    callback=_show_help,
    help="Show this message and exit.",
)
@click.option(
    "-E",
    "-event",
    "--event",
    "event_file",
    metavar="FILE",
    default=None,
    help="The event file to expose to the script (default: stdin, or "
    "$SENSU_SH_EVENT).",
)
@click.option(
    "-R",
    "-raw",
    "--raw",
    "raw",
    is_flag=True,
    help="Treat all arguments as command strings; '--' starts the "
    "positional parameters.",
)
@click.option(
    "--exec-timeout",
    type=float,
    default=None,
    metavar="SECONDS",
    help="Time limit for each external command (default: 5, or "
    "$SENSU_SH_EXEC_TIMEOUT).",
)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def cli(ctx, event_file, raw, exec_timeout, args):
    """Run a shell SCRIPT that can query a Sensu event.

    Inside the script, `event [QUERY]` queries the event document,
    `query [QUERY] [VAR|-]` queries a variable or stdin, and `@VAR [QUERY]`
    is shorthand for `query [QUERY] VAR`. Queries use jq syntax.

    \b
    Examples:
        sensu-sh -E event.json check.sh
        sensu-sh -E event.yaml -R 'event .check.status'
        sensu-sh -R -E event.json 'echo "$1: $(event .entity.metadata.name)"' -- host
    """
    try:
        settings = resolve_settings(event_file, exec_timeout)
    except ValueError as e:
        _fail(ctx, str(e))

    args = list(args)
    if not args:
        _fail(ctx, "no commands given" if raw else "no script file given")

    if raw:
        params: list = []
        if "--" in args:
            split = args.index("--")
            args, params = args[:split], args[split + 1 :]
        source = inline_script(args)
        name = "sensu-sh"
        label = "<inline>"
    else:
        source, params = args[0], args[1:]
        name = label = source
        if source == "-" and settings.event_path == "-":
            _fail(
                ctx,
                "both --event and program are stdin: only one can be read "
                "from standard input",
            )

    try:
        event = load_event(settings.event_path, sys.stdin)
    except DocumentError as e:
        _fail(ctx, f"error reading event file: {e}")

    try:
        script = read_script(source, sys.stdin)
    except (OSError, UnicodeDecodeError) as e:
        _fail(ctx, f"error reading script file [{label}]: {e}")
    except ScriptSyntaxError as e:
        _fail(ctx, f"error parsing script file [{label}]: {e}")

    runner = Runner(
        exec_handler=Dispatcher(Session(event=event, settings=settings)),
        env=Environ.from_os(),
        stdin=io.StringIO(),
        stdout=sys.stdout,
        stderr=sys.stderr,
        params=params,
        name=name,
    )
    status = runner.run(script)
    sys.stdout.flush()
    if status != 0:
        _fail(ctx, f"script error: exit status {status}")


def main():
    """Entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
