"""Pytest configuration and shared fixtures."""

import io
import json

import pytest
from click.testing import CliRunner

from sensu_sh.cli import cli
from sensu_sh.context import Session, resolve_settings
from sensu_sh.dispatch import Dispatcher
from sensu_sh.shell import Environ, Runner, parse

SAMPLE_EVENT = {
    "entity": {"metadata": {"name": "foobar", "namespace": "default"}},
    "check": {
        "status": 2,
        "output": "CRITICAL: disk usage 95.5%",
        "interval": 60,
        "labels": {"team": "ops"},
    },
}


@pytest.fixture(autouse=True)
def clean_settings_env(monkeypatch):
    """Keep settings resolution independent of the developer's shell."""
    monkeypatch.delenv("SENSU_SH_EVENT", raising=False)
    monkeypatch.delenv("SENSU_SH_EXEC_TIMEOUT", raising=False)


@pytest.fixture
def cli_runner():
    """Provide Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def invoke(cli_runner):
    """Helper to invoke the CLI with args and optional stdin.

    Usage:
        result = invoke(["-E", "event.json", "script.sh"])
        result = invoke(["-R", "event .check.status"], input_data="{...}")
    """

    def _invoke(args, input_data=None):
        return cli_runner.invoke(cli, args, input=input_data)

    return _invoke


@pytest.fixture
def event_file(tmp_path):
    """Write the sample event as JSON and return its path."""
    path = tmp_path / "event.json"
    path.write_text(json.dumps(SAMPLE_EVENT))
    return path


@pytest.fixture
def run_script():
    """Run script text with the query dispatcher installed.

    Returns (status, stdout, stderr). External commands go through the
    default handler unless ``fallback`` is given.

    Usage:
        status, out, err = run_script("event .check.status")
        status, out, err = run_script("@FOO .a", env={"FOO": '{"a": 1}'})
    """

    def _run(text, event=None, env=None, fallback=None, stdin=""):
        session = Session(
            event=SAMPLE_EVENT if event is None else event,
            settings=resolve_settings("-", 5.0),
        )
        stdout, stderr = io.StringIO(), io.StringIO()
        runner = Runner(
            exec_handler=Dispatcher(session, fallback=fallback),
            env=Environ.from_os(env if env is not None else {}),
            stdin=io.StringIO(stdin),
            stdout=stdout,
            stderr=stderr,
        )
        status = runner.run(parse(text))
        return status, stdout.getvalue(), stderr.getvalue()

    return _run


class RecordingHandler:
    """Exec handler that records argv instead of running anything."""

    def __init__(self, status=0, output=""):
        self.calls = []
        self.status = status
        self.output = output

    def __call__(self, ctx, args):
        self.calls.append(list(args))
        ctx.stdout.write(self.output)
        return self.status


@pytest.fixture
def recorder():
    return RecordingHandler()
