"""Tests for the script runner."""

import io

import pytest

from sensu_sh.shell import Environ, Runner, default_exec_handler, parse


class Recorder:
    def __init__(self, status=0):
        self.calls = []
        self.status = status

    def __call__(self, ctx, args):
        self.calls.append(args)
        return self.status


def run(text, handler=None, env=None, params=()):
    out, err = io.StringIO(), io.StringIO()
    runner = Runner(
        exec_handler=handler or Recorder(),
        env=Environ.from_os(env or {}),
        stdout=out,
        stderr=err,
        params=params,
    )
    status = runner.run(parse(text))
    return status, out.getvalue(), err.getvalue(), runner


def test_echo_builtin():
    status, out, _, _ = run("echo hello world; echo -n done")
    assert status == 0
    assert out == "hello world\ndone"


def test_unquoted_expansion_splits():
    rec = Recorder()
    run('A="x  y"; cmd $A "$A"', handler=rec)
    assert rec.calls == [["cmd", "x", "y", "x  y"]]


def test_empty_unquoted_expansion_disappears():
    rec = Recorder()
    run('cmd $NOPE "" "$NOPE"', handler=rec)
    assert rec.calls == [["cmd", "", ""]]


def test_array_expansion():
    rec = Recorder()
    run("A=(one 'two three'); cmd \"${A[@]}\" ${A[1]} $A \"${A[*]}\"", handler=rec)
    assert rec.calls == [
        ["cmd", "one", "two three", "two", "three", "one", "one two three"]
    ]


def test_array_element_assignment():
    rec = Recorder()
    run("A[1]=b; A[0]=a; cmd ${A[@]}", handler=rec)
    assert rec.calls == [["cmd", "a", "b"]]


def test_positional_parameters():
    rec = Recorder()
    run('cmd "$@" $# $1 $3; shift; cmd "$@"', handler=rec, params=["a b", "c"])
    assert rec.calls == [["cmd", "a b", "c", "2", "a", "b"], ["cmd", "c"]]


def test_command_substitution_strips_trailing_newlines():
    rec = Recorder()
    run('X=$(echo hi; echo there); cmd "$X"', handler=rec)
    assert rec.calls == [["cmd", "hi\nthere"]]


def test_command_substitution_does_not_leak_assignments():
    _, out, _, runner = run("X=1; Y=$(X=2; echo $X); echo $X $Y")
    assert out == "1 2\n"


def test_assignment_status_comes_from_substitution():
    status, out, _, _ = run("X=$(false); echo $?")
    assert out == "1\n"


def test_prefix_assignment_is_scoped_to_command():
    seen = []

    def handler(ctx, args):
        seen.append((ctx.env.get("FOO").value, ctx.env.exported().get("FOO")))
        return 0

    _, _, _, runner = run("FOO=bar cmd", handler=handler)
    assert seen == [("bar", "bar")]
    assert not runner.env.get("FOO").is_set


def test_and_or():
    _, out, _, _ = run("false && echo no; false || echo yes; true && echo ok")
    assert out == "yes\nok\n"


def test_exit_status_and_negation():
    status, out, _, _ = run("false; echo $?; ! false; echo $?")
    assert out == "1\n0\n"
    assert status == 0


def test_exit_builtin_stops_script():
    status, out, _, _ = run("echo a; exit 3; echo b")
    assert status == 3
    assert out == "a\n"


def test_errexit():
    status, out, _, _ = run("set -e; false || true; false && true; echo kept; false; echo lost")
    assert status == 1
    assert out == "kept\n"


def test_pipeline_feeds_stdout_to_stdin():
    seen = []

    def handler(ctx, args):
        seen.append(ctx.stdin.read())
        ctx.stdout.write("from-handler")
        return 0

    _, out, _, _ = run("echo piped | cmd | cmd", handler=handler)
    assert seen == ["piped\n", "from-handler"]
    assert out == "from-handler"


def test_export_and_unset():
    _, out, _, runner = run("X=1; export X Y=2; unset Z; export")
    assert 'declare -x X="1"' in out
    assert 'declare -x Y="2"' in out
    assert runner.env.exported() == {"X": "1", "Y": "2"}


def test_cd_changes_directory(tmp_path):
    sub = tmp_path / "sub"
    sub.mkdir()
    _, _, err, runner = run(f"cd {tmp_path}; cd sub; cd missing")
    assert runner.dir == str(sub.resolve())
    assert "missing: No such file or directory" in err


def test_handler_receives_streams_and_dir():
    contexts = []

    def handler(ctx, args):
        contexts.append(ctx)
        return 0

    _, _, _, runner = run("cmd", handler=handler)
    assert contexts[0].dir == runner.dir
    assert contexts[0].stdout is runner.stdout


def test_default_handler_runs_programs():
    status, out, _, _ = run(
        "echo hello | cat; printf '%s-%s' a b",
        handler=default_exec_handler(),
        env={"PATH": "/usr/bin:/bin"},
    )
    assert status == 0
    assert out == "hello\na-b"


def test_default_handler_command_not_found():
    status, _, err, _ = run(
        "definitely-not-a-command-xyz", handler=default_exec_handler()
    )
    assert status == 127
    assert "command not found" in err


def test_default_handler_passes_exported_env():
    _, out, _, _ = run(
        "export GREETING=hi; LOCAL=x sh -c 'echo $GREETING $LOCAL'",
        handler=default_exec_handler(),
        env={"PATH": "/usr/bin:/bin"},
    )
    assert out == "hi x\n"


def test_default_handler_timeout():
    status, _, err, _ = run(
        "sleep 5", handler=default_exec_handler(timeout=0.2), env={"PATH": "/usr/bin:/bin"}
    )
    assert status == 124
    assert "timed out" in err


@pytest.mark.parametrize("text,expected", [("exit 256", 0), ("exit -1", 255)])
def test_exit_status_wraps(text, expected):
    status, _, _, _ = run(text)
    assert status == expected
