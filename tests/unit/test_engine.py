"""Tests for the jq engine adapter."""

import itertools

import pytest

from sensu_sh.errors import QueryParseError
from sensu_sh.query.engine import QueryError, compile_query


def test_run_yields_results_in_order():
    query = compile_query(".items[]")
    assert list(query.run({"items": [3, 1, 2]})) == [3, 1, 2]


def test_parse_error():
    with pytest.raises(QueryParseError):
        compile_query(".[")


def test_error_becomes_last_element():
    results = list(compile_query('1, error("boom"), 2').run(None))
    assert results[0] == 1
    assert isinstance(results[1], QueryError)
    assert "boom" in str(results[1])
    assert len(results) == 2


def test_runtime_type_error():
    results = list(compile_query(".a + 1").run({"a": "x"}))
    assert len(results) == 1
    assert isinstance(results[0], QueryError)


def test_infinite_sequence_is_lazy():
    results = compile_query("repeat(1)").run(None)
    assert list(itertools.islice(results, 5)) == [1, 1, 1, 1, 1]


def test_raw_string_input():
    query = compile_query('split(":")[]')
    assert list(query.run("/usr/bin:/bin")) == ["/usr/bin", "/bin"]


def test_query_keeps_source_text():
    assert compile_query(".a").text == ".a"


def test_halt_error_becomes_error_element():
    results = list(compile_query('1, ("bye" | halt_error), 2').run(None))
    assert results[0] == 1
    assert isinstance(results[1], QueryError)
    assert "bye" in str(results[1])
    assert len(results) == 2


def test_halt_error_with_exit_code():
    results = list(compile_query('{"a": 1} | halt_error(3)').run(None))
    assert len(results) == 1
    assert isinstance(results[0], QueryError)
    assert '"a"' in str(results[0])

