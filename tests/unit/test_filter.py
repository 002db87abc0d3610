"""Tests for QueryFilter."""

import io

from sensu_sh.models import FilterOptions
from sensu_sh.query import QueryFilter


def make_filter(**flags):
    out, err = io.StringIO(), io.StringIO()
    return QueryFilter(FilterOptions(**flags), out, err), out, err


def test_run_value_plain():
    qf, out, err = make_filter()
    status = qf.run_value(".entity.metadata.name", {"entity": {"metadata": {"name": "foobar"}}})
    assert status == 0
    assert out.getvalue() == "foobar"
    assert err.getvalue() == ""


def test_stream_runs_each_document():
    qf, out, _ = make_filter()
    status = qf.run_stream(".a", io.StringIO("a: 1\n---\na: 2\n---\na: 3\n"))
    assert status == 0
    assert out.getvalue() == "1\n2\n3"


def test_stream_accepts_json():
    qf, out, _ = make_filter(emit_json=True)
    status = qf.run_stream(".[]", io.StringIO('[{"x": 1}, "y"]'))
    assert status == 0
    assert out.getvalue() == '{"x":1}\n"y"\n'


def test_empty_stream_is_success():
    qf, out, _ = make_filter()
    assert qf.run_stream(".", io.StringIO("")) == 0
    assert out.getvalue() == ""


def test_raw_input_passes_text():
    qf, out, _ = make_filter(raw_input=True)
    status = qf.run_stream('split(":")[]', io.StringIO("/usr/bin:/bin"))
    assert status == 0
    assert out.getvalue() == "/usr/bin\n/bin"


def test_parse_error_reported_before_reading_input():
    qf, out, err = make_filter()
    stream = io.StringIO("a: 1")
    assert qf.run_stream(".[", stream) == 1
    assert "query: unable to parse query" in err.getvalue()
    assert stream.tell() == 0
    assert out.getvalue() == ""


def test_error_element_stops_iteration():
    qf, out, err = make_filter()
    status = qf.run_value('1, error("boom"), 2', {})
    assert status == 1
    assert out.getvalue() == "1"
    assert "query error" in err.getvalue()
    assert "boom" in err.getvalue()


def test_error_skips_later_documents():
    qf, out, _ = make_filter()
    status = qf.run_stream(".a + 1", io.StringIO("a: 1\n---\na: x\n---\na: 3\n"))
    assert status == 1
    assert out.getvalue() == "2"


def test_decode_error_abandons_stream():
    qf, out, err = make_filter()
    status = qf.run_stream(".a", io.StringIO("a: 1\n---\na: [unclosed\n---\na: 3\n"))
    assert status == 1
    assert out.getvalue() == "1"
    assert "error decoding input" in err.getvalue()


def test_timestamps_stay_strings():
    qf, out, _ = make_filter()
    status = qf.run_stream(".when", io.StringIO("when: 2024-01-02T03:04:05Z\n"))
    assert status == 0
    assert out.getvalue() == "2024-01-02T03:04:05Z"


def test_separate_filters_give_identical_output():
    doc = {"a": [1, 2, {"b": 1.5}]}
    first, out1, _ = make_filter()
    second, out2, _ = make_filter()
    first.run_value(".a[]", doc)
    second.run_value(".a[]", doc)
    assert out1.getvalue() == out2.getvalue() == '1\n2\n{"b":1.5}'


def test_diagnostics_use_command_name():
    err = io.StringIO()
    qf = QueryFilter(FilterOptions(), io.StringIO(), err, name="event")
    qf.run_value(".[", {})
    assert err.getvalue().startswith("event: ")


class BrokenStream(io.StringIO):
    def write(self, s):
        raise OSError("broken pipe")


def test_encoding_error():
    err = io.StringIO()
    qf = QueryFilter(FilterOptions(), BrokenStream(), err)
    assert qf.run_value(".", {"a": 1}) == 1
    assert "encoding error" in err.getvalue()
