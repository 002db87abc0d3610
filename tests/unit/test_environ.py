"""Tests for the variable store."""

import pytest

from sensu_sh.shell.environ import Environ, VarKind


def test_from_os_exports_strings():
    env = Environ.from_os({"HOME": "/root"})
    var = env.get("HOME")
    assert var.kind is VarKind.STRING
    assert var.exported
    assert env.exported() == {"HOME": "/root"}


def test_missing_is_unset():
    var = Environ().get("NOPE")
    assert var.kind is VarKind.UNSET
    assert var.text() == ""
    assert var.elements() == []


def test_indexed_text_joins_with_newlines():
    env = Environ()
    env.set_indexed("PATHS", ["/usr/bin", "/bin"])
    var = env.get("PATHS")
    assert var.kind is VarKind.INDEXED
    assert var.text() == "/usr/bin\n/bin"
    assert var.scalar() == "/usr/bin"


def test_set_item_grows_array():
    env = Environ()
    env.set_item("A", 2, "c")
    assert env.get("A").elements() == ["", "", "c"]
    env.set_item("A", -1, "z")
    assert env.get("A").elements() == ["", "", "z"]


def test_set_item_bad_negative_index():
    env = Environ()
    with pytest.raises(IndexError):
        env.set_item("A", -1, "x")


def test_arrays_are_not_exported():
    env = Environ()
    env.set_indexed("A", ["x"])
    env.export("A")
    assert "A" not in env.exported()


def test_assignment_keeps_export_flag():
    env = Environ.from_os({"X": "1"})
    env.set_string("X", "2")
    assert env.exported() == {"X": "2"}


def test_copy_is_independent():
    env = Environ()
    env.set_string("A", "1")
    clone = env.copy()
    clone.set_string("A", "2")
    clone.unset("A")
    assert env.get("A").value == "1"


def test_export_unset_name_stays_unset():
    env = Environ()
    env.export("X")
    assert env.get("X").kind is VarKind.UNSET
    assert env.exported() == {}
    env.set_string("X", "1")
    assert env.exported() == {"X": "1"}
