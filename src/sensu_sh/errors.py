"""Exception hierarchy shared across sensu-sh layers."""

from __future__ import annotations


class SensuShError(Exception):
    """Base class for all sensu-sh errors."""


class QueryParseError(SensuShError):
    """A query string failed to compile."""


class DocumentError(SensuShError):
    """A YAML/JSON document could not be read or decoded."""


class ScriptSyntaxError(SensuShError):
    """A shell script could not be parsed."""

    def __init__(self, message: str, line: int | None = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class IncompleteScriptError(ScriptSyntaxError):
    """Script ended in the middle of a quote, substitution or list."""


__all__ = [
    "DocumentError",
    "IncompleteScriptError",
    "QueryParseError",
    "ScriptSyntaxError",
    "SensuShError",
]
