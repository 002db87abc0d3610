"""Run one query over one input and stream the results."""

from __future__ import annotations

from typing import Any, Iterable, TextIO

import click
from ruamel.yaml.error import YAMLError

from ..documents import iter_documents
from ..errors import DocumentError, QueryParseError
from ..models import FilterOptions
from .encoders import new_encoder
from .engine import Query, QueryError, compile_query


class QueryFilter:
    """Query runner bound to one command invocation.

    The encoder is created once here, so plain-mode separators continue
    across every document the invocation processes.

    Args:
        options: Output and input flags
        stdout: Stream results are written to
        stderr: Stream diagnostics are written to
        name: Command name used to prefix diagnostics
    """

    def __init__(
        self,
        options: FilterOptions,
        stdout: TextIO,
        stderr: TextIO,
        name: str = "query",
    ):
        self.options = options
        self.stderr = stderr
        self.name = name
        self.encoder = new_encoder(stdout, options)

    def log(self, message: str) -> None:
        click.echo(f"{self.name}: {message}", file=self.stderr)

    def compile(self, query_text: str) -> Query | None:
        try:
            return compile_query(query_text)
        except QueryParseError as e:
            self.log(f"unable to parse query: {e}")
            return None

    def run_value(self, query_text: str, value: Any) -> int:
        """Run the query against a single, already decoded value."""
        query = self.compile(query_text)
        if query is None:
            return 1
        return self._run_all(query, [value])

    def run_stream(self, query_text: str, stream: TextIO) -> int:
        """Run the query against a text stream.

        With ``raw_input`` the whole stream is one string value. Otherwise
        every YAML document in the stream is an input, processed in order.

        Returns:
            Exit status: 0 on success, 1 on any failure
        """
        query = self.compile(query_text)
        if query is None:
            return 1

        if self.options.raw_input:
            try:
                data = stream.read()
            except OSError as e:
                self.log(f"error reading input: {e}")
                return 1
            return self._run_all(query, [data])

        return self._run_all(query, iter_documents(stream))

    def _run_all(self, query: Query, inputs: Iterable[Any]) -> int:
        try:
            for value in inputs:
                status = self._run_one(query, value)
                if status != 0:
                    return status
        except DocumentError as e:
            self.log(f"error decoding input: {e}")
            return 1
        return 0

    def _run_one(self, query: Query, value: Any) -> int:
        for result in query.run(value):
            if isinstance(result, QueryError):
                self.log(f"query error: {result}")
                return 1
            try:
                self.encoder.encode(result)
            except (
                OSError,
                TypeError,
                ValueError,
                RecursionError,
                YAMLError,
            ) as e:
                self.log(f"encoding error: {e}")
                return 1
        return 0


__all__ = ["QueryFilter"]
