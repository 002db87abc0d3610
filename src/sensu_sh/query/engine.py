"""Adapter over the jq bindings.

The engine reports runtime failures by raising from its iterator. This
module turns such a failure into a ``QueryError`` element at the point in
the sequence where it happened, so callers can tell results and errors
apart while consuming lazily.

The bindings end iteration quietly when a program halts, so ``halt_error``
is redefined to raise an ordinary error carrying its input.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

import jq

from ..errors import QueryParseError

HALT_ERROR_PRELUDE = (
    "def halt_error($code): error(if type == \"string\" then . else tojson end); "
    "def halt_error: halt_error(5); "
)


@dataclass(frozen=True)
class QueryError:
    """An error element in a query result sequence."""

    message: str

    def __str__(self) -> str:
        return self.message


class Query:
    """A compiled jq program."""

    def __init__(self, text: str, program: Any):
        self.text = text
        self._program = program

    def __repr__(self) -> str:
        return f"Query({self.text!r})"

    def run(self, value: Any) -> Iterator[Any]:
        """Run the query against one input value.

        Results are produced on demand, so infinite programs such as
        ``repeat(1)`` are fine as long as the caller stops pulling. The
        iterator ends right after yielding a ``QueryError``.

        Args:
            value: Decoded input document, or a raw string

        Yields:
            Result values, possibly ending with a QueryError
        """
        try:
            results = iter(self._program.input_value(value))
        except (TypeError, ValueError, RecursionError) as e:
            yield QueryError(str(e))
            return

        while True:
            try:
                item = next(results)
            except StopIteration:
                return
            except (ValueError, RecursionError) as e:
                yield QueryError(str(e))
                return
            yield item


def compile_query(text: str) -> Query:
    """Compile a query string.

    Raises:
        QueryParseError: If the program does not compile
    """
    source = text
    # module directives must stay at the start of the program
    if not text.lstrip().startswith(("import", "include", "module")):
        source = HALT_ERROR_PRELUDE + text
    try:
        program = jq.compile(source)
    except ValueError as e:
        raise QueryParseError(str(e)) from e
    return Query(text, program)


__all__ = ["Query", "QueryError", "compile_query"]
