"""YAML/JSON document decoding.

Inputs are decoded as YAML streams, which also accepts JSON. Timestamps
are kept as strings so decoded values stay JSON-compatible for the query
engine.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator, TextIO

from ruamel.yaml import YAML
from ruamel.yaml.constructor import SafeConstructor
from ruamel.yaml.error import YAMLError

from .errors import DocumentError


class _PlainConstructor(SafeConstructor):
    """Safe constructor that leaves timestamps as strings."""


_PlainConstructor.add_constructor(
    "tag:yaml.org,2002:timestamp", SafeConstructor.construct_yaml_str
)


def _loader() -> YAML:
    yaml = YAML(typ="safe", pure=True)
    yaml.Constructor = _PlainConstructor
    return yaml


def iter_documents(stream: TextIO | str) -> Iterator[Any]:
    """Yield each document of a YAML stream in order.

    Args:
        stream: Text stream or string holding zero or more documents

    Yields:
        Decoded documents (dicts, lists, scalars or None)

    Raises:
        DocumentError: If a document fails to decode. Documents before the
            failing one have already been yielded.
    """
    try:
        yield from _loader().load_all(stream)
    except YAMLError as e:
        raise DocumentError(str(e)) from e
    except RecursionError as e:
        raise DocumentError("document nested too deeply") from e


def load_event(path: str | Path, stdin: TextIO) -> dict[str, Any]:
    """Load the event document from a file, or from stdin when path is "-".

    Args:
        path: Event file path or "-"
        stdin: Stream used when path is "-"

    Returns:
        The decoded event mapping

    Raises:
        DocumentError: If the event cannot be read, decoded, or is not a
            mapping
    """
    try:
        if str(path) == "-":
            data = stdin.read()
        else:
            data = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DocumentError(f"error opening event [{path}]: {e}") from e

    try:
        event = _loader().load(data)
    except YAMLError as e:
        raise DocumentError(f"error parsing event [{path}]: {e}") from e
    except RecursionError as e:
        raise DocumentError(
            f"error parsing event [{path}]: document nested too deeply"
        ) from e

    if event is None:
        raise DocumentError(f"error parsing event [{path}]: empty document")
    if not isinstance(event, dict):
        kind = type(event).__name__
        raise DocumentError(
            f"error parsing event [{path}]: expected a mapping, got {kind}"
        )
    return event


__all__ = ["iter_documents", "load_event"]
