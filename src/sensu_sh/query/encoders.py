"""Result encoders for query output.

Three render policies:
- plain: strings verbatim, collections as compact JSON, newline-separated
- json: one JSON document per line, optionally indented
- yaml: one YAML document per value
"""

from __future__ import annotations

import io
import json
import math
from decimal import Decimal
from typing import Any, TextIO

from ruamel.yaml import YAML

from ..models import FilterOptions, OutputMode


class Encoder:
    """Writes successive values to a text stream."""

    def __init__(self, stream: TextIO):
        self.stream = stream

    def encode(self, value: Any) -> None:
        raise NotImplementedError


def format_float(value: float) -> str:
    """Format a float in the shortest positional form that round-trips.

    Examples:
        >>> format_float(1.50)
        '1.5'
        >>> format_float(3.0)
        '3'
        >>> format_float(1e-7)
        '0.0000001'
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    # repr() is the shortest round-trip form; Decimal drops its exponent
    return format(Decimal(repr(value)).normalize(), "f")


def compact_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


class PlainEncoder(Encoder):
    """Human-oriented output.

    A newline is written before every value except the first, so the
    stream never ends with a trailing newline.
    """

    def __init__(self, stream: TextIO):
        super().__init__(stream)
        self.written = False

    def encode(self, value: Any) -> None:
        if self.written:
            self.stream.write("\n")
        self.written = True
        self.stream.write(self.render(value))

    @staticmethod
    def render(value: Any) -> str:
        if isinstance(value, (dict, list)):
            return compact_json(value)
        if isinstance(value, str):
            return value
        if isinstance(value, bool) or value is None:
            return json.dumps(value)
        if isinstance(value, float):
            return format_float(value)
        return str(value)


class JSONEncoder(Encoder):
    """Newline-delimited JSON, HTML characters left unescaped."""

    def __init__(self, stream: TextIO, pretty: bool = False):
        super().__init__(stream)
        self.pretty = pretty

    def encode(self, value: Any) -> None:
        if self.pretty:
            text = json.dumps(value, ensure_ascii=False, indent=2)
        else:
            text = compact_json(value)
        self.stream.write(text + "\n")


class YAMLEncoder(Encoder):
    """Multi-document YAML stream."""

    def __init__(self, stream: TextIO):
        super().__init__(stream)
        self.yaml = YAML(typ="safe", pure=True)
        self.yaml.indent(mapping=2, sequence=4, offset=2)
        self.yaml.default_flow_style = False
        self.written = False

    def encode(self, value: Any) -> None:
        if self.written:
            self.stream.write("---\n")
        self.written = True
        buf = io.StringIO()
        self.yaml.dump(value, buf)
        text = buf.getvalue()
        # plain root scalars get a document end marker
        if text.endswith("\n...\n"):
            text = text[: -len("...\n")]
        self.stream.write(text)


def new_encoder(stream: TextIO, options: FilterOptions) -> Encoder:
    """Return the encoder selected by the filter options."""
    mode = options.mode
    if mode is OutputMode.JSON:
        return JSONEncoder(stream, pretty=options.pretty)
    if mode is OutputMode.YAML:
        return YAMLEncoder(stream)
    return PlainEncoder(stream)


__all__ = [
    "Encoder",
    "JSONEncoder",
    "PlainEncoder",
    "YAMLEncoder",
    "compact_json",
    "format_float",
    "new_encoder",
]
