"""jq-style query execution: engine adapter, result encoders and filter."""

from .encoders import Encoder, JSONEncoder, PlainEncoder, YAMLEncoder, new_encoder
from .engine import Query, QueryError, compile_query
from .filter import QueryFilter

__all__ = [
    "Encoder",
    "JSONEncoder",
    "PlainEncoder",
    "Query",
    "QueryError",
    "QueryFilter",
    "YAMLEncoder",
    "compile_query",
    "new_encoder",
]
