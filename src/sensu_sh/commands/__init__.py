"""In-script ``query`` and ``event`` commands."""

from .event import run_event
from .query import run_query

__all__ = ["run_event", "run_query"]
