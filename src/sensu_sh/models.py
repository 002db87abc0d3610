"""Per-invocation filter configuration."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class OutputMode(str, Enum):
    """Render policy for query results."""

    PLAIN = "plain"
    JSON = "json"
    YAML = "yaml"


class FilterOptions(BaseModel):
    """Flags shared by the ``query`` and ``event`` commands.

    ``emit_json`` and ``emit_yaml`` select alternative output modes. When
    both are given, JSON wins.
    """

    model_config = ConfigDict(frozen=True)

    emit_json: bool = False
    emit_yaml: bool = False
    pretty: bool = False
    raw_input: bool = False

    @property
    def mode(self) -> OutputMode:
        if self.emit_json:
            return OutputMode.JSON
        if self.emit_yaml:
            return OutputMode.YAML
        return OutputMode.PLAIN


__all__ = ["FilterOptions", "OutputMode"]
