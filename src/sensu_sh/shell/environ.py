"""Shell variable store."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Mapping, Optional


class VarKind(Enum):
    UNSET = "unset"
    STRING = "string"
    INDEXED = "indexed"


@dataclass(frozen=True)
class Variable:
    """A shell variable: unset, a scalar string, or an indexed array."""

    kind: VarKind = VarKind.UNSET
    value: str = ""
    items: tuple = field(default_factory=tuple)
    exported: bool = False

    @property
    def is_set(self) -> bool:
        return self.kind is not VarKind.UNSET

    def scalar(self) -> str:
        """Value of ``$NAME``; arrays expand to their first element."""
        if self.kind is VarKind.INDEXED:
            return self.items[0] if self.items else ""
        return self.value

    def elements(self) -> List[str]:
        """Value of ``${NAME[@]}``."""
        if self.kind is VarKind.INDEXED:
            return list(self.items)
        if self.kind is VarKind.STRING:
            return [self.value]
        return []

    def text(self) -> str:
        """Text used as query input: array elements joined by newlines."""
        if self.kind is VarKind.INDEXED:
            return "\n".join(self.items)
        return self.value


UNSET = Variable()


class Environ:
    """Mutable variable table owned by a runner.

    Subshells work on a copy so their assignments do not leak back.
    """

    def __init__(self, variables: Optional[Mapping[str, Variable]] = None):
        self._vars: Dict[str, Variable] = dict(variables or {})

    @classmethod
    def from_os(cls, environ: Optional[Mapping[str, str]] = None) -> "Environ":
        """Build a table from process environment strings, all exported."""
        source = os.environ if environ is None else environ
        return cls(
            {
                name: Variable(VarKind.STRING, value=value, exported=True)
                for name, value in source.items()
            }
        )

    def get(self, name: str) -> Variable:
        return self._vars.get(name, UNSET)

    def set_string(self, name: str, value: str) -> None:
        old = self.get(name)
        self._vars[name] = Variable(
            VarKind.STRING, value=value, exported=old.exported
        )

    def set_indexed(self, name: str, items: List[str]) -> None:
        old = self.get(name)
        self._vars[name] = Variable(
            VarKind.INDEXED, items=tuple(items), exported=old.exported
        )

    def set_item(self, name: str, index: int, value: str) -> None:
        """Assign ``NAME[index]=value``, growing the array with empties."""
        old = self.get(name)
        items = old.elements()
        if index < 0:
            index += len(items)
            if index < 0:
                raise IndexError(f"{name}[{index}]: bad array subscript")
        if index >= len(items):
            items.extend([""] * (index + 1 - len(items)))
        items[index] = value
        self._vars[name] = Variable(
            VarKind.INDEXED, items=tuple(items), exported=old.exported
        )

    def export(self, name: str) -> None:
        """Mark NAME for export. An unset NAME stays unset until assigned."""
        self._vars[name] = replace(self.get(name), exported=True)

    def unset(self, name: str) -> None:
        self._vars.pop(name, None)

    def exported(self) -> Dict[str, str]:
        """Environment passed to external commands.

        Arrays are never exported, matching bash.
        """
        return {
            name: var.value
            for name, var in self._vars.items()
            if var.exported and var.kind is VarKind.STRING
        }

    def copy(self) -> "Environ":
        return Environ(self._vars)


__all__ = ["UNSET", "Environ", "VarKind", "Variable"]
