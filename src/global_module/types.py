"""Core data structures shared by the registry runtime."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

ModuleId = str
DEFAULT_EXPORT = "default"


class Origin(str, Enum):
    """Which producer protocol created a module record."""

    ESM = "esm"
    COMMONJS = "commonjs"


@dataclass(frozen=True, slots=True)
class Value:
    """Snapshot binding holding a plain value."""

    value: Any

    def resolve(self) -> Any:
        return self.value

    def is_bound(self) -> bool:
        return True


@dataclass(frozen=True, slots=True, eq=False)
class Indirect:
    """Live binding that re-reads ``key`` from ``owner`` on every access.

    ``owner`` is either a mapping (item lookup) or any other object
    (attribute lookup, e.g. a Python module). A slot that disappeared from
    the owner surfaces as ``KeyError`` in both cases.
    """

    owner: Any
    key: str

    def resolve(self) -> Any:
        if isinstance(self.owner, Mapping):
            return self.owner[self.key]
        try:
            return getattr(self.owner, self.key)
        except AttributeError as exc:
            raise KeyError(self.key) from exc

    def is_bound(self) -> bool:
        if isinstance(self.owner, Mapping):
            return self.key in self.owner
        return hasattr(self.owner, self.key)


Binding = Value | Indirect


__all__ = [
    "Binding",
    "DEFAULT_EXPORT",
    "Indirect",
    "ModuleId",
    "Origin",
    "Value",
]
