"""Module records, CommonJS handles, and the wildcard copy algorithm."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import ModuleType
from typing import Any

from .types import DEFAULT_EXPORT, Binding, Indirect, Origin, Value


class ModuleRecord(Mapping[str, Any]):
    """Export surface of one registered module.

    Reading an export resolves its binding, so live bindings observe later
    mutation of the producer's export object. Exports are reachable both as
    items (``record["name"]``) and as attributes (``record.name``). In
    attribute form an export shadows the mapping method of the same name,
    so a module exporting ``get`` or ``keys`` still reads back what it
    exported; the item protocol is never shadowed.

    A live binding whose source slot was deleted is hidden from iteration
    and membership until the slot comes back.

    Only records created through the CommonJS protocol accept assignment.
    Record metadata is read with :func:`origin_of` and :func:`binding_of`.
    """

    __slots__ = ("_bindings", "_origin")

    def __init__(self, origin: Origin = Origin.ESM) -> None:
        object.__setattr__(self, "_bindings", {})
        object.__setattr__(self, "_origin", origin)

    def __getattribute__(self, name: str) -> Any:
        if not name.startswith("_"):
            binding = object.__getattribute__(self, "_bindings").get(name)
            if binding is not None and binding.is_bound():
                return binding.resolve()
        return object.__getattribute__(self, name)

    def __getitem__(self, name: str) -> Any:
        return self._bindings[name].resolve()

    def __iter__(self) -> Iterator[str]:
        return iter([name for name, binding in self._bindings.items() if binding.is_bound()])

    def __len__(self) -> int:
        return sum(1 for binding in self._bindings.values() if binding.is_bound())

    def __contains__(self, name: object) -> bool:
        binding = self._bindings.get(name)
        return binding is not None and binding.is_bound()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mapping):
            return NotImplemented
        return {name: self[name] for name in self} == {name: other[name] for name in other}

    def __getattr__(self, name: str) -> Any:
        if name in ModuleRecord.__slots__ or (name.startswith("__") and name.endswith("__")):
            raise AttributeError(name)
        try:
            return self[name]
        except KeyError:
            raise AttributeError(f"Module has no export '{name}'.") from None

    def __setitem__(self, name: str, value: Any) -> None:
        self._assert_writable()
        self._define(name, Value(value))

    def __delitem__(self, name: str) -> None:
        self._assert_writable()
        del self._bindings[name]

    def __setattr__(self, name: str, value: Any) -> None:
        self[name] = value

    def __delattr__(self, name: str) -> None:
        try:
            del self[name]
        except KeyError:
            raise AttributeError(name) from None

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self._bindings))

    def __repr__(self) -> str:
        return f"<ModuleRecord {self._origin.value} {list(self)!r}>"

    def _define(self, name: str, binding: Binding) -> None:
        self._bindings[name] = binding

    def _assert_writable(self) -> None:
        if self._origin is not Origin.COMMONJS:
            raise TypeError("ES module records are read-only.")


class CommonJsHandle:
    """Writable ``exports`` view over a CommonJS module record.

    Assigning ``handle.exports`` stores the value as the module's default
    export. Reading it returns the record, so ``handle.exports.name = value``
    defines a named export.
    """

    __slots__ = ("_record",)

    def __init__(self, record: ModuleRecord) -> None:
        self._record = record

    @property
    def exports(self) -> ModuleRecord:
        return self._record

    @exports.setter
    def exports(self, value: Any) -> None:
        self._record._define(DEFAULT_EXPORT, Value(value))


def origin_of(record: ModuleRecord) -> Origin:
    """Return which producer protocol created ``record``."""
    return record._origin


def binding_of(record: ModuleRecord, name: str) -> Binding:
    """Return the raw binding behind ``name`` without resolving it."""
    return record._bindings[name]


def is_exports_container(value: object) -> bool:
    """Return True when ``value`` can be used as a source of exports."""
    return isinstance(value, (Mapping, ModuleType))


def own_bindings(source: Mapping[Any, Any] | ModuleType) -> list[tuple[str, Binding]]:
    """Return the ``(name, binding)`` pairs a source contributes.

    Records hand out their existing bindings untouched. Mappings and Python
    modules yield live ``Indirect`` bindings; non-string mapping keys are
    ignored.
    """

    if isinstance(source, ModuleRecord):
        return list(source._bindings.items())
    if isinstance(source, Mapping):
        return [(key, Indirect(source, key)) for key in list(source) if isinstance(key, str)]
    if isinstance(source, ModuleType):
        return [(name, Indirect(source, name)) for name in _module_export_names(source)]
    raise TypeError(f"Unsupported exports source: {type(source).__name__}")


def copy_bindings(
    source: Mapping[Any, Any] | ModuleType,
    target: ModuleRecord,
    *,
    skip_default: bool = False,
    overwrite: bool = True,
) -> int:
    """Copy bindings from ``source`` into ``target`` and return how many landed.

    This is the single copy step behind wildcard views, re-exports, and
    staged ``export_all``.
    """

    copied = 0
    for name, binding in own_bindings(source):
        if skip_default and name == DEFAULT_EXPORT:
            continue
        if not overwrite and name in target:
            continue
        target._define(name, binding)
        copied += 1
    return copied


def as_wildcard(source: Mapping[Any, Any] | ModuleType) -> ModuleRecord:
    """Return a new namespace record holding every export except ``default``."""
    namespace = ModuleRecord(Origin.ESM)
    copy_bindings(source, namespace, skip_default=True)
    return namespace


def resolve_for_require(record: ModuleRecord) -> Any:
    """Adapt ``record`` for CommonJS-style consumption."""
    if record._origin is Origin.COMMONJS and DEFAULT_EXPORT in record:
        return record[DEFAULT_EXPORT]
    return record


def _module_export_names(module: ModuleType) -> list[str]:
    names = getattr(module, "__all__", None)
    if names is not None:
        return [str(name) for name in names]
    return [name for name in vars(module) if not name.startswith("_")]


__all__ = [
    "CommonJsHandle",
    "ModuleRecord",
    "as_wildcard",
    "binding_of",
    "copy_bindings",
    "is_exports_container",
    "origin_of",
    "own_bindings",
    "resolve_for_require",
]
