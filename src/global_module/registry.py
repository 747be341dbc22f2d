"""Process-wide module registry and its producer/consumer API."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from types import ModuleType
from typing import Any

from .errors import (
    EmptyModuleError,
    InvalidExportsError,
    InvalidModuleIdError,
    ModuleNotFoundError,
    NotInitializedError,
)
from .record import (
    CommonJsHandle,
    ModuleRecord,
    as_wildcard,
    copy_bindings,
    is_exports_container,
    origin_of,
    resolve_for_require,
)
from .types import ModuleId, Origin

LOGGER = logging.getLogger(__name__)
_MISSING = object()


class ModuleTable(Mapping[ModuleId, ModuleRecord]):
    """Read-only view over one registry table.

    Item lookup of an absent id raises ``ModuleNotFoundError`` instead of
    ``KeyError``; ``in`` and ``get`` behave like a plain mapping.
    """

    def __init__(self, entries: dict[ModuleId, ModuleRecord], *, external: bool = False) -> None:
        self._entries = entries
        self._external = external

    def __getitem__(self, module_id: ModuleId) -> ModuleRecord:
        try:
            return self._entries[module_id]
        except KeyError:
            raise ModuleNotFoundError(module_id, external=self._external) from None

    def __iter__(self) -> Iterator[ModuleId]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, module_id: object) -> bool:
        return module_id in self._entries

    def get(self, module_id: ModuleId, default: Any = None) -> Any:
        return self._entries.get(module_id, default)


class Helpers:
    """Helpers referenced by generated consumer code."""

    as_wildcard = staticmethod(as_wildcard)


class ModuleRegistry:
    """Holds every registered module plus a separate table of external modules."""

    def __init__(self) -> None:
        self._modules: dict[ModuleId, ModuleRecord] = {}
        self._externals: dict[ModuleId, ModuleRecord] = {}
        self.helpers = Helpers()

    @property
    def modules(self) -> ModuleTable:
        return ModuleTable(self._modules)

    @property
    def externals(self) -> ModuleTable:
        return ModuleTable(self._externals, external=True)

    # -- producers ---------------------------------------------------------

    def esm(
        self,
        module_id: ModuleId,
        exported_bindings: Mapping[str, Any] | ModuleType,
        *re_exported_modules: Mapping[str, Any] | ModuleType,
    ) -> None:
        """Register an ES module in one call, replacing any previous record.

        Direct exports always win; each re-export source only fills names that
        are still free and never contributes ``default``.
        """

        _check_module_id(module_id)
        for source in (exported_bindings, *re_exported_modules):
            _check_exports(module_id, source)

        record = ModuleRecord(Origin.ESM)
        copy_bindings(exported_bindings, record)
        for source in re_exported_modules:
            copy_bindings(source, record, skip_default=True, overwrite=False)
        if not record:
            raise EmptyModuleError(module_id)

        self._modules[module_id] = record
        LOGGER.debug("Registered ES module '%s' with exports %s", module_id, list(record))

    def init(self, module_id: ModuleId) -> None:
        """Install an empty placeholder for staged registration."""
        _check_module_id(module_id)
        self._modules[module_id] = ModuleRecord(Origin.ESM)
        LOGGER.debug("Initialised module '%s'", module_id)

    def export(self, module_id: ModuleId, exports: Mapping[str, Any] | ModuleType) -> None:
        """Merge ``exports`` into an initialised module as live bindings."""
        record = self._staged_record(module_id, exports)
        copy_bindings(exports, record)

    def export_all(self, module_id: ModuleId, exports: Mapping[str, Any] | ModuleType) -> None:
        """Merge ``exports`` like :meth:`export` but leave out ``default``."""
        record = self._staged_record(module_id, exports)
        copy_bindings(exports, record, skip_default=True)

    def cjs(self, module_id: ModuleId) -> CommonJsHandle:
        """Create a CommonJS module record and return its writable handle."""
        _check_module_id(module_id)
        record = ModuleRecord(Origin.COMMONJS)
        self._modules[module_id] = record
        LOGGER.debug("Registered CommonJS module '%s'", module_id)
        return CommonJsHandle(record)

    # -- consumers ---------------------------------------------------------

    def import_(self, module_id: ModuleId) -> ModuleRecord:
        """Return the raw record registered under ``module_id``."""
        return _lookup(self._modules, module_id)

    def import_wildcard(self, module_id: ModuleId) -> ModuleRecord:
        """Return a namespace view of ``module_id`` without its default export."""
        return as_wildcard(_lookup(self._modules, module_id))

    def require(self, module_id: ModuleId) -> Any:
        """Return ``module_id`` adapted for CommonJS consumption."""
        return resolve_for_require(_lookup(self._modules, module_id))

    def reset(self, module_id: ModuleId | None = None) -> None:
        """Forget one module, or every module when no id is given.

        External modules are never affected.
        """

        if module_id is None:
            LOGGER.debug("Resetting all %s module(s)", len(self._modules))
            self._modules.clear()
            return
        if self._modules.pop(module_id, None) is not None:
            LOGGER.debug("Reset module '%s'", module_id)

    def external(self, module_id: ModuleId, module: Any = _MISSING) -> ModuleRecord:
        """Register ``module`` as an external module, or retrieve one.

        Called with a payload, the payload replaces any previous entry and the
        stored record is returned. Called with only an id, the existing entry
        is returned.
        """

        if module is _MISSING:
            return _lookup(self._externals, module_id, external=True)

        _check_module_id(module_id)
        _check_exports(module_id, module)
        record = ModuleRecord(Origin.ESM)
        copy_bindings(module, record)
        self._externals[module_id] = record
        LOGGER.debug("Registered external module '%s'", module_id)
        return record

    def snapshot(self) -> dict[str, dict[ModuleId, dict[str, Any]]]:
        """Return a serialisable summary of both tables."""

        return {
            "modules": _summarise(self._modules),
            "externals": _summarise(self._externals),
        }

    def _staged_record(self, module_id: ModuleId, exports: object) -> ModuleRecord:
        record = self._modules.get(module_id) if isinstance(module_id, str) else None
        if record is None:
            raise NotInitializedError(module_id)
        _check_exports(module_id, exports)
        return record


def _lookup(
    table: dict[ModuleId, ModuleRecord],
    module_id: ModuleId,
    *,
    external: bool = False,
) -> ModuleRecord:
    if not isinstance(module_id, str) or not module_id:
        LOGGER.warning("Unable to look up module by id %r", module_id)
        raise ModuleNotFoundError(module_id, external=external)
    try:
        return table[module_id]
    except KeyError:
        raise ModuleNotFoundError(module_id, external=external) from None


def _check_module_id(module_id: object) -> None:
    if not isinstance(module_id, str) or not module_id:
        raise InvalidModuleIdError(module_id)


def _check_exports(module_id: ModuleId, exports: object) -> None:
    if not is_exports_container(exports):
        raise InvalidExportsError(module_id, exports)


def _summarise(table: dict[ModuleId, ModuleRecord]) -> dict[ModuleId, dict[str, Any]]:
    return {
        module_id: {"origin": origin_of(record).value, "exports": list(record)}
        for module_id, record in table.items()
    }


__all__ = ["Helpers", "ModuleRegistry", "ModuleTable"]
