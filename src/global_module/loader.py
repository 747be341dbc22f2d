"""Host-side loader that evaluates compiled units against the registry."""

from __future__ import annotations

import importlib
import importlib.util
import logging
import sys
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import ModuleType

from .errors import RegistryError
from .registry import ModuleRegistry
from .runtime import DEFAULT_GLOBAL_NAME, get_registry, install, uninstall

LOGGER = logging.getLogger(__name__)
_UNIT_PREFIX = "global_module.units"


class UnitLoader:
    """Evaluate unit files in order with the registry exposed as a builtin.

    Each path is either a ``.py`` file or a directory whose ``.py`` files are
    taken in name order. A unit found again under a later path replaces the
    earlier one and moves to the end of the evaluation order.
    """

    def __init__(
        self,
        paths: Iterable[Path | str],
        registry: ModuleRegistry | None = None,
        global_name: str = DEFAULT_GLOBAL_NAME,
    ) -> None:
        self._paths = [Path(path).expanduser() for path in paths]
        self._registry = registry if registry is not None else get_registry()
        self._global_name = global_name
        self._units: dict[str, ModuleType] = {}

    @property
    def registry(self) -> ModuleRegistry:
        return self._registry

    @property
    def unit_names(self) -> list[str]:
        """Return evaluated unit names in evaluation order."""
        return list(self._units)

    def discover(self) -> list[tuple[str, Path]]:
        """Return ``(unit name, file)`` pairs in evaluation order."""

        discovered: dict[str, Path] = {}
        for search_path in self._paths:
            if search_path.is_dir():
                entries = sorted(search_path.iterdir(), key=lambda item: item.name)
            elif search_path.exists():
                entries = [search_path]
            else:
                LOGGER.warning("Unit path %s does not exist; skipping.", search_path)
                continue
            for entry in entries:
                name = self._unit_name(entry)
                if not name:
                    continue
                if name in discovered:
                    del discovered[name]
                discovered[name] = entry
        return list(discovered.items())

    def load_all(self) -> list[str]:
        """Evaluate every discovered unit and return their names.

        The registry stays installed afterwards so that functions defined by
        units can keep resolving modules lazily. Call :meth:`unload` to undo.
        """

        install(self._global_name, self._registry)
        for name, location in self.discover():
            try:
                self._units[name] = self._evaluate(name, location)
            except RegistryError as exc:
                LOGGER.error("Unit '%s' (%s) failed: %s", name, location, exc)
                raise
            except Exception:
                LOGGER.exception("Failed to evaluate unit '%s' from %s", name, location)
                raise
            LOGGER.debug("Evaluated unit '%s' from %s", name, location)
        return self.unit_names

    def unload(self) -> None:
        """Drop evaluated units and remove the builtin registry name."""

        for name in list(sys.modules):
            if name.startswith(f"{_UNIT_PREFIX}."):
                sys.modules.pop(name, None)
        self._units.clear()
        uninstall(self._global_name, self._registry)

    def _unit_name(self, path: Path) -> str | None:
        if path.is_file() and path.suffix == ".py" and path.stem != "__init__":
            return path.stem
        return None

    def _evaluate(self, name: str, path: Path) -> ModuleType:
        spec = importlib.util.spec_from_file_location(f"{_UNIT_PREFIX}.{name}", path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot load unit '{name}' from {path}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[spec.name] = module
        try:
            spec.loader.exec_module(module)
        except Exception:
            sys.modules.pop(spec.name, None)
            raise
        return module


def register_externals(registry: ModuleRegistry, externals: Mapping[str, str]) -> list[str]:
    """Import host modules and register them in the external table."""

    registered: list[str] = []
    for module_id, target in externals.items():
        module = importlib.import_module(target)
        registry.external(module_id, module)
        registered.append(module_id)
        LOGGER.debug("External '%s' -> %s", module_id, target)
    return registered


__all__ = ["UnitLoader", "register_externals"]
