"""Process-wide registry instance and its exposure on ``builtins``."""

from __future__ import annotations

import builtins
import logging

from .errors import RuntimeInstallError
from .registry import ModuleRegistry

LOGGER = logging.getLogger(__name__)
DEFAULT_GLOBAL_NAME = "__modules"
_MISSING = object()

_registry: ModuleRegistry | None = None


def get_registry() -> ModuleRegistry:
    """Return the registry shared by the whole process, creating it once."""

    global _registry
    if _registry is None:
        _registry = ModuleRegistry()
    return _registry


def install(
    global_name: str = DEFAULT_GLOBAL_NAME,
    registry: ModuleRegistry | None = None,
) -> ModuleRegistry:
    """Expose ``registry`` (default: the process registry) as a builtin name.

    Generated code refers to the registry through this name without importing
    anything. Installing the same registry twice is a no-op; a name already
    bound to anything else is never overwritten.
    """

    target = registry if registry is not None else get_registry()
    current = getattr(builtins, global_name, _MISSING)
    if current is target:
        return target
    if current is not _MISSING:
        raise RuntimeInstallError(f"builtins.{global_name} is already defined")
    setattr(builtins, global_name, target)
    LOGGER.debug("Installed module registry as builtins.%s", global_name)
    return target


def uninstall(
    global_name: str = DEFAULT_GLOBAL_NAME,
    registry: ModuleRegistry | None = None,
) -> bool:
    """Remove the builtin name if it still points at ``registry``."""

    target = registry if registry is not None else get_registry()
    if getattr(builtins, global_name, _MISSING) is not target:
        return False
    delattr(builtins, global_name)
    LOGGER.debug("Removed builtins.%s", global_name)
    return True


__all__ = ["DEFAULT_GLOBAL_NAME", "get_registry", "install", "uninstall"]
