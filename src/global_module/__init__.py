"""Global module registry runtime."""

from importlib import metadata

from .errors import (
    EmptyModuleError,
    InvalidExportsError,
    InvalidModuleIdError,
    ModuleNotFoundError,
    NotInitializedError,
    RegistryError,
    RuntimeInstallError,
)
from .record import (
    CommonJsHandle,
    ModuleRecord,
    as_wildcard,
    binding_of,
    origin_of,
    resolve_for_require,
)
from .registry import ModuleRegistry
from .runtime import get_registry, install, uninstall
from .types import Origin


def _discover_version() -> str:
    """Return the installed package version, falling back to dev marker."""
    try:
        return metadata.version("global-module")
    except metadata.PackageNotFoundError:  # pragma: no cover - occurs in source checkouts
        return "0.0.0"


__version__ = _discover_version()

__all__ = [
    "CommonJsHandle",
    "EmptyModuleError",
    "InvalidExportsError",
    "InvalidModuleIdError",
    "ModuleNotFoundError",
    "ModuleRecord",
    "ModuleRegistry",
    "NotInitializedError",
    "Origin",
    "RegistryError",
    "RuntimeInstallError",
    "__version__",
    "as_wildcard",
    "binding_of",
    "get_registry",
    "install",
    "origin_of",
    "resolve_for_require",
    "uninstall",
]
