"""Error taxonomy raised by the module registry."""

from __future__ import annotations

import builtins

from .types import ModuleId

_PREFIX = "[Global Module]"


class RegistryError(Exception):
    """Base class for contract violations detected by the registry."""

    def __init__(self, message: str, *, module_id: ModuleId | None = None) -> None:
        super().__init__(message)
        self.module_id = module_id


class ModuleNotFoundError(RegistryError, builtins.ModuleNotFoundError):
    """Raised when a lookup misses in the main or external table.

    Subclasses the builtin so ``except ImportError`` in consumer code also
    catches registry misses.
    """

    def __init__(self, module_id: object, *, external: bool = False) -> None:
        kind = "external module" if external else "module"
        super().__init__(
            f'{_PREFIX} "{module_id}" {kind} not found',
            module_id=module_id if isinstance(module_id, str) else None,
        )
        self.name = self.module_id
        self.external = external


class NotInitializedError(RegistryError, LookupError):
    """Raised when a staged export targets an id that was never ``init``-ed."""

    def __init__(self, module_id: ModuleId) -> None:
        super().__init__(f'{_PREFIX} "{module_id}" module not initialized', module_id=module_id)


class InvalidExportsError(RegistryError, TypeError):
    """Raised when a registration payload is not a key-value container."""

    def __init__(self, module_id: ModuleId, exports: object) -> None:
        super().__init__(
            f'{_PREFIX} invalid exports argument on "{module_id}" module registration '
            f"(got {type(exports).__name__})",
            module_id=module_id,
        )


class EmptyModuleError(RegistryError, ValueError):
    """Raised when one-shot registration would install a module with no exports."""

    def __init__(self, module_id: ModuleId) -> None:
        super().__init__(f'{_PREFIX} "{module_id}" module has no exports', module_id=module_id)


class InvalidModuleIdError(RegistryError, ValueError):
    """Raised when a registration call receives an empty or non-string id."""

    def __init__(self, module_id: object) -> None:
        super().__init__(f"{_PREFIX} invalid module id {module_id!r}")


class RuntimeInstallError(RegistryError, RuntimeError):
    """Raised when the global name is already bound to a foreign object."""


__all__ = [
    "EmptyModuleError",
    "InvalidExportsError",
    "InvalidModuleIdError",
    "ModuleNotFoundError",
    "NotInitializedError",
    "RegistryError",
    "RuntimeInstallError",
]
