from __future__ import annotations

import builtins
from collections.abc import Iterator

import pytest

from global_module import errors
from global_module.registry import ModuleRegistry
from global_module.runtime import get_registry, install, uninstall

GLOBAL_NAME = "__test_modules"


@pytest.fixture()
def registry() -> Iterator[ModuleRegistry]:
    registry = ModuleRegistry()
    yield registry
    uninstall(GLOBAL_NAME, registry)


def test_get_registry_is_process_wide() -> None:
    assert get_registry() is get_registry()


def test_install_exposes_registry_as_builtin(registry: ModuleRegistry) -> None:
    assert install(GLOBAL_NAME, registry) is registry
    assert getattr(builtins, GLOBAL_NAME) is registry

    code = compile(f"{GLOBAL_NAME}.esm('unit', {{'answer': 42}})", "<unit>", "exec")
    exec(code, {})

    assert registry.import_("unit").answer == 42


def test_install_twice_is_a_no_op(registry: ModuleRegistry) -> None:
    install(GLOBAL_NAME, registry)
    assert install(GLOBAL_NAME, registry) is registry


def test_install_refuses_foreign_binding(
    monkeypatch: pytest.MonkeyPatch, registry: ModuleRegistry
) -> None:
    foreign = object()
    monkeypatch.setattr(builtins, GLOBAL_NAME, foreign, raising=False)

    with pytest.raises(errors.RuntimeInstallError):
        install(GLOBAL_NAME, registry)
    assert uninstall(GLOBAL_NAME, registry) is False
    assert getattr(builtins, GLOBAL_NAME) is foreign


def test_uninstall_removes_binding(registry: ModuleRegistry) -> None:
    install(GLOBAL_NAME, registry)

    assert uninstall(GLOBAL_NAME, registry) is True
    assert not hasattr(builtins, GLOBAL_NAME)
    assert uninstall(GLOBAL_NAME, registry) is False
