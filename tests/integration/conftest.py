from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path
from textwrap import dedent

import pytest

from global_module.loader import UnitLoader
from global_module.registry import ModuleRegistry

LoadUnits = Callable[[dict[str, str]], UnitLoader]


def write_units(unit_dir: Path, units: dict[str, str]) -> Path:
    """Write ``name -> source`` unit files; names control evaluation order."""

    unit_dir.mkdir(parents=True, exist_ok=True)
    for name, body in units.items():
        (unit_dir / f"{name}.py").write_text(dedent(body), encoding="utf-8")
    return unit_dir


@pytest.fixture()
def registry() -> ModuleRegistry:
    return ModuleRegistry()


@pytest.fixture()
def load_units(tmp_path: Path, registry: ModuleRegistry) -> Iterator[LoadUnits]:
    loaders: list[UnitLoader] = []

    def _load(units: dict[str, str]) -> UnitLoader:
        loader = UnitLoader([write_units(tmp_path / f"build{len(loaders)}", units)], registry=registry)
        loaders.append(loader)
        loader.load_all()
        return loader

    yield _load
    for loader in loaders:
        loader.unload()
