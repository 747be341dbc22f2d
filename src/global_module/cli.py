"""Global module command-line interface."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any, NoReturn

import typer

from . import __version__
from .config import Config, ConfigError, load_config
from .errors import RegistryError
from .loader import UnitLoader, register_externals
from .logging import configure_logging
from .runtime import get_registry

app = typer.Typer(help="Global module registry runtime utilities.")
LOGGER = logging.getLogger(__name__)


@dataclass
class CLIState:
    """Stores shared CLI options."""

    config_path: Path | None


@app.callback()
def _global_module(
    ctx: typer.Context,
    config: Annotated[
        Path | None,
        typer.Option(
            "-c",
            "--config",
            help="Path to config (env GLOBAL_MODULE_CONFIG or ~/.config/global-module/config.yaml).",
        ),
    ] = None,
) -> None:
    """Capture global CLI options."""

    ctx.obj = CLIState(config_path=config.expanduser() if config else None)


@app.command()
def run(
    ctx: typer.Context,
    units: Annotated[
        list[Path] | None,
        typer.Argument(help="Unit files or directories (defaults to config 'units')."),
    ] = None,
) -> None:
    """Evaluate units in order and list the modules they registered."""

    config = _load_config(_state(ctx).config_path)
    try:
        configure_logging(config.logging)
    except ConfigError as exc:
        _config_failure(exc)

    paths = list(units) if units else config.units
    if not paths:
        typer.secho("No units given and none configured.", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    registry = get_registry()
    loader = UnitLoader(paths, registry=registry, global_name=config.global_name)
    try:
        register_externals(registry, config.externals)
        loaded = loader.load_all()
        summary = registry.snapshot()
    except (RegistryError, ImportError) as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from exc
    finally:
        loader.unload()

    typer.echo("→ Global Module Runtime")
    typer.echo(f"Units evaluated: {len(loaded)}")
    _echo_table("Modules", summary["modules"])
    _echo_table("Externals", summary["externals"])


@app.command()
def version() -> None:
    """Print the installed package version."""

    typer.echo(__version__)


def _echo_table(title: str, entries: dict[str, dict[str, Any]]) -> None:
    typer.echo("")
    typer.echo(f"{title}:")
    if not entries:
        typer.echo("  (none)")
        return
    for module_id, info in sorted(entries.items()):
        exports = ", ".join(info["exports"]) or "-"
        typer.echo(f"  - {module_id} [{info['origin']}]: {exports}")


def _state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise RuntimeError("CLI state missing from context.")
    return state


def _load_config(path: Path | None) -> Config:
    try:
        return load_config(path)
    except ConfigError as exc:
        _config_failure(exc)


def _config_failure(exc: ConfigError) -> NoReturn:
    typer.secho(f"Configuration error: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(2) from exc


def main() -> None:  # pragma: no cover - delegated to Typer
    app()


__all__ = ["app", "main"]
