"""Configuration loading and validation."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .runtime import DEFAULT_GLOBAL_NAME

LOGGER = logging.getLogger(__name__)

CONFIG_ENV_VAR = "GLOBAL_MODULE_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.config/global-module/config.yaml")
DEFAULT_LOG_LEVEL = "info"


class ConfigError(ValueError):
    """Raised when configuration is invalid or missing."""


@dataclass(frozen=True)
class LoggingConfig:
    """Logging-related configuration."""

    level: str = DEFAULT_LOG_LEVEL
    file: Path | None = None


@dataclass(frozen=True)
class Config:
    """Fully parsed configuration."""

    global_name: str = DEFAULT_GLOBAL_NAME
    units: list[Path] = field(default_factory=list)
    externals: dict[str, str] = field(default_factory=dict)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: Path | str | None = None) -> Config:
    """Load and validate configuration from YAML.

    A missing file is an error only when its location was given explicitly
    (argument or environment); otherwise defaults apply.
    """

    config_path, explicit = _resolve_config_path(path)
    if not config_path.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {config_path}")
        LOGGER.debug("No config at %s; using defaults.", config_path)
        return Config()

    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    if not isinstance(raw, dict):
        raise ConfigError("Configuration root must be a mapping.")

    return _parse_config(raw, config_path.parent)


def _resolve_config_path(explicit: Path | str | None) -> tuple[Path, bool]:
    if explicit:
        return Path(explicit).expanduser(), True
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser(), True
    return DEFAULT_CONFIG_PATH.expanduser(), False


def _parse_config(raw: dict[str, Any], base_dir: Path) -> Config:
    return Config(
        global_name=_parse_global_name(raw.get("global_name")),
        units=_parse_units(raw.get("units"), base_dir),
        externals=_parse_externals(raw.get("externals")),
        logging=_parse_logging(raw.get("logging"), base_dir),
    )


def _parse_global_name(value: Any) -> str:
    if value is None:
        return DEFAULT_GLOBAL_NAME
    if not isinstance(value, str) or not value.isidentifier():
        raise ConfigError("global_name must be a valid Python identifier.")
    return value


def _parse_units(value: Any, base_dir: Path) -> list[Path]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError("units must be a list.")

    paths: list[Path] = []
    for idx, entry in enumerate(value, start=1):
        if not isinstance(entry, str) or not entry.strip():
            raise ConfigError(f"units[{idx}] must be a string path.")
        paths.append(_resolve_path(entry, base_dir))
    return paths


def _parse_externals(value: Any) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError("externals must be a mapping of module id to Python module.")

    externals: dict[str, str] = {}
    for module_id, target in value.items():
        if not isinstance(module_id, str) or not module_id:
            raise ConfigError(f"externals key {module_id!r} must be a non-empty string.")
        if not isinstance(target, str) or not target.strip():
            raise ConfigError(f"externals['{module_id}'] must name an importable module.")
        externals[module_id] = target.strip()
    return externals


def _parse_logging(value: Any, base_dir: Path) -> LoggingConfig:
    if value is None:
        return LoggingConfig()
    if not isinstance(value, dict):
        raise ConfigError("logging must be a mapping.")
    level = str(value.get("level", DEFAULT_LOG_LEVEL)).lower()
    file_value = value.get("file")
    if file_value is None:
        return LoggingConfig(level=level)
    if not isinstance(file_value, str) or not file_value.strip():
        raise ConfigError("logging.file must be a string path.")
    return LoggingConfig(level=level, file=_resolve_path(file_value, base_dir))


def _resolve_path(value: str, base_dir: Path) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    return path


__all__ = [
    "CONFIG_ENV_VAR",
    "Config",
    "ConfigError",
    "LoggingConfig",
    "load_config",
]
