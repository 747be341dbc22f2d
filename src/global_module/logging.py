"""Logging setup for the runtime and its command line."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .config import ConfigError, LoggingConfig

FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


class ConsoleFormatter(logging.Formatter):
    """Prefix each line with a level symbol, coloured on terminals."""

    SYMBOLS: dict[int, tuple[str, str]] = {
        logging.DEBUG: ("D", "\x1b[36m"),
        logging.INFO: ("I", "\x1b[32m"),
        logging.WARNING: ("!", "\x1b[33m"),
        logging.ERROR: ("X", "\x1b[31m"),
        logging.CRITICAL: ("X", "\x1b[35m"),
    }
    RESET = "\x1b[0m"

    def __init__(self, use_color: bool) -> None:
        super().__init__("%(message)s")
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        symbol, color = self.SYMBOLS.get(record.levelno, ("?", "\x1b[37m"))
        message = super().format(record)
        if not self.use_color:
            return f"{symbol} {message}"
        return f"{color}{symbol}{self.RESET} {message}"


def configure_logging(logging_config: LoggingConfig) -> None:
    """Route log records to stderr and, when configured, a rotating file."""

    level = level_from_string(logging_config.level)
    handlers: list[logging.Handler] = [_console_handler()]
    if logging_config.file is not None:
        handlers.append(_file_handler(logging_config.file))

    logging.basicConfig(level=level, handlers=handlers, force=True)


def level_from_string(level: str) -> int:
    try:
        return LEVELS[level.strip().upper()]
    except KeyError as exc:
        raise ConfigError(f"Unknown log level: {level}") from exc


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    stream = getattr(handler, "stream", None)
    use_color = bool(getattr(stream, "isatty", lambda: False)())
    handler.setFormatter(ConsoleFormatter(use_color))
    return handler


def _file_handler(path: Path) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(path, maxBytes=5_000_000, backupCount=5, encoding="utf-8")
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler


__all__ = ["ConsoleFormatter", "configure_logging", "level_from_string"]
