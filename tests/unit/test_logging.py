from __future__ import annotations

import logging
from collections.abc import Iterator
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from global_module.config import ConfigError, LoggingConfig
from global_module.logging import ConsoleFormatter, configure_logging, level_from_string


@pytest.fixture()
def restore_root_logger() -> Iterator[logging.Logger]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.parametrize(
    "value, expected",
    [("debug", logging.DEBUG), (" Warn ", logging.WARNING), ("CRITICAL", logging.CRITICAL)],
)
def test_level_from_string(value: str, expected: int) -> None:
    assert level_from_string(value) == expected


def test_unknown_level_is_config_error() -> None:
    with pytest.raises(ConfigError, match="Unknown log level: loud"):
        level_from_string("loud")


def test_console_formatter_symbols() -> None:
    record = logging.LogRecord("x", logging.WARNING, __file__, 1, "careful", None, None)

    assert ConsoleFormatter(use_color=False).format(record) == "! careful"
    assert ConsoleFormatter(use_color=True).format(record).endswith("\x1b[0m careful")


def test_configure_logging_with_file(
    tmp_path: Path, restore_root_logger: logging.Logger
) -> None:
    log_path = tmp_path / "logs" / "runtime.log"

    configure_logging(LoggingConfig(level="debug", file=log_path))
    logging.getLogger("global_module.test").debug("registered %s", "app.js")

    root = restore_root_logger
    assert root.level == logging.DEBUG
    file_handlers = [h for h in root.handlers if isinstance(h, RotatingFileHandler)]
    assert len(file_handlers) == 1
    file_handlers[0].flush()
    assert "registered app.js" in log_path.read_text(encoding="utf-8")
