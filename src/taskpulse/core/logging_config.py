"""Application-wide logging configuration."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Iterable

from .paths import ensure_app_structure, log_path

ROOT_LOGGER_NAME = "taskpulse"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(threadName)s] %(message)s"
CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"
DEFAULT_LOG_LEVEL = logging.INFO

_configured = False


class EventFormatter(logging.Formatter):
    """Append the ``event`` tag passed through ``extra`` to each line."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        event = getattr(record, "event", None)
        if event:
            return f"{line} event={event}"
        return line


def _file_handler() -> logging.Handler:
    handler = RotatingFileHandler(log_path(), maxBytes=5_000_000, backupCount=5, encoding="utf-8", delay=True)
    handler.setFormatter(EventFormatter(LOG_FORMAT))
    return handler


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(EventFormatter(CONSOLE_FORMAT))
    handler.setLevel(logging.WARNING)
    return handler


def normalize_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def configure_logging(
    level: int | str = DEFAULT_LOG_LEVEL,
    *,
    console: bool = False,
    extra_handlers: Iterable[logging.Handler] | None = None,
) -> logging.Logger:
    """Configure the shared ``taskpulse`` logger once and return it.

    Later calls only adjust the level. The file handler writes to the
    application data directory; ``console`` adds a stderr handler for
    warnings and above.
    """
    global _configured
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    numeric_level = normalize_level(level)
    if _configured:
        logger.setLevel(numeric_level)
        return logger

    ensure_app_structure()
    logger.setLevel(numeric_level)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handlers = [_file_handler()]
    if console:
        handlers.append(_console_handler())
    handlers.extend(extra_handlers or ())
    for handler in handlers:
        logger.addHandler(handler)

    logging.captureWarnings(True)
    _configured = True
    logger.info(
        "Logging initialized",
        extra={"event": "logging_configured", "level": logging.getLevelName(numeric_level)},
    )
    return logger


def reset_logging() -> logging.Logger:
    """Close every handler on the shared logger so it can be configured again."""
    global _configured
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        try:
            handler.close()
        finally:
            logger.removeHandler(handler)
    logger.propagate = True
    _configured = False
    return logger
