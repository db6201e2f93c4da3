# utils/logging.py

"""Logging helpers for Promptline."""

from __future__ import annotations

import logging
import logging.handlers
import os

import structlog
from rich.console import Console
from rich.logging import RichHandler

from config import settings

__all__ = ["setup_logging"]

_NOISY_LOGGERS = ("httpx", "httpcore")


def _plain_formatter() -> logging.Formatter:
    return logging.Formatter(settings.LOG_FORMAT, datefmt=settings.LOG_DATE_FORMAT)


def _console_handler(level: int) -> logging.Handler:
    if settings.ENABLE_RICH_LOGGING:
        # stderr keeps stdout free for prompt results
        return RichHandler(
            level=level,
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_path=False,
            markup=False,
        )
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(_plain_formatter())
    return handler


def _file_handler(path: str, level: int) -> logging.Handler:
    log_dir = os.path.dirname(path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(_plain_formatter())
    return handler


def setup_logging(level: str | None = None, log_file: str | None = None) -> None:
    """Route structlog through standard logging for one CLI process.

    ``level`` and ``log_file`` default to the configured settings. An
    unwritable log file raises ``OSError``.
    """
    numeric_level = logging.getLevelName((level or settings.LOG_LEVEL_STR).upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level or settings.LOG_LEVEL_STR}")

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.format_exc_info,
            structlog.stdlib.render_to_log_kwargs,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(numeric_level)
    root_logger.addHandler(_console_handler(numeric_level))
    log_file = log_file or settings.LOG_FILE
    if log_file:
        root_logger.addHandler(_file_handler(log_file, numeric_level))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    structlog.get_logger(__name__).debug(
        "Logging configured",
        level=logging.getLevelName(numeric_level),
        log_file=log_file,
    )
