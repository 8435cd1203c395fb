"""Centralized logging configuration."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Iterable, Optional, Union

CONSOLE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Library loggers that flood DEBUG/INFO with per-query or per-update lines
NOISY_LOGGERS = ("aiosqlite", "aiogram.event", "aiohttp.access")


class ColoredFormatter(logging.Formatter):
    """Console formatter that tints the level name with ANSI colours."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        # Tint a copy; the file handler formats the same record uncoloured
        tinted = logging.makeLogRecord(record.__dict__)
        color = self.LEVEL_COLORS.get(record.levelno)
        if color:
            tinted.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(tinted)


def resolve_level(level: Union[int, str]) -> int:
    """Translate a level name such as ``"debug"`` into its numeric value.

    Unknown names fall back to INFO rather than failing startup.
    """
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else logging.INFO


def _console_handler(level: int, colored: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    formatter_class = ColoredFormatter if colored else logging.Formatter
    handler.setFormatter(formatter_class(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _file_handler(log_file: str, level: int) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def quiet_loggers(names: Iterable[str] = NOISY_LOGGERS, floor: int = logging.WARNING) -> None:
    """Raise third-party loggers to at least ``floor``."""
    for name in names:
        library_logger = logging.getLogger(name)
        library_logger.setLevel(max(library_logger.level, floor))


def setup_logger(
    name: Optional[str] = None,
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    colored: bool = True
) -> logging.Logger:
    """Configure and return a logger instance.

    Args:
        name: Logger name, ``None`` configures the root logger so every
            module logger obtained through ``get_logger`` inherits handlers
        level: Logging level or level name (``LOG_LEVEL``)
        log_file: Optional file path (``LOG_FILE``); parent dirs are created
        colored: Whether to use colored output for console

    Returns:
        Configured logger instance
    """
    level = resolve_level(level)
    logger = logging.getLogger(name)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_console_handler(level, colored))
    if log_file:
        logger.addHandler(_file_handler(log_file, level))

    if name is None:
        quiet_loggers()
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger by name."""
    return logging.getLogger(name)
