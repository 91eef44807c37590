"""
kernel/logging_service.py - Built-in logging capability

Log levels are the standard library names. The .NET-style names used by
older kernel specs (Information, Trace, ...) are accepted as aliases.
"""

from __future__ import annotations
from typing import Optional
import logging

from .services import LoggingService

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_LEVEL_ALIASES = {
    "TRACE": "DEBUG",
    "INFORMATION": "INFO",
    "WARN": "WARNING",
    "FATAL": "CRITICAL",
}


def parse_log_level(value: str) -> str:
    """
    Normalize a log level name.

    Args:
        value: Level name, any case

    Returns:
        One of LOG_LEVELS

    Raises:
        ValueError: If the name is unknown
    """
    name = str(value).strip().upper()
    name = _LEVEL_ALIASES.get(name, name)
    if name not in LOG_LEVELS:
        raise ValueError(f"Unknown log level {value!r}; expected one of {', '.join(LOG_LEVELS)}")
    return name


class ConsoleLoggingService(LoggingService):
    """Applies the minimum severity to the root logger."""

    def __init__(self):
        self._min_level: Optional[str] = None

    @property
    def min_level(self) -> Optional[str]:
        return self._min_level

    def set_min_level(self, level: str) -> None:
        if self._min_level is not None:
            raise RuntimeError(f"Minimum log level already set to {self._min_level}")

        self._min_level = parse_log_level(level)
        logging.getLogger().setLevel(getattr(logging, self._min_level))

    def get_logger(self, name: str) -> logging.Logger:
        return logging.getLogger(name)
