"""Small shared helpers: list editing, logging and common errors."""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import Iterable

LOGGER_NAME = "illabuilder"
LOG_LEVEL_ENV = "ILLA_LOG_LEVEL"

# Numeric levels follow the zap convention: -1 debug, 0 info, 1 warn,
# 2 error, 3 and above are fatal-class levels.
_LEVELS = {
    -1: logging.DEBUG,
    0: logging.INFO,
    1: logging.WARNING,
    2: logging.ERROR,
}


class RecordNotFoundError(LookupError):
    """Raised when a stored record cannot be found."""


def delete_element(items: Iterable[int], element: int) -> list[int]:
    """Return a copy of ``items`` with the first occurrence of ``element`` removed.

    When ``element`` is absent the first item is removed, and an empty
    input gives an empty list.
    """
    result = list(items)
    if not result:
        return result
    position = result.index(element) if element in result else 0
    del result[position]
    return result


class _JsonFormatter(logging.Formatter):
    """Formats records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "level": record.levelname.lower(),
            "ts": record.created,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def _level_for(value: int) -> int:
    if value < -1:
        return logging.DEBUG
    return _LEVELS.get(value, logging.CRITICAL)


def get_logger() -> logging.Logger:
    """Return the package logger, levelled by the ILLA_LOG_LEVEL variable."""
    raw = os.environ.get(LOG_LEVEL_ENV, "").strip() or "0"
    try:
        level = int(raw)
    except ValueError as exc:
        raise ValueError(f"invalid {LOG_LEVEL_ENV} value: {raw!r}") from exc

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(_level_for(level))
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(_JsonFormatter())
        logger.addHandler(handler)
        logger.propagate = False
    return logger