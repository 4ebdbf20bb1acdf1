"""Logging bootstrap for the ccachetop command line tools."""

from __future__ import annotations

import logging

LOGGER_NAME = "ccachetop"

_FORMAT = "[%(name)s] %(levelname)s %(message)s"


def _parse_level(raw: str) -> int:
    level = logging.getLevelName(str(raw or "WARNING").strip().upper())
    return level if isinstance(level, int) else logging.WARNING


def configure(level: str = "WARNING") -> logging.Logger:
    """Attach a single stderr handler to the package logger. Safe to call twice."""
    logger = logging.getLogger(LOGGER_NAME)
    resolved = _parse_level(level)
    logger.setLevel(resolved)
    if not any(getattr(h, "_ccachetop", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._ccachetop = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    for handler in logger.handlers:
        handler.setLevel(resolved)
    return logger
