"""
Environment-driven settings for the ccachetop CLI.

The reader itself takes an explicit cache root; this module only decides
which root the command line tools look at when none is given.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path


DEFAULT_WORKERS = 1
DEFAULT_LOG_LEVEL = "WARNING"


def cache_dir() -> Path:
    """Resolve the ccache root the same way ccache itself does."""
    override = os.environ.get("CCACHE_DIR", "").strip()
    if override:
        return Path(override).expanduser()
    legacy = Path.home() / ".ccache"
    if legacy.exists():
        return legacy
    xdg = os.environ.get("XDG_CACHE_HOME", "").strip()
    xdg_dir = (Path(xdg).expanduser() if xdg else Path.home() / ".cache") / "ccache"
    if xdg_dir.exists():
        return xdg_dir
    return legacy


def default_workers() -> int:
    raw = os.environ.get("CCACHETOP_WORKERS", "").strip()
    if not raw:
        return DEFAULT_WORKERS
    try:
        return max(1, int(raw))
    except ValueError:
        return DEFAULT_WORKERS


def log_level() -> str:
    raw = os.environ.get("CCACHETOP_LOG_LEVEL", "").strip().upper()
    if raw and isinstance(logging.getLevelName(raw), int):
        return raw
    return DEFAULT_LOG_LEVEL
