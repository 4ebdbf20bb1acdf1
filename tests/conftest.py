"""Shared fixtures: synthetic ccache roots built with the real on-disk layout."""

import logging
from pathlib import Path

import pytest

from ccachetop.decoder import encode
from ccachetop.logging_setup import LOGGER_NAME
from ccachetop.store import FieldStore


def write_shard(root: Path, name: str, values=None, raw: bytes = None) -> Path:
    """Create <root>/<name>/stats from a {CacheField: value} mapping or raw bytes."""
    shard = root / name
    shard.mkdir(parents=True, exist_ok=True)
    path = shard / "stats"
    if raw is None:
        raw = encode(FieldStore.from_values(values or {}))
    path.write_bytes(raw)
    return path


@pytest.fixture
def cache_root(tmp_path):
    root = tmp_path / "ccache"
    root.mkdir()
    return root


@pytest.fixture
def shard_writer(cache_root):
    def _write(name, values=None, raw=None):
        return write_shard(cache_root, name, values, raw)
    return _write


@pytest.fixture(autouse=True)
def _detach_cli_log_handler():
    """Drop the stderr handler the CLI installs so it never outlives a test's capture."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if getattr(handler, "_ccachetop", False):
            logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
