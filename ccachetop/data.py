"""
ccachetop data layer — reads ccache's stats files directly.

ccache shards its statistics across 16 subdirectories of the cache root:
  <root>/0/stats … <root>/f/stats
Each file is decoded on its own and folded into one FieldStore for the
whole cache. No ccache process is spawned and nothing is ever written
back to the cache directory.
"""

from __future__ import annotations

import logging
import os
import stat
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

import psutil

from ccachetop.decoder import MalformedFile, decode
from ccachetop.fields import CacheField
from ccachetop.store import FieldStore

logger = logging.getLogger(__name__)

SHARD_NAMES: tuple[str, ...] = tuple("0123456789abcdef")
STATS_FILENAME = "stats"

OK = "ok"
MISSING = "missing"
UNREADABLE = "unreadable"


# ── Errors ────────────────────────────────────────────────────────────────────

class DirectoryError(OSError):
    """The cache root itself could not be used."""

    def __init__(self, message: str, root: Union[str, os.PathLike]):
        self.root = Path(root)
        super().__init__(f"{message}: {root}")


class RootNotFound(DirectoryError):
    def __init__(self, root: Union[str, os.PathLike]):
        super().__init__("cache directory does not exist", root)


class RootNotReadable(DirectoryError):
    def __init__(self, root: Union[str, os.PathLike], reason: str = "cannot be listed"):
        super().__init__(f"cache directory {reason}", root)


# ── Data models ───────────────────────────────────────────────────────────────

@dataclass
class ShardResult:
    name:   str
    status: str                      # ok | missing | unreadable
    store:  Optional[FieldStore]
    mtime:  float = 0.0              # stats file mtime, 0 when absent
    error:  str = ""
    elapsed_ms: int = 0


@dataclass
class CacheDirectory:
    root:       Path
    store:      FieldStore
    scanned:    int
    missing:    int
    unreadable: int
    shards:     list[ShardResult] = field(default_factory=list)
    updated_at: float = 0.0          # newest stats file mtime
    fetched_at: float = field(default_factory=time.time)

    def get_field(self, f: CacheField) -> int:
        return self.store.get(f)

    def format_field(self, f: CacheField) -> str:
        return f.format_value(self.store.get(f))

    @property
    def hits(self) -> int:
        return self.get_field(CacheField.CACHE_HIT_DIR) + self.get_field(CacheField.CACHE_HIT_CPP)

    @property
    def misses(self) -> int:
        return self.get_field(CacheField.TO_CACHE)

    @property
    def hit_rate(self) -> float:
        """Cache hits as a percentage of hits + misses, 0.0 with no calls yet."""
        calls = self.hits + self.misses
        return round(self.hits / calls * 100, 2) if calls else 0.0

    @property
    def is_complete(self) -> bool:
        """True when no shard file was unreadable."""
        return self.unreadable == 0


@dataclass
class DiskMetrics:
    path:     str
    pct:      float
    used_gb:  float
    total_gb: float
    free_gb:  float


# ── Shard scanning ────────────────────────────────────────────────────────────

def _scan_shard(root: Path, name: str) -> ShardResult:
    """Read one shard's stats file. Never raises for per-shard problems."""
    path = root / name / STATS_FILENAME
    t0 = time.monotonic()

    def _elapsed() -> int:
        return int((time.monotonic() - t0) * 1000)

    try:
        mtime = path.stat().st_mtime
        data = path.read_bytes()
    except (FileNotFoundError, NotADirectoryError):
        logger.debug("no stats file in shard %s", name)
        return ShardResult(name, MISSING, None, elapsed_ms=_elapsed())
    except OSError as exc:
        logger.warning("cannot read %s: %s", path, exc)
        return ShardResult(name, UNREADABLE, None, error=str(exc), elapsed_ms=_elapsed())

    try:
        store = decode(data)
    except MalformedFile as exc:
        logger.warning("malformed stats file %s: %s", path, exc.reason)
        return ShardResult(name, UNREADABLE, None, mtime=mtime, error=exc.reason,
                           elapsed_ms=_elapsed())
    return ShardResult(name, OK, store, mtime=mtime, elapsed_ms=_elapsed())


def _check_root(root: Path) -> set[str]:
    try:
        st = root.stat()
    except (FileNotFoundError, NotADirectoryError) as exc:
        raise RootNotFound(root) from exc
    except OSError as exc:
        raise RootNotReadable(root, f"cannot be accessed ({exc.strerror or exc})") from exc
    if not stat.S_ISDIR(st.st_mode):
        raise RootNotReadable(root, "is not a directory")
    try:
        return set(os.listdir(root))
    except OSError as exc:
        raise RootNotReadable(root, f"cannot be listed ({exc.strerror or exc})") from exc


# ── Aggregation ───────────────────────────────────────────────────────────────

def read_dir(root: Union[str, os.PathLike], max_workers: int = 1) -> CacheDirectory:
    """
    Aggregate every shard's stats file under root into one CacheDirectory.

    Missing and unreadable shards are counted, not raised; only a root that
    does not exist, cannot be stat'ed or cannot be listed raises
    (RootNotFound/RootNotReadable).
    With max_workers > 1 shards are read on a thread pool, each worker
    producing its own store that is merged here.
    """
    root = Path(root)
    entries = _check_root(root)

    results: list[ShardResult] = []
    present = [name for name in SHARD_NAMES if name in entries]
    for name in SHARD_NAMES:
        if name not in entries:
            results.append(ShardResult(name, MISSING, None))

    if max_workers > 1 and len(present) > 1:
        with ThreadPoolExecutor(max_workers=min(max_workers, len(present))) as pool:
            futures = [pool.submit(_scan_shard, root, name) for name in present]
            for future in as_completed(futures):
                results.append(future.result())
    else:
        results.extend(_scan_shard(root, name) for name in present)

    results.sort(key=lambda r: SHARD_NAMES.index(r.name))

    total = FieldStore()
    missing = unreadable = 0
    updated_at = 0.0
    for r in results:
        if r.status == OK and r.store is not None:
            total.merge(r.store)
        elif r.status == MISSING:
            missing += 1
        else:
            unreadable += 1
        updated_at = max(updated_at, r.mtime)

    if missing or unreadable:
        logger.info("read %s: %d shard(s) missing, %d unreadable", root, missing, unreadable)

    return CacheDirectory(
        root       = root,
        store      = total,
        scanned    = len(results),
        missing    = missing,
        unreadable = unreadable,
        shards     = results,
        updated_at = updated_at,
    )


# ── Disk usage ────────────────────────────────────────────────────────────────

def fetch_disk(path: Union[str, os.PathLike]) -> Optional[DiskMetrics]:
    """Usage of the filesystem holding path, or None when it cannot be stat'ed."""
    try:
        disk = psutil.disk_usage(str(path))
    except OSError:
        return None
    return DiskMetrics(
        path     = str(path),
        pct      = disk.percent,
        used_gb  = disk.used  / 1e9,
        total_gb = disk.total / 1e9,
        free_gb  = disk.free  / 1e9,
    )


# ── Diagnostics ───────────────────────────────────────────────────────────────

def run_diagnostics(root: Union[str, os.PathLike]) -> list[dict]:
    """
    Check the cache root and each shard individually and report what was found.
    Used by the --debug flag in tui.py.
    """
    root = Path(root)
    report: list[dict] = []

    t0 = time.monotonic()
    try:
        entries = _check_root(root)
    except DirectoryError as exc:
        report.append({"label": "cache root", "ok": False,
                       "elapsed_ms": int((time.monotonic() - t0) * 1000),
                       "detail": "", "error": str(exc)[:120]})
        return report
    report.append({"label": "cache root", "ok": True,
                   "elapsed_ms": int((time.monotonic() - t0) * 1000),
                   "detail": f"{root}  ({len(entries)} entries)", "error": ""})

    for name in SHARD_NAMES:
        r = _scan_shard(root, name)
        if r.status == OK and r.store is not None:
            calls = sum(r.store.get(f) for f in (CacheField.CACHE_HIT_DIR,
                                                 CacheField.CACHE_HIT_CPP,
                                                 CacheField.TO_CACHE))
            detail = f"{calls} call(s)  {r.store.get(CacheField.NUM_FILES)} file(s)"
        else:
            detail = r.status
        report.append({"label": f"shard {name}/{STATS_FILENAME}",
                       "ok": r.status != UNREADABLE,
                       "elapsed_ms": r.elapsed_ms,
                       "detail": detail, "error": r.error[:120]})
    return report
