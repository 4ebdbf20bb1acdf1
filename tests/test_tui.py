"""Tests for the command line front end."""

import io

from rich.console import Console

from ccachetop import data as D
from ccachetop import tui
from ccachetop.fields import CacheField
from ccachetop.store import FieldStore


def _console():
    return Console(record=True, width=120, force_terminal=False)


def _populate(shard_writer):
    shard_writer("0", {CacheField.CACHE_HIT_DIR: 30, CacheField.CACHE_HIT_CPP: 10,
                       CacheField.TO_CACHE: 40, CacheField.LINK: 2,
                       CacheField.NUM_FILES: 12, CacheField.TOTAL_SIZE: 2048})
    shard_writer("5", {CacheField.CACHE_HIT_DIR: 20})


def test_write_raw(shard_writer, cache_root):
    _populate(shard_writer)
    out = io.StringIO()
    tui.write_raw(D.read_dir(cache_root), out)
    lines = dict(line.split("\t") for line in out.getvalue().splitlines())
    assert lines["direct_cache_hit"] == "50"
    assert lines["preprocessed_cache_hit"] == "10"
    assert lines["cache_miss"] == "40"
    assert lines["cache_size_kibibyte"] == "2048"
    assert "stats_updated_timestamp" in lines
    assert "none" not in lines
    assert "obsolete_max_files" not in lines


def test_write_pretty(shard_writer, cache_root):
    _populate(shard_writer)
    console = _console()
    tui.write_pretty(D.read_dir(cache_root), console)
    text = console.export_text()
    assert "cache directory" in text
    assert "cache hit (direct)" in text
    assert "called for link" in text
    assert "2.0 MB" in text
    assert "60.00 %" in text
    assert "14 missing" in text
    # zero, non-headline counters are hidden
    assert "compile failed" not in text


def test_write_pretty_empty_cache(cache_root):
    console = _console()
    tui.write_pretty(D.read_dir(cache_root), console)
    text = console.export_text()
    assert "never" in text
    assert "0 bytes" in text


def test_render_counters_shows_deltas(cache_root):
    prev = D.CacheDirectory(root=cache_root, store=FieldStore.from_values({CacheField.TO_CACHE: 5}),
                            scanned=16, missing=16, unreadable=0, fetched_at=100.0)
    cur = D.CacheDirectory(root=cache_root, store=FieldStore.from_values({CacheField.TO_CACHE: 15}),
                           scanned=16, missing=16, unreadable=0, fetched_at=105.0)
    console = _console()
    console.print(tui.render_counters(cur, prev))
    text = console.export_text()
    assert "+10" in text
    assert "2.000/s" in text


def test_main_print_stats(shard_writer, cache_root, capsys):
    _populate(shard_writer)
    assert tui.main(["--dir", str(cache_root), "--print-stats"]) == 0
    out = capsys.readouterr().out
    assert "direct_cache_hit\t50" in out


def test_main_uses_ccache_dir(shard_writer, cache_root, capsys, monkeypatch):
    _populate(shard_writer)
    monkeypatch.setenv("CCACHE_DIR", str(cache_root))
    assert tui.main(["--print-stats", "--workers", "4"]) == 0
    assert "cache_miss\t40" in capsys.readouterr().out


def test_main_missing_root(tmp_path, capsys):
    assert tui.main(["--dir", str(tmp_path / "nope")]) == 1
    err = capsys.readouterr().err
    assert "does not exist" in err


def test_main_debug(shard_writer, cache_root, capsys):
    _populate(shard_writer)
    assert tui.main(["--dir", str(cache_root), "--debug"]) == 0
    assert "diagnostics" in capsys.readouterr().out


def test_main_monitor_once(shard_writer, cache_root, capsys):
    _populate(shard_writer)
    assert tui.main(["--dir", str(cache_root), "--monitor", "--once"]) == 0
    out = capsys.readouterr().out
    assert "COUNTERS" in out
    assert "STORAGE" in out


def test_parse_args_defaults():
    args = tui.parse_args([])
    assert args.mode == "pretty"
    assert args.dir is None
    assert tui.parse_args(["-s"]).mode == "pretty"
    assert tui.parse_args(["--print-stats"]).mode == "raw"


def test_main_inaccessible_root_exits_1(tmp_path, capsys):
    assert tui.main(["--dir", str(tmp_path / ("x" * 300)), "--print-stats"]) == 1
    err = capsys.readouterr().err
    assert err.startswith("ccachetop: cache directory cannot be accessed")
