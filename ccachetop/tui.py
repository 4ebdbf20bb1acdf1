"""
ccachetop — ccache statistics without running ccache.

Usage:
    ccachetop                       # same summary as `ccache -s`
    ccachetop --print-stats         # machine-parsable id<TAB>value lines
    ccachetop --monitor --refresh 5 # live counter deltas
    ccachetop --debug               # per-shard diagnostics

The cache root is taken from --dir, else CCACHE_DIR, else ~/.ccache.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from datetime import datetime
from typing import Optional, TextIO

from rich import box
from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ccachetop import config, logging_setup
from ccachetop import data as D
from ccachetop.fields import CATALOG, DISPLAY_ORDER, CacheField, all_fields
from ccachetop.formatting import format_rate, format_size, format_timestamp
from ccachetop.store import FieldStore

logger = logging.getLogger(__name__)

# ── Palette ───────────────────────────────────────────────────────────────────

C_ACCENT   = "cyan"
C_TITLE    = "bold cyan"
C_OK       = "bright_green"
C_WARN     = "yellow"
C_ERR      = "bright_red"
C_MUTED    = "grey58"
C_DIM      = "grey42"
C_BORDER   = "grey35"


# ── Shared widgets ────────────────────────────────────────────────────────────

def _bar(pct: float, width: int = 18) -> Text:
    """Render a Unicode block progress bar, colour-coded by percentage."""
    clamped = max(0.0, min(100.0, pct))
    filled  = round(clamped / 100 * width)
    empty   = width - filled
    color   = C_OK if clamped < 60 else C_WARN if clamped < 80 else C_ERR
    t = Text()
    t.append("█" * filled, style=color)
    t.append("░" * empty,  style=C_DIM)
    return t


def _hit_color(rate: float) -> str:
    return C_OK if rate >= 50 else C_WARN if rate >= 20 else C_ERR


def _visible_fields(store: FieldStore) -> list[CacheField]:
    """Fields --show-stats prints: headline counters always, the rest when non-zero."""
    return [
        f for f in DISPLAY_ORDER
        if not CATALOG[f].hidden and (CATALOG[f].always or store.get(f))
    ]


# ── Summary (--show-stats) ────────────────────────────────────────────────────

def render_summary(cd: D.CacheDirectory) -> Table:
    tbl = Table(box=None, show_header=False, pad_edge=False)
    tbl.add_column("LABEL", style=C_MUTED, no_wrap=True, min_width=32)
    tbl.add_column("VALUE", style="white", no_wrap=True, justify="right")

    tbl.add_row("cache directory", Text(str(cd.root), style=C_ACCENT))
    tbl.add_row("stats updated", format_timestamp(int(cd.updated_at)))

    for f in _visible_fields(cd.store):
        tbl.add_row(f.label, cd.format_field(f))
        if f is CacheField.TO_CACHE:
            tbl.add_row("cache hit rate",
                        Text(f"{cd.hit_rate:.2f} %", style=_hit_color(cd.hit_rate)))

    if not cd.is_complete or cd.missing:
        tbl.add_row(
            "shards",
            Text(f"{cd.scanned - cd.missing - cd.unreadable}/{cd.scanned} read"
                 f"  {cd.missing} missing  {cd.unreadable} unreadable",
                 style=C_WARN if cd.unreadable else C_DIM),
        )
    return tbl


def write_pretty(cd: D.CacheDirectory, console: Optional[Console] = None) -> None:
    (console or Console()).print(render_summary(cd))


# ── Raw (--print-stats) ───────────────────────────────────────────────────────

def write_raw(cd: D.CacheDirectory, out: TextIO) -> None:
    """One `id<TAB>value` line per field, in on-disk order."""
    out.write(f"stats_updated_timestamp\t{int(cd.updated_at)}\n")
    for f in all_fields():
        if CATALOG[f].hidden:
            continue
        out.write(f"{f.key}\t{cd.get_field(f)}\n")


# ── Monitor panels ────────────────────────────────────────────────────────────

def render_header(cd: D.CacheDirectory, disk: Optional[D.DiskMetrics], now_str: str) -> Panel:
    row = Text()
    row.append("⚙  ccachetop", style=C_TITLE)
    row.append("   │   ", style=C_MUTED)
    row.append(str(cd.root), style=C_ACCENT)
    row.append("   │   hit rate ", style=C_MUTED)
    row.append(f"{cd.hit_rate:.1f}%", style=_hit_color(cd.hit_rate))
    if disk is not None:
        row.append("   │   disk ", style=C_MUTED)
        row.append(f"{disk.free_gb:.0f}G free", style="white")
    row.append(f"   │   {now_str}", style=C_MUTED)
    return Panel(row, style=C_BORDER, box=box.HORIZONTALS, padding=(0, 1))


def render_counters(cd: D.CacheDirectory, prev: Optional[D.CacheDirectory]) -> Panel:
    tbl = Table(box=None, show_header=True, pad_edge=False,
                header_style=C_DIM, expand=True)
    tbl.add_column("COUNTER", style=C_MUTED, no_wrap=True, min_width=28)
    tbl.add_column("VALUE",   style="white", no_wrap=True, justify="right")
    tbl.add_column("DELTA",   no_wrap=True,  justify="right")
    tbl.add_column("RATE",    style=C_DIM,   no_wrap=True, justify="right")

    changed = cd.store.changed_since(prev.store) if prev is not None else {}
    elapsed = cd.fetched_at - prev.fetched_at if prev is not None else 0.0

    for f in _visible_fields(cd.store):
        delta_txt = Text("")
        rate_txt = ""
        if f in changed and f is not CacheField.ZERO_TIMESTAMP:
            old, new = changed[f]
            diff = new - old
            delta_txt = Text(f"{diff:+d}", style=C_OK if diff > 0 else C_WARN)
            rate_txt = format_rate(diff, elapsed)
        tbl.add_row(f.label, cd.format_field(f), delta_txt, rate_txt)

    title = f"[{C_TITLE}]COUNTERS  [{C_MUTED}]{cd.hits + cd.misses} calls[/{C_MUTED}][/{C_TITLE}]"
    return Panel(tbl, title=title, border_style=C_BORDER, box=box.ROUNDED, padding=(0, 1))


def render_storage(cd: D.CacheDirectory, disk: Optional[D.DiskMetrics]) -> Panel:
    lines: list[Text] = []

    size_bytes = cd.get_field(CacheField.TOTAL_SIZE) * CATALOG[CacheField.TOTAL_SIZE].unit
    row = Text()
    row.append("  cache  ", style=C_MUTED)
    row.append(format_size(size_bytes), style="white")
    row.append(f"  {cd.get_field(CacheField.NUM_FILES)} files", style=C_DIM)
    lines.append(row)

    if disk is not None:
        row = Text()
        row.append("  disk   ", style=C_MUTED)
        row.append_text(_bar(disk.pct))
        row.append(f"  {disk.pct:5.1f}%", style=C_OK if disk.pct < 60 else C_WARN if disk.pct < 80 else C_ERR)
        row.append(f"  {disk.used_gb:.0f}G/{disk.total_gb:.0f}G", style=C_DIM)
        lines.append(row)

    lines.append(Text(""))
    shards = Text("  shards ", style=C_MUTED)
    for r in cd.shards:
        color = C_OK if r.status == D.OK else C_ERR if r.status == D.UNREADABLE else C_DIM
        shards.append(r.name, style=color)
    lines.append(shards)

    cleanups = Text()
    cleanups.append("  cleanups  ", style=C_MUTED)
    cleanups.append(str(cd.get_field(CacheField.NUM_CLEANUPS)), style=C_ACCENT)
    lines.append(cleanups)

    body = Text("\n").join([Text(""), *lines, Text("")])
    return Panel(body, title=f"[{C_TITLE}]STORAGE[/{C_TITLE}]",
                 border_style=C_BORDER, box=box.ROUNDED, padding=(0, 0))


def render_footer(refresh: float, last_ms: int) -> Panel:
    t = Text()
    t.append("  Ctrl+C", style=C_ACCENT)
    t.append(" to quit   ", style=C_MUTED)
    t.append("↻", style=C_DIM)
    t.append(f" refreshing every {refresh:.0f}s", style=C_MUTED)
    t.append(f"   last read: {last_ms}ms", style=C_DIM)
    return Panel(t, style=C_BORDER, box=box.HORIZONTALS, padding=(0, 0))


# ── Layout assembly ───────────────────────────────────────────────────────────

def build_layout() -> Layout:
    root = Layout(name="root")
    root.split_column(
        Layout(name="header", size=3),
        Layout(name="body"),
        Layout(name="footer", size=3),
    )
    root["body"].split_row(
        Layout(name="counters", ratio=3),
        Layout(name="storage",  ratio=2),
    )
    return root


def update_layout(layout: Layout, cd: D.CacheDirectory, prev: Optional[D.CacheDirectory],
                  disk: Optional[D.DiskMetrics], refresh: float, last_ms: int) -> None:
    now_str = datetime.now().strftime("%H:%M:%S")
    layout["header"].update(render_header(cd, disk, now_str))
    layout["footer"].update(render_footer(refresh, last_ms))
    layout["body"]["counters"].update(render_counters(cd, prev))
    layout["body"]["storage"].update(render_storage(cd, disk))


def _timed_read(root, workers: int) -> tuple[D.CacheDirectory, int]:
    t0 = time.monotonic()
    cd = D.read_dir(root, max_workers=workers)
    return cd, int((time.monotonic() - t0) * 1000)


def run_monitor(root, workers: int, refresh: float, once: bool, console: Console) -> None:
    layout = build_layout()
    cd, last_ms = _timed_read(root, workers)
    update_layout(layout, cd, None, D.fetch_disk(root), refresh, last_ms)

    if once:
        console.print(layout)
        return

    try:
        with Live(layout, console=console, refresh_per_second=2,
                  screen=True, vertical_overflow="visible") as live:
            while True:
                time.sleep(refresh)
                new_cd, last_ms = _timed_read(root, workers)
                update_layout(layout, new_cd, cd, D.fetch_disk(root), refresh, last_ms)
                live.refresh()
                cd = new_cd
    except KeyboardInterrupt:
        pass  # clean exit on Ctrl+C


# ── Diagnostics (--debug) ─────────────────────────────────────────────────────

def run_debug(root, console: Console) -> None:
    """Print a diagnostic table: checks the root and each shard, with timing/errors."""
    console.print()
    console.print(Text("⚙  ccachetop — diagnostics", style=C_TITLE))
    console.print(Text("Checking each stats file…\n", style=C_MUTED))

    tbl = Table(box=box.ROUNDED, border_style=C_BORDER, show_header=True,
                header_style=C_DIM, expand=True)
    tbl.add_column("SOURCE",  style="white",  no_wrap=True, min_width=20)
    tbl.add_column("STATUS",  no_wrap=True,   width=10)
    tbl.add_column("TIME",    style=C_MUTED,  width=8, justify="right")
    tbl.add_column("DETAIL",  style=C_DIM,    ratio=3)
    tbl.add_column("ERROR",   style=C_ERR,    ratio=2)

    for r in D.run_diagnostics(root):
        status = Text("✓  ok", style=C_OK) if r["ok"] else Text("✗  fail", style=C_ERR)
        tbl.add_row(r["label"], status, f"{r['elapsed_ms']}ms",
                    r["detail"] or "—",
                    r["error"] or "")

    console.print(tbl)
    console.print()
    console.print(Text("All data is read from local files — no ccache process is spawned.", style=C_MUTED))
    console.print()


# ── Entry point ───────────────────────────────────────────────────────────────

def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="ccachetop",
        description="ccachetop — read ccache statistics without running ccache",
    )
    mode = p.add_mutually_exclusive_group()
    mode.add_argument("-s", "--show-stats", dest="mode", action="store_const", const="pretty",
                      help="Show summary of statistics counters in human-readable format (default)")
    mode.add_argument("--print-stats", dest="mode", action="store_const", const="raw",
                      help="Print statistics counter IDs and values in machine-parsable format")
    mode.add_argument("--monitor", dest="mode", action="store_const", const="monitor",
                      help="Live view of counter changes")
    mode.add_argument("--debug", dest="mode", action="store_const", const="debug",
                      help="Run diagnostics on each stats file, then exit")
    p.add_argument("--dir", metavar="PATH", default=None,
                   help="Cache root (default: $CCACHE_DIR or ~/.ccache)")
    p.add_argument("--workers", type=int, default=config.default_workers(),
                   metavar="N", help="Read shards on N threads (default: 1)")
    p.add_argument("--refresh", type=float, default=5.0,
                   metavar="SECS", help="Monitor refresh interval in seconds (default: 5)")
    p.add_argument("--once", action="store_true",
                   help="With --monitor, render a single snapshot and exit")
    p.add_argument("--log-level", default=config.log_level(),
                   metavar="LEVEL", help="Log level for diagnostics on stderr (default: WARNING)")
    p.set_defaults(mode="pretty")
    return p.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    logging_setup.configure(args.log_level)

    root = args.dir or config.cache_dir()
    console = Console()
    logger.debug("using cache root %s", root)

    try:
        if args.mode == "debug":
            run_debug(root, console)
        elif args.mode == "monitor":
            run_monitor(root, max(1, args.workers), args.refresh, args.once, console)
        elif args.mode == "raw":
            write_raw(D.read_dir(root, max_workers=max(1, args.workers)), sys.stdout)
        else:
            write_pretty(D.read_dir(root, max_workers=max(1, args.workers)), console)
    except D.DirectoryError as exc:
        print(f"ccachetop: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
