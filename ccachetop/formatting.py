"""
Value formatting for ccache counters.

Every raw counter is an unsigned 64-bit integer; the format tag attached
to its field decides how it is shown:
  RAW        → plain decimal
  BYTE_SIZE  → binary-scaled size with ccache's unit names ("1.0 MB")
  UNIX_TIME  → local calendar time, or "never" for the zero sentinel
"""

from __future__ import annotations

import enum
import time


U64_MAX = 2 ** 64 - 1

NEVER = "never"

# ccache labels binary multiples with the decimal-looking names.
_SIZE_UNITS = ("kB", "MB", "GB", "TB", "PB", "EB")


class FormatTag(enum.Enum):
    RAW = "raw"
    BYTE_SIZE = "byte_size"
    UNIX_TIME = "unix_time"


def format_size(num_bytes: int) -> str:
    """Scale a byte count into the largest unit with magnitude >= 1.

    A value that would round up to 1024.0 moves to the next unit.
    """
    if num_bytes < 1024:
        return f"{num_bytes} bytes"
    value = float(num_bytes)
    unit = _SIZE_UNITS[0]
    for unit in _SIZE_UNITS:
        value /= 1024
        if round(value, 1) < 1024:
            break
    return f"{value:.1f} {unit}"


def format_timestamp(seconds: int) -> str:
    if seconds == 0:
        return NEVER
    try:
        return time.strftime("%c", time.localtime(seconds))
    except (OverflowError, OSError, ValueError):
        # Beyond what the platform's time_t can represent.
        return str(seconds)


def format_value(tag: FormatTag, raw: int) -> str:
    if tag is FormatTag.BYTE_SIZE:
        return format_size(raw)
    if tag is FormatTag.UNIX_TIME:
        return format_timestamp(raw)
    return str(raw)


def format_rate(delta: int, seconds: float) -> str:
    """Per-second rate of a counter delta, as shown by the monitor."""
    if seconds <= 0:
        return "—"
    return f"{delta / seconds:.3f}/s"
