"""
Stats file decoder.

A shard's stats file is a flat run of 8-byte little-endian unsigned
integers; record i holds the counter for CacheField(i). ccache only ever
appends new counters, so the decoder is lenient in both directions:

  - records past the fields we know are ignored
  - a file shorter than the catalog leaves the missing fields at zero
  - trailing bytes that do not make up a whole record are ignored

Only a non-empty file too short to hold a single record is rejected.
"""

from __future__ import annotations

import os
import struct
from pathlib import Path
from typing import Iterator, NamedTuple, Union

from ccachetop.fields import FIELD_COUNT, CacheField, all_fields
from ccachetop.store import FieldStore

RECORD = struct.Struct("<Q")
RECORD_WIDTH = RECORD.size


class MalformedFile(ValueError):
    """A stats file whose bytes cannot be decoded at all."""

    def __init__(self, reason: str, path: Union[str, os.PathLike, None] = None):
        self.reason = reason
        self.path = path
        super().__init__(f"{path}: {reason}" if path is not None else reason)


class RawRecord(NamedTuple):
    field: CacheField
    value: int


def iter_records(data: bytes) -> Iterator[RawRecord]:
    """Yield one RawRecord per complete, known record in data."""
    if 0 < len(data) < RECORD_WIDTH:
        raise MalformedFile(f"truncated: {len(data)} byte(s), need at least {RECORD_WIDTH}")
    usable = min(len(data) // RECORD_WIDTH, FIELD_COUNT) * RECORD_WIDTH
    view = memoryview(data)[:usable]
    for field, (value,) in zip(all_fields(), RECORD.iter_unpack(view)):
        yield RawRecord(field, value)


def decode(data: bytes) -> FieldStore:
    store = FieldStore()
    for record in iter_records(data):
        store.set(record.field, record.value)
    return store


def encode(store: FieldStore) -> bytes:
    """Serialise a store into the on-disk layout (one record per known field)."""
    return b"".join(RECORD.pack(value) for _, value in store)


def read_file(path: Union[str, os.PathLike]) -> FieldStore:
    """Read and decode a single stats file. OSError propagates unchanged."""
    data = Path(path).read_bytes()
    try:
        return decode(data)
    except MalformedFile as exc:
        raise MalformedFile(exc.reason, path) from None
