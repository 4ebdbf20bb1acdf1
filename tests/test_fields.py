"""Tests for the field catalog."""

import pytest

from ccachetop.fields import (
    CATALOG,
    DISPLAY_ORDER,
    FIELD_COUNT,
    CacheField,
    all_fields,
    field_by_key,
    format_of,
    info_of,
    slot_of,
)
from ccachetop.formatting import FormatTag


def test_slots_are_a_bijection_onto_range():
    slots = sorted(slot_of(f) for f in all_fields())
    assert slots == list(range(FIELD_COUNT))
    assert FIELD_COUNT == 32


def test_all_fields_in_slot_order():
    fields = all_fields()
    assert [f.slot for f in fields] == list(range(FIELD_COUNT))
    assert fields[0] is CacheField.NONE
    assert fields[-1] is CacheField.ZERO_TIMESTAMP


def test_every_field_has_catalog_entry():
    assert set(CATALOG) == set(CacheField)
    assert len({info.key for info in CATALOG.values()}) == FIELD_COUNT


def test_catalog_is_read_only():
    with pytest.raises(TypeError):
        CATALOG[CacheField.NONE] = None


def test_well_known_positions():
    assert CacheField.TO_CACHE == 4
    assert CacheField.CACHE_HIT_CPP == 8
    assert CacheField.TOTAL_SIZE == 12
    assert CacheField.CACHE_HIT_DIR == 22
    assert CacheField.ZERO_TIMESTAMP == 31


def test_format_tags():
    assert format_of(CacheField.TOTAL_SIZE) is FormatTag.BYTE_SIZE
    assert format_of(CacheField.ZERO_TIMESTAMP) is FormatTag.UNIX_TIME
    assert format_of(CacheField.CACHE_HIT_DIR) is FormatTag.RAW
    assert CacheField.LINK.format_tag is FormatTag.RAW


def test_cache_size_is_stored_in_kibibytes():
    assert info_of(CacheField.TOTAL_SIZE).unit == 1024
    assert CacheField.TOTAL_SIZE.format_value(1024) == "1.0 MB"
    assert CacheField.TOTAL_SIZE.format_value(0) == "0 bytes"


def test_field_format_value():
    assert CacheField.CACHE_HIT_DIR.format_value(42) == "42"
    assert CacheField.ZERO_TIMESTAMP.format_value(0) == "never"


def test_field_by_key():
    assert field_by_key("direct_cache_hit") is CacheField.CACHE_HIT_DIR
    assert field_by_key("cache_size_kibibyte") is CacheField.TOTAL_SIZE
    with pytest.raises(KeyError):
        field_by_key("no_such_counter")


def test_display_order_has_no_duplicates_or_hidden_fields():
    assert len(set(DISPLAY_ORDER)) == len(DISPLAY_ORDER)
    assert not any(CATALOG[f].hidden for f in DISPLAY_ORDER)
