"""
Field catalog: every counter ccache keeps in a shard's stats file.

The member value of CacheField is both its slot in a FieldStore and its
record position in the on-disk file, mirroring ccache's own enum
(ccache.h). New ccache counters are appended, never renumbered.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from ccachetop.formatting import FormatTag, format_value


class CacheField(enum.IntEnum):
    NONE                  = 0
    STDOUT                = 1   # compiler produced stdout
    STATUS                = 2   # compile failed
    ERROR                 = 3   # ccache internal error
    TO_CACHE              = 4   # cache miss
    PREPROCESSOR          = 5   # preprocessor error
    COMPILER              = 6   # couldn't find the compiler
    MISSING               = 7   # cache file missing
    CACHE_HIT_CPP         = 8   # preprocessed cache hit
    ARGS                  = 9   # bad compiler arguments
    LINK                  = 10  # called for link
    NUM_FILES             = 11
    TOTAL_SIZE            = 12  # KiB
    OBSOLETE_MAX_FILES    = 13
    OBSOLETE_MAX_SIZE     = 14  # KiB
    SOURCE_LANG           = 15
    BAD_OUTPUT_FILE       = 16
    NO_INPUT              = 17
    MULTIPLE              = 18
    CONF_TEST             = 19
    UNSUPPORTED_OPTION    = 20
    OUT_STDOUT            = 21
    CACHE_HIT_DIR         = 22  # direct cache hit
    NO_OUTPUT             = 23
    EMPTY_OUTPUT          = 24
    BAD_EXTRA_FILE        = 25
    COMP_CHECK            = 26
    CANT_USE_PCH          = 27
    PREPROCESSING         = 28
    NUM_CLEANUPS          = 29
    UNSUPPORTED_DIRECTIVE = 30
    ZERO_TIMESTAMP        = 31

    @property
    def slot(self) -> int:
        return int(self)

    @property
    def info(self) -> FieldInfo:
        return CATALOG[self]

    @property
    def key(self) -> str:
        return CATALOG[self].key

    @property
    def label(self) -> str:
        return CATALOG[self].label

    @property
    def format_tag(self) -> FormatTag:
        return CATALOG[self].format_tag

    def format_value(self, raw: int) -> str:
        """Render a raw counter value for display, scaled by the field's unit."""
        info = CATALOG[self]
        return format_value(info.format_tag, raw * info.unit)


@dataclass(frozen=True)
class FieldInfo:
    key:        str                 # --print-stats id
    label:      str                 # --show-stats label
    format_tag: FormatTag = FormatTag.RAW
    unit:       int = 1             # bytes per raw unit (BYTE_SIZE only)
    always:     bool = False        # shown by --show-stats even when zero
    hidden:     bool = False        # never shown by --show-stats


_F = CacheField

CATALOG: Mapping[CacheField, FieldInfo] = MappingProxyType({
    _F.NONE:                  FieldInfo("none", "none", hidden=True),
    _F.STDOUT:                FieldInfo("compiler_produced_stdout", "compiler produced stdout"),
    _F.STATUS:                FieldInfo("compile_failed", "compile failed"),
    _F.ERROR:                 FieldInfo("internal_error", "ccache internal error"),
    _F.TO_CACHE:              FieldInfo("cache_miss", "cache miss", always=True),
    _F.PREPROCESSOR:          FieldInfo("preprocessor_error", "preprocessor error"),
    _F.COMPILER:              FieldInfo("could_not_find_compiler", "couldn't find the compiler"),
    _F.MISSING:               FieldInfo("missing_cache_file", "cache file missing"),
    _F.CACHE_HIT_CPP:         FieldInfo("preprocessed_cache_hit", "cache hit (preprocessed)", always=True),
    _F.ARGS:                  FieldInfo("bad_compiler_arguments", "bad compiler arguments"),
    _F.LINK:                  FieldInfo("called_for_link", "called for link"),
    _F.NUM_FILES:             FieldInfo("files_in_cache", "files in cache", always=True),
    _F.TOTAL_SIZE:            FieldInfo("cache_size_kibibyte", "cache size", FormatTag.BYTE_SIZE,
                                        unit=1024, always=True),
    _F.OBSOLETE_MAX_FILES:    FieldInfo("obsolete_max_files", "max files", hidden=True),
    _F.OBSOLETE_MAX_SIZE:     FieldInfo("obsolete_max_size", "max cache size", FormatTag.BYTE_SIZE,
                                        unit=1024, hidden=True),
    _F.SOURCE_LANG:           FieldInfo("unsupported_source_language", "unsupported source language"),
    _F.BAD_OUTPUT_FILE:       FieldInfo("bad_output_file", "could not write to output file"),
    _F.NO_INPUT:              FieldInfo("no_input_file", "no input file"),
    _F.MULTIPLE:              FieldInfo("multiple_source_files", "multiple source files"),
    _F.CONF_TEST:             FieldInfo("autoconf_test", "autoconf compile/link"),
    _F.UNSUPPORTED_OPTION:    FieldInfo("unsupported_compiler_option", "unsupported compiler option"),
    _F.OUT_STDOUT:            FieldInfo("output_to_stdout", "output to stdout"),
    _F.CACHE_HIT_DIR:         FieldInfo("direct_cache_hit", "cache hit (direct)", always=True),
    _F.NO_OUTPUT:             FieldInfo("compiler_produced_no_output", "compiler produced no output"),
    _F.EMPTY_OUTPUT:          FieldInfo("compiler_produced_empty_output", "compiler produced empty output"),
    _F.BAD_EXTRA_FILE:        FieldInfo("error_hashing_extra_file", "error hashing extra file"),
    _F.COMP_CHECK:            FieldInfo("compiler_check_failed", "compiler check failed"),
    _F.CANT_USE_PCH:          FieldInfo("could_not_use_precompiled_header", "can't use precompiled header"),
    _F.PREPROCESSING:         FieldInfo("called_for_preprocessing", "called for preprocessing"),
    _F.NUM_CLEANUPS:          FieldInfo("cleanups_performed", "cleanups performed", always=True),
    _F.UNSUPPORTED_DIRECTIVE: FieldInfo("unsupported_code_directive", "unsupported code directive"),
    _F.ZERO_TIMESTAMP:        FieldInfo("stats_zeroed_timestamp", "stats zeroed", FormatTag.UNIX_TIME,
                                        always=True),
})

FIELD_COUNT = len(CacheField)

_ALL_FIELDS: tuple[CacheField, ...] = tuple(sorted(CacheField))
_BY_KEY: Mapping[str, CacheField] = MappingProxyType({info.key: f for f, info in CATALOG.items()})

# Order in which `ccache -s` lists the counters.
DISPLAY_ORDER: tuple[CacheField, ...] = (
    _F.ZERO_TIMESTAMP,
    _F.CACHE_HIT_DIR,
    _F.CACHE_HIT_CPP,
    _F.TO_CACHE,
    _F.LINK,
    _F.PREPROCESSING,
    _F.MULTIPLE,
    _F.STDOUT,
    _F.NO_OUTPUT,
    _F.EMPTY_OUTPUT,
    _F.STATUS,
    _F.ERROR,
    _F.PREPROCESSOR,
    _F.CANT_USE_PCH,
    _F.COMPILER,
    _F.MISSING,
    _F.ARGS,
    _F.SOURCE_LANG,
    _F.COMP_CHECK,
    _F.CONF_TEST,
    _F.UNSUPPORTED_OPTION,
    _F.UNSUPPORTED_DIRECTIVE,
    _F.OUT_STDOUT,
    _F.BAD_OUTPUT_FILE,
    _F.NO_INPUT,
    _F.BAD_EXTRA_FILE,
    _F.NUM_CLEANUPS,
    _F.NUM_FILES,
    _F.TOTAL_SIZE,
)


def slot_of(field: CacheField) -> int:
    return int(field)


def format_of(field: CacheField) -> FormatTag:
    return CATALOG[field].format_tag


def info_of(field: CacheField) -> FieldInfo:
    return CATALOG[field]


def all_fields() -> tuple[CacheField, ...]:
    """All known fields in slot order."""
    return _ALL_FIELDS


def field_by_key(key: str) -> CacheField:
    """Look a field up by its --print-stats id. Raises KeyError if unknown."""
    return _BY_KEY[key]
