"""Read ccache's statistics straight from its cache directory."""

from ccachetop.data import (
    CacheDirectory,
    DirectoryError,
    RootNotFound,
    RootNotReadable,
    read_dir,
)
from ccachetop.decoder import MalformedFile, decode, read_file
from ccachetop.fields import CacheField, all_fields, format_of, slot_of
from ccachetop.formatting import FormatTag, format_value
from ccachetop.store import FieldStore

__version__ = "0.2.0"

__all__ = [
    "CacheDirectory",
    "CacheField",
    "DirectoryError",
    "FieldStore",
    "FormatTag",
    "MalformedFile",
    "RootNotFound",
    "RootNotReadable",
    "all_fields",
    "decode",
    "format_of",
    "format_value",
    "read_dir",
    "read_file",
    "slot_of",
]
