"""
FieldStore: dense, fixed-size counter storage indexed by CacheField.

Backed by a single array('Q') of FIELD_COUNT unsigned 64-bit slots, so a
store costs 8 bytes per known field no matter how many are non-zero.
"""

from __future__ import annotations

from array import array
from typing import Iterable, Iterator, Mapping

from ccachetop.fields import CATALOG, FIELD_COUNT, CacheField, all_fields
from ccachetop.formatting import U64_MAX, FormatTag


def _slot(field: CacheField) -> int:
    """Bounds-checked slot lookup; plain ints must name a known field."""
    return int(CacheField(field))


def _check_u64(value: int) -> int:
    if not 0 <= value <= U64_MAX:
        raise ValueError(f"counter value out of range: {value}")
    return value


# Slots merged with max() rather than a saturating sum.
_MAX_MERGE_SLOTS = frozenset(
    int(f) for f, info in CATALOG.items() if info.format_tag is FormatTag.UNIX_TIME
)


class FieldStore:
    __slots__ = ("_values",)

    def __init__(self) -> None:
        self._values = array("Q", bytes(8 * FIELD_COUNT))

    @classmethod
    def from_values(cls, values: Mapping[CacheField, int]) -> FieldStore:
        store = cls()
        for field, value in values.items():
            store.set(field, value)
        return store

    def get(self, field: CacheField) -> int:
        return self._values[_slot(field)]

    def set(self, field: CacheField, value: int) -> None:
        self._values[_slot(field)] = _check_u64(value)

    def accumulate(self, field: CacheField, delta: int) -> None:
        """Add delta to a counter, saturating at U64_MAX."""
        slot = _slot(field)
        self._values[slot] = min(self._values[slot] + _check_u64(delta), U64_MAX)

    def merge(self, other: FieldStore) -> None:
        """Fold every slot of other into this store.

        Counters are added with saturation; UNIX_TIME slots (ZERO_TIMESTAMP)
        keep the later of the two timestamps instead of their sum.
        """
        mine, theirs = self._values, other._values
        for slot in range(FIELD_COUNT):
            if slot in _MAX_MERGE_SLOTS:
                mine[slot] = max(mine[slot], theirs[slot])
            else:
                mine[slot] = min(mine[slot] + theirs[slot], U64_MAX)

    def copy(self) -> FieldStore:
        clone = FieldStore()
        clone._values = array("Q", self._values)
        return clone

    def changed_since(self, older: FieldStore) -> dict[CacheField, tuple[int, int]]:
        """Fields whose value differs from older, as {field: (old, new)}."""
        return {
            field: (old, new)
            for field, old, new in zip(all_fields(), older._values, self._values)
            if old != new
        }

    def to_dict(self) -> dict[str, int]:
        return {field.key: value for field, value in self}

    def __iter__(self) -> Iterator[tuple[CacheField, int]]:
        return zip(all_fields(), self._values)

    def __len__(self) -> int:
        return FIELD_COUNT

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FieldStore):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        nonzero = ", ".join(f"{f.name}={v}" for f, v in self if v)
        return f"FieldStore({nonzero})"


def merge_all(stores: Iterable[FieldStore]) -> FieldStore:
    total = FieldStore()
    for store in stores:
        total.merge(store)
    return total
