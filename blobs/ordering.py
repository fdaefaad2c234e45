"""
Configurable ordering over blob records.

Produces three-way comparators (-1, 0, 1) by name, last-modified time or
length, ascending or descending. Used to present listings and to keep
test expectations stable across environments.
"""

import functools
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Union

from blobs.records import MAX_INSTANT, parse_length, parse_timestamp
from validation.errors import InvalidInput, NotComparable

Comparator = Callable[[Any, Any], int]


class SortColumn(Enum):
    """Columns a blob listing can be sorted on."""
    NAME = "Name"
    LAST_MODIFIED = "LastModified"
    LENGTH = "Length"


def _resolve_column(column: Union[SortColumn, str]) -> SortColumn:
    if isinstance(column, SortColumn):
        return column
    for candidate in SortColumn:
        if column == candidate.value:
            return candidate
    raise InvalidInput(f"Can't sort on column {column!r}")


def _column_value(record: Any, column: SortColumn):
    """Extract the comparable value of ``column`` from a record.

    Strings are parsed with the same rules BlobRecord uses, so loosely
    typed records compare the same way as parsed ones.
    """
    if column is SortColumn.NAME:
        name = getattr(record, 'name', None)
        if not isinstance(name, str):
            raise NotComparable(f"Can't compare {type(record).__name__} by name")
        return name

    if column is SortColumn.LAST_MODIFIED:
        if not hasattr(record, 'last_modified'):
            raise NotComparable(f"Can't compare {type(record).__name__} by last-modified")
        # Missing date = pending, aborted or failed upload: newest possible
        return parse_timestamp(record.last_modified) or MAX_INSTANT

    if not hasattr(record, 'length_bytes'):
        raise NotComparable(f"Can't compare {type(record).__name__} by length")
    return parse_length(record.length_bytes)


class BlobComparer:
    """Three-way comparator over blob records.

    None is treated as the lowest value, then the sort direction is applied.

    Args:
        column: SortColumn or its name ("Name", "LastModified", "Length")
        ascending: Sort direction (default: True)

    Raises:
        InvalidInput: If the column isn't supported

    Usage:
        comparer = BlobComparer("LastModified", ascending=False)
        records.sort(key=functools.cmp_to_key(comparer))
    """

    def __init__(self, column: Union[SortColumn, str] = SortColumn.NAME, ascending: bool = True):
        self.column = _resolve_column(column)
        self.ascending = ascending

    def __call__(self, first: Optional[Any], second: Optional[Any]) -> int:
        return self.compare(first, second)

    def compare(self, first: Optional[Any], second: Optional[Any]) -> int:
        if first is None and second is None:
            return 0
        if first is None:
            return self._apply_direction(-1)
        if second is None:
            return self._apply_direction(1)

        a = _column_value(first, self.column)
        b = _column_value(second, self.column)
        return self._apply_direction((a > b) - (a < b))

    def _apply_direction(self, result: int) -> int:
        return result if self.ascending else -result

    def __repr__(self) -> str:
        direction = "ascending" if self.ascending else "descending"
        return f"BlobComparer({self.column.value}, {direction})"


def make_comparator(column: Union[SortColumn, str], ascending: bool = True) -> Comparator:
    """Build a three-way comparator for the given column and direction."""
    return BlobComparer(column, ascending)


def sort_blobs(records: Iterable[Any], column: Union[SortColumn, str] = SortColumn.NAME,
               ascending: bool = True) -> list:
    """Return a new list of records ordered by ``column`` (stable)."""
    comparer = make_comparator(column, ascending)
    return sorted(records, key=functools.cmp_to_key(comparer))
