"""
Blob metadata records and snapshot construction.

A snapshot is the list of BlobRecords built from one container listing.
Timestamps and lengths are parsed here, once, so that comparison and
reconciliation code only ever sees datetimes and ints.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from enum import Enum
from typing import Any, Iterable, Optional, Union

from validation.errors import InvalidInput, MalformedMetadata

# Stand-in for a missing timestamp when ordering by date
MAX_INSTANT = datetime.max.replace(tzinfo=timezone.utc)


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse a last-modified value into an aware UTC-comparable datetime.

    Accepts ISO-8601 ("2024-01-02", "2024-01-02T10:00:00Z") and RFC-1123
    ("Tue, 02 Jan 2024 10:00:00 GMT"). Naive values are taken as UTC.

    Returns:
        datetime, or None when the value is missing (None or empty string)

    Raises:
        MalformedMetadata: If the value is present but can't be parsed
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            # Replace Z with +00:00 for fromisoformat
            parsed = datetime.fromisoformat(text.replace('Z', '+00:00'))
        except ValueError:
            try:
                parsed = parsedate_to_datetime(text)
            except (TypeError, ValueError, IndexError) as e:
                raise MalformedMetadata(f"Unparsable timestamp: {value!r}") from e
    else:
        raise MalformedMetadata(f"Unsupported timestamp type {type(value).__name__}: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_length(value: Union[str, int, None]) -> int:
    """Parse a blob length into a non-negative int.

    None and empty string mean "unknown" and become 0.

    Raises:
        MalformedMetadata: If the value is non-numeric or negative
    """
    if value is None:
        return 0

    # bool is an int subclass; True is not a length
    if isinstance(value, bool):
        raise MalformedMetadata(f"Invalid length: {value!r}")

    if isinstance(value, int):
        length = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            length = int(text)
        except ValueError as e:
            raise MalformedMetadata(f"Non-numeric length: {value!r}") from e
    else:
        raise MalformedMetadata(f"Unsupported length type {type(value).__name__}: {value!r}")

    if length < 0:
        raise MalformedMetadata(f"Negative length: {value!r}")
    return length


@dataclass(frozen=True)
class BlobRecord:
    """Snapshot of one blob's identity and metadata.

    String timestamps and lengths are parsed on construction.

    Attributes:
        name: Blob name, the unique key within a container
        last_modified: Last modification instant (None = pending/unknown)
        length_bytes: Size in bytes (0 = placeholder, never synced)
    """
    name: str
    last_modified: Optional[datetime] = None
    length_bytes: int = 0

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise InvalidInput(f"Blob name must be a non-empty string, got {self.name!r}")
        object.__setattr__(self, 'last_modified', parse_timestamp(self.last_modified))
        object.__setattr__(self, 'length_bytes', parse_length(self.length_bytes))

    @property
    def is_placeholder(self) -> bool:
        """Zero-length entries (virtual directories, empty markers) never sync."""
        return self.length_bytes == 0

    def __str__(self) -> str:
        modified = self.last_modified.isoformat() if self.last_modified else ''
        return f"Name: {self.name} LastModified: {modified} Length: {self.length_bytes}"


class ListingKind(Enum):
    """Kind of entry returned by a container listing."""
    BLOB = "blob"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class ListingItem:
    """Raw listing entry as reported by a storage backend.

    Values are kept as the backend reported them; to_snapshot() turns
    the BLOB entries into BlobRecords.
    """
    kind: ListingKind
    name: str
    last_modified: Any = None
    length: Any = None


def to_snapshot(items: Iterable[ListingItem]) -> list[BlobRecord]:
    """Build a snapshot from listing items, dropping virtual directories.

    Args:
        items: Listing items in backend order

    Returns:
        List of BlobRecord in the same order

    Raises:
        MalformedMetadata: If any blob carries an unparsable timestamp or length
    """
    return [
        BlobRecord(item.name, item.last_modified, item.length)
        for item in items
        if item.kind is ListingKind.BLOB
    ]


def index_by_name(snapshot: Iterable[BlobRecord]) -> dict[str, BlobRecord]:
    """Index a snapshot by blob name, preserving snapshot order.

    Raises:
        InvalidInput: If two records share a name
    """
    index: dict[str, BlobRecord] = {}
    for record in snapshot:
        if record.name in index:
            raise InvalidInput(f"Duplicate blob name in snapshot: {record.name!r}")
        index[record.name] = record
    return index
