"""
In-memory blob store.

Behaves like a container for tests and local dry runs: copies and deletes
take effect immediately, and every operation is recorded in ``operations``.
"""

import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from blobs.records import ListingItem, ListingKind
from validation.errors import PermanentError


@dataclass
class StoredBlob:
    """Blob content and metadata held by InMemoryBlobStore."""
    data: bytes
    last_modified: Optional[datetime]


class InMemoryBlobStore:
    """Dict-backed container implementing the BlobStore protocol.

    Args:
        container: Container name
        clock: Callable returning the "now" used for copied blobs' timestamps
    """

    def __init__(self, container: str, clock=None):
        self._container = container
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._blobs: dict[str, StoredBlob] = {}
        self._directories: list[str] = []
        self._lock = threading.Lock()
        self.public_access = False
        self.operations: list[tuple[str, str]] = []

    @property
    def container(self) -> str:
        return self._container

    def put(self, name: str, data: bytes, last_modified: Optional[datetime] = None) -> None:
        """Add or replace a blob."""
        with self._lock:
            self._blobs[name] = StoredBlob(data, last_modified or self._clock())

    def add_directory(self, name: str) -> None:
        """Add a virtual directory marker to the listing."""
        with self._lock:
            self._directories.append(name)

    def get(self, name: str) -> Optional[StoredBlob]:
        with self._lock:
            return self._blobs.get(name)

    def names(self) -> list[str]:
        with self._lock:
            return list(self._blobs)

    def list_items(self) -> list[ListingItem]:
        with self._lock:
            items = [
                ListingItem(ListingKind.BLOB, name, blob.last_modified, len(blob.data))
                for name, blob in self._blobs.items()
            ]
            items.extend(
                ListingItem(ListingKind.DIRECTORY, name) for name in self._directories
            )
        return items

    def copy_from(self, source: "InMemoryBlobStore", name: str) -> None:
        blob = source.get(name)
        if blob is None:
            raise PermanentError(f"Blob {name!r} not found", container=source.container, blob_name=name)
        with self._lock:
            self._blobs[name] = StoredBlob(blob.data, self._clock())
            self.operations.append(('copy', name))

    def delete(self, name: str) -> None:
        with self._lock:
            if name not in self._blobs:
                raise PermanentError(f"Blob {name!r} not found", container=self._container, blob_name=name)
            del self._blobs[name]
            self.operations.append(('delete', name))

    def set_public_access(self) -> None:
        with self._lock:
            self.public_access = True
            self.operations.append(('set_public_access', self._container))
