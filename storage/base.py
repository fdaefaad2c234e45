"""Storage backend contract consumed by the sync engine."""
from typing import Protocol, runtime_checkable

from blobs.records import ListingItem


@runtime_checkable
class BlobStore(Protocol):
    """One object-storage container (bucket).

    Implementations enumerate every entry, including virtual directory
    markers (the engine filters them), and treat copy as fire-and-forget:
    returning means the copy was requested, not that it finished.
    """

    @property
    def container(self) -> str:
        """Container name, used in logs and error messages."""
        ...

    def list_items(self) -> list[ListingItem]:
        """List every entry in the container."""
        ...

    def copy_from(self, source: "BlobStore", name: str) -> None:
        """Request a server-side copy of blob ``name`` from ``source`` into this container."""
        ...

    def delete(self, name: str) -> None:
        """Delete blob ``name`` from this container."""
        ...

    def set_public_access(self) -> None:
        """Allow anonymous read access to the blobs in this container."""
        ...
