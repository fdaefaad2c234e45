"""Reconciliation planner: diff two container snapshots into sync actions."""
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from blobs.records import BlobRecord, index_by_name


class ActionKind(Enum):
    """What to do with a blob to converge the two containers."""
    COPY_FORWARD = "copy_forward"               # source -> destination
    COPY_BACK = "copy_back"                     # destination -> source
    DELETE_FROM_SOURCE = "delete_from_source"


@dataclass(frozen=True)
class Action:
    """One copy or delete operation the caller must execute.

    Attributes:
        kind: ActionKind
        name: Blob name, present in at least one input snapshot
    """
    kind: ActionKind
    name: str

    @classmethod
    def copy_forward(cls, name: str) -> 'Action':
        return cls(ActionKind.COPY_FORWARD, name)

    @classmethod
    def copy_back(cls, name: str) -> 'Action':
        return cls(ActionKind.COPY_BACK, name)

    @classmethod
    def delete_from_source(cls, name: str) -> 'Action':
        return cls(ActionKind.DELETE_FROM_SOURCE, name)

    def __str__(self) -> str:
        return f"{self.kind.value}({self.name})"


def needs_copy(source: BlobRecord, destination: BlobRecord) -> bool:
    """Check if a blob present in both containers should be copied forward.

    A missing timestamp on either side means a new (pending) file, which
    always syncs. Otherwise the source must be strictly newer.
    """
    if source.last_modified is None or destination.last_modified is None:
        return True
    return source.last_modified > destination.last_modified


def reconcile(
    source_snapshot: Iterable[BlobRecord],
    destination_snapshot: Iterable[BlobRecord]
) -> list[Action]:
    """Compute the actions that converge the source and destination containers.

    Source-driven actions come first, in source snapshot order:
    - Present in both, source newer (or either date missing): COPY_FORWARD
    - Present in both, source not newer: nothing
    - Present only in source: DELETE_FROM_SOURCE (removed downstream)

    Then destination-only blobs, in destination snapshot order: COPY_BACK.

    Zero-length records are dropped before matching. Names match exactly
    (case-sensitive). No two emitted actions depend on each other, so the
    caller may execute them in any order or concurrently.

    Args:
        source_snapshot: BlobRecords listed from the source container
        destination_snapshot: BlobRecords listed from the destination container

    Returns:
        Ordered list of Action

    Raises:
        InvalidInput: If a name appears twice within one snapshot
    """
    source_index = index_by_name(source_snapshot)
    destination_index = index_by_name(destination_snapshot)

    # Destination blobs not yet matched by a source blob
    remaining = {
        name: record
        for name, record in destination_index.items()
        if not record.is_placeholder
    }

    actions: list[Action] = []

    for name, source in source_index.items():
        if source.is_placeholder:
            continue

        destination = remaining.pop(name, None)
        if destination is None:
            actions.append(Action.delete_from_source(name))
        elif needs_copy(source, destination):
            actions.append(Action.copy_forward(name))

    for name in remaining:
        actions.append(Action.copy_back(name))

    return actions


def summarize_actions(actions: Iterable[Action]) -> dict[str, int]:
    """Count actions per kind, keyed by ActionKind value (all kinds present)."""
    counts = {kind.value: 0 for kind in ActionKind}
    for action in actions:
        counts[action.kind.value] += 1
    return counts
