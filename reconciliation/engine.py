"""
Sync engine orchestrator for two-container reconciliation.

Connects the pure planner to storage backends: list both containers,
build snapshots, plan actions, then execute them against the stores.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional, TYPE_CHECKING

from blobs.records import to_snapshot
from reconciliation.planner import Action, ActionKind, reconcile
from validation.errors import TransientError, classify_exception

if TYPE_CHECKING:
    from storage.base import BlobStore
    from validation.config import BlobSyncConfig

from shared.log import create_logger
_, log_debug, log_info, log_warn, _ = create_logger("Engine")


@dataclass
class SyncResult:
    """Result summary from one reconciliation pass.

    Attributes:
        source_count: Blobs listed in the source container (placeholders included)
        destination_count: Blobs listed in the destination container
        actions: Planned actions, in emission order
        copied_forward: COPY_FORWARD actions requested successfully
        copied_back: COPY_BACK actions requested successfully
        deleted: DELETE_FROM_SOURCE actions executed successfully
        failed: Actions that raised
        errors: Messages for failed actions
        dry_run: True if actions were planned but not executed
        duration: Wall-clock seconds for the whole pass
    """
    source_count: int = 0
    destination_count: int = 0
    actions: list[Action] = field(default_factory=list)
    copied_forward: int = 0
    copied_back: int = 0
    deleted: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)
    dry_run: bool = False
    duration: float = 0.0

    @property
    def executed(self) -> int:
        return self.copied_forward + self.copied_back + self.deleted


class SyncEngine:
    """Runs reconciliation passes between a source and a destination container.

    Args:
        source: BlobStore for the source container
        destination: BlobStore for the destination container
        config: Optional BlobSyncConfig (public_access, dry_run, max_workers)
    """

    def __init__(
        self,
        source: "BlobStore",
        destination: "BlobStore",
        config: Optional["BlobSyncConfig"] = None
    ):
        self.source = source
        self.destination = destination
        self.config = config

    @property
    def dry_run(self) -> bool:
        return bool(getattr(self.config, 'dry_run', False))

    @property
    def max_workers(self) -> int:
        try:
            return max(1, int(self.config.max_workers))
        except (AttributeError, ValueError, TypeError):
            return 4

    def run(self) -> SyncResult:
        """Run one reconciliation pass.

        Execution steps:
            1. Set public access on both containers (if configured)
            2. List both containers concurrently
            3. Build snapshots (drops virtual directories, parses metadata)
            4. Plan actions
            5. Execute actions concurrently (skipped in dry-run mode)

        Returns:
            SyncResult with counts and per-action errors

        Raises:
            StorageError: If setting permissions or listing fails
            InvalidInput, MalformedMetadata: If a listing can't be reconciled
        """
        started = time.monotonic()
        result = SyncResult(dry_run=self.dry_run)

        if getattr(self.config, 'public_access', False):
            self.source.set_public_access()
            self.destination.set_public_access()

        source_items, destination_items = self._fetch_listings()
        source_snapshot = to_snapshot(source_items)
        destination_snapshot = to_snapshot(destination_items)
        result.source_count = len(source_snapshot)
        result.destination_count = len(destination_snapshot)
        log_info(f"Listed {result.source_count} blobs in {self.source.container}, "
                 f"{result.destination_count} in {self.destination.container}")

        result.actions = reconcile(source_snapshot, destination_snapshot)
        log_info(f"Planned {len(result.actions)} actions")
        for action in result.actions:
            log_debug(f"Planned {action}")

        if result.dry_run:
            log_info("Dry-run mode (no actions executed)")
        elif result.actions:
            self._execute_all(result)

        result.duration = time.monotonic() - started
        return result

    def _fetch_listings(self):
        """List both containers concurrently; the two fetches are independent."""
        with ThreadPoolExecutor(max_workers=2) as pool:
            source_future = pool.submit(self.source.list_items)
            destination_future = pool.submit(self.destination.list_items)
            return source_future.result(), destination_future.result()

    def _execute_all(self, result: SyncResult) -> None:
        """Execute planned actions and tally outcomes into ``result``.

        Actions are independent, so they run concurrently. A failing action
        is recorded and the rest still run.
        """
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            outcomes = list(pool.map(self._execute_one, result.actions))

        for action, error in zip(result.actions, outcomes):
            if error is not None:
                result.failed += 1
                result.errors.append(error)
            elif action.kind is ActionKind.COPY_FORWARD:
                result.copied_forward += 1
            elif action.kind is ActionKind.COPY_BACK:
                result.copied_back += 1
            else:
                result.deleted += 1

    def _execute_one(self, action: Action) -> Optional[str]:
        """Execute one action against the stores.

        Returns:
            None on success, or an error message on failure
        """
        try:
            if action.kind is ActionKind.COPY_FORWARD:
                self.destination.copy_from(self.source, action.name)
            elif action.kind is ActionKind.COPY_BACK:
                self.source.copy_from(self.destination, action.name)
            else:
                self.source.delete(action.name)
            log_debug(f"Executed {action}")
            return None
        except Exception as e:
            kind = "transient" if classify_exception(e) is TransientError else "permanent"
            message = f"{action} failed ({kind}): {e}"
            log_warn(message)
            return message
