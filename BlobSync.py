#!/usr/bin/env python3
"""
BlobSync - keep two object-storage containers converged

Entry point. Loads configuration, builds the storage stores and sync
engine, then either runs one pass, prints status, lists a container, or
loops running a pass whenever the configured interval has elapsed.
"""

import argparse
import json
import os
import sys
import time
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Callable, Optional

from blobs.ordering import SortColumn, sort_blobs
from blobs.records import to_snapshot
from reconciliation.engine import SyncEngine, SyncResult
from reconciliation.scheduler import ReconciliationScheduler
from shared.log import configure_logging, create_logger
from validation.config import BlobSyncConfig, load_config

log_trace, log_debug, log_info, log_warn, log_error = create_logger()


def get_state_dir(config: BlobSyncConfig) -> str:
    """Get or create the directory holding persisted scheduler state."""
    state_dir = config.state_dir
    os.makedirs(state_dir, exist_ok=True)
    return state_dir


def build_engine(config: BlobSyncConfig) -> SyncEngine:
    """Create the S3 stores for both containers and wire them into an engine."""
    from storage.s3 import create_store

    source = create_store(config.source)
    destination = create_store(config.destination)
    return SyncEngine(source, destination, config)


def log_summary(result: SyncResult) -> None:
    log_info("=== Sync Summary ===")
    log_info(f"Blobs listed: {result.source_count} source, {result.destination_count} destination")
    log_info(f"Actions planned: {len(result.actions)}")
    if result.dry_run:
        log_info("Dry-run mode (no actions executed)")
    else:
        log_info(f"  Copied to destination: {result.copied_forward}")
        log_info(f"  Copied back to source: {result.copied_back}")
        log_info(f"  Deleted from source: {result.deleted}")
        if result.failed:
            log_warn(f"  Failed: {result.failed}")
    log_info(f"Duration: {result.duration:.2f}s")


def handle_sync(engine: SyncEngine, scheduler: ReconciliationScheduler) -> Optional[SyncResult]:
    """
    Run one reconciliation pass and record the outcome.

    Any error escaping the pass is logged and recorded, never raised, so a
    long-running loop survives a bad pass and retries on the next tick.

    Returns:
        SyncResult, or None if the pass aborted
    """
    log_info(f"Starting sync: {engine.source.container} <-> {engine.destination.container}")
    try:
        result = engine.run()
    except Exception as e:
        log_error(f"Sync pass failed: {type(e).__name__}: {e}")
        scheduler.record_failure(e)
        return None

    scheduler.record_run(result)
    log_summary(result)
    for err in result.errors:
        log_warn(f"Error during sync: {err}")
    return result


def maybe_auto_sync(config: BlobSyncConfig, engine: SyncEngine,
                    scheduler: ReconciliationScheduler) -> Optional[SyncResult]:
    """Run a pass if the configured interval has elapsed."""
    if not config.enabled or config.sync_interval == 'never':
        return None

    if not scheduler.is_due(config.sync_interval):
        return None

    log_info(f"Auto-sync: interval trigger ({config.sync_interval})")
    return handle_sync(engine, scheduler)


def run_loop(config: BlobSyncConfig, engine: SyncEngine, scheduler: ReconciliationScheduler,
             sleep: Callable[[float], None] = time.sleep,
             max_ticks: Optional[int] = None) -> None:
    """Tick every poll_seconds, running a pass whenever one is due.

    Args:
        sleep: Sleep function (injectable for tests)
        max_ticks: Stop after this many ticks (default: run forever)
    """
    log_info(f"Sync loop started (interval: {config.sync_interval}, tick: {config.poll_seconds:.0f}s)")
    ticks = 0
    while max_ticks is None or ticks < max_ticks:
        maybe_auto_sync(config, engine, scheduler)
        ticks += 1
        if max_ticks is not None and ticks >= max_ticks:
            break
        sleep(config.poll_seconds)


def handle_status(scheduler: ReconciliationScheduler, interval: str) -> dict:
    """Print persisted sync state as JSON and return it."""
    state = scheduler.load_state()
    status = asdict(state)
    if state.last_run_time:
        status['last_run_at'] = datetime.fromtimestamp(state.last_run_time, timezone.utc).isoformat()
    status['next_due_in_seconds'] = scheduler.seconds_until_due(interval)
    print(json.dumps(status, indent=2))
    return status


def handle_list(engine: SyncEngine, which: str, column: str, ascending: bool) -> list:
    """Print one container's blobs ordered by the requested column."""
    store = engine.source if which == 'source' else engine.destination
    records = sort_blobs(to_snapshot(store.list_items()), column, ascending)
    for record in records:
        print(record)
    log_info(f"{len(records)} blobs in {store.container}")
    return records


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog='blobsync',
        description='Reconcile two object-storage containers.'
    )
    parser.add_argument('--config', help='YAML config file (BLOBSYNC_* env vars take precedence)')
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument('--once', action='store_true', help='Run a single pass now and exit')
    mode.add_argument('--status', action='store_true', help='Print persisted sync state')
    mode.add_argument('--list', choices=['source', 'destination'], dest='list_container',
                      help='List a container')
    parser.add_argument('--sort', choices=[c.value for c in SortColumn], default=SortColumn.NAME.value,
                        help='Sort column for --list (default: Name)')
    parser.add_argument('--descending', action='store_true', help='Reverse sort order for --list')
    parser.add_argument('--dry-run', action='store_true', help='Plan actions without executing them')
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    config, error = load_config(args.config)
    if error:
        configure_logging("info")
        log_error(f"Configuration error: {error}")
        return 1

    if args.dry_run:
        config = config.model_copy(update={'dry_run': True})

    configure_logging("debug" if config.debug_logging else "info", config.log_format)
    config.log_config()

    try:
        state_dir = get_state_dir(config)
    except OSError as e:
        log_error(f"Cannot create state directory {config.state_dir}: {e}")
        return 1
    scheduler = ReconciliationScheduler(state_dir)

    if args.status:
        handle_status(scheduler, config.sync_interval)
        return 0

    if not config.enabled:
        log_info("Sync is disabled via configuration")
        return 0

    engine = build_engine(config)

    if args.list_container:
        try:
            handle_list(engine, args.list_container, args.sort, not args.descending)
        except Exception as e:
            log_error(f"Listing failed: {type(e).__name__}: {e}")
            return 1
        return 0

    if args.once:
        result = handle_sync(engine, scheduler)
        return 0 if result is not None and not result.failed else 1

    try:
        run_loop(config, engine, scheduler)
    except KeyboardInterrupt:
        log_info("Interrupted, exiting")
    return 0


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
