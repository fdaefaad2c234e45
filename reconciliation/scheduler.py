"""
Reconciliation scheduler for periodic sync passes.

The scheduler is a check-on-tick helper, not a timer: the caller's loop
asks is_due() and records each outcome. State persists in sync_state.json
so restarts don't trigger an immediate extra pass.
"""

import json
import os
import time
from dataclasses import dataclass, field, asdict
from typing import Optional

from reconciliation.planner import summarize_actions

from shared.log import create_logger
_, log_debug, _, _, _ = create_logger("Scheduler")

# Interval to seconds mapping
INTERVAL_SECONDS = {
    'never': 0,
    'hourly': 3600,
    'daily': 86400,
    'weekly': 604800,
}

STATUS_SUCCESS = 'success'
STATUS_PARTIAL = 'partial'
STATUS_FAILED = 'failed'


@dataclass
class ReconciliationState:
    """Persisted state for sync scheduling."""
    last_run_time: float = 0.0          # time.time() of last pass
    last_status: str = ""               # success, partial, failed
    last_error: str = ""                # message when last pass failed
    last_actions_by_kind: dict = field(default_factory=dict)  # {copy_forward: N, ...}
    last_failed: int = 0                # actions that raised
    last_source_count: int = 0
    last_destination_count: int = 0
    last_dry_run: bool = False
    run_count: int = 0                  # total passes, failed ones included
    failure_count: int = 0              # passes that aborted


class ReconciliationScheduler:
    """Tracks when the next sync pass is due via persisted state."""

    STATE_FILE = 'sync_state.json'

    def __init__(self, state_dir: str):
        self.state_dir = state_dir
        self.state_path = os.path.join(state_dir, self.STATE_FILE)

    def load_state(self) -> ReconciliationState:
        """Load state from disk (defaults when missing or corrupt)."""
        try:
            if os.path.exists(self.state_path):
                with open(self.state_path, 'r') as f:
                    data = json.load(f)
                return ReconciliationState(**data)
        except (json.JSONDecodeError, TypeError, KeyError) as e:
            log_debug(f"Failed to load sync state, using defaults: {e}")
        return ReconciliationState()

    def save_state(self, state: ReconciliationState) -> None:
        """Save state to disk atomically."""
        tmp_path = self.state_path + '.tmp'
        try:
            os.makedirs(self.state_dir, exist_ok=True)
            with open(tmp_path, 'w') as f:
                json.dump(asdict(state), f, indent=2)
            os.replace(tmp_path, self.state_path)
        except OSError as e:
            log_debug(f"Failed to save sync state: {e}")

    def is_due(self, interval: str, now: Optional[float] = None) -> bool:
        """Check if a pass is due based on interval and last run time.

        Args:
            interval: 'never', 'hourly', 'daily', 'weekly'
            now: Current time (default: time.time()). For testing.

        Returns:
            True if a pass should run now.
        """
        interval_secs = INTERVAL_SECONDS.get(interval, 0)
        if interval_secs == 0:
            return False

        if now is None:
            now = time.time()

        state = self.load_state()
        elapsed = now - state.last_run_time
        return elapsed >= interval_secs

    def seconds_until_due(self, interval: str, now: Optional[float] = None) -> Optional[float]:
        """Seconds until the next pass is due (0 if overdue, None if never)."""
        interval_secs = INTERVAL_SECONDS.get(interval, 0)
        if interval_secs == 0:
            return None

        if now is None:
            now = time.time()

        state = self.load_state()
        return max(0.0, state.last_run_time + interval_secs - now)

    def record_run(self, result, now: Optional[float] = None) -> ReconciliationState:
        """Record a completed pass.

        Args:
            result: SyncResult from SyncEngine.run()
            now: Completion time (default: time.time()). For testing.
        """
        state = self.load_state()
        state.last_run_time = time.time() if now is None else now
        state.last_status = STATUS_PARTIAL if result.failed else STATUS_SUCCESS
        state.last_error = ""
        state.last_actions_by_kind = summarize_actions(result.actions)
        state.last_failed = result.failed
        state.last_source_count = result.source_count
        state.last_destination_count = result.destination_count
        state.last_dry_run = result.dry_run
        state.run_count += 1
        self.save_state(state)
        return state

    def record_failure(self, error: Exception, now: Optional[float] = None) -> ReconciliationState:
        """Record a pass that aborted before or during planning.

        The failed pass still resets the interval; the next attempt waits
        for the following tick.
        """
        state = self.load_state()
        state.last_run_time = time.time() if now is None else now
        state.last_status = STATUS_FAILED
        state.last_error = f"{type(error).__name__}: {error}"
        state.last_actions_by_kind = {}
        state.last_failed = 0
        state.run_count += 1
        state.failure_count += 1
        self.save_state(state)
        return state
