"""Unit tests for ReconciliationScheduler."""

import json
import os

import pytest

from reconciliation.engine import SyncResult
from reconciliation.planner import Action
from reconciliation.scheduler import (
    INTERVAL_SECONDS,
    ReconciliationScheduler,
    ReconciliationState,
    STATUS_FAILED,
    STATUS_PARTIAL,
    STATUS_SUCCESS,
)


# =============================================================================
# ReconciliationState Defaults
# =============================================================================

def test_default_state():
    """Fresh state has never run."""
    state = ReconciliationState()
    assert state.last_run_time == 0.0
    assert state.run_count == 0
    assert state.failure_count == 0
    assert state.last_status == ""
    assert state.last_actions_by_kind == {}
    assert state.last_dry_run is False


# =============================================================================
# State Persistence
# =============================================================================

def test_load_state_no_file(tmp_path):
    scheduler = ReconciliationScheduler(str(tmp_path))
    state = scheduler.load_state()

    assert isinstance(state, ReconciliationState)
    assert state.last_run_time == 0.0


def test_save_and_load_state(tmp_path):
    scheduler = ReconciliationScheduler(str(tmp_path))
    original = ReconciliationState(
        last_run_time=1234567890.5,
        last_status=STATUS_PARTIAL,
        last_error="",
        last_actions_by_kind={'copy_forward': 2, 'copy_back': 1, 'delete_from_source': 0},
        last_failed=1,
        last_source_count=10,
        last_destination_count=12,
        last_dry_run=False,
        run_count=3,
        failure_count=1,
    )

    scheduler.save_state(original)

    assert scheduler.load_state() == original


def test_load_state_corrupt_json(tmp_path):
    """Corrupt JSON returns defaults (graceful degradation)."""
    scheduler = ReconciliationScheduler(str(tmp_path))
    with open(os.path.join(str(tmp_path), 'sync_state.json'), 'w') as f:
        f.write("{invalid json content")

    assert scheduler.load_state() == ReconciliationState()


def test_load_state_unknown_fields(tmp_path):
    """State written by an incompatible version returns defaults."""
    scheduler = ReconciliationScheduler(str(tmp_path))
    with open(scheduler.state_path, 'w') as f:
        json.dump({'unexpected': 1}, f)

    assert scheduler.load_state() == ReconciliationState()


def test_save_state_atomic(tmp_path):
    """State file is written via tmp then rename."""
    scheduler = ReconciliationScheduler(str(tmp_path))
    scheduler.save_state(ReconciliationState(last_run_time=123.456, run_count=1))

    assert os.path.exists(scheduler.state_path)
    assert not os.path.exists(scheduler.state_path + '.tmp')
    with open(scheduler.state_path) as f:
        assert json.load(f)['run_count'] == 1


def test_save_state_creates_directory(tmp_path):
    state_dir = tmp_path / "nested" / "state"
    scheduler = ReconciliationScheduler(str(state_dir))

    scheduler.save_state(ReconciliationState(run_count=2))

    assert scheduler.load_state().run_count == 2


# =============================================================================
# is_due / seconds_until_due
# =============================================================================

def test_never_is_never_due(tmp_path):
    scheduler = ReconciliationScheduler(str(tmp_path))
    assert scheduler.is_due('never') is False


def test_unknown_interval_is_never_due(tmp_path):
    scheduler = ReconciliationScheduler(str(tmp_path))
    assert scheduler.is_due('fortnightly') is False


@pytest.mark.parametrize("interval", ['hourly', 'daily', 'weekly'])
def test_due_when_never_run(tmp_path, interval):
    scheduler = ReconciliationScheduler(str(tmp_path))
    assert scheduler.is_due(interval, now=10_000_000.0) is True


@pytest.mark.parametrize("interval", ['hourly', 'daily', 'weekly'])
def test_not_due_before_interval_elapsed(tmp_path, interval):
    scheduler = ReconciliationScheduler(str(tmp_path))
    scheduler.save_state(ReconciliationState(last_run_time=1000.0))

    assert scheduler.is_due(interval, now=1000.0 + INTERVAL_SECONDS[interval] - 1) is False


@pytest.mark.parametrize("interval", ['hourly', 'daily', 'weekly'])
def test_due_at_interval_boundary(tmp_path, interval):
    scheduler = ReconciliationScheduler(str(tmp_path))
    scheduler.save_state(ReconciliationState(last_run_time=1000.0))

    assert scheduler.is_due(interval, now=1000.0 + INTERVAL_SECONDS[interval]) is True


def test_seconds_until_due(tmp_path):
    scheduler = ReconciliationScheduler(str(tmp_path))
    scheduler.save_state(ReconciliationState(last_run_time=1000.0))

    assert scheduler.seconds_until_due('hourly', now=1600.0) == 3000.0
    assert scheduler.seconds_until_due('hourly', now=99999.0) == 0.0
    assert scheduler.seconds_until_due('never', now=1600.0) is None


# =============================================================================
# record_run / record_failure
# =============================================================================

def _result(**overrides):
    result = SyncResult(
        source_count=5,
        destination_count=6,
        actions=[Action.copy_forward("a"), Action.copy_back("b"), Action.copy_back("c")],
        copied_forward=1,
        copied_back=2,
    )
    for key, value in overrides.items():
        setattr(result, key, value)
    return result


def test_record_run_success(tmp_path):
    scheduler = ReconciliationScheduler(str(tmp_path))

    state = scheduler.record_run(_result(), now=5000.0)

    assert state.last_run_time == 5000.0
    assert state.last_status == STATUS_SUCCESS
    assert state.last_actions_by_kind == {'copy_forward': 1, 'copy_back': 2, 'delete_from_source': 0}
    assert state.last_source_count == 5
    assert state.last_destination_count == 6
    assert state.run_count == 1
    assert scheduler.load_state() == state


def test_record_run_partial_when_actions_failed(tmp_path):
    scheduler = ReconciliationScheduler(str(tmp_path))

    state = scheduler.record_run(_result(failed=1, copied_back=1), now=5000.0)

    assert state.last_status == STATUS_PARTIAL
    assert state.last_failed == 1


def test_record_run_resets_interval(tmp_path):
    scheduler = ReconciliationScheduler(str(tmp_path))
    scheduler.record_run(_result(), now=5000.0)

    assert scheduler.is_due('hourly', now=5001.0) is False
    assert scheduler.is_due('hourly', now=5000.0 + 3600) is True


def test_record_failure(tmp_path):
    scheduler = ReconciliationScheduler(str(tmp_path))
    scheduler.record_run(_result(), now=1000.0)

    state = scheduler.record_failure(ValueError("bad timestamp"), now=2000.0)

    assert state.last_status == STATUS_FAILED
    assert state.last_error == "ValueError: bad timestamp"
    assert state.last_actions_by_kind == {}
    assert state.run_count == 2
    assert state.failure_count == 1
    assert scheduler.is_due('hourly', now=2001.0) is False


def test_record_run_clears_previous_error(tmp_path):
    scheduler = ReconciliationScheduler(str(tmp_path))
    scheduler.record_failure(RuntimeError("boom"), now=1000.0)

    state = scheduler.record_run(_result(), now=9000.0)

    assert state.last_error == ""
    assert state.failure_count == 1
    assert state.run_count == 2
