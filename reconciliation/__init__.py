"""Reconciliation package: action planning, sync execution and scheduling."""
from reconciliation.planner import Action, ActionKind, reconcile, summarize_actions
from reconciliation.engine import SyncEngine, SyncResult
from reconciliation.scheduler import ReconciliationScheduler, ReconciliationState

__all__ = [
    'Action',
    'ActionKind',
    'reconcile',
    'summarize_actions',
    'SyncEngine',
    'SyncResult',
    'ReconciliationScheduler',
    'ReconciliationState',
]
