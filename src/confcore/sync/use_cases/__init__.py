"""Use cases layer - Business logic orchestration for ledger sync.

Use cases depend only on ports, not concrete implementations.
"""

from .sync_sessions import (
    SyncSessionsUseCase,
    compute_new_records,
    filter_by_events,
    plan_uploads,
)

__all__ = [
    "SyncSessionsUseCase",
    "compute_new_records",
    "filter_by_events",
    "plan_uploads",
]
