"""Sync module - mirrors freshly fetched sessions into the session ledger.

Architecture:
    domain/     - Pure domain entities and port interfaces
    use_cases/  - Diff-and-throttle orchestration
    adapters/   - Infrastructure implementations (HTTP ledger, asyncio scheduler)
"""

from .domain.entities import (
    AssetKind,
    SessionRecord,
    SyncResult,
    SyncRun,
    SyncState,
    UploadTask,
)
from .domain.ports import ILedger, ISessionRecordMapper, ISessionSync, IUploadScheduler
from .service import SessionSyncService
from .use_cases.sync_sessions import SyncSessionsUseCase

__all__ = [
    # Entities
    "AssetKind",
    "SessionRecord",
    "UploadTask",
    # Result Entities
    "SyncResult",
    "SyncRun",
    "SyncState",
    # Ports
    "ILedger",
    "ISessionRecordMapper",
    "ISessionSync",
    "IUploadScheduler",
    # Orchestration
    "SyncSessionsUseCase",
    "SessionSyncService",
]
