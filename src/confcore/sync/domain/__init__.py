"""Domain layer - Pure domain entities and port interfaces.

This layer contains:
- Entities: Ledger records, upload tasks and sync run bookkeeping
- Ports: Abstract interfaces defining contracts for adapters

No infrastructure dependencies allowed in this layer.
"""

from .entities import (
    LEDGER_COLUMNS,
    AssetKind,
    SessionRecord,
    SyncResult,
    SyncRun,
    SyncState,
    UploadTask,
)
from .ports import ILedger, ISessionRecordMapper, ISessionSync, IUploadScheduler

__all__ = [
    "LEDGER_COLUMNS",
    "AssetKind",
    "SessionRecord",
    "UploadTask",
    "SyncResult",
    "SyncRun",
    "SyncState",
    "ILedger",
    "ISessionRecordMapper",
    "ISessionSync",
    "IUploadScheduler",
]
