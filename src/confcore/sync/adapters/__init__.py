"""Adapters layer - Infrastructure implementations for sync operations.

- HTTPLedger: JSON-over-HTTP implementation of ILedger
- SessionRecordMapper: Session projection implementing ISessionRecordMapper
- AsyncioUploadScheduler: asyncio implementation of IUploadScheduler
"""

from .ledger_api_adapter import HTTPLedger
from .record_mapper import SessionRecordMapper
from .upload_scheduler import AsyncioUploadScheduler

__all__ = [
    "HTTPLedger",
    "SessionRecordMapper",
    "AsyncioUploadScheduler",
]
