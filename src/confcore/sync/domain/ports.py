"""Port interfaces for ledger sync operations.

Ports define the contracts between the sync use case and the
infrastructure. Following the Hexagonal Architecture (Ports and Adapters)
pattern, the use case depends only on these interfaces.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

from ...api.models import ContentsResponse, Session
from .entities import SessionRecord, SyncResult


class ILedger(ABC):
    """Port for the external store of already-uploaded session records."""

    @abstractmethod
    async def fetch_records(self) -> list[SessionRecord]:
        """Read every row currently in the ledger.

        Raises:
            Exception: Any failure; the caller treats it as "sync skipped"
        """
        ...

    @abstractmethod
    async def upload_record(self, record: SessionRecord) -> None:
        """Append a single record to the ledger.

        Raises:
            Exception: Any failure; the caller logs and counts it
        """
        ...


class ISessionRecordMapper(ABC):
    """Port for projecting content sessions into ledger records."""

    @abstractmethod
    def map_to_record(self, session: Session) -> SessionRecord:
        """Transform a decoded Session into a SessionRecord."""
        ...


class IUploadScheduler(ABC):
    """Port for running jobs after a delay, off the caller's path."""

    @abstractmethod
    def schedule(self, delay: float, job: Callable[[], Awaitable[Any]]) -> Any:
        """Run ``job`` once, ``delay`` seconds from now.

        Returns:
            An implementation-defined handle for the pending job
        """
        ...

    @abstractmethod
    def cancel_all(self) -> int:
        """Cancel every job that has not run yet.

        Returns:
            Number of jobs cancelled
        """
        ...


class ISessionSync(ABC):
    """Port used by the API client to hand fresh content to the sync.

    Implementations must never raise into the caller.
    """

    @abstractmethod
    def trigger(self, contents: ContentsResponse) -> Any:
        """Start a sync run for ``contents`` in the background."""
        ...

    @abstractmethod
    async def run(self, contents: ContentsResponse) -> SyncResult:
        """Run one sync and return its result."""
        ...
