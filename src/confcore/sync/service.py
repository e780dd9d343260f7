"""Background runner that connects the API client to the sync use case.

The client calls ``trigger(contents)`` after each successful content
fetch. The run happens in its own task; whatever goes wrong there is
logged and never reaches the fetch caller.
"""

import asyncio
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Optional

from ..api.models import ContentsResponse
from .adapters.ledger_api_adapter import HTTPLedger
from .adapters.record_mapper import SessionRecordMapper
from .adapters.upload_scheduler import AsyncioUploadScheduler
from .domain.entities import SyncResult
from .domain.ports import ISessionSync
from .use_cases.sync_sessions import (
    DEFAULT_EVENT_IDENTIFIERS,
    DEFAULT_UPLOAD_SPACING,
    SyncSessionsUseCase,
)

if TYPE_CHECKING:
    from ..api.http import RestClient

logger = logging.getLogger(__name__)


class SessionSyncService(ISessionSync):
    """Fire-and-forget wrapper around SyncSessionsUseCase."""

    def __init__(
        self,
        use_case: SyncSessionsUseCase,
        scheduler: Optional[AsyncioUploadScheduler] = None,
    ):
        self.use_case = use_case
        # Scheduler the use case writes to, if it can be drained
        self.scheduler = scheduler
        self.last_result: Optional[SyncResult] = None
        self._runs: set[asyncio.Task] = set()

    @classmethod
    def for_ledger(
        cls,
        http: "RestClient",
        ledger_url: str,
        event_identifiers: Iterable[str] = DEFAULT_EVENT_IDENTIFIERS,
        upload_spacing: float = DEFAULT_UPLOAD_SPACING,
    ) -> "SessionSyncService":
        """Wire the HTTP ledger, record mapper and asyncio scheduler."""
        scheduler = AsyncioUploadScheduler()
        use_case = SyncSessionsUseCase(
            ledger=HTTPLedger(http, ledger_url),
            mapper=SessionRecordMapper(),
            scheduler=scheduler,
            event_identifiers=event_identifiers,
            upload_spacing=upload_spacing,
        )
        return cls(use_case, scheduler=scheduler)

    def trigger(self, contents: ContentsResponse) -> asyncio.Task:
        """Start a sync run in the background and return its task."""
        task = asyncio.get_running_loop().create_task(
            self._run_safely(contents), name="confcore-ledger-sync"
        )
        self._runs.add(task)
        task.add_done_callback(self._runs.discard)
        return task

    async def run(self, contents: ContentsResponse) -> SyncResult:
        result = await self.use_case.execute(contents)
        self.last_result = result
        return result

    async def _run_safely(self, contents: ContentsResponse) -> Optional[SyncResult]:
        try:
            return await self.run(contents)
        except Exception:
            logger.exception("Ledger sync failed")
            return None

    async def drain_runs(self) -> None:
        """Wait for running syncs to finish their diff phase."""
        while self._runs:
            await asyncio.gather(*list(self._runs), return_exceptions=True)

    async def drain(self) -> None:
        """Wait for running syncs and, when possible, their uploads."""
        await self.drain_runs()
        if self.scheduler is not None:
            await self.scheduler.drain()

    async def close(self) -> None:
        """Cancel running syncs and uploads that have not started."""
        for task in list(self._runs):
            task.cancel()
        if self._runs:
            await asyncio.gather(*list(self._runs), return_exceptions=True)
        if self.scheduler is not None:
            self.scheduler.cancel_all()
            await self.scheduler.drain()
        self.use_case.forget_pending()
