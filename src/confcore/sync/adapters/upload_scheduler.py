"""Delayed-job queue on the asyncio event loop.

Each scheduled job is an asyncio task that sleeps for its delay and then
awaits the job once. Jobs are fire-and-forget from the scheduler's point of
view: a failing job is logged, never retried.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from ..domain.ports import IUploadScheduler

logger = logging.getLogger(__name__)


class AsyncioUploadScheduler(IUploadScheduler):
    """Runs delayed jobs as tasks on the running event loop."""

    def __init__(self):
        self._pending: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def schedule(self, delay: float, job: Callable[[], Awaitable[Any]]) -> asyncio.Task:
        """Run ``job`` after ``delay`` seconds.

        Must be called from a running event loop.
        """
        task = asyncio.get_running_loop().create_task(self._run_later(delay, job))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _run_later(self, delay: float, job: Callable[[], Awaitable[Any]]) -> None:
        if delay > 0:
            await asyncio.sleep(delay)
        try:
            await job()
        except Exception:
            logger.exception("Scheduled job failed")

    def cancel_all(self) -> int:
        cancelled = 0
        for task in list(self._pending):
            if task.cancel():
                cancelled += 1
        if cancelled:
            logger.info(f"Cancelled {cancelled} scheduled jobs")
        return cancelled

    async def drain(self) -> None:
        """Wait until every scheduled job has finished or been cancelled."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
