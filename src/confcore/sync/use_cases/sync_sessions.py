"""Sync Sessions Use Case - mirrors fresh content into the session ledger.

This use case implements the diff-and-throttle workflow that runs after
every successful schedule/content fetch. It depends on ports for all
external operations, making it testable without a network.

Workflow:
1. Read the full ledger (via ILedger); any failure skips this run
2. Project sessions to SessionRecords (via ISessionRecordMapper)
3. Keep sessions of the allow-listed events
4. Diff against ledger identifiers (and uploads still pending)
5. Schedule one upload per new record, ``spacing * i`` seconds apart
6. Each upload POSTs once; the outcome is logged and counted, never retried

No state is persisted between runs. Records whose upload failed are not in
the ledger, so they reappear in the next run's diff.
"""

import logging
from collections.abc import Iterable
from datetime import datetime, timezone

from ...api.models import ContentsResponse
from ..domain.entities import (
    SessionRecord,
    SyncResult,
    SyncRun,
    SyncState,
    UploadTask,
)
from ..domain.ports import ILedger, ISessionRecordMapper, IUploadScheduler

logger = logging.getLogger(__name__)

DEFAULT_EVENT_IDENTIFIERS = ("wwdc2017", "wwdc2018", "wwdc2019")
DEFAULT_UPLOAD_SPACING = 3.0


def filter_by_events(
    records: Iterable[SessionRecord],
    event_identifiers: Iterable[str],
) -> list[SessionRecord]:
    """Keep records whose event is in ``event_identifiers``."""
    allowed = set(event_identifiers)
    return [record for record in records if record.event_identifier in allowed]


def compute_new_records(
    records: Iterable[SessionRecord],
    known_identifiers: Iterable[str],
) -> list[SessionRecord]:
    """Records whose identifier is not already known.

    Order of first appearance is preserved and repeated identifiers in
    ``records`` are collapsed to their first occurrence.
    """
    seen = set(known_identifiers)
    new_records: list[SessionRecord] = []
    for record in records:
        if record.identifier in seen:
            continue
        seen.add(record.identifier)
        new_records.append(record)
    return new_records


def plan_uploads(
    records: Iterable[SessionRecord],
    spacing: float = DEFAULT_UPLOAD_SPACING,
) -> list[UploadTask]:
    """Stagger uploads: the i-th record waits ``spacing * i`` seconds."""
    return [
        UploadTask(record=record, delay=spacing * index)
        for index, record in enumerate(records)
    ]


class SyncSessionsUseCase:
    """Orchestrates one ledger sync per content snapshot.

    Example:
        use_case = SyncSessionsUseCase(
            ledger=HTTPLedger(http, ledger_url),
            mapper=SessionRecordMapper(),
            scheduler=AsyncioUploadScheduler(),
        )
        result = await use_case.execute(contents)
    """

    def __init__(
        self,
        ledger: ILedger,
        mapper: ISessionRecordMapper,
        scheduler: IUploadScheduler,
        event_identifiers: Iterable[str] = DEFAULT_EVENT_IDENTIFIERS,
        upload_spacing: float = DEFAULT_UPLOAD_SPACING,
    ):
        """Initialize the use case with its dependencies.

        Args:
            ledger: Port for reading and appending ledger rows
            mapper: Port for projecting sessions into records
            scheduler: Port for running uploads after a delay
            event_identifiers: Events whose sessions are mirrored
            upload_spacing: Seconds between consecutive uploads
        """
        self.ledger = ledger
        self.mapper = mapper
        self.scheduler = scheduler
        self.event_identifiers = tuple(event_identifiers)
        self.upload_spacing = upload_spacing

        # Identifiers scheduled in this process whose upload has not finished
        self._pending: set[str] = set()

    @property
    def pending_identifiers(self) -> frozenset[str]:
        return frozenset(self._pending)

    def forget_pending(self) -> None:
        """Drop pending identifiers, e.g. after their jobs were cancelled."""
        self._pending.clear()

    async def execute(self, contents: ContentsResponse) -> SyncResult:
        """Run the diff phase and schedule uploads.

        Returns as soon as uploads are scheduled; ``result.run`` keeps
        counting their outcomes.
        """
        run = SyncRun(started_at=datetime.now(timezone.utc))
        result = SyncResult(run=run, fetched=len(contents.sessions))

        # Step 1: Read the ledger
        try:
            uploaded = await self.ledger.fetch_records()
        except Exception as e:
            logger.warning(f"Ledger read failed, skipping sync this cycle: {e}")
            run.advance(SyncState.SKIPPED)
            result.error_details.append(f"Ledger read failed: {e}")
            return result

        run.advance(SyncState.LEDGER_FETCHED)
        result.ledger_size = len(uploaded)

        # Step 2: Project sessions
        records: list[SessionRecord] = []
        for session in contents.sessions:
            try:
                records.append(self.mapper.map_to_record(session))
            except Exception as e:
                error_msg = f"Mapping error for session {session.identifier}: {e}"
                logger.warning(error_msg)
                result.error_details.append(error_msg)

        # Step 3 + 4: Filter and diff
        eligible = filter_by_events(records, self.event_identifiers)
        result.eligible = len(eligible)

        known = {record.identifier for record in uploaded} | self._pending
        new_records = compute_new_records(eligible, known)
        run.advance(SyncState.DIFFED)

        logger.info(
            f"Sync diff: {len(records)} sessions, {len(eligible)} eligible, "
            f"{len(uploaded)} in ledger, {len(new_records)} new"
        )

        # Step 5: Schedule staggered uploads
        result.tasks = plan_uploads(new_records, self.upload_spacing)
        run.begin_uploads(len(result.tasks))

        for task in result.tasks:
            self._pending.add(task.record.identifier)
            logger.info(f"Session #{task.record.number} scheduled for upload in {task.delay:g}s")
            self.scheduler.schedule(task.delay, self._upload_job(task.record, run))

        return result

    def _upload_job(self, record: SessionRecord, run: SyncRun):
        async def job() -> None:
            await self._upload(record, run)

        return job

    async def _upload(self, record: SessionRecord, run: SyncRun) -> None:
        # Step 6: single POST, outcome recorded, no retry
        try:
            await self.ledger.upload_record(record)
        except Exception as e:
            logger.warning(f"Upload of {record.identifier} failed: {e}")
            run.record_upload(success=False)
        else:
            logger.info(f"Uploaded {record.identifier} ({run.completed + 1}/{run.scheduled})")
            run.record_upload(success=True)
        finally:
            self._pending.discard(record.identifier)
