"""Tests for the SyncSessionsUseCase.

These tests use mock ports to test the diff-and-throttle workflow in
isolation from HTTP and the event loop's clock.
"""

from collections.abc import Awaitable, Callable
from typing import Any

import pytest

from src.confcore.api.models import ContentsResponse, Session
from src.confcore.sync.adapters.record_mapper import SessionRecordMapper
from src.confcore.sync.domain.entities import SessionRecord, SyncState
from src.confcore.sync.domain.ports import ILedger, IUploadScheduler
from src.confcore.sync.use_cases.sync_sessions import (
    SyncSessionsUseCase,
    compute_new_records,
    filter_by_events,
    plan_uploads,
)


class MockLedger(ILedger):
    """In-memory ledger that records uploads."""

    def __init__(
        self,
        identifiers: list[str] | None = None,
        raise_on_fetch: Exception | None = None,
        fail_uploads: set[str] | None = None,
    ):
        self.rows = [SessionRecord(identifier=i) for i in identifiers or []]
        self.raise_on_fetch = raise_on_fetch
        self.fail_uploads = fail_uploads or set()
        self.uploaded: list[SessionRecord] = []
        self.fetch_count = 0

    async def fetch_records(self) -> list[SessionRecord]:
        self.fetch_count += 1
        if self.raise_on_fetch:
            raise self.raise_on_fetch
        return list(self.rows)

    async def upload_record(self, record: SessionRecord) -> None:
        if record.identifier in self.fail_uploads:
            raise RuntimeError("ledger rejected row")
        self.uploaded.append(record)
        self.rows.append(record)


class ManualScheduler(IUploadScheduler):
    """Collects jobs instead of running them; the test runs them explicitly."""

    def __init__(self):
        self.jobs: list[tuple[float, Callable[[], Awaitable[Any]]]] = []

    def schedule(self, delay: float, job: Callable[[], Awaitable[Any]]) -> None:
        self.jobs.append((delay, job))

    def cancel_all(self) -> int:
        count = len(self.jobs)
        self.jobs.clear()
        return count

    @property
    def delays(self) -> list[float]:
        return [delay for delay, _ in self.jobs]

    async def run_all(self) -> None:
        jobs, self.jobs = self.jobs, []
        for _, job in jobs:
            await job()


def make_contents(*sessions: tuple[str, str]) -> ContentsResponse:
    return ContentsResponse(
        sessions=[
            Session(identifier=identifier, event_identifier=event, number=identifier[-3:])
            for identifier, event in sessions
        ]
    )


@pytest.fixture
def scheduler():
    return ManualScheduler()


def make_use_case(ledger: ILedger, scheduler: IUploadScheduler) -> SyncSessionsUseCase:
    return SyncSessionsUseCase(
        ledger=ledger,
        mapper=SessionRecordMapper(),
        scheduler=scheduler,
    )


class TestPureHelpers:
    """Tests for the diff helpers."""

    def test_compute_new_records_is_set_difference(self):
        records = [SessionRecord(identifier=i) for i in ("A", "B", "C")]
        new = compute_new_records(records, {"A", "B"})
        assert [r.identifier for r in new] == ["C"]

    def test_compute_new_records_collapses_duplicates(self):
        records = [SessionRecord(identifier=i, title=t) for i, t in (("C", "1"), ("D", ""), ("C", "2"))]
        new = compute_new_records(records, set())
        assert [(r.identifier, r.title) for r in new] == [("C", "1"), ("D", "")]

    def test_filter_by_events(self):
        records = [
            SessionRecord(identifier="a", event_identifier="wwdc2019"),
            SessionRecord(identifier="b", event_identifier="wwdc2016"),
        ]
        assert [r.identifier for r in filter_by_events(records, ["wwdc2019"])] == ["a"]

    def test_plan_uploads_staggers_by_position(self):
        records = [SessionRecord(identifier=i) for i in ("x", "y", "z", "w")]
        tasks = plan_uploads(records, spacing=3.0)
        assert [t.delay for t in tasks] == [0.0, 3.0, 6.0, 9.0]
        assert [t.record.identifier for t in tasks] == ["x", "y", "z", "w"]


class TestSyncSessionsUseCase:
    """Tests for SyncSessionsUseCase.execute."""

    @pytest.mark.asyncio
    async def test_only_missing_record_is_scheduled(self, scheduler):
        """Ledger {A,B} and content {A,B,C} schedules exactly C."""
        ledger = MockLedger(identifiers=["wwdc2019-A", "wwdc2019-B"])
        use_case = make_use_case(ledger, scheduler)
        contents = make_contents(
            ("wwdc2019-A", "wwdc2019"),
            ("wwdc2019-B", "wwdc2019"),
            ("wwdc2019-C", "wwdc2019"),
        )

        result = await use_case.execute(contents)

        assert result.new_identifiers == ["wwdc2019-C"]
        assert scheduler.delays == [0.0]
        assert result.run.state == SyncState.UPLOADING

        await scheduler.run_all()

        assert [r.identifier for r in ledger.uploaded] == ["wwdc2019-C"]
        assert result.run.state == SyncState.DONE
        assert result.run.succeeded == 1

    @pytest.mark.asyncio
    async def test_uploads_are_staggered_in_content_order(self, scheduler):
        ledger = MockLedger()
        use_case = make_use_case(ledger, scheduler)
        contents = make_contents(
            ("wwdc2018-300", "wwdc2018"),
            ("wwdc2017-100", "wwdc2017"),
            ("wwdc2019-200", "wwdc2019"),
        )

        result = await use_case.execute(contents)

        assert scheduler.delays == [0.0, 3.0, 6.0]
        assert result.new_identifiers == ["wwdc2018-300", "wwdc2017-100", "wwdc2019-200"]

    @pytest.mark.asyncio
    async def test_sessions_outside_allow_list_are_ignored(self, scheduler):
        ledger = MockLedger()
        use_case = make_use_case(ledger, scheduler)
        contents = make_contents(("wwdc2016-1", "wwdc2016"), ("tech-talks-2", "tech-talks"))

        result = await use_case.execute(contents)

        assert result.eligible == 0
        assert scheduler.jobs == []
        assert result.run.state == SyncState.DONE

    @pytest.mark.asyncio
    async def test_second_run_is_idempotent(self, scheduler):
        """Running twice against the same content uploads nothing the second time."""
        ledger = MockLedger()
        use_case = make_use_case(ledger, scheduler)
        contents = make_contents(("wwdc2019-1", "wwdc2019"), ("wwdc2019-2", "wwdc2019"))

        first = await use_case.execute(contents)
        await scheduler.run_all()
        second = await use_case.execute(contents)

        assert len(first.tasks) == 2
        assert second.tasks == []
        assert scheduler.jobs == []

    @pytest.mark.asyncio
    async def test_pending_uploads_are_not_rescheduled(self, scheduler):
        """A run that starts before earlier uploads land does not duplicate them."""
        ledger = MockLedger()
        use_case = make_use_case(ledger, scheduler)
        contents = make_contents(("wwdc2019-1", "wwdc2019"))

        await use_case.execute(contents)
        second = await use_case.execute(contents)

        assert second.tasks == []
        assert use_case.pending_identifiers == {"wwdc2019-1"}

        await scheduler.run_all()
        assert use_case.pending_identifiers == frozenset()

    @pytest.mark.asyncio
    async def test_ledger_failure_skips_run(self, scheduler):
        ledger = MockLedger(raise_on_fetch=ConnectionRefusedError("down"))
        use_case = make_use_case(ledger, scheduler)

        result = await use_case.execute(make_contents(("wwdc2019-1", "wwdc2019")))

        assert result.skipped
        assert result.tasks == []
        assert scheduler.jobs == []
        assert "Ledger read failed" in result.error_details[0]

    @pytest.mark.asyncio
    async def test_failed_upload_is_counted_and_retried_next_run(self, scheduler):
        ledger = MockLedger(fail_uploads={"wwdc2019-2"})
        use_case = make_use_case(ledger, scheduler)
        contents = make_contents(("wwdc2019-1", "wwdc2019"), ("wwdc2019-2", "wwdc2019"))

        first = await use_case.execute(contents)
        await scheduler.run_all()

        assert first.run.succeeded == 1
        assert first.run.failed == 1
        assert first.run.state == SyncState.DONE

        ledger.fail_uploads.clear()
        second = await use_case.execute(contents)

        assert second.new_identifiers == ["wwdc2019-2"]

    @pytest.mark.asyncio
    async def test_mapping_errors_are_collected(self, scheduler):
        class BrokenMapper(SessionRecordMapper):
            def map_to_record(self, session):
                if session.identifier == "bad":
                    raise ValueError("cannot map")
                return super().map_to_record(session)

        ledger = MockLedger()
        use_case = SyncSessionsUseCase(ledger, BrokenMapper(), scheduler)
        contents = make_contents(("bad", "wwdc2019"), ("wwdc2019-ok", "wwdc2019"))

        result = await use_case.execute(contents)

        assert result.new_identifiers == ["wwdc2019-ok"]
        assert len(result.error_details) == 1

    @pytest.mark.asyncio
    async def test_custom_events_and_spacing(self, scheduler):
        ledger = MockLedger()
        use_case = SyncSessionsUseCase(
            ledger,
            SessionRecordMapper(),
            scheduler,
            event_identifiers=["wwdc2020"],
            upload_spacing=0.5,
        )
        contents = make_contents(
            ("wwdc2020-1", "wwdc2020"),
            ("wwdc2019-1", "wwdc2019"),
            ("wwdc2020-2", "wwdc2020"),
        )

        result = await use_case.execute(contents)

        assert result.new_identifiers == ["wwdc2020-1", "wwdc2020-2"]
        assert scheduler.delays == [0.0, 0.5]
