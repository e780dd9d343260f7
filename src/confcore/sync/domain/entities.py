"""Domain entities for ledger sync operations.

These are pure data structures with no infrastructure dependencies.
They represent the rows mirrored into the session ledger and the
bookkeeping of a single sync run.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class AssetKind(str, Enum):
    """Asset types copied into a ledger row, keyed by raw asset type."""

    STREAMING_VIDEO = "WWDCSessionAssetTypeStreamingVideo"
    HD_VIDEO = "WWDCSessionAssetTypeHDVideo"
    SD_VIDEO = "WWDCSessionAssetTypeSDVideo"
    SLIDES = "WWDCSessionAssetTypeSlidesPDF"
    WEBPAGE = "WWDCSessionAssetTypeWebpageURL"

    @property
    def record_field(self) -> str:
        """SessionRecord attribute holding this kind's URL."""
        return _ASSET_FIELDS[self]

    @classmethod
    def from_raw(cls, raw_asset_type: str) -> "AssetKind | None":
        try:
            return cls(raw_asset_type)
        except ValueError:
            return None


_ASSET_FIELDS = {
    AssetKind.STREAMING_VIDEO: "streaming_video",
    AssetKind.HD_VIDEO: "hd_video",
    AssetKind.SD_VIDEO: "sd_video",
    AssetKind.SLIDES: "slides",
    AssetKind.WEBPAGE: "webpage_url",
}

# Ledger column name per SessionRecord attribute
LEDGER_COLUMNS = {
    "identifier": "Identifier",
    "number": "Number",
    "title": "Title",
    "static_content_id": "StaticContentId",
    "summary": "Summary",
    "event_identifier": "EventIdentifier",
    "track_identifier": "TrackIdentifier",
    "media_duration": "MediaDuration",
    "streaming_video": "StreamingVideo",
    "hd_video": "HDVideo",
    "sd_video": "SDVideo",
    "slides": "Slides",
    "webpage_url": "WebpageURL",
}


@dataclass
class SessionRecord:
    """One ledger row describing a session and its asset URLs.

    Records are uniquely identified by ``identifier``.
    """

    identifier: str
    number: str = ""
    title: str = ""
    static_content_id: str = ""
    summary: str = ""
    event_identifier: str = ""
    track_identifier: str = ""
    media_duration: str = ""

    streaming_video: str | None = None
    hd_video: str | None = None
    sd_video: str | None = None
    slides: str | None = None
    webpage_url: str | None = None

    def asset_url(self, kind: AssetKind) -> str | None:
        return getattr(self, kind.record_field)

    def to_ledger_row(self) -> dict[str, Any]:
        """Serialize using the ledger's column names."""
        return {column: getattr(self, attr) for attr, column in LEDGER_COLUMNS.items()}

    @classmethod
    def from_ledger_row(cls, row: dict[str, Any]) -> "SessionRecord":
        """Build a record from a ledger row; missing columns take defaults.

        Raises:
            ValueError: If the row has no Identifier
        """
        identifier = row.get("Identifier")
        if not identifier:
            raise ValueError("Ledger row has no Identifier")

        values: dict[str, Any] = {}
        for attr, column in LEDGER_COLUMNS.items():
            value = row.get(column)
            if value is None:
                continue
            values[attr] = value if attr in _ASSET_ATTRS else str(value)
        return cls(**values)


_ASSET_ATTRS = frozenset(_ASSET_FIELDS.values())


@dataclass(frozen=True)
class UploadTask:
    """A pending upload and its delay (seconds) from the start of the run."""

    record: SessionRecord
    delay: float


class SyncState(str, Enum):
    """Lifecycle of one sync run."""

    IDLE = "idle"
    LEDGER_FETCHED = "ledger_fetched"
    DIFFED = "diffed"
    UPLOADING = "uploading"
    DONE = "done"
    SKIPPED = "skipped"


@dataclass
class SyncRun:
    """Mutable progress of one sync run.

    Upload jobs report back through record_upload(); once every scheduled
    upload has reported, the run moves to DONE.
    """

    started_at: datetime
    state: SyncState = SyncState.IDLE
    scheduled: int = 0
    succeeded: int = 0
    failed: int = 0

    @property
    def completed(self) -> int:
        return self.succeeded + self.failed

    def advance(self, state: SyncState) -> None:
        self.state = state

    def begin_uploads(self, count: int) -> None:
        self.scheduled = count
        self.state = SyncState.UPLOADING if count else SyncState.DONE

    def record_upload(self, success: bool) -> None:
        if success:
            self.succeeded += 1
        else:
            self.failed += 1
        if self.completed >= self.scheduled:
            self.state = SyncState.DONE

    @property
    def progress(self) -> str:
        """Human-readable "k/n" upload progress."""
        return f"{self.completed}/{self.scheduled}"


@dataclass
class SyncResult:
    """Result of the diff phase of a sync run.

    ``run`` keeps tracking upload outcomes after the result is returned.
    """

    run: SyncRun
    fetched: int = 0
    ledger_size: int = 0
    eligible: int = 0
    tasks: list[UploadTask] = field(default_factory=list)
    error_details: list[str] = field(default_factory=list)

    @property
    def skipped(self) -> bool:
        return self.run.state == SyncState.SKIPPED

    @property
    def new_identifiers(self) -> list[str]:
        return [task.record.identifier for task in self.tasks]

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.run.state.value,
            "fetched": self.fetched,
            "ledger_size": self.ledger_size,
            "eligible": self.eligible,
            "scheduled": len(self.tasks),
            "uploads": self.run.progress,
            "started_at": self.run.started_at.isoformat(),
        }
