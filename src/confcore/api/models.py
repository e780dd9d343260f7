"""Pydantic models for the content service payloads.

Only the fields the client and the sync pipeline rely on are declared;
unknown keys are kept (``extra="allow"``) so richer payloads still decode.
Every timestamp uses the service's single custom date format.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Service-wide timestamp format, e.g. "2019-06-03T10:00:00-07:00"
CONFCORE_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


def parse_confcore_date(value: Any) -> Any:
    """Parse a timestamp in the service's custom format.

    Non-string values are returned unchanged so pydantic can handle
    ``None`` and already-parsed datetimes.

    Raises:
        ValueError: If the string does not match CONFCORE_DATE_FORMAT
    """
    if not isinstance(value, str):
        return value
    return datetime.strptime(value, CONFCORE_DATE_FORMAT)


class ConfCoreModel(BaseModel):
    """Base model: camelCase aliases, unknown keys preserved."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class NewsItem(ConfCoreModel):
    identifier: str = Field(alias="id")
    title: str = ""
    body: str = ""
    visibility: Optional[str] = None
    date: Optional[datetime] = None

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, value: Any) -> Any:
        return parse_confcore_date(value)


class FeaturedSection(ConfCoreModel):
    identifier: str = Field(default="", alias="id")
    title: str = ""
    summary: str = Field(default="", alias="description")
    order: int = 0
    format: Optional[str] = None
    content: list[dict[str, Any]] = Field(default_factory=list)


class SessionAsset(ConfCoreModel):
    """A downloadable or streamable asset attached to a session."""

    raw_asset_type: str = Field(alias="rawAssetType")
    remote_url: str = Field(alias="remoteURL")
    session_identifier: Optional[str] = Field(default=None, alias="sessionIdentifier")
    year: Optional[int] = None


class Event(ConfCoreModel):
    identifier: str = Field(alias="id")
    name: str = ""
    start_date: Optional[datetime] = Field(default=None, alias="startTime")
    end_date: Optional[datetime] = Field(default=None, alias="endTime")
    is_current: bool = Field(default=False, alias="current")

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_dates(cls, value: Any) -> Any:
        return parse_confcore_date(value)


class Track(ConfCoreModel):
    identifier: str = Field(alias="id")
    name: str = ""


class Session(ConfCoreModel):
    identifier: str = Field(alias="id")
    number: str = ""
    title: str = ""
    static_content_id: str = Field(default="", alias="staticContentId")
    summary: str = Field(default="", alias="description")
    event_identifier: str = Field(default="", alias="eventId")
    track_identifier: str = Field(default="", alias="trackId")
    media_duration: float = Field(default=0.0, alias="mediaDuration")
    assets: list[SessionAsset] = Field(default_factory=list)

    @field_validator("number", "static_content_id", "track_identifier", mode="before")
    @classmethod
    def coerce_str(cls, value: Any) -> Any:
        # The service sends some identifiers as bare integers
        if isinstance(value, int):
            return str(value)
        return value


class ContentsResponse(ConfCoreModel):
    """Schedule/content payload: events, tracks and sessions."""

    events: list[Event] = Field(default_factory=list)
    tracks: list[Track] = Field(default_factory=list)
    sessions: list[Session] = Field(default_factory=list)


class SessionsResponse(ConfCoreModel):
    """Videos payload: sessions with their media assets."""

    sessions: list[Session] = Field(default_factory=list)
    updated: Optional[datetime] = None

    @field_validator("updated", mode="before")
    @classmethod
    def parse_updated(cls, value: Any) -> Any:
        return parse_confcore_date(value)
