"""Endpoint registry: the five content endpoints and their decoders.

Each Endpoint knows which Environment field holds its path, how to decode
its payload, and whether it must always hit the network. Decoders are pure
``bytes -> value`` functions that raise on malformed input; the Resource
layer turns those failures into AdapterError.
"""

from collections.abc import Callable
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from .environment import Environment
from .models import (
    ContentsResponse,
    FeaturedSection,
    NewsItem,
    SessionAsset,
    SessionsResponse,
)

Decoder = Callable[[bytes], Any]

# Asset type assigned to live stream entries
LIVE_STREAM_ASSET_TYPE = "WWDCSessionAssetTypeLiveStreamVideo"


class _NewsEnvelope(BaseModel):
    items: list[NewsItem]


class _FeaturedEnvelope(BaseModel):
    sections: list[FeaturedSection]


class _LiveStream(BaseModel):
    hls: str
    images: dict[str, Any] = Field(default_factory=dict)


class _LiveEnvelope(BaseModel):
    live_sessions: dict[str, _LiveStream]


def decode_news(payload: bytes) -> list[NewsItem]:
    return _NewsEnvelope.model_validate_json(payload).items


def decode_featured_sections(payload: bytes) -> list[FeaturedSection]:
    return _FeaturedEnvelope.model_validate_json(payload).sections


def decode_contents(payload: bytes) -> ContentsResponse:
    return ContentsResponse.model_validate_json(payload)


def decode_sessions(payload: bytes) -> SessionsResponse:
    return SessionsResponse.model_validate_json(payload)


def decode_live_video_assets(payload: bytes) -> list[SessionAsset]:
    """Flatten ``{"live_sessions": {id: {"hls": url}}}`` into assets."""
    envelope = _LiveEnvelope.model_validate_json(payload)
    return [
        SessionAsset(
            raw_asset_type=LIVE_STREAM_ASSET_TYPE,
            remote_url=stream.hls,
            session_identifier=session_id,
        )
        for session_id, stream in envelope.live_sessions.items()
    ]


class Endpoint(Enum):
    """The fixed set of remote data sources.

    Value is the name of the Environment attribute that holds the path.
    """

    NEWS = "news_path"
    FEATURED_SECTIONS = "featured_sections_path"
    SCHEDULE = "sessions_path"
    SESSIONS = "videos_path"
    LIVE_VIDEO_ASSETS = "live_videos_path"

    @property
    def always_reload(self) -> bool:
        """Live assets skip the cache; everything else loads if needed."""
        return self is Endpoint.LIVE_VIDEO_ASSETS

    @property
    def decoder(self) -> Decoder:
        return DEFAULT_DECODERS[self]

    def path(self, environment: Environment) -> str:
        return getattr(environment, self.value)

    def url(self, environment: Environment) -> str:
        return environment.url(self.path(environment))


DEFAULT_DECODERS: dict[Endpoint, Decoder] = {
    Endpoint.NEWS: decode_news,
    Endpoint.FEATURED_SECTIONS: decode_featured_sections,
    Endpoint.SCHEDULE: decode_contents,
    Endpoint.SESSIONS: decode_sessions,
    Endpoint.LIVE_VIDEO_ASSETS: decode_live_video_assets,
}
