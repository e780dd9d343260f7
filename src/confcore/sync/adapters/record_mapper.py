"""Projection of content sessions into ledger records.

Only the five asset kinds the ledger has columns for are copied; any
other asset type is ignored. When a session lists several assets of the
same kind, the last one wins.
"""

from ...api.models import Session
from ..domain.entities import AssetKind, SessionRecord
from ..domain.ports import ISessionRecordMapper


def format_duration(duration: float) -> str:
    """Render a media duration the way the ledger stores it."""
    return str(duration)


class SessionRecordMapper(ISessionRecordMapper):
    """Maps Session models to SessionRecord entities."""

    def map_to_record(self, session: Session) -> SessionRecord:
        record = SessionRecord(
            identifier=session.identifier,
            number=session.number,
            title=session.title,
            static_content_id=session.static_content_id,
            summary=session.summary,
            event_identifier=session.event_identifier,
            track_identifier=session.track_identifier,
            media_duration=format_duration(session.media_duration),
        )

        for asset in session.assets:
            kind = AssetKind.from_raw(asset.raw_asset_type)
            if kind is None:
                continue
            setattr(record, kind.record_field, asset.remote_url)

        return record
