"""HTTP ledger adapter.

The ledger is a spreadsheet-style JSON store:
    GET  <ledger_url>  -> [ {"Identifier": ..., "Number": ..., ...}, ... ]
    POST <ledger_url>  <- [ {one row} ]   (Content-Type: application/json)

This adapter implements ILedger on top of RestClient.
"""

import json
import logging
from typing import TYPE_CHECKING, Any

from ...api.exceptions import LedgerError, NetworkError
from ..domain.entities import SessionRecord
from ..domain.ports import ILedger

if TYPE_CHECKING:
    from ...api.http import RestClient

logger = logging.getLogger(__name__)


class HTTPLedger(ILedger):
    """Ledger backed by a JSON-over-HTTP rows endpoint."""

    def __init__(self, http: "RestClient", ledger_url: str):
        """Initialize the adapter.

        Args:
            http: Open RestClient shared with the API client
            ledger_url: Absolute URL of the ledger rows endpoint
        """
        self.http = http
        self.ledger_url = ledger_url

    async def fetch_records(self) -> list[SessionRecord]:
        """Read every row from the ledger.

        Rows without an Identifier are skipped with a warning.

        Raises:
            LedgerError: If the request fails or the body is not a JSON array
        """
        try:
            body = await self.http.get(self.ledger_url)
        except NetworkError as e:
            raise LedgerError("Could not read ledger", operation="read", cause=e)

        try:
            rows: Any = json.loads(body)
        except ValueError as e:
            raise LedgerError("Ledger returned invalid JSON", operation="read", cause=e)

        if not isinstance(rows, list):
            raise LedgerError(
                f"Ledger returned {type(rows).__name__}, expected a list",
                operation="read",
            )

        records: list[SessionRecord] = []
        for index, row in enumerate(rows):
            if not isinstance(row, dict):
                logger.warning(f"Skipping ledger row {index}: not an object")
                continue
            try:
                records.append(SessionRecord.from_ledger_row(row))
            except ValueError as e:
                logger.warning(f"Skipping ledger row {index}: {e}")

        logger.info(f"Ledger holds {len(records)} records")
        return records

    async def upload_record(self, record: SessionRecord) -> None:
        """POST one record as a single-element array.

        Raises:
            LedgerError: If the request fails
        """
        try:
            await self.http.post_json(self.ledger_url, [record.to_ledger_row()])
        except NetworkError as e:
            raise LedgerError(
                f"Upload of {record.identifier} failed",
                operation="upload",
                cause=e,
            )
