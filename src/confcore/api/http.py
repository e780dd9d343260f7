"""Async HTTP transport for the content service and the sync ledger.

This module knows HOW to move bytes over HTTP, but not WHAT they mean.
Decoding belongs to the endpoint registry; ledger semantics belong to the
ledger adapter. There is no retry: every failure is
terminal for its request and surfaces as a typed NetworkError.

Usage:
    async with RestClient(timeout=30) as http:
        payload = await http.get("https://api2019.wwdc.io/news.json")
        await http.post_json(ledger_url, [row])
"""
import asyncio
import logging
from typing import Any, Optional

import aiohttp

from .exceptions import ConnectionError, HTTPStatusError, NetworkError, TimeoutError

logger = logging.getLogger(__name__)


class RestClient:
    """Thin aiohttp wrapper returning raw response bodies.

    Must be used as an async context manager so the session lifecycle is
    explicit:

        async with RestClient() as http:
            body = await http.get(url)

    Attributes:
        timeout: Total request timeout in seconds
    """

    def __init__(self, timeout: float = 30.0, max_connections: int = 10):
        self.timeout = timeout
        self.max_connections = max_connections

        # Session is created in __aenter__, closed in __aexit__
        self._session: Optional[aiohttp.ClientSession] = None

    # ----------------------------------------
    # Context Manager Protocol
    # ----------------------------------------

    async def __aenter__(self) -> "RestClient":
        """Enter async context: create the HTTP session."""
        self._session = aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(
                limit=self.max_connections,
                limit_per_host=self.max_connections,
            ),
            timeout=aiohttp.ClientTimeout(
                total=self.timeout,
                connect=min(10, self.timeout),
            ),
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context: close the HTTP session."""
        await self.close()

    async def close(self) -> None:
        if self._session:
            await self._session.close()
            self._session = None

    @property
    def is_open(self) -> bool:
        return self._session is not None

    # ----------------------------------------
    # Requests
    # ----------------------------------------

    async def _request(
        self,
        method: str,
        url: str,
        json_body: Any = None,
    ) -> bytes:
        """Make a single HTTP request and return the raw body.

        Raises:
            HTTPStatusError: If response status is >= 400
            ConnectionError: If connection to server fails
            TimeoutError: If request times out
            NetworkError: For any other aiohttp client failure
            RuntimeError: If called outside of async context manager
        """
        if not self._session:
            raise RuntimeError(
                "RestClient must be used as async context manager: "
                "async with RestClient(...) as http:"
            )

        headers = {"Content-Type": "application/json"} if json_body is not None else None

        try:
            async with self._session.request(
                method=method,
                url=url,
                headers=headers,
                json=json_body,
            ) as response:
                if response.status >= 400:
                    raw = await response.read()
                    error_text = raw.decode("utf-8", errors="replace")
                    raise HTTPStatusError(
                        f"{method} {url} failed with status {response.status}",
                        status_code=response.status,
                        method=method,
                        response_body=error_text,
                        url=url,
                    )

                body = await response.read()
                logger.debug(f"{method} {url} -> {response.status} ({len(body)} bytes)")
                return body

        except aiohttp.ClientConnectionError as e:
            raise ConnectionError(
                f"Failed to connect to {url}",
                url=url,
                cause=e,
            )

        except asyncio.TimeoutError as e:
            raise TimeoutError(
                f"Request to {url} timed out",
                timeout_seconds=self.timeout,
                url=url,
                cause=e,
            )

        except aiohttp.ClientError as e:
            raise NetworkError(
                f"Network error during {method} {url}: {e}",
                url=url,
                cause=e,
            )

    async def get(self, url: str) -> bytes:
        """GET ``url`` and return the raw response body."""
        return await self._request("GET", url)

    async def post_json(self, url: str, payload: Any) -> bytes:
        """POST ``payload`` as JSON (Content-Type: application/json)."""
        return await self._request("POST", url, json_body=payload)
