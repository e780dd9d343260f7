#!/usr/bin/env python3
"""ConfCore API client: cached, observable access to the content endpoints.

The client exposes one fetch method per endpoint. Results are not
returned; they are delivered to callbacks registered on a per-endpoint
Resource, on the event loop that issued the fetch:

    - First fetch of an endpoint creates its Resource and registers the callback
    - Every fetch cancels the endpoint's in-flight request before issuing a new one
    - Endpoints other than live video assets reuse fresh cached data
    - Live video assets always hit the network
    - A successful schedule/content fetch also triggers the ledger sync

Design Philosophy:
    The client owns the Environment and the Resources. Nothing else mutates
    them. Environment swaps cancel everything in flight and start over from
    empty caches; callers fetch again to re-subscribe.

Usage:
    async with ConfCoreClient(PRODUCTION) as client:
        client.fetch_news(lambda result: print(result.unwrap()))
        client.fetch_content(on_contents)
"""
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Optional

from .endpoints import DEFAULT_DECODERS, Decoder, Endpoint
from .environment import PRODUCTION, Environment, EnvironmentCenter, default_center
from .http import RestClient
from .models import ContentsResponse
from .resource import FetchResult, Observer, Resource, Transport

if TYPE_CHECKING:
    import asyncio

    from ..sync.domain.ports import ISessionSync

logger = logging.getLogger(__name__)


class ConfCoreClient:
    """Facade over the five content endpoints.

    Attributes:
        environment: Environment whose paths are currently fetched
        sync: Optional ledger sync triggered by fresh content
        expiration: Seconds before cached data is considered stale (None = never)
    """

    def __init__(
        self,
        environment: Optional[Environment] = None,
        *,
        http: Optional[Transport] = None,
        sync: Optional["ISessionSync"] = None,
        decoders: Optional[dict[Endpoint, Decoder]] = None,
        center: Optional[EnvironmentCenter] = None,
        expiration: Optional[float] = None,
        timeout: float = 30.0,
        follow_center: bool = True,
    ):
        """Initialize the client.

        Args:
            environment: Initial environment. Defaults to ``center.current``
                when a center is given, otherwise PRODUCTION.
            http: Transport to use. When omitted the client creates and owns
                a RestClient, opened by ``async with``.
            sync: Ledger sync to notify with fresh ContentsResponse values
            decoders: Per-endpoint decoder overrides
            center: Environment change signal to follow. Defaults to
                default_center when follow_center is True.
            expiration: Staleness window for load-if-needed endpoints
            timeout: Request timeout for an owned RestClient
            follow_center: Set False to ignore environment change signals
        """
        if center is None and follow_center:
            center = default_center
        if environment is None:
            environment = center.current if center is not None else PRODUCTION

        self.environment = environment
        self.sync = sync
        self.expiration = expiration

        self._owns_http = http is None
        self._http: Transport = http if http is not None else RestClient(timeout=timeout)
        self._decoders = {**DEFAULT_DECODERS, **(decoders or {})}
        self._resources: dict[Endpoint, Resource[Any]] = {}

        self._center = center
        self._center_token: Optional[int] = None
        if center is not None:
            self._center_token = center.subscribe(self._on_environment_change)

    # ----------------------------------------
    # Context Manager Protocol
    # ----------------------------------------

    async def __aenter__(self) -> "ConfCoreClient":
        if self._owns_http:
            await self._http.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Cancel in-flight requests, stop following the center, close owned HTTP."""
        self.cancel_all()
        if self._center is not None and self._center_token is not None:
            self._center.unsubscribe(self._center_token)
            self._center_token = None
        if self._owns_http:
            await self._http.close()

    @property
    def http(self) -> Transport:
        return self._http

    # ----------------------------------------
    # Environment
    # ----------------------------------------

    def _on_environment_change(self) -> None:
        self.update_environment(self._center.current)

    def update_environment(self, environment: Environment) -> None:
        """Swap the Environment and start over with empty caches.

        All in-flight requests are cancelled before anything else changes.
        Cached values and observers are discarded.
        """
        self.cancel_all()
        for resource in self._resources.values():
            resource.reset()
        self._resources.clear()
        self.environment = environment
        logger.info(f"Client now targets {environment.base_url}")

    def cancel_all(self) -> None:
        """Cancel the in-flight request of every endpoint."""
        for resource in self._resources.values():
            resource.cancel()

    # ----------------------------------------
    # Resources
    # ----------------------------------------

    def resource(self, endpoint: Endpoint) -> Resource[Any]:
        """Return the Resource for ``endpoint``, creating it on first use."""
        resource = self._resources.get(endpoint)
        if resource is None:
            on_new_data = self._sync_contents if endpoint is Endpoint.SCHEDULE else None
            resource = Resource(
                name=endpoint.name.lower(),
                url=endpoint.url(self.environment),
                transport=self._http,
                decode=self._decoders[endpoint],
                expiration=None if endpoint.always_reload else self.expiration,
                on_new_data=on_new_data,
            )
            self._resources[endpoint] = resource
        return resource

    def cached(self, endpoint: Endpoint) -> Any:
        """Last decoded value for ``endpoint``, or None."""
        resource = self._resources.get(endpoint)
        return resource.latest_data if resource is not None else None

    def _sync_contents(self, contents: ContentsResponse) -> None:
        if self.sync is None:
            return
        try:
            self.sync.trigger(contents)
        except Exception:
            logger.exception("Could not start ledger sync")

    # ----------------------------------------
    # Fetching
    # ----------------------------------------

    def fetch(
        self,
        endpoint: Endpoint,
        on_result: Callable[[FetchResult[Any]], None],
    ) -> Optional["asyncio.Task"]:
        """Fetch ``endpoint`` and deliver the outcome to ``on_result``.

        Returns:
            The request task, or None when fresh cached data was redelivered
        """
        resource = self.resource(endpoint)
        resource.add_observer(on_result)
        resource.cancel()

        if endpoint.always_reload:
            return resource.load()
        return resource.load_if_needed()

    def fetch_news(self, on_result: Observer) -> Optional["asyncio.Task"]:
        return self.fetch(Endpoint.NEWS, on_result)

    def fetch_featured_sections(self, on_result: Observer) -> Optional["asyncio.Task"]:
        return self.fetch(Endpoint.FEATURED_SECTIONS, on_result)

    def fetch_content(self, on_result: Observer) -> Optional["asyncio.Task"]:
        return self.fetch(Endpoint.SCHEDULE, on_result)

    def fetch_sessions(self, on_result: Observer) -> Optional["asyncio.Task"]:
        return self.fetch(Endpoint.SESSIONS, on_result)

    def fetch_live_video_assets(self, on_result: Observer) -> Optional["asyncio.Task"]:
        return self.fetch(Endpoint.LIVE_VIDEO_ASSETS, on_result)
