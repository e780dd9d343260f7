"""Per-endpoint cache entry with request ownership and observers.

A Resource holds the last decoded value of one endpoint, the single
in-flight request for it, and the callbacks interested in its results.

Invariants:
    - At most one request task is in flight; load() cancels the previous
      one before starting the next.
    - Only the current request may publish. A result produced by a task
      that has been superseded is dropped.
    - Each observer receives exactly one FetchResult per completed request.
    - A cached redelivery still pending when the entry is cancelled or
      reloaded is dropped.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, Optional, Protocol, TypeVar

from .exceptions import AdapterError, ConfCoreError, NetworkError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Transport(Protocol):
    """Anything that can GET a URL and return its body."""

    async def get(self, url: str) -> bytes: ...


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """Terminal outcome of one fetch: a value or an error, never both."""

    value: Optional[T] = None
    error: Optional[ConfCoreError] = None

    @classmethod
    def success(cls, value: T) -> "FetchResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ConfCoreError) -> "FetchResult[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value or raise the error."""
        if self.error is not None:
            raise self.error
        return self.value


Observer = Callable[[FetchResult[Any]], None]


class Resource(Generic[T]):
    """Cache entry for one endpoint URL.

    Attributes:
        name: Label used in logs (usually the endpoint name)
        url: Absolute URL fetched by load()
        latest_data: Last successfully decoded value
        latest_error: Error from the most recent completed request, if any
        timestamp: Monotonic time of the last completed request
        expiration: Seconds after which latest_data counts as stale
            (None = never)
    """

    def __init__(
        self,
        name: str,
        url: str,
        transport: Transport,
        decode: Callable[[bytes], T],
        expiration: Optional[float] = None,
        on_new_data: Optional[Callable[[T], None]] = None,
    ):
        self.name = name
        self.url = url
        self.expiration = expiration
        self.latest_data: Optional[T] = None
        self.latest_error: Optional[ConfCoreError] = None
        self.timestamp: Optional[float] = None

        self._transport = transport
        self._decode = decode
        self._on_new_data = on_new_data
        self._observers: list[Observer] = []
        self._request: Optional[asyncio.Task] = None
        self._redelivery: Optional[asyncio.Handle] = None

    # ----------------------------------------
    # Observers
    # ----------------------------------------

    def add_observer(self, observer: Observer) -> None:
        """Register ``observer``; registering the same callable twice is a no-op."""
        if observer not in self._observers:
            self._observers.append(observer)

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    def _notify(self, result: FetchResult[T]) -> None:
        for observer in list(self._observers):
            try:
                observer(result)
            except Exception:
                logger.exception(f"Observer of {self.name} raised")

    # ----------------------------------------
    # State
    # ----------------------------------------

    @property
    def is_loading(self) -> bool:
        return self._request is not None and not self._request.done()

    @property
    def current_request(self) -> Optional[asyncio.Task]:
        return self._request

    @property
    def is_up_to_date(self) -> bool:
        """True when a non-error value is cached and not expired."""
        if self.latest_data is None or self.latest_error is not None:
            return False
        if self.expiration is None or self.timestamp is None:
            return True
        return time.monotonic() - self.timestamp < self.expiration

    # ----------------------------------------
    # Loading
    # ----------------------------------------

    def load(self) -> asyncio.Task:
        """Cancel any in-flight request and start a new one.

        Must be called from a running event loop.
        """
        self.cancel()
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._perform(), name=f"confcore-{self.name}")
        self._request = task
        return task

    def load_if_needed(self) -> Optional[asyncio.Task]:
        """Reuse fresh cached data, otherwise load().

        When cached data is served, every observer receives it again on the
        next loop iteration and None is returned.
        """
        if self.is_up_to_date:
            logger.debug(f"{self.name}: serving cached data")
            self.cancel()
            cached = FetchResult.success(self.latest_data)
            self._redelivery = asyncio.get_running_loop().call_soon(self._redeliver, cached)
            return None
        return self.load()

    def cancel(self) -> None:
        """Cancel the in-flight request and any pending cached redelivery."""
        if self._request is not None and not self._request.done():
            logger.debug(f"{self.name}: cancelling in-flight request")
            self._request.cancel()
        self._request = None
        if self._redelivery is not None:
            self._redelivery.cancel()
            self._redelivery = None

    def _redeliver(self, result: FetchResult[T]) -> None:
        self._redelivery = None
        self._notify(result)

    def reset(self) -> None:
        """Cancel and forget data, errors and observers."""
        self.cancel()
        self.latest_data = None
        self.latest_error = None
        self.timestamp = None
        self._observers.clear()

    async def _perform(self) -> None:
        me = asyncio.current_task()

        try:
            payload = await self._transport.get(self.url)
        except NetworkError as e:
            logger.warning(f"{self.name}: request failed: {e}")
            self._complete(me, FetchResult.failure(e))
            return
        except Exception as e:
            logger.warning(f"{self.name}: transport raised {type(e).__name__}: {e}")
            error = NetworkError(
                f"Request for {self.name} failed: {e}",
                url=self.url,
                cause=e,
            )
            self._complete(me, FetchResult.failure(error))
            return

        try:
            value = self._decode(payload)
        except Exception as e:
            logger.warning(f"{self.name}: could not decode payload: {e}")
            error = AdapterError(
                f"Could not decode {self.name} payload",
                endpoint=self.name,
                cause=e,
            )
            self._complete(me, FetchResult.failure(error))
            return

        self._complete(me, FetchResult.success(value))

    def _complete(self, task: Optional[asyncio.Task], result: FetchResult[T]) -> None:
        if task is not self._request:
            logger.debug(f"{self.name}: dropping result of superseded request")
            return

        self.timestamp = time.monotonic()
        if result.ok:
            self.latest_data = result.value
            self.latest_error = None
        else:
            self.latest_error = result.error

        # Sync hooks run before observers and must not affect them
        if result.ok and self._on_new_data is not None:
            try:
                self._on_new_data(result.value)
            except Exception:
                logger.exception(f"{self.name}: new-data hook failed")

        self._notify(result)
