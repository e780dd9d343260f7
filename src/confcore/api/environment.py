"""Environment values and the process-wide environment change signal.

An Environment is an immutable bundle of base URL plus one path per
endpoint. Exactly one Environment is "current" at a time; components that
need to react to a swap subscribe to an EnvironmentCenter and read
``center.current`` when notified.

Usage:
    center = EnvironmentCenter(PRODUCTION)
    token = center.subscribe(lambda: print("changed to", center.current))
    center.update(Environment.from_env())
    center.unsubscribe(token)
"""

import itertools
import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, replace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Environment:
    """Base URL and per-endpoint paths of one content deployment."""

    base_url: str
    news_path: str = "/news.json"
    featured_sections_path: str = "/explore.json"
    sessions_path: str = "/contents.json"
    videos_path: str = "/videos.json"
    live_videos_path: str = "/videos_live.json"

    # Environment variable name per field, used by from_env()
    ENV_VARS = {
        "base_url": "CONFCORE_BASE_URL",
        "news_path": "CONFCORE_NEWS_PATH",
        "featured_sections_path": "CONFCORE_FEATURED_PATH",
        "sessions_path": "CONFCORE_CONTENTS_PATH",
        "videos_path": "CONFCORE_VIDEOS_PATH",
        "live_videos_path": "CONFCORE_LIVE_VIDEOS_PATH",
    }

    def url(self, path: str) -> str:
        """Join ``path`` onto the base URL."""
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    @classmethod
    def from_env(cls, default: "Environment | None" = None) -> "Environment":
        """Build an Environment from CONFCORE_* variables.

        Any variable that is unset or empty keeps the value from ``default``
        (PRODUCTION when not given).
        """
        base = default or PRODUCTION
        overrides = {}
        for field_name, var in cls.ENV_VARS.items():
            value = os.getenv(var, "").strip()
            if value:
                overrides[field_name] = value
        return replace(base, **overrides) if overrides else base


PRODUCTION = Environment(base_url="https://api2019.wwdc.io")


class EnvironmentCenter:
    """Broadcasts environment changes to subscribers.

    The signal carries no payload. Subscribers read ``current`` when they
    are called back.
    """

    def __init__(self, initial: Environment = PRODUCTION):
        self._current = initial
        self._subscribers: dict[int, Callable[[], None]] = {}
        self._tokens = itertools.count(1)

    @property
    def current(self) -> Environment:
        return self._current

    def subscribe(self, callback: Callable[[], None]) -> int:
        """Register ``callback`` and return a token for unsubscribe()."""
        token = next(self._tokens)
        self._subscribers[token] = callback
        return token

    def unsubscribe(self, token: int) -> None:
        self._subscribers.pop(token, None)

    def update(self, environment: Environment) -> None:
        """Install ``environment`` as current and notify every subscriber."""
        self._current = environment
        self.post()

    def post(self) -> None:
        """Emit the change signal without altering ``current``."""
        logger.info(f"Environment changed to {self._current.base_url}")
        for callback in list(self._subscribers.values()):
            try:
                callback()
            except Exception:
                logger.exception("Environment change subscriber failed")


# Process-wide default signal
default_center = EnvironmentCenter()
