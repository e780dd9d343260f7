"""Runtime settings loaded from environment variables.

Environment Variables:
    CONFCORE_BASE_URL, CONFCORE_*_PATH: Environment overrides (see Environment.from_env)
    CONFCORE_HTTP_TIMEOUT: Request timeout in seconds (default: 30)
    CONFCORE_CACHE_TTL: Seconds before cached data is stale (default: empty, never)
    CONFCORE_LEDGER_URL: Session ledger rows endpoint (default: empty, sync disabled)
    CONFCORE_SYNC_ENABLED: Mirror sessions into the ledger, true/false, yes/no, on/off or 1/0 (default: true)
    CONFCORE_SYNC_EVENTS: Comma-separated event identifiers (default: wwdc2017,wwdc2018,wwdc2019)
    CONFCORE_UPLOAD_SPACING: Seconds between ledger uploads (default: 3)

A ``.env`` file in the working directory is read by load_settings().
"""

import os
from typing import Optional

from dotenv import load_dotenv

from .api.environment import Environment
from .api.exceptions import ConfigurationError
from .sync.use_cases.sync_sessions import DEFAULT_EVENT_IDENTIFIERS, DEFAULT_UPLOAD_SPACING


def _float_var(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(
            f"{name} must be a number, got {raw!r}",
            invalid_keys=[name],
        )
    if value < 0:
        raise ConfigurationError(f"{name} must not be negative", invalid_keys=[name])
    return value


_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _bool_var(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ConfigurationError(
        f"{name} must be one of true/false, yes/no, on/off, 1/0, got {raw!r}",
        invalid_keys=[name],
    )


class Settings:
    """Configuration loaded from environment variables."""

    def __init__(self):
        self.environment = Environment.from_env()
        self.http_timeout = _float_var("CONFCORE_HTTP_TIMEOUT", 30.0)
        self.cache_ttl = _float_var("CONFCORE_CACHE_TTL", None)
        self.ledger_url = os.getenv("CONFCORE_LEDGER_URL", "").strip() or None
        self.sync_enabled = _bool_var("CONFCORE_SYNC_ENABLED", True)
        self.upload_spacing = _float_var("CONFCORE_UPLOAD_SPACING", DEFAULT_UPLOAD_SPACING)

        events = os.getenv("CONFCORE_SYNC_EVENTS", "")
        self.sync_events = tuple(e.strip() for e in events.split(",") if e.strip()) or DEFAULT_EVENT_IDENTIFIERS

        if self.http_timeout == 0:
            raise ConfigurationError(
                "CONFCORE_HTTP_TIMEOUT must be positive",
                invalid_keys=["CONFCORE_HTTP_TIMEOUT"],
            )

    @property
    def sync_active(self) -> bool:
        """Sync runs only when enabled and a ledger URL is configured."""
        return self.sync_enabled and self.ledger_url is not None

    def __repr__(self):
        return (
            f"Settings("
            f"base_url={self.environment.base_url}, "
            f"timeout={self.http_timeout}s, "
            f"cache_ttl={self.cache_ttl}, "
            f"sync={self.sync_active}, "
            f"events={','.join(self.sync_events)}, "
            f"spacing={self.upload_spacing}s)"
        )


def load_settings(dotenv_path: Optional[str] = None) -> Settings:
    """Read ``.env`` (without overriding the process environment) and build Settings."""
    load_dotenv(dotenv_path)
    return Settings()
