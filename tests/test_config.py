#!/usr/bin/env python3
"""Unit tests for Settings and the exception hierarchy."""
import sys

import pytest

sys.path.insert(0, str(__file__).rsplit("/tests", 1)[0])
from src.confcore.api.environment import PRODUCTION, Environment
from src.confcore.api.exceptions import (
    AdapterError,
    ConfCoreError,
    ConfigurationError,
    HTTPStatusError,
    NetworkError,
    TimeoutError,
)
from src.confcore.config import Settings

CONFCORE_VARS = [
    "CONFCORE_BASE_URL",
    "CONFCORE_HTTP_TIMEOUT",
    "CONFCORE_CACHE_TTL",
    "CONFCORE_LEDGER_URL",
    "CONFCORE_SYNC_ENABLED",
    "CONFCORE_SYNC_EVENTS",
    "CONFCORE_UPLOAD_SPACING",
]


@pytest.fixture
def clean_env(monkeypatch):
    for var in CONFCORE_VARS + list(Environment.ENV_VARS.values()):
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


# ============================================
# Settings Tests
# ============================================

class TestSettings:
    """Test environment-driven configuration."""

    def test_defaults(self, clean_env):
        settings = Settings()

        assert settings.environment is PRODUCTION
        assert settings.http_timeout == 30.0
        assert settings.cache_ttl is None
        assert settings.ledger_url is None
        assert settings.sync_events == ("wwdc2017", "wwdc2018", "wwdc2019")
        assert settings.upload_spacing == 3.0
        assert not settings.sync_active

    def test_sync_active_with_ledger_url(self, clean_env):
        clean_env.setenv("CONFCORE_LEDGER_URL", "https://ledger.example.com/rows")
        assert Settings().sync_active

    def test_sync_can_be_disabled(self, clean_env):
        clean_env.setenv("CONFCORE_LEDGER_URL", "https://ledger.example.com/rows")
        clean_env.setenv("CONFCORE_SYNC_ENABLED", "false")
        assert not Settings().sync_active

    @pytest.mark.parametrize("value,expected", [
        ("1", True), ("yes", True), ("ON", True), ("True", True),
        ("0", False), ("no", False), ("off", False),
    ])
    def test_sync_enabled_spellings(self, clean_env, value, expected):
        clean_env.setenv("CONFCORE_SYNC_ENABLED", value)
        assert Settings().sync_enabled is expected

    def test_unknown_sync_enabled_value_raises(self, clean_env):
        clean_env.setenv("CONFCORE_SYNC_ENABLED", "maybe")

        with pytest.raises(ConfigurationError) as exc:
            Settings()

        assert "CONFCORE_SYNC_ENABLED" in exc.value.details["invalid_keys"]

    def test_event_list_is_parsed(self, clean_env):
        clean_env.setenv("CONFCORE_SYNC_EVENTS", "wwdc2020, wwdc2021,,")
        assert Settings().sync_events == ("wwdc2020", "wwdc2021")

    def test_numeric_overrides(self, clean_env):
        clean_env.setenv("CONFCORE_HTTP_TIMEOUT", "12.5")
        clean_env.setenv("CONFCORE_CACHE_TTL", "300")
        clean_env.setenv("CONFCORE_UPLOAD_SPACING", "1")

        settings = Settings()

        assert settings.http_timeout == 12.5
        assert settings.cache_ttl == 300
        assert settings.upload_spacing == 1

    @pytest.mark.parametrize("var,value", [
        ("CONFCORE_HTTP_TIMEOUT", "fast"),
        ("CONFCORE_HTTP_TIMEOUT", "0"),
        ("CONFCORE_UPLOAD_SPACING", "-3"),
    ])
    def test_invalid_numbers_raise(self, clean_env, var, value):
        clean_env.setenv(var, value)

        with pytest.raises(ConfigurationError) as exc:
            Settings()

        assert var in exc.value.details["invalid_keys"]

    def test_repr_mentions_base_url(self, clean_env):
        assert PRODUCTION.base_url in repr(Settings())


# ============================================
# Exception Tests
# ============================================

class TestExceptions:
    """Test the error taxonomy surfaced to callers."""

    def test_kinds(self):
        assert NetworkError("x").kind == "network"
        assert HTTPStatusError("x", status_code=500).kind == "network"
        assert AdapterError().kind == "adapter"

    def test_network_error_carries_cause(self):
        cause = OSError("reset by peer")
        error = TimeoutError("slow", timeout_seconds=5, cause=cause)

        assert error.cause is cause
        assert error.__cause__ is cause
        assert isinstance(error, ConfCoreError)

    def test_response_body_is_truncated(self):
        error = HTTPStatusError("x", status_code=502, response_body="e" * 2000)
        assert len(error.details["response_body"]) == 500
        assert error.response_body == "e" * 2000

    def test_str_and_to_dict(self):
        error = AdapterError("bad payload", endpoint="news")

        assert str(error).startswith("[ADAPTER_ERROR] bad payload")
        data = error.to_dict()
        assert data["kind"] == "adapter"
        assert data["details"] == {"endpoint": "news"}
        assert data["cause"] is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
