#!/usr/bin/env python3
"""Exception Hierarchy for the ConfCore content client.

Design Principles:
    - All exceptions inherit from ConfCoreError base class
    - Exceptions preserve context (original error, timestamps, details)
    - Only two kinds ever reach fetch callbacks: NetworkError and AdapterError

Exception Hierarchy:
    ConfCoreError (base)
    ├── ConfigurationError (unrecoverable - fix config)
    ├── NetworkError (transport/HTTP failure, kind "network")
    │   ├── ConnectionError
    │   ├── TimeoutError
    │   └── HTTPStatusError
    ├── AdapterError (payload could not be decoded, kind "adapter")
    └── LedgerError (sync ledger read/write failed, never surfaced to callers)
"""
from datetime import datetime, timezone
from typing import Any, Optional

# ============================================
# Base Exception
# ============================================

class ConfCoreError(Exception):
    """Base exception for all ConfCore errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (e.g., "NETWORK_ERROR")
        details: Additional context as a dictionary
        timestamp: When the error occurred
        cause: The original exception that caused this error
    """

    kind = "unknown"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)
        self.cause = cause

        if cause:
            self.__cause__ = cause

    def __str__(self) -> str:
        parts = [self.message]
        if self.code:
            parts.insert(0, f"[{self.code}]")
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            parts.append(f"({detail_str})")
        return " ".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"details={self.details!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "kind": self.kind,
            "message": self.message,
            "code": self.code,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause else None,
        }


# ============================================
# Configuration Errors
# ============================================

class ConfigurationError(ConfCoreError):
    """Raised when configuration is missing or invalid."""

    kind = "configuration"

    def __init__(
        self,
        message: str,
        invalid_keys: Optional[list[str]] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if invalid_keys:
            details["invalid_keys"] = invalid_keys
        super().__init__(
            message,
            code="CONFIGURATION_ERROR",
            details=details,
            **kwargs,
        )


# ============================================
# Network Errors
# ============================================

class NetworkError(ConfCoreError):
    """Transport or HTTP-level failure.

    The underlying transport exception is available as ``cause``.
    """

    kind = "network"

    def __init__(self, message: str, url: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if url:
            details["url"] = url
        kwargs.setdefault("code", "NETWORK_ERROR")
        super().__init__(message, details=details, **kwargs)
        self.url = url


class ConnectionError(NetworkError):
    """Raised when connection to server fails."""

    def __init__(self, message: str = "Failed to connect to server", **kwargs):
        super().__init__(message, code="CONNECTION_ERROR", **kwargs)


class TimeoutError(NetworkError):
    """Raised when request times out."""

    def __init__(
        self,
        message: str = "Request timed out",
        timeout_seconds: Optional[float] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if timeout_seconds:
            details["timeout_seconds"] = timeout_seconds
        super().__init__(message, code="TIMEOUT_ERROR", details=details, **kwargs)


class HTTPStatusError(NetworkError):
    """Raised when the server answers with a status >= 400.

    Attributes:
        status_code: HTTP status code
        method: HTTP method of the failed request
        response_body: Raw response body (truncated in details)
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        method: str = "GET",
        response_body: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        details["status_code"] = status_code
        details["method"] = method
        if response_body:
            details["response_body"] = response_body[:500]
        super().__init__(
            message,
            code=f"HTTP_ERROR_{status_code}",
            details=details,
            **kwargs,
        )
        self.status_code = status_code
        self.method = method
        self.response_body = response_body


# ============================================
# Decoding Errors
# ============================================

class AdapterError(ConfCoreError):
    """Raised when a payload was received but could not be decoded."""

    kind = "adapter"

    def __init__(
        self,
        message: str = "Payload could not be decoded",
        endpoint: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if endpoint:
            details["endpoint"] = endpoint
        super().__init__(message, code="ADAPTER_ERROR", details=details, **kwargs)
        self.endpoint = endpoint


# ============================================
# Sync Errors
# ============================================

class LedgerError(ConfCoreError):
    """Raised by ledger adapters when a read or upload fails.

    The sync pipeline catches these; they never reach fetch callers.
    """

    kind = "ledger"

    def __init__(self, message: str, operation: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if operation:
            details["operation"] = operation
        super().__init__(message, code="LEDGER_ERROR", details=details, **kwargs)
