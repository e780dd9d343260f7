"""ConfCore API modules.

This package provides the cached, observable client for the conference
content service.

Classes:
    ConfCoreClient: Facade with one fetch method per endpoint
    Resource: Per-endpoint cache entry (value, in-flight request, observers)
    FetchResult: Value-or-error delivered to observers
    RestClient: aiohttp transport returning raw bodies
    Environment: Base URL + per-endpoint paths
    EnvironmentCenter: Process-wide environment change signal
    Endpoint: The five content endpoints and their decoders

Exceptions:
    ConfCoreError: Base exception for all ConfCore errors
    NetworkError: Transport/HTTP failure (surfaced to callbacks)
    AdapterError: Payload could not be decoded (surfaced to callbacks)
"""
from .client import ConfCoreClient
from .endpoints import DEFAULT_DECODERS, Endpoint
from .environment import PRODUCTION, Environment, EnvironmentCenter, default_center
from .exceptions import (
    AdapterError,
    ConfCoreError,
    ConfigurationError,
    ConnectionError,
    HTTPStatusError,
    LedgerError,
    NetworkError,
    TimeoutError,
)
from .http import RestClient
from .models import (
    ContentsResponse,
    FeaturedSection,
    NewsItem,
    Session,
    SessionAsset,
    SessionsResponse,
)
from .resource import FetchResult, Resource

__all__ = [
    # Client
    "ConfCoreClient",
    "Resource",
    "FetchResult",
    "RestClient",
    # Environment
    "Environment",
    "EnvironmentCenter",
    "PRODUCTION",
    "default_center",
    # Endpoints
    "Endpoint",
    "DEFAULT_DECODERS",
    # Models
    "ContentsResponse",
    "FeaturedSection",
    "NewsItem",
    "Session",
    "SessionAsset",
    "SessionsResponse",
    # Exceptions
    "ConfCoreError",
    "ConfigurationError",
    "NetworkError",
    "ConnectionError",
    "TimeoutError",
    "HTTPStatusError",
    "AdapterError",
    "LedgerError",
]
