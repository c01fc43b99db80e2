"""polluted_cities - Polluted city listings behind a rate-limited, cached API client."""

# Stores
from polluted_cities.adapters import AsyncMemoryStore, AsyncRedisStore, AsyncStore

# Upstream clients
from polluted_cities.allowlist import AllowlistClient
from polluted_cities.auth import TokenManager
from polluted_cities.cache import TTL_MISSING, TTL_NO_EXPIRY, Cache
from polluted_cities.config import Settings, get_settings
from polluted_cities.descriptions import DescriptionClient

# Duration parsing
from polluted_cities.duration import parse_duration
from polluted_cities.errors import (
    DescriptionNotFound,
    ErrorResponse,
    PollutedCitiesError,
    RateLimitTimeout,
    StoreError,
    UnknownCountryError,
    UpstreamAuthError,
    UpstreamError,
    UpstreamLogicError,
    UpstreamRateLimitExceeded,
    UpstreamUnauthorized,
)
from polluted_cities.logging import configure_logging, get_logger
from polluted_cities.pollution import PollutionClient
from polluted_cities.ratelimit import FixedWindowRateLimiter

# Service
from polluted_cities.service import CitiesService, create_cities_service

# Core types
from polluted_cities.types import AuthToken, City, CityPage, Duration, PollutionQuery

__version__ = "0.1.0"

__all__ = [
    "TTL_MISSING",
    "TTL_NO_EXPIRY",
    "AllowlistClient",
    "AsyncMemoryStore",
    "AsyncRedisStore",
    "AsyncStore",
    "AuthToken",
    "Cache",
    "CitiesService",
    "City",
    "CityPage",
    "DescriptionClient",
    "DescriptionNotFound",
    "Duration",
    "ErrorResponse",
    "FixedWindowRateLimiter",
    "PollutedCitiesError",
    "PollutionClient",
    "PollutionQuery",
    "RateLimitTimeout",
    "Settings",
    "StoreError",
    "TokenManager",
    "UnknownCountryError",
    "UpstreamAuthError",
    "UpstreamError",
    "UpstreamLogicError",
    "UpstreamRateLimitExceeded",
    "UpstreamUnauthorized",
    "configure_logging",
    "create_cities_service",
    "get_logger",
    "get_settings",
    "parse_duration",
]
