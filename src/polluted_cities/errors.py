"""Error types for polluted_cities.

Lower layers either resolve a failure (a retry succeeds), degrade it (a
missing description) or raise one of these verbatim. Only the service
boundary turns them into a user-visible response.
"""

from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    status: int
    details: dict[str, Any] = {}


class PollutedCitiesError(Exception):
    """Base exception for polluted_cities."""

    code = "POLLUTED_CITIES_ERROR"
    status = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            status=self.status,
            details=self.details,
        )


class StoreError(PollutedCitiesError):
    """The shared cache store is unreachable or rejected a command."""

    code = "STORE_ERROR"
    status = 502


class RateLimitTimeout(PollutedCitiesError):
    """Waiting for a rate-limit admission exceeded the wait ceiling."""

    code = "RATE_LIMIT_TIMEOUT"
    status = 503


class UnknownCountryError(PollutedCitiesError):
    """Country code has no entry in the country table."""

    code = "UNKNOWN_COUNTRY"
    status = 400

    def __init__(self, country: str) -> None:
        super().__init__(f"Unknown country code: {country}", {"country": country})


class DescriptionNotFound(PollutedCitiesError):
    """No description exists for a city. Never escapes DescriptionClient."""

    code = "DESCRIPTION_NOT_FOUND"
    status = 404


class UpstreamError(PollutedCitiesError):
    """An upstream API call failed."""

    code = "UPSTREAM_ERROR"
    status = 502

    def __init__(
        self,
        service: str,
        message: str = "External service error",
        *,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.service = service
        self.status_code = status_code
        details = dict(details or {})
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(f"{service}: {message}", details)


class UpstreamAuthError(UpstreamError):
    """Could not obtain a token from the auth endpoint."""

    code = "UPSTREAM_AUTH_ERROR"


class UpstreamUnauthorized(UpstreamError):
    """Upstream rejected the bearer token (401)."""

    code = "UPSTREAM_UNAUTHORIZED"


class UpstreamRateLimitExceeded(UpstreamError):
    """Upstream rejected the call with 429."""

    code = "UPSTREAM_RATE_LIMITED"
    status = 429

    def __init__(
        self,
        service: str,
        message: str = "Rate limit exceeded",
        *,
        retry_after: float | None = None,
    ) -> None:
        self.retry_after = retry_after
        super().__init__(
            service,
            message,
            status_code=429,
            details={"retry_after": retry_after},
        )


class UpstreamLogicError(UpstreamError):
    """Upstream answered but reported a logical error, e.g. unknown country."""

    code = "UPSTREAM_LOGIC_ERROR"
