"""Core types for polluted_cities."""

import time
from dataclasses import dataclass, field
from typing import Any

# Duration type alias
Duration = str | int | float  # "30s", "10m", "24h", "1d" or seconds

MAX_PAGE_SIZE = 50


@dataclass(frozen=True, slots=True)
class AuthToken:
    """A bearer token issued by the pollution API."""

    value: str
    expires_at: float  # Unix timestamp, seconds

    @property
    def headers(self) -> dict[str, str]:
        """Per-request headers carrying this token."""
        return {"Authorization": f"Bearer {self.value}"}

    def is_expired(self, now: float | None = None) -> bool:
        return (time.time() if now is None else now) >= self.expires_at


@dataclass(frozen=True, slots=True)
class PollutionQuery:
    """One page of pollution results for a country."""

    country: str
    page: int = 1
    limit: int = MAX_PAGE_SIZE

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError("page must be at least 1")
        if not 1 <= self.limit <= MAX_PAGE_SIZE:
            raise ValueError(f"limit must be between 1 and {MAX_PAGE_SIZE}")

    @property
    def cache_key(self) -> str:
        return f"polluted:cities:{self.country}:{self.page}:{self.limit}"

    @property
    def params(self) -> dict[str, str | int]:
        return {"limit": self.limit, "page": self.page, "country": self.country}


@dataclass(frozen=True, slots=True)
class City:
    """A polluted city that passed the allowlist, with its description."""

    name: str
    country: str
    pollution_value: float
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "country": self.country,
            "pollutionValue": self.pollution_value,
            "description": self.description,
        }


@dataclass(frozen=True, slots=True)
class CityPage:
    """Paginated service response. ``total`` is the upstream page count."""

    page: int
    limit: int
    total: int
    cities: list[City] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "cities": [city.to_dict() for city in self.cities],
        }
