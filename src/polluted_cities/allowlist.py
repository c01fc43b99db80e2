"""Cached per-country city allowlist (CountriesNow API)."""

from __future__ import annotations

import httpx

from polluted_cities.cache import Cache
from polluted_cities.errors import UpstreamError, UpstreamLogicError

SERVICE = "cities-api"


class AllowlistClient:
    """Lists the valid city names of a country.

    No rate limiting and no retries. An upstream error is never cached, since
    the service cannot filter without a trustworthy list.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        cache: Cache,
        *,
        ttl: float = 3600,
    ) -> None:
        self._http = http
        self._cache = cache
        self._ttl = ttl

    async def list_cities(self, country: str) -> list[str]:
        """Return city names for a country name such as ``"germany"``."""
        key = f"cities:{country}"
        cached = await self._cache.get(key)
        if isinstance(cached, list):
            return cached

        try:
            response = await self._http.post(
                "/api/v0.1/countries/cities", json={"country": country}
            )
        except httpx.HTTPError as e:
            raise UpstreamError(SERVICE, f"request failed: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise UpstreamError(
                SERVICE, "invalid JSON body", status_code=response.status_code
            ) from e

        if isinstance(body, dict) and body.get("error"):
            raise UpstreamLogicError(
                SERVICE,
                body.get("msg") or "request failed",
                status_code=response.status_code,
                details={"country": country},
            )
        if response.is_error or not isinstance(body, dict):
            raise UpstreamError(
                SERVICE, "request failed", status_code=response.status_code
            )

        cities = list(body.get("data") or [])
        await self._cache.set(key, cities, self._ttl)
        return cities
