"""Resilient client for the pollution API.

Each call goes through the result cache, then the shared rate limiter, then
the upstream. A 401 refreshes the token and a 429 backs off. Both count
against one retry budget.
"""

from __future__ import annotations

import asyncio
import math
from typing import Any

import httpx

from polluted_cities.auth import SERVICE, TokenManager
from polluted_cities.cache import Cache
from polluted_cities.errors import (
    UpstreamError,
    UpstreamRateLimitExceeded,
    UpstreamUnauthorized,
)
from polluted_cities.logging import get_logger
from polluted_cities.ratelimit import FixedWindowRateLimiter, Sleep
from polluted_cities.types import AuthToken, PollutionQuery

logger = get_logger(__name__)


def parse_retry_after(value: str | None) -> float | None:
    """Seconds from a numeric Retry-After header, or None if unusable."""
    if value is None:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    if not math.isfinite(seconds) or seconds <= 0:
        return None
    return seconds


class PollutionClient:
    """Fetches pages of polluted cities with caching, rate limiting and retries."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        cache: Cache,
        rate_limiter: FixedWindowRateLimiter,
        tokens: TokenManager,
        *,
        cache_ttl: float = 30,
        max_retries: int = 3,
        base_delay: float = 1.0,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if max_retries < 0:
            raise ValueError("max_retries must not be negative")
        self._http = http
        self._cache = cache
        self._rate_limiter = rate_limiter
        self._tokens = tokens
        self._cache_ttl = cache_ttl
        self._max_retries = max_retries
        self._base_delay = base_delay
        self._sleep = sleep

    @property
    def rate_limiter(self) -> FixedWindowRateLimiter:
        return self._rate_limiter

    def backoff_delay(self, attempt: int, retry_after: float | None = None) -> float:
        """Delay before retrying a 429: Retry-After if given, else exponential."""
        if retry_after is not None:
            return retry_after
        return self._base_delay * 2**attempt

    async def fetch_cities(
        self, country: str, page: int = 1, limit: int = 50
    ) -> dict[str, Any] | None:
        """Return the upstream body for one page, or None if it is empty.

        Raises UpstreamUnauthorized or UpstreamRateLimitExceeded once the
        retry budget is spent, and UpstreamError for anything else.
        """
        query = PollutionQuery(country=country, page=page, limit=limit)
        token = await self._tokens.get_token()

        cached = await self._cache.get(query.cache_key)
        if cached:
            return cached

        last_error = UpstreamError(SERVICE, "no attempt made")
        for attempt in range(self._max_retries + 1):
            await self._rate_limiter.acquire()
            try:
                body = await self._request(query, token)
            except UpstreamUnauthorized as e:
                last_error = e
                logger.warning(
                    "Pollution API rejected token, refreshing",
                    attempt=attempt,
                    country=country,
                )
                token = await self._tokens.refresh()
                continue
            except UpstreamRateLimitExceeded as e:
                last_error = e
                if attempt < self._max_retries:
                    delay = self.backoff_delay(attempt, e.retry_after)
                    logger.warning(
                        "Pollution API rate limited, backing off",
                        attempt=attempt,
                        delay=delay,
                        country=country,
                    )
                    await self._sleep(delay)
                continue

            if body:
                await self._cache.set(query.cache_key, body, self._cache_ttl)
                return body
            return None

        logger.error(
            "Pollution API retries exhausted",
            attempts=self._max_retries + 1,
            country=country,
            error=last_error.code,
        )
        raise last_error

    async def _request(self, query: PollutionQuery, token: AuthToken) -> Any:
        try:
            response = await self._http.get(
                "/pollution", params=query.params, headers=token.headers
            )
        except httpx.HTTPError as e:
            raise UpstreamError(SERVICE, f"request failed: {e}") from e

        if response.status_code == httpx.codes.UNAUTHORIZED:
            raise UpstreamUnauthorized(SERVICE, "unauthorized", status_code=401)
        if response.status_code == httpx.codes.TOO_MANY_REQUESTS:
            raise UpstreamRateLimitExceeded(
                SERVICE,
                retry_after=parse_retry_after(response.headers.get("Retry-After")),
            )
        if response.is_error:
            raise UpstreamError(
                SERVICE, "request failed", status_code=response.status_code
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(SERVICE, "invalid JSON body") from e
