"""City aggregation service.

Combines the pollution, allowlist and description clients into the paginated
response returned to API callers.
"""

from __future__ import annotations

import asyncio
from types import TracebackType
from typing import Any

import httpx

from polluted_cities.adapters.redis import AsyncRedisStore
from polluted_cities.allowlist import AllowlistClient
from polluted_cities.auth import TokenManager
from polluted_cities.cache import Cache
from polluted_cities.config import Settings, get_settings
from polluted_cities.countries import country_name
from polluted_cities.descriptions import DescriptionClient
from polluted_cities.errors import PollutedCitiesError, UnknownCountryError
from polluted_cities.logging import configure_logging, get_logger
from polluted_cities.pollution import PollutionClient
from polluted_cities.ratelimit import FixedWindowRateLimiter
from polluted_cities.types import MAX_PAGE_SIZE, City, CityPage

logger = get_logger(__name__)


def _pollution_value(result: dict[str, Any]) -> Any:
    if "pollutionValue" in result:
        return result["pollutionValue"]
    return result.get("pollution")


class CitiesService:
    """Builds pages of polluted cities that exist in the country's allowlist."""

    def __init__(
        self,
        pollution: PollutionClient,
        allowlist: AllowlistClient,
        descriptions: DescriptionClient,
        *,
        cache: Cache | None = None,
        http_clients: list[httpx.AsyncClient] | None = None,
    ) -> None:
        self.pollution = pollution
        self.allowlist = allowlist
        self.descriptions = descriptions
        self._cache = cache
        self._http_clients = http_clients or []

    async def get_cities(
        self, country: str, page: int = 1, limit: int = MAX_PAGE_SIZE
    ) -> CityPage | None:
        """Return one page of enriched cities, or None when upstream has none.

        Raises PollutedCitiesError for an unknown country, exhausted retries
        or an unusable upstream.
        """
        try:
            return await self._get_cities(country, page, limit)
        except PollutedCitiesError as e:
            logger.error(
                "Failed to build city page",
                country=country,
                page=page,
                limit=limit,
                code=e.code,
                error=e.message,
            )
            raise

    async def _get_cities(self, country: str, page: int, limit: int) -> CityPage | None:
        polluted = await self.pollution.fetch_cities(country, page, limit)
        if not polluted:
            return None

        name = country_name(country)
        if name is None:
            raise UnknownCountryError(country)

        allowed = set(await self.allowlist.list_cities(name.lower()))
        results = [r for r in polluted.get("results") or [] if r.get("name") in allowed]

        descriptions = await asyncio.gather(
            *(self.descriptions.describe(r["name"]) for r in results),
            return_exceptions=True,
        )
        cities = []
        for result, description in zip(results, descriptions):
            if isinstance(description, BaseException):
                logger.warning(
                    "Description unavailable",
                    city=result["name"],
                    error=str(description),
                )
                description = None
            cities.append(
                City(
                    name=result["name"],
                    country=name,
                    pollution_value=_pollution_value(result),
                    description=description or "",
                )
            )

        meta = polluted.get("meta") or {}
        return CityPage(
            page=meta.get("page", page),
            limit=limit,
            total=meta.get("totalPages", 0),
            cities=cities,
        )

    async def aclose(self) -> None:
        """Close HTTP clients and the store connection."""
        for client in self._http_clients:
            await client.aclose()
        if self._cache is not None:
            await self._cache.disconnect()

    async def __aenter__(self) -> CitiesService:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


def create_cities_service(settings: Settings | None = None) -> CitiesService:
    """Create a CitiesService wired to Redis and the configured upstreams.

    Args:
        settings: Configuration (default: loaded from the environment)

    Returns:
        CitiesService sharing one store between cache and rate limiter
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.env)
    cache = Cache(AsyncRedisStore(settings.redis_url))

    def http_client(
        base_url: str, headers: dict[str, str] | None = None
    ) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=base_url,
            headers=headers or {"Content-Type": "application/json"},
            timeout=settings.http_timeout,
        )

    polluted_http = http_client(settings.polluted_api_url)
    cities_http = http_client(settings.cities_api_url)
    wiki_http = http_client(
        settings.wiki_api_url,
        {
            "Accept": "application/json",
            "Accept-Language": "en",
            "User-Agent": settings.user_agent,
        },
    )

    rate_limiter = FixedWindowRateLimiter(
        cache,
        key=settings.rate_limit_key,
        window=settings.seconds("rate_limit_window"),
        max_requests=settings.rate_limit_max_requests,
        padding=settings.seconds("rate_limit_padding"),
        max_wait=settings.seconds("rate_limit_max_wait"),
    )
    tokens = TokenManager(
        polluted_http,
        cache,
        username=settings.polluted_api_user,
        password=settings.polluted_api_password,
        ttl=settings.seconds("auth_token_ttl"),
    )
    pollution = PollutionClient(
        polluted_http,
        cache,
        rate_limiter,
        tokens,
        cache_ttl=settings.seconds("pollution_cache_ttl"),
        max_retries=settings.max_retries,
        base_delay=settings.seconds("retry_base_delay"),
    )
    allowlist = AllowlistClient(
        cities_http, cache, ttl=settings.seconds("cities_cache_ttl")
    )
    descriptions = DescriptionClient(
        wiki_http,
        cache,
        ttl=settings.seconds("description_cache_ttl"),
        negative_ttl=settings.seconds("description_negative_ttl"),
    )
    return CitiesService(
        pollution,
        allowlist,
        descriptions,
        cache=cache,
        http_clients=[polluted_http, cities_http, wiki_http],
    )
