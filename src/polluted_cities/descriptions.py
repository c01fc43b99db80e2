"""Short city descriptions from the Wikipedia REST API."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from polluted_cities.cache import Cache
from polluted_cities.errors import DescriptionNotFound, StoreError
from polluted_cities.logging import get_logger

logger = get_logger(__name__)

CACHE_PREFIX = "wiki:desc:"
# Negative-cache marker: looked up, nothing found
NO_DESCRIPTION = ""


class DescriptionClient:
    """Looks up a city's summary, falling back to a title search.

    Found descriptions are cached for ``ttl`` seconds. Misses and failures
    cache NO_DESCRIPTION under the same key for ``negative_ttl`` seconds.
    Lookup errors never leave ``describe``.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        cache: Cache,
        *,
        ttl: float = 86_400,
        negative_ttl: float = 3600,
    ) -> None:
        self._http = http
        self._cache = cache
        self._ttl = ttl
        self._negative_ttl = negative_ttl

    async def describe(self, city_name: str) -> str | None:
        """Return a description of ``city_name``, or None if there is none."""
        if not city_name:
            return None
        key = f"{CACHE_PREFIX}{city_name}"
        # Raw read: descriptions are plain text, not JSON
        cached = await self._cache.store.get(key)
        if cached is not None:
            return cached or None

        try:
            description = await self._lookup(city_name)
        except DescriptionNotFound:
            logger.info("No description found", city=city_name)
        except (httpx.HTTPError, ValueError, TypeError) as e:
            logger.warning("Description lookup failed", city=city_name, error=str(e))
        else:
            await self._cache.set(key, description, self._ttl)
            return description

        try:
            await self._cache.set(key, NO_DESCRIPTION, self._negative_ttl)
        except StoreError as e:
            logger.warning(
                "Could not store negative description", city=city_name, error=str(e)
            )
        return None

    async def _lookup(self, city_name: str) -> str:
        summary = await self._summary(city_name.replace(" ", "_"))
        description = _extract(summary)

        if not description or summary.get("type") == "disambiguation":
            logger.debug("Resolving description through search", city=city_name)
            best_key = await self._search(city_name)
            if best_key:
                resolved = await self._summary(best_key)
                description = _extract(resolved) or description

        if not description:
            raise DescriptionNotFound(
                f"No description for {city_name}", {"city": city_name}
            )
        return description

    async def _summary(self, title: str) -> dict[str, Any]:
        response = await self._http.get(f"/page/summary/{quote(title, safe='')}")
        if response.status_code == httpx.codes.NOT_FOUND:
            return {}
        response.raise_for_status()
        data = response.json()
        return data if isinstance(data, dict) else {}

    async def _search(self, city_name: str) -> str | None:
        response = await self._http.get(
            "/search/title", params={"q": city_name, "limit": 1}
        )
        response.raise_for_status()
        data = response.json()
        pages = data.get("pages") if isinstance(data, dict) else None
        if not pages or not isinstance(pages, list) or not isinstance(pages[0], dict):
            return None
        top = pages[0]
        best_key = top.get("key") or top.get("title")
        return best_key if isinstance(best_key, str) else None


def _extract(summary: dict[str, Any]) -> str | None:
    extract = summary.get("extract")
    return extract if isinstance(extract, str) and extract else None
