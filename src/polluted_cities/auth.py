"""Bearer token lifecycle for the pollution API."""

from __future__ import annotations

import time
from typing import Any

import httpx

from polluted_cities.cache import Cache
from polluted_cities.errors import UpstreamAuthError
from polluted_cities.logging import get_logger
from polluted_cities.types import AuthToken

logger = get_logger(__name__)

TOKEN_KEY = "polluted:auth:token"
SERVICE = "polluted-api"


class TokenManager:
    """Acquires and caches the pollution API token.

    The token lives in the shared store, so every instance reuses the same
    one until it expires there. A 401 from the API should be answered with
    ``refresh()``.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        cache: Cache,
        *,
        username: str,
        password: str,
        ttl: float = 600,
        login_path: str = "/auth/login",
    ) -> None:
        self._http = http
        self._cache = cache
        self._username = username
        self._password = password
        self._ttl = ttl
        self._login_path = login_path

    async def get_token(self) -> AuthToken:
        """Return the cached token, acquiring one if none is cached."""
        cached = await self._cache.get(TOKEN_KEY)
        if isinstance(cached, dict) and cached.get("token"):
            token = AuthToken(
                value=cached["token"],
                expires_at=float(cached.get("expires_at", 0)),
            )
            if not token.is_expired():
                return token
        return await self.refresh()

    async def refresh(self) -> AuthToken:
        """Acquire a new token from the auth endpoint and cache it."""
        data = await self._login()
        token = AuthToken(value=data["token"], expires_at=time.time() + self._ttl)
        await self._cache.set(
            TOKEN_KEY,
            {"token": token.value, "expires_at": token.expires_at},
            self._ttl,
        )
        logger.info("Auth token refreshed", ttl=self._ttl)
        return token

    async def _login(self) -> dict[str, Any]:
        try:
            response = await self._http.post(
                self._login_path,
                json={"username": self._username, "password": self._password},
            )
        except httpx.HTTPError as e:
            raise UpstreamAuthError(SERVICE, f"login request failed: {e}") from e

        if not response.is_success:
            raise UpstreamAuthError(
                SERVICE, "login rejected", status_code=response.status_code
            )
        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamAuthError(SERVICE, "login returned invalid JSON") from e
        if not isinstance(data, dict) or not data.get("token"):
            raise UpstreamAuthError(SERVICE, "login response has no token")
        return data
