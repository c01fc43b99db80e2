"""Configuration loaded from the environment (and an optional .env file)."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from polluted_cities.duration import parse_duration
from polluted_cities.types import Duration


class Settings(BaseSettings):
    """Settings for the service and its upstream clients."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: str = "local"
    log_level: str = "info"

    # Shared cache store
    redis_url: str = "redis://localhost:6379/0"

    # Upstreams
    polluted_api_url: str = "http://localhost:3000"
    polluted_api_user: str = ""
    polluted_api_password: str = ""
    cities_api_url: str = "https://countriesnow.space"
    wiki_api_url: str = "https://en.wikipedia.org/api/rest_v1"
    http_timeout: float = 10.0
    user_agent: str = "polluted-cities/1.0"

    # Cache lifetimes
    pollution_cache_ttl: Duration = "30s"
    auth_token_ttl: Duration = "10m"
    cities_cache_ttl: Duration = "1h"
    description_cache_ttl: Duration = "24h"
    description_negative_ttl: Duration = "1h"

    # Upstream rate limit: max requests per window, shared by all instances
    rate_limit_key: str = "rl:polluted_api"
    rate_limit_window: Duration = "10s"
    rate_limit_max_requests: int = Field(default=5, ge=1)
    rate_limit_padding: Duration = "100ms"
    rate_limit_max_wait: Duration | None = "2m"

    # Retries on 401/429
    max_retries: int = Field(default=3, ge=0)
    retry_base_delay: Duration = "1s"

    def seconds(self, name: str) -> float | None:
        """Return a duration setting in seconds."""
        value = getattr(self, name)
        return None if value is None else parse_duration(value)


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
