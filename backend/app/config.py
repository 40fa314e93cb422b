"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All connection strings come from environment variables (never hardcoded in code paths)
    - get_settings() is cached (lru_cache) — single instance per process
    - cache_failure_policy is the ONE place the cache-read failure policy is chosen

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support (ADR: developer UX)
    - Defaults provided for all settings: works out-of-the-box with docker-compose
    - cache_failure_policy defaults to DEGRADE: a Redis outage slows lookups
      instead of failing them (store + external still answer correctly)
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

from app.core.domain_types import CacheFailurePolicy


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Record store
    database_url: str = (
        "postgresql+asyncpg://pokecache:pokecache@db:5432/pokecache"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms provide postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10
    database_auto_create: bool = True

    # Cache
    redis_url: str = "redis://localhost:6379/0"
    cache_key_prefix: str = "record:"
    cache_ttl_seconds: int = 0  # 0 = never expire
    cache_socket_timeout_seconds: float = 2.0
    cache_failure_policy: CacheFailurePolicy = CacheFailurePolicy.DEGRADE

    # External source
    external_source_url_template: str = "https://pokeapi.co/api/v2/pokemon/{name}"
    external_timeout_seconds: float = 10.0
    external_max_retries: int = 2
    external_base_delay_ms: int = 200
    external_max_delay_ms: int = 2000

    # Pipeline
    single_flight_enabled: bool = True

    # API
    cors_origins: list[str] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
