"""Redis Record Cache — RecordCache implementation over redis.asyncio.

Invariants:
    - Cache key is prefix + normalized key ("record:pikachu" by default)
    - Never-set key → None (a miss), never an error
    - Transport failures (RedisError, OSError, timeouts) → CacheUnavailableError, never a miss
    - Corrupt payloads are treated as a miss and logged; the next write-back overwrites them
    - ttl_seconds == 0 stores without expiry

Design Decisions:
    - Shared client with internal connection pool: safe for concurrent lookups
    - Client injected (from_url builds one): tests pass an AsyncMock
"""

import logging

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from app.core.domain_types import NaturalKey, Record
from app.core.errors import CacheUnavailableError, ErrorContext
from app.core.record_codec import (
    DEFAULT_KEY_PREFIX, RecordDecodeError, cache_key, decode_record, encode_record,
)

logger = logging.getLogger(__name__)


class RedisRecordCache:
    """Record cache stored as flat JSON strings in Redis."""

    def __init__(
        self,
        client: aioredis.Redis,
        prefix: str = DEFAULT_KEY_PREFIX,
        ttl_seconds: int = 0,
    ):
        self.client = client
        self.prefix = prefix
        self.ttl_seconds = ttl_seconds

    @classmethod
    def from_url(
        cls,
        redis_url: str,
        prefix: str = DEFAULT_KEY_PREFIX,
        ttl_seconds: int = 0,
        socket_timeout: float = 2.0,
        max_connections: int = 50,
    ) -> "RedisRecordCache":
        client = aioredis.from_url(
            redis_url,
            decode_responses=False,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
            max_connections=max_connections,
        )
        return cls(client, prefix=prefix, ttl_seconds=ttl_seconds)

    async def get(self, key: NaturalKey) -> Record | None:
        full_key = cache_key(key, self.prefix)
        try:
            raw = await self.client.get(full_key)
        except (RedisError, OSError) as e:
            raise CacheUnavailableError(
                str(e), "get", ErrorContext(record_key=key),
            ) from e
        if raw is None:
            return None
        try:
            return decode_record(raw, key)
        except RecordDecodeError as e:
            logger.warning(
                f"Discarding corrupt cache entry: {e}",
                extra={"record_key": key, "tier": "cache"},
            )
            return None

    async def set(self, key: NaturalKey, record: Record) -> None:
        full_key = cache_key(key, self.prefix)
        payload = encode_record(record)
        try:
            if self.ttl_seconds > 0:
                await self.client.set(full_key, payload, ex=self.ttl_seconds)
            else:
                await self.client.set(full_key, payload)
        except (RedisError, OSError) as e:
            raise CacheUnavailableError(
                str(e), "set", ErrorContext(record_key=key),
            ) from e

    async def health_check(self) -> bool:
        """Ping Redis (for readiness probes)."""
        try:
            return bool(await self.client.ping())
        except (RedisError, OSError) as e:
            logger.error(f"Cache health check failed: {e}")
            return False

    async def close(self) -> None:
        await self.client.aclose()
