"""Redis Record Cache — key layout, miss vs outage, corrupt entries, TTL.

Design Decisions:
    - Redis client mocked with AsyncMock at the redis.asyncio boundary (no server needed)
"""

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from app.core.domain_types import NaturalKey, Record
from app.core.errors import CacheUnavailableError
from app.infrastructure.redis_cache import RedisRecordCache

PIKACHU = Record(id=1, name=NaturalKey("pikachu"), height=40, weight=60)


@pytest.fixture
def redis_client():
    client = AsyncMock()
    client.get.return_value = None
    return client


async def test_get_uses_record_prefix_and_decodes(redis_client):
    redis_client.get.return_value = b'{"id":1,"name":"pikachu","height":40,"weight":60}'
    cache = RedisRecordCache(redis_client)

    assert await cache.get(NaturalKey("pikachu")) == PIKACHU
    redis_client.get.assert_awaited_once_with("record:pikachu")


async def test_never_set_key_is_a_miss_not_an_error(redis_client):
    cache = RedisRecordCache(redis_client)
    assert await cache.get(NaturalKey("ditto")) is None


@pytest.mark.parametrize("exc", [
    RedisConnectionError("refused"), RedisTimeoutError("slow"), OSError("reset"),
])
async def test_transport_failure_on_get_is_cache_unavailable(redis_client, exc):
    redis_client.get.side_effect = exc
    cache = RedisRecordCache(redis_client)

    with pytest.raises(CacheUnavailableError) as exc_info:
        await cache.get(NaturalKey("pikachu"))
    assert exc_info.value.operation == "get"
    assert exc_info.value.context.record_key == "pikachu"


async def test_corrupt_entry_is_treated_as_miss(redis_client):
    redis_client.get.return_value = b"{not json"
    cache = RedisRecordCache(redis_client)

    assert await cache.get(NaturalKey("pikachu")) is None


async def test_entry_for_another_name_is_treated_as_miss(redis_client):
    redis_client.get.return_value = b'{"id":2,"name":"eevee","height":3,"weight":65}'
    cache = RedisRecordCache(redis_client)

    assert await cache.get(NaturalKey("pikachu")) is None


async def test_set_writes_flat_json_without_expiry_by_default(redis_client):
    cache = RedisRecordCache(redis_client)

    await cache.set(NaturalKey("pikachu"), PIKACHU)

    redis_client.set.assert_awaited_once_with(
        "record:pikachu", '{"id":1,"name":"pikachu","height":40,"weight":60}',
    )


async def test_set_applies_ttl_when_configured(redis_client):
    cache = RedisRecordCache(redis_client, prefix="poke:", ttl_seconds=300)

    await cache.set(NaturalKey("pikachu"), PIKACHU)

    args, kwargs = redis_client.set.await_args
    assert args[0] == "poke:pikachu"
    assert kwargs == {"ex": 300}


async def test_transport_failure_on_set_is_cache_unavailable(redis_client):
    redis_client.set.side_effect = RedisConnectionError("refused")
    cache = RedisRecordCache(redis_client)

    with pytest.raises(CacheUnavailableError) as exc_info:
        await cache.set(NaturalKey("pikachu"), PIKACHU)
    assert exc_info.value.operation == "set"


async def test_health_check(redis_client):
    redis_client.ping.return_value = True
    assert await RedisRecordCache(redis_client).health_check() is True

    redis_client.ping.side_effect = RedisConnectionError("refused")
    assert await RedisRecordCache(redis_client).health_check() is False
