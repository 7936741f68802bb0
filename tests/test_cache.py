import json
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from travel_crm.core.cache import CacheService


@pytest.mark.asyncio
async def test_without_client_reads_miss_and_writes_drop():
    cache = CacheService()
    assert await cache.get("k") is None
    await cache.set("k", "v", ttl=10)
    await cache.delete("k")
    assert await cache.get_json("k") is None


@pytest.mark.asyncio
async def test_set_with_ttl_uses_setex(mock_cache, mock_redis):
    await mock_cache.set("rate", "83.2", ttl=60)
    mock_redis.setex.assert_awaited_once_with("rate", 60, "83.2")
    mock_redis.set.assert_not_awaited()


@pytest.mark.asyncio
async def test_set_without_ttl(mock_cache, mock_redis):
    await mock_cache.set("rate", "83.2")
    mock_redis.set.assert_awaited_once_with("rate", "83.2")


@pytest.mark.asyncio
async def test_json_round_trip_through_redis(mock_cache, mock_redis):
    await mock_cache.set_json("board", {"month": 4}, ttl=30)
    stored = mock_redis.setex.await_args.args[2]
    mock_redis.get = AsyncMock(return_value=stored)
    assert await mock_cache.get_json("board") == {"month": 4}


@pytest.mark.asyncio
async def test_invalid_json_is_a_miss(mock_cache, mock_redis):
    mock_redis.get = AsyncMock(return_value="{not json")
    assert await mock_cache.get_json("board") is None


@pytest.mark.asyncio
async def test_redis_errors_are_swallowed(mock_cache, mock_redis):
    mock_redis.get = AsyncMock(side_effect=RedisConnectionError("down"))
    mock_redis.setex = AsyncMock(side_effect=RedisConnectionError("down"))
    assert await mock_cache.get("k") is None
    await mock_cache.set("k", json.dumps({}), ttl=5)
