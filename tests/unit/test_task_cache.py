from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from admin_api.exceptions import CacheUnavailable
from admin_api.forge.sdk.cache.local import LocalCache
from admin_api.forge.sdk.cache.redis_cache import RedisCache
from admin_api.forge.sdk.schemas.tasks import TaskDto, TaskStatus
from admin_api.forge.sdk.services.task_cache import TaskCache, task_cache_key


class FakeTimer:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def make_task_dto(task_id: str = "42") -> TaskDto:
    return TaskDto(
        id=task_id,
        task_name="nightly-crawl",
        task_definition='{"steps": []}',
        status=TaskStatus.failed,
        owner="auth0|alice",
        created_at=datetime(2024, 5, 1, 12, 0, 0),
        updated_at=datetime(2024, 5, 1, 12, 0, 0),
    )


def test_task_cache_key() -> None:
    assert task_cache_key(42) == "task:42"
    assert task_cache_key("42") == "task:42"


@pytest.mark.asyncio
async def test_local_cache_entry_expires_after_ttl() -> None:
    timer = FakeTimer()
    cache = LocalCache(timer=timer)

    await cache.set("task:42", {"id": "42"}, ex=timedelta(seconds=300))
    timer.now += 299
    assert await cache.get("task:42") == {"id": "42"}

    timer.now += 2
    assert await cache.get("task:42") is None


@pytest.mark.asyncio
async def test_local_cache_without_expiry() -> None:
    timer = FakeTimer()
    cache = LocalCache(timer=timer)

    await cache.set("key", "value", ex=None)
    timer.now += 10**9

    assert await cache.get("key") == "value"


@pytest.mark.asyncio
async def test_local_cache_delete_missing_key() -> None:
    cache = LocalCache()

    await cache.delete("missing")

    assert await cache.get("missing") is None


@pytest.mark.asyncio
async def test_task_cache_round_trip_and_invalidate() -> None:
    task_cache = TaskCache(LocalCache(), ttl=300)
    task_dto = make_task_dto()

    assert await task_cache.get(42) is None
    await task_cache.set(task_dto)
    assert await task_cache.get(42) == task_dto

    await task_cache.invalidate(42)
    assert await task_cache.get(42) is None


@pytest.mark.asyncio
async def test_task_cache_drops_unreadable_entry() -> None:
    cache = LocalCache()
    await cache.set(task_cache_key(42), {"id": "42"})
    task_cache = TaskCache(cache, ttl=300)

    assert await task_cache.get(42) is None
    assert await cache.get(task_cache_key(42)) is None


@pytest.mark.asyncio
async def test_redis_cache_stores_json_with_expiry() -> None:
    client = MagicMock()
    client.set = AsyncMock()
    client.get = AsyncMock(return_value='{"id": "42"}')
    cache = RedisCache(client)

    await cache.set("task:42", {"id": "42"}, ex=timedelta(minutes=5))

    client.set.assert_awaited_once_with("task:42", '{"id": "42"}', ex=300)
    assert await cache.get("task:42") == {"id": "42"}


@pytest.mark.asyncio
async def test_redis_cache_miss() -> None:
    client = MagicMock()
    client.get = AsyncMock(return_value=None)

    assert await RedisCache(client).get("task:42") is None


@pytest.mark.asyncio
async def test_redis_failures_raise_cache_unavailable() -> None:
    client = MagicMock()
    client.get = AsyncMock(side_effect=RedisConnectionError("refused"))
    client.set = AsyncMock(side_effect=RedisConnectionError("refused"))
    client.delete = AsyncMock(side_effect=RedisConnectionError("refused"))
    cache = RedisCache(client)

    with pytest.raises(CacheUnavailable):
        await cache.get("task:42")
    with pytest.raises(CacheUnavailable):
        await cache.set("task:42", {"id": "42"})
    with pytest.raises(CacheUnavailable):
        await cache.delete("task:42")


@pytest.mark.asyncio
async def test_redis_unreadable_value_raises_cache_unavailable() -> None:
    client = MagicMock()
    client.get = AsyncMock(return_value="not json{")

    with pytest.raises(CacheUnavailable):
        await RedisCache(client).get("task:42")
