import json
from datetime import timedelta
from typing import Any, Union

import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError

from admin_api.exceptions import CacheUnavailable
from admin_api.forge.sdk.cache.base import CACHE_EXPIRE_TIME, BaseCache, expire_seconds

LOG = structlog.get_logger()


class RedisCache(BaseCache):
    """Cache shared between workers. Values must be JSON serializable."""

    def __init__(self, client: Redis) -> None:
        self.client = client

    async def get(self, key: str) -> Any:
        try:
            raw = await self.client.get(key)
        except RedisError as e:
            LOG.warning("Redis get failed", key=key, exc_info=True)
            raise CacheUnavailable(key, str(e)) from e
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            # overwritten by the next set on this key
            LOG.warning("Unreadable redis value", key=key, exc_info=True)
            raise CacheUnavailable(key, f"unreadable value: {e}") from e

    async def set(self, key: str, value: Any, ex: Union[int, timedelta, None] = CACHE_EXPIRE_TIME) -> None:
        seconds = expire_seconds(ex)
        try:
            await self.client.set(key, json.dumps(value), ex=int(seconds) if seconds else None)
        except RedisError as e:
            LOG.warning("Redis set failed", key=key, exc_info=True)
            raise CacheUnavailable(key, str(e)) from e

    async def delete(self, key: str) -> None:
        try:
            await self.client.delete(key)
        except RedisError as e:
            LOG.warning("Redis delete failed", key=key, exc_info=True)
            raise CacheUnavailable(key, str(e)) from e
