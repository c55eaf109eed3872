from datetime import timedelta

import structlog
from pydantic import ValidationError

from admin_api.forge.sdk.cache.base import BaseCache
from admin_api.forge.sdk.schemas.tasks import TaskDto

LOG = structlog.get_logger()

TASK_CACHE_PREFIX = "task"


def task_cache_key(task_id: int | str) -> str:
    return f"{TASK_CACHE_PREFIX}:{task_id}"


class TaskCache:
    """
    Read-through cache of materialized task DTOs.

    A store failure surfaces as CacheUnavailable, which callers treat as a miss.
    """

    def __init__(self, cache: BaseCache, ttl: int | timedelta) -> None:
        self.cache = cache
        self.ttl = ttl

    async def get(self, task_id: int | str) -> TaskDto | None:
        key = task_cache_key(task_id)
        cached = await self.cache.get(key)
        if cached is None:
            return None
        try:
            return TaskDto.model_validate(cached)
        except ValidationError:
            LOG.warning("Dropping unreadable task cache entry", key=key, exc_info=True)
            await self.cache.delete(key)
            return None

    async def set(self, task_dto: TaskDto) -> None:
        await self.cache.set(task_cache_key(task_dto.id), task_dto.model_dump(mode="json"), ex=self.ttl)

    async def invalidate(self, task_id: int | str) -> None:
        await self.cache.delete(task_cache_key(task_id))
