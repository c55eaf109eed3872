import time
from datetime import timedelta
from typing import Any, Callable, NamedTuple, Union

from cachetools import TLRUCache

from admin_api.forge.sdk.cache.base import CACHE_EXPIRE_TIME, MAX_CACHE_ITEM, BaseCache, expire_seconds


class _Entry(NamedTuple):
    value: Any
    ttl: float | None


def _time_to_use(key: str, entry: _Entry, now: float) -> float:
    if entry.ttl is None:
        return float("inf")
    return now + entry.ttl


class LocalCache(BaseCache):
    def __init__(self, maxsize: int = MAX_CACHE_ITEM, timer: Callable[[], float] = time.monotonic) -> None:
        self.cache: TLRUCache = TLRUCache(maxsize=maxsize, ttu=_time_to_use, timer=timer)

    async def get(self, key: str) -> Any:
        entry = self.cache.get(key)
        if entry is None:
            return None
        return entry.value

    async def set(self, key: str, value: Any, ex: Union[int, timedelta, None] = CACHE_EXPIRE_TIME) -> None:
        self.cache[key] = _Entry(value, expire_seconds(ex))

    async def delete(self, key: str) -> None:
        self.cache.pop(key, None)
