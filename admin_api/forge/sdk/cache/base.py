from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Any, Union

CACHE_EXPIRE_TIME = timedelta(minutes=5)
MAX_CACHE_ITEM = 1000


def expire_seconds(ex: Union[int, timedelta, None]) -> float | None:
    if ex is None:
        return None
    if isinstance(ex, timedelta):
        return ex.total_seconds()
    return float(ex)


class BaseCache(ABC):
    @abstractmethod
    async def set(self, key: str, value: Any, ex: Union[int, timedelta, None] = CACHE_EXPIRE_TIME) -> None:
        pass

    @abstractmethod
    async def get(self, key: str) -> Any:
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        pass
