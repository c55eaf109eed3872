from functools import wraps
from typing import Any, Callable

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from admin_api.exceptions import PersistenceError

LOG = structlog.get_logger()


def db_operation(name: str) -> Callable:
    """Decorator that logs database failures and surfaces them as PersistenceError.

    Failures are not retried: the caller sees the first error.

    Args:
        name: Operation name attached to the log line and the raised error
    """

    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await fn(*args, **kwargs)
            except SQLAlchemyError as e:
                LOG.error("SQLAlchemyError", operation=name, exc_info=True)
                raise PersistenceError(name, str(e)) from e

        return wrapper

    return decorator


class BaseAlchemyDB:
    """Base database client with connection and session management."""

    def __init__(self, db_engine: AsyncEngine) -> None:
        self.engine = db_engine
        self.Session = async_sessionmaker(bind=db_engine, expire_on_commit=False)
