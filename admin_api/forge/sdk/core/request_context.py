from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any


@dataclass
class RequestContext:
    request_id: str | None = None
    # validated claims placed here by the authentication layer
    claims: Any = None
    user_id: str | None = None

    def __repr__(self) -> str:
        return f"RequestContext(request_id={self.request_id}, user_id={self.user_id})"

    def __str__(self) -> str:
        return self.__repr__()


_context: ContextVar[RequestContext | None] = ContextVar(
    "Request context",
    default=None,
)


def current() -> RequestContext | None:
    """
    Get the current context

    Returns:
        The current context, or None if there is none
    """
    return _context.get()


def ensure_context() -> RequestContext:
    """
    Get the current context, or raise an error if there is none

    Returns:
        The current context if there is one

    Raises:
        RuntimeError: If there is no current context
    """
    context = current()
    if context is None:
        raise RuntimeError("No request context")
    return context


def set(context: RequestContext) -> None:
    """
    Set the current context

    Args:
        context: The context to set

    Returns:
        None
    """
    _context.set(context)


def reset() -> None:
    """
    Reset the current context

    Returns:
        None
    """
    _context.set(None)
