from typing import Annotated, Awaitable, Callable

import structlog
from fastapi import Depends, Header

from admin_api.exceptions import InsufficientRole, NoAuthContext
from admin_api.forge import app
from admin_api.forge.sdk.core import request_context
from admin_api.forge.sdk.schemas.users import User, UserRole

LOG = structlog.get_logger()


async def get_current_user(
    authorization: Annotated[str | None, Header(include_in_schema=False)] = None,
) -> User:
    """
    Resolve the caller. Claims are taken from the request context when an upstream middleware already put
    them there, otherwise the bearer token is handed to app.authentication_function.
    """
    context = request_context.ensure_context()
    if context.claims is None and authorization:
        context.claims = await _authenticate_helper(authorization)

    user = await app.IDENTITY_GATEWAY.get_user_from_context()
    context.user_id = user.id
    return user


async def _authenticate_helper(authorization: str) -> object:
    token = authorization.split(" ")[-1]
    if not app.authentication_function:
        LOG.error("No authentication function configured, cannot verify bearer token")
        raise NoAuthContext()
    return await app.authentication_function(token)


def require_roles(*roles: UserRole) -> Callable[..., Awaitable[User]]:
    """Build a dependency that lets the request through only if the caller holds one of the roles."""

    async def check_roles(user: User = Depends(get_current_user)) -> User:
        if not set(user.roles or []) & set(roles):
            LOG.warning("Caller lacks the required role", user_id=user.id, required=[str(r) for r in roles])
            raise InsufficientRole(user.id, required=[str(r) for r in roles])
        return user

    return check_roles
