from typing import Any

import structlog
from pydantic import ValidationError

from admin_api.exceptions import InvalidClaims, InvalidID, InvalidPagination, NoAuthContext
from admin_api.forge.sdk.core import request_context
from admin_api.forge.sdk.identity.auth0_client import Auth0ManagementClient, Auth0User
from admin_api.forge.sdk.identity.role_mapper import ExternalRole, RoleMapper
from admin_api.forge.sdk.schemas.users import User, UserRole, ValidatedClaims

LOG = structlog.get_logger()

UPDATABLE_USER_FIELDS = (
    "email",
    "name",
    "picture",
    "given_name",
    "family_name",
    "username",
    "nickname",
)


class IdentityGateway:
    """
    User and role management backed by the identity provider. Nothing is persisted locally,
    every call goes to the provider.

    The full sweeps (list_all_users and the role listing) keep requesting pages until the provider
    says there are no more. They have no iteration bound of their own, callers that need a deadline
    should wrap them in asyncio.timeout.
    """

    def __init__(self, client: Auth0ManagementClient, role_mapper: RoleMapper, page_size: int = 100) -> None:
        self.client = client
        self.role_mapper = role_mapper
        self.page_size = page_size

    async def get_user_from_context(self) -> User:
        context = request_context.current()
        if context is None or context.claims is None:
            LOG.error("No validated claims in the request context")
            raise NoAuthContext()

        try:
            claims = ValidatedClaims.from_raw(context.claims)
        except ValidationError as e:
            LOG.error("Malformed claims in the request context", request_id=context.request_id)
            raise InvalidClaims(str(e)) from e

        return await self.get_user(claims.sub)

    async def list_users(self, page: int, page_size: int) -> tuple[list[User], int]:
        """
        Get one page of users.

        Args:
            page: 1 based page number
            page_size: number of users per page

        Returns:
            The users of the page and the total number of users known to the provider
        """
        if page < 1 or page_size < 1:
            LOG.error("Invalid user pagination", page=page, page_size=page_size)
            raise InvalidPagination(page, page_size)

        user_list = await self.client.list_users(page=page - 1, per_page=page_size)
        return [_to_user(auth0_user) for auth0_user in user_list.users], user_list.total

    async def list_all_users(self) -> list[User]:
        users: list[User] = []
        page = 0
        while True:
            user_list = await self.client.list_users(page=page, per_page=self.page_size)
            users.extend(_to_user(auth0_user) for auth0_user in user_list.users)
            if not user_list.has_next():
                break
            page += 1
        LOG.info("Listed all users", total=len(users), pages=page + 1)
        return users

    async def get_user(self, user_id: str) -> User:
        auth0_user = await self.client.get_user(user_id)
        user = _to_user(auth0_user)
        user.roles = await self.list_user_roles(user_id)
        return user

    async def update_user(self, user: User) -> None:
        if not user.id:
            LOG.error("Cannot update a user without an id")
            raise InvalidID(user.id, kind="user", expected="a non-empty user id")

        changes: dict[str, Any] = {}
        for field in UPDATABLE_USER_FIELDS:
            value = getattr(user, field)
            if value is not None:
                changes[field] = value

        if not changes:
            LOG.info("Nothing to update", user_id=user.id)
            return

        await self.client.update_user(user.id, changes)
        LOG.info("User updated", user_id=user.id, fields=sorted(changes))

    async def delete_user(self, user_id: str) -> None:
        await self.client.delete_user(user_id)
        LOG.info("User deleted", user_id=user_id)

    async def list_user_roles(self, user_id: str) -> list[UserRole]:
        external_roles: list[ExternalRole] = []
        page = 0
        while True:
            role_list = await self.client.list_user_roles(user_id, page=page, per_page=self.page_size)
            external_roles.extend(role_list.roles)
            if not role_list.has_next():
                break
            page += 1

        roles: list[UserRole] = []
        for external_role in external_roles:
            role = self.role_mapper.to_local(external_role)
            if role == UserRole.unknown:
                LOG.warning("Unrecognized external role", user_id=user_id, external_role_id=external_role.id)
            roles.append(role)
        return roles

    async def assign_user_role(self, user_id: str, role: UserRole) -> None:
        external_role = self.role_mapper.to_external(role)
        await self.client.assign_roles(user_id, [external_role.id])
        LOG.info("Role assigned", user_id=user_id, role=role)

    async def remove_user_role(self, user_id: str, role: UserRole) -> None:
        external_role = self.role_mapper.to_external(role)
        await self.client.remove_roles(user_id, [external_role.id])
        LOG.info("Role removed", user_id=user_id, role=role)


def _to_user(auth0_user: Auth0User) -> User:
    return User(
        id=auth0_user.user_id,
        email=auth0_user.email,
        name=auth0_user.name,
        picture=auth0_user.picture,
        given_name=auth0_user.given_name,
        family_name=auth0_user.family_name,
        username=auth0_user.username,
        nickname=auth0_user.nickname,
        screen_name=auth0_user.screen_name,
        connection=auth0_user.connection,
        location=auth0_user.location,
        last_login=auth0_user.last_login,
    )
