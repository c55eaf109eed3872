from __future__ import annotations

import structlog
from pydantic import BaseModel

from admin_api.config import Settings
from admin_api.exceptions import InvalidRole
from admin_api.forge.sdk.schemas.users import UserRole

LOG = structlog.get_logger()


class ExternalRole(BaseModel):
    """A role object of the identity provider. Only the id is stable, names are for humans."""

    id: str
    name: str | None = None
    description: str | None = None


class RoleMapper:
    """
    Translates between the closed local role enum and the provider's role catalog.

    to_external is total over the assignable roles, to_local is partial and falls back to
    UserRole.unknown for ids outside the catalog.
    """

    def __init__(self, catalog: dict[UserRole, ExternalRole]) -> None:
        if UserRole.unknown in catalog:
            raise ValueError("UserRole.unknown cannot be mapped to an external role")
        self._to_external = dict(catalog)
        self._to_local = {external.id: role for role, external in catalog.items()}
        if len(self._to_local) != len(self._to_external):
            raise ValueError("External role ids must be unique per local role")

    @classmethod
    def from_settings(cls, settings: Settings) -> RoleMapper:
        return cls(
            {
                UserRole.user: ExternalRole(id=settings.AUTH0_USER_ROLE_ID, name="User"),
                UserRole.member: ExternalRole(id=settings.AUTH0_MEMBER_ROLE_ID, name="Member"),
                UserRole.admin: ExternalRole(id=settings.AUTH0_ADMIN_ROLE_ID, name="Admin"),
            }
        )

    def to_external(self, role: UserRole) -> ExternalRole:
        external = self._to_external.get(role)
        if external is None:
            LOG.error("Role has no external counterpart", role=role)
            raise InvalidRole(str(role))
        return external

    def to_local(self, external_role: ExternalRole | str) -> UserRole:
        role_id = external_role if isinstance(external_role, str) else external_role.id
        return self._to_local.get(role_id, UserRole.unknown)
