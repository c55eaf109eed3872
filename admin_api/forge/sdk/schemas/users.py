from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class UserRole(StrEnum):
    user = "User"
    member = "Member"
    admin = "Admin"
    # an external role id the mapper does not know about. never assignable.
    unknown = "Unknown"


class User(BaseModel):
    id: str | None = None
    email: str | None = None
    name: str | None = None
    picture: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    username: str | None = None
    nickname: str | None = None
    screen_name: str | None = None
    connection: str | None = None
    location: str | None = None
    last_login: datetime | None = None
    roles: list[UserRole] | None = None


class UserUpdateRequest(BaseModel):
    email: str | None = None
    name: str | None = None
    picture: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    username: str | None = None
    nickname: str | None = None


class UserPage(BaseModel):
    users: list[User]
    total: int


class ValidatedClaims(BaseModel):
    """Claims of an already verified access token."""

    model_config = ConfigDict(extra="allow")

    sub: str = Field(..., min_length=1)
    iss: str | None = None
    aud: str | list[str] | None = None
    exp: int | None = None
    scope: str | None = None
    permissions: list[str] | None = None

    @classmethod
    def from_raw(cls, raw: Any) -> ValidatedClaims:
        if isinstance(raw, ValidatedClaims):
            return raw
        return cls.model_validate(raw)
