from __future__ import annotations

import asyncio
import time
from datetime import datetime
from typing import Any
from urllib.parse import quote

import structlog
from pydantic import BaseModel, ConfigDict, model_validator

from admin_api.exceptions import IdentityProviderError, UserNotFound
from admin_api.forge.sdk.core.aiohttp_helper import aiohttp_request
from admin_api.forge.sdk.identity.role_mapper import ExternalRole

LOG = structlog.get_logger()

# refresh the management token this long before it actually expires
TOKEN_EXPIRY_MARGIN_SECONDS = 60


class Auth0User(BaseModel):
    model_config = ConfigDict(extra="ignore")

    user_id: str | None = None
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

    @model_validator(mode="before")
    @classmethod
    def connection_from_identities(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("connection"):
            identities = data.get("identities") or []
            if identities and isinstance(identities[0], dict) and identities[0].get("connection"):
                data = {**data, "connection": identities[0]["connection"]}
        return data


class Auth0List(BaseModel):
    """Pagination envelope returned by the management API when include_totals=true."""

    start: int = 0
    limit: int = 0
    length: int = 0
    total: int = 0

    def has_next(self) -> bool:
        return self.total > self.start + self.limit


class Auth0UserList(Auth0List):
    users: list[Auth0User] = []


class Auth0RoleList(Auth0List):
    roles: list[ExternalRole] = []


class Auth0ManagementClient:
    """HTTP client for the Auth0 Management API v2."""

    def __init__(
        self,
        domain_url: str,
        client_id: str,
        client_secret: str,
        timeout: int = 30,
    ) -> None:
        """
        Args:
            domain_url: Tenant base url, e.g. https://tenant.us.auth0.com
            client_id: Machine to machine application client id
            client_secret: Machine to machine application client secret
            timeout: Per request timeout in seconds
        """
        self.domain_url = domain_url.rstrip("/")
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout = timeout
        self._access_token: str | None = None
        self._access_token_expires_at = 0.0
        self._token_lock = asyncio.Lock()

    @property
    def audience(self) -> str:
        return f"{self.domain_url}/api/v2/"

    async def _get_access_token(self) -> str:
        async with self._token_lock:
            if self._access_token and time.monotonic() < self._access_token_expires_at:
                return self._access_token

            url = f"{self.domain_url}/oauth/token"
            status_code, _, body = await aiohttp_request(
                "POST",
                url,
                headers={"Content-Type": "application/json"},
                json_data={
                    "grant_type": "client_credentials",
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "audience": self.audience,
                },
                timeout=self.timeout,
            )
            if status_code >= 400 or not isinstance(body, dict) or "access_token" not in body:
                LOG.error("Failed to obtain management api token", status_code=status_code)
                raise IdentityProviderError(status_code, url, _error_detail(body))

            expires_in = int(body.get("expires_in", 0))
            self._access_token = body["access_token"]
            self._access_token_expires_at = time.monotonic() + max(expires_in - TOKEN_EXPIRY_MARGIN_SECONDS, 0)
            return self._access_token

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_data: dict[str, Any] | None = None,
    ) -> Any:
        token = await self._get_access_token()
        url = f"{self.domain_url}/api/v2/{path}"
        status_code, _, body = await aiohttp_request(
            method,
            url,
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
            },
            params=params,
            json_data=json_data,
            timeout=self.timeout,
        )
        if status_code >= 400:
            LOG.error(
                "Management api request failed",
                method=method,
                url=url,
                status_code=status_code,
                detail=_error_detail(body),
            )
            raise IdentityProviderError(status_code, url, _error_detail(body))
        return body

    async def list_users(self, page: int, per_page: int) -> Auth0UserList:
        """List one page of users. Pages start at 0."""
        body = await self._request(
            "GET",
            "users",
            params={"page": page, "per_page": per_page, "include_totals": True},
        )
        return Auth0UserList.model_validate(body)

    async def get_user(self, user_id: str) -> Auth0User:
        try:
            body = await self._request("GET", f"users/{_quote(user_id)}")
        except IdentityProviderError as e:
            if e.provider_status_code == 404:
                raise UserNotFound(user_id) from e
            raise
        return Auth0User.model_validate(body)

    async def update_user(self, user_id: str, changes: dict[str, Any]) -> Auth0User:
        try:
            body = await self._request("PATCH", f"users/{_quote(user_id)}", json_data=changes)
        except IdentityProviderError as e:
            if e.provider_status_code == 404:
                raise UserNotFound(user_id) from e
            raise
        return Auth0User.model_validate(body)

    async def delete_user(self, user_id: str) -> None:
        await self._request("DELETE", f"users/{_quote(user_id)}")

    async def list_user_roles(self, user_id: str, page: int, per_page: int) -> Auth0RoleList:
        body = await self._request(
            "GET",
            f"users/{_quote(user_id)}/roles",
            params={"page": page, "per_page": per_page, "include_totals": True},
        )
        return Auth0RoleList.model_validate(body)

    async def assign_roles(self, user_id: str, role_ids: list[str]) -> None:
        await self._request("POST", f"users/{_quote(user_id)}/roles", json_data={"roles": role_ids})

    async def remove_roles(self, user_id: str, role_ids: list[str]) -> None:
        await self._request("DELETE", f"users/{_quote(user_id)}/roles", json_data={"roles": role_ids})


def _quote(user_id: str) -> str:
    # auth0 user ids look like "auth0|abc123"
    return quote(user_id, safe="")


def _error_detail(body: Any) -> str | None:
    if isinstance(body, dict):
        return body.get("message") or body.get("error_description") or body.get("error")
    if isinstance(body, str):
        return body[:200] or None
    return None
