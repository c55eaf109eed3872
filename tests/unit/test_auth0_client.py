from typing import Any
from unittest.mock import AsyncMock, patch

import pytest

from admin_api.exceptions import IdentityProviderError, UserNotFound
from admin_api.forge.sdk.identity.auth0_client import Auth0ManagementClient, Auth0RoleList, Auth0User

TOKEN_RESPONSE = (200, {}, {"access_token": "mgmt-token", "expires_in": 86400, "token_type": "Bearer"})
PATCH_TARGET = "admin_api.forge.sdk.identity.auth0_client.aiohttp_request"


def make_client() -> Auth0ManagementClient:
    return Auth0ManagementClient("https://tenant.us.auth0.com/", "client-id", "client-secret", timeout=5)


@pytest.mark.asyncio
async def test_list_users_fetches_token_once_and_pages() -> None:
    client = make_client()
    users_page = {
        "start": 0,
        "limit": 2,
        "length": 2,
        "total": 3,
        "users": [
            {"user_id": "auth0|1", "email": "a@example.com", "identities": [{"connection": "Username-Password"}]},
            {"user_id": "auth0|2", "email": "b@example.com", "connection": "google-oauth2"},
        ],
    }
    mock_request = AsyncMock(side_effect=[TOKEN_RESPONSE, (200, {}, users_page), (200, {}, users_page)])

    with patch(PATCH_TARGET, mock_request):
        user_list = await client.list_users(page=0, per_page=2)
        await client.list_users(page=0, per_page=2)

    assert user_list.has_next()
    assert user_list.total == 3
    assert [user.user_id for user in user_list.users] == ["auth0|1", "auth0|2"]
    assert user_list.users[0].connection == "Username-Password"
    assert user_list.users[1].connection == "google-oauth2"

    token_call = mock_request.await_args_list[0]
    assert token_call.args == ("POST", "https://tenant.us.auth0.com/oauth/token")
    assert token_call.kwargs["json_data"]["grant_type"] == "client_credentials"
    assert token_call.kwargs["json_data"]["audience"] == "https://tenant.us.auth0.com/api/v2/"

    list_call = mock_request.await_args_list[1]
    assert list_call.args == ("GET", "https://tenant.us.auth0.com/api/v2/users")
    assert list_call.kwargs["params"] == {"page": 0, "per_page": 2, "include_totals": True}
    assert list_call.kwargs["headers"]["Authorization"] == "Bearer mgmt-token"
    assert list_call.kwargs["timeout"] == 5

    # the token is reused for the second call
    assert mock_request.await_count == 3


@pytest.mark.asyncio
async def test_user_id_is_quoted() -> None:
    client = make_client()
    mock_request = AsyncMock(side_effect=[TOKEN_RESPONSE, (200, {}, {"user_id": "auth0|abc"})])

    with patch(PATCH_TARGET, mock_request):
        user = await client.get_user("auth0|abc")

    assert user == Auth0User(user_id="auth0|abc")
    assert mock_request.await_args_list[1].args == ("GET", "https://tenant.us.auth0.com/api/v2/users/auth0%7Cabc")


@pytest.mark.asyncio
async def test_get_user_not_found() -> None:
    client = make_client()
    not_found = (404, {}, {"statusCode": 404, "message": "The user does not exist."})
    mock_request = AsyncMock(side_effect=[TOKEN_RESPONSE, not_found])

    with patch(PATCH_TARGET, mock_request):
        with pytest.raises(UserNotFound):
            await client.get_user("auth0|missing")


@pytest.mark.asyncio
async def test_provider_error_is_surfaced() -> None:
    client = make_client()
    mock_request = AsyncMock(side_effect=[TOKEN_RESPONSE, (429, {}, {"message": "Too Many Requests"})])

    with patch(PATCH_TARGET, mock_request):
        with pytest.raises(IdentityProviderError) as exc_info:
            await client.list_users(page=0, per_page=100)

    assert exc_info.value.provider_status_code == 429
    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_token_failure() -> None:
    client = make_client()
    mock_request = AsyncMock(return_value=(401, {}, {"error": "access_denied"}))

    with patch(PATCH_TARGET, mock_request):
        with pytest.raises(IdentityProviderError):
            await client.delete_user("auth0|1")

    assert mock_request.await_count == 1


@pytest.mark.asyncio
async def test_role_calls() -> None:
    client = make_client()
    roles_page = {"start": 0, "limit": 50, "length": 1, "total": 1, "roles": [{"id": "rol_a", "name": "Admin"}]}
    mock_request = AsyncMock(side_effect=[TOKEN_RESPONSE, (200, {}, roles_page), (204, {}, ""), (204, {}, "")])

    with patch(PATCH_TARGET, mock_request):
        role_list = await client.list_user_roles("auth0|1", page=0, per_page=50)
        await client.assign_roles("auth0|1", ["rol_a"])
        await client.remove_roles("auth0|1", ["rol_a"])

    assert isinstance(role_list, Auth0RoleList)
    assert not role_list.has_next()
    assert role_list.roles[0].id == "rol_a"

    calls: list[Any] = mock_request.await_args_list
    assert calls[2].args == ("POST", "https://tenant.us.auth0.com/api/v2/users/auth0%7C1/roles")
    assert calls[2].kwargs["json_data"] == {"roles": ["rol_a"]}
    assert calls[3].args == ("DELETE", "https://tenant.us.auth0.com/api/v2/users/auth0%7C1/roles")


@pytest.mark.asyncio
async def test_update_user_sends_changes() -> None:
    client = make_client()
    mock_request = AsyncMock(side_effect=[TOKEN_RESPONSE, (200, {}, {"user_id": "auth0|1", "nickname": "ally"})])

    with patch(PATCH_TARGET, mock_request):
        user = await client.update_user("auth0|1", {"nickname": "ally"})

    assert user.nickname == "ally"
    assert mock_request.await_args_list[1].args[0] == "PATCH"
    assert mock_request.await_args_list[1].kwargs["json_data"] == {"nickname": "ally"}
