from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from admin_api.forge.sdk.core.aiohttp_helper import aiohttp_request


def make_session(response: Any, captured_args: list[Any], captured_kwargs: dict[str, Any]) -> MagicMock:
    def capture_request(*args: Any, **kwargs: Any) -> Any:
        captured_args.extend(args)
        captured_kwargs.update(kwargs)
        return response

    mock_session = MagicMock()
    mock_session.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session.__aexit__ = AsyncMock(return_value=None)
    mock_session.request = MagicMock(side_effect=capture_request)
    return mock_session


def make_response(status: int = 200, json_body: Any = None, text_body: str = "") -> AsyncMock:
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.headers = {"Content-Type": "application/json"}
    if json_body is None:
        mock_response.json = AsyncMock(side_effect=aiohttp.ContentTypeError(MagicMock(), ()))
    else:
        mock_response.json = AsyncMock(return_value=json_body)
    mock_response.text = AsyncMock(return_value=text_body)
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=None)
    return mock_response


@pytest.mark.asyncio
async def test_aiohttp_request_with_json_data_sends_json() -> None:
    captured_args: list[Any] = []
    captured_kwargs: dict[str, Any] = {}
    mock_session = make_session(make_response(json_body={"success": True}), captured_args, captured_kwargs)

    with patch("admin_api.forge.sdk.core.aiohttp_helper.aiohttp.ClientSession", return_value=mock_session):
        status, _, body = await aiohttp_request(
            "post",
            "https://example.com/api",
            json_data={"roles": ["rol_a"]},
        )

    assert status == 200
    assert body == {"success": True}
    assert captured_args[0] == "POST"
    assert captured_kwargs["url"] == "https://example.com/api"
    assert captured_kwargs["json"] == {"roles": ["rol_a"]}


@pytest.mark.asyncio
async def test_aiohttp_request_get_ignores_body_and_encodes_params() -> None:
    captured_args: list[Any] = []
    captured_kwargs: dict[str, Any] = {}
    mock_session = make_session(make_response(json_body={"users": []}), captured_args, captured_kwargs)

    with patch("admin_api.forge.sdk.core.aiohttp_helper.aiohttp.ClientSession", return_value=mock_session):
        await aiohttp_request(
            "GET",
            "https://example.com/api/v2/users",
            params={"page": 0, "per_page": 100, "include_totals": True, "q": None},
            json_data={"ignored": True},
        )

    assert "json" not in captured_kwargs
    assert captured_kwargs["params"] == {"page": "0", "per_page": "100", "include_totals": "true"}


@pytest.mark.asyncio
async def test_aiohttp_request_falls_back_to_text() -> None:
    captured_args: list[Any] = []
    captured_kwargs: dict[str, Any] = {}
    mock_session = make_session(make_response(status=204, text_body=""), captured_args, captured_kwargs)

    with patch("admin_api.forge.sdk.core.aiohttp_helper.aiohttp.ClientSession", return_value=mock_session):
        status, _, body = await aiohttp_request("DELETE", "https://example.com/api/v2/users/1")

    assert status == 204
    assert body == ""
