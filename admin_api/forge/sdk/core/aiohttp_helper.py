from typing import Any

import aiohttp

DEFAULT_REQUEST_TIMEOUT = 30


async def aiohttp_request(
    method: str,
    url: str,
    headers: dict[str, str] | None = None,
    *,
    params: dict[str, Any] | None = None,
    json_data: dict[str, Any] | list[Any] | None = None,
    timeout: int = DEFAULT_REQUEST_TIMEOUT,
) -> tuple[int, dict[str, str], Any]:
    """
    Generic HTTP request function that supports all HTTP methods.

    Args:
        method: HTTP method (GET, POST, etc.)
        url: Request URL
        headers: Request headers
        params: Query string parameters
        json_data: JSON body, ignored for GET
        timeout: Request timeout in seconds

    Returns:
        Tuple of (status_code, response_headers, response_body)
        where response_body can be dict (for JSON) or str (for text)
    """
    async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout)) as session:
        request_kwargs: dict[str, Any] = {
            "url": url,
            "headers": headers or {},
            "params": _encode_params(params),
        }
        if method.upper() != "GET" and json_data is not None:
            request_kwargs["json"] = json_data

        async with session.request(method.upper(), **request_kwargs) as response:
            response_headers = dict(response.headers)

            try:
                response_body = await response.json()
            except (aiohttp.ContentTypeError, ValueError):
                # not JSON, or an empty body
                response_body = await response.text()

            return response.status, response_headers, response_body


def _encode_params(params: dict[str, Any] | None) -> dict[str, str] | None:
    # aiohttp only accepts str/int/float query values
    if params is None:
        return None
    encoded: dict[str, str] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            encoded[key] = "true" if value else "false"
        else:
            encoded[key] = str(value)
    return encoded
