"""Shared HTTP plumbing for provider adapters.

classify_http_error() maps httpx failures to the provider error taxonomy.
It returns a ProviderError instance (does not raise); callers use
``raise classify_http_error(e) from e``.
"""

import contextlib
from typing import Any

import httpx

from talentops.providers.errors import (
    AuthenticationError,
    ProviderError,
    RateLimitError,
    TransientError,
)


def classify_http_error(
    error: Exception,
    rejected: type[ProviderError] = ProviderError,
) -> ProviderError:
    """Classify an httpx exception.

    Args:
        error: Exception raised by httpx (transport error or raise_for_status).
        rejected: Class used for 4xx responses that are not auth or rate
            limit failures (e.g. ProvisionError for the identity service).

    Returns:
        ProviderError subclass instance.
    """
    if isinstance(error, httpx.TransportError):
        return TransientError(f"{type(error).__name__}: {error}")

    if isinstance(error, httpx.HTTPStatusError):
        response = error.response
        status = response.status_code
        message = f"HTTP {status} from {error.request.url.host}"
        if status == 429:
            retry_after = None
            retry_header = response.headers.get("retry-after")
            if retry_header is not None:
                with contextlib.suppress(ValueError):
                    retry_after = float(retry_header)
            return RateLimitError(message, retry_after_seconds=retry_after)
        if status in (401, 403):
            return AuthenticationError(message)
        if status >= 500:
            return TransientError(message)
        return rejected(message)

    return ProviderError(str(error))


async def post_json(
    client: httpx.AsyncClient | None,
    url: str,
    *,
    json: dict[str, Any],
    headers: dict[str, str],
    timeout: float,
) -> httpx.Response:
    """POST a JSON body and raise for non-2xx responses.

    Args:
        client: Shared client, or None to open a short-lived one.
        url: Target URL.
        json: Request body.
        headers: Request headers.
        timeout: Request timeout in seconds.

    Returns:
        The successful response.

    Raises:
        httpx.HTTPError: On transport failure or error status.
    """
    if client is not None:
        resp = await client.post(url, json=json, headers=headers, timeout=timeout)
    else:
        async with httpx.AsyncClient() as owned:
            resp = await owned.post(url, json=json, headers=headers, timeout=timeout)
    resp.raise_for_status()
    return resp


def json_body(resp: httpx.Response) -> dict[str, Any]:
    """Decode a JSON object response body.

    Raises:
        ProviderError: If the body is not a JSON object.
    """
    try:
        body = resp.json()
    except ValueError as e:
        raise ProviderError("Provider returned a non-JSON response") from e
    if not isinstance(body, dict):
        raise ProviderError("Provider returned an unexpected response shape")
    return body
