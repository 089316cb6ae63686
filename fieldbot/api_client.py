"""Mini README: Async HTTP access to the farm backend.

Structure:
    * create_http_client - builds the shared ``httpx.AsyncClient``.
    * request_envelope - performs one request and unwraps the
      ``{success, ...}`` envelope the backend answers with.

Every network, HTTP status or envelope failure is converted into a
``TransportError`` here so callers only deal with one error family. Tests
pass an ``httpx.MockTransport`` to ``create_http_client``.
"""

from __future__ import annotations

import time
from typing import Any, Dict, Optional

import httpx

from .configuration import FieldbotSettings
from .errors import RemoteRejectedError, TransportError
from .logging_utils import get_logger

LOGGER = get_logger(__name__)


def create_http_client(
    settings: FieldbotSettings,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Create the client used by the remote repository and actuation channel."""

    LOGGER.debug("Creating HTTP client for %s", settings.api_base_url)
    return httpx.AsyncClient(
        base_url=settings.api_base_url,
        timeout=settings.request_timeout_seconds,
        headers={"Accept": "application/json"},
        transport=transport,
    )


async def request_envelope(
    client: httpx.AsyncClient,
    method: str,
    path: str,
    *,
    json_body: Any = None,
) -> Dict[str, Any]:
    """Send a request and return the decoded envelope when ``success`` is true."""

    method_u = method.upper()
    url = f"{client.base_url}{path.lstrip('/')}"
    start = time.perf_counter()
    try:
        response = await client.request(method_u, path.lstrip("/"), json=json_body)
    except httpx.TimeoutException as error:
        raise TransportError("Request timed out", method=method_u, url=url) from error
    except httpx.HTTPError as error:
        raise TransportError(f"Request failed: {error}", method=method_u, url=url) from error
    LOGGER.debug(
        "%s %s -> %s in %.3fs", method_u, url, response.status_code, time.perf_counter() - start
    )

    if response.status_code >= 400:
        raise TransportError(
            "HTTP error response", method=method_u, url=url, status_code=response.status_code
        )
    try:
        payload = response.json()
    except ValueError as error:
        raise TransportError(
            "Response body is not valid JSON",
            method=method_u,
            url=url,
            status_code=response.status_code,
        ) from error
    if not isinstance(payload, dict):
        raise TransportError(
            "Response body is not a JSON object",
            method=method_u,
            url=url,
            status_code=response.status_code,
        )
    if not payload.get("success"):
        message = payload.get("message") or payload.get("error") or "Backend reported failure"
        raise RemoteRejectedError(
            str(message), method=method_u, url=url, status_code=response.status_code
        )
    return payload
