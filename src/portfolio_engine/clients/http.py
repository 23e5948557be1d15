"""JSON-over-HTTP helper shared by every upstream client and source.

Requests are made with ``requests`` in a worker thread so callers stay
asynchronous. Every call carries an explicit timeout.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

import requests

from ..errors import UpstreamUnavailable
from ..logger import get_logger

logger = get_logger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


def is_permanent_http_error(e: Exception) -> bool:
    """Give-up predicate for ``backoff``: only 429 and 5xx are worth retrying."""
    return (
        isinstance(e, requests.exceptions.HTTPError)
        and e.response is not None
        and e.response.status_code not in RETRYABLE_STATUS_CODES
    )


def _send(
    method: str,
    url: str,
    *,
    timeout: float,
    headers: dict[str, str] | None,
    params: dict[str, Any] | None,
    json_body: Any,
) -> Any:
    response = requests.request(
        method,
        url,
        headers=headers,
        params=params,
        json=json_body,
        timeout=timeout,
    )
    response.raise_for_status()
    try:
        return response.json()
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON from {url}") from e


async def request_json(
    method: str,
    url: str,
    *,
    timeout: float,
    headers: dict[str, str] | None = None,
    params: dict[str, Any] | None = None,
    json_body: Any = None,
) -> Any:
    """Send one request and decode the JSON body.

    Args:
        method: HTTP method
        url: Absolute URL
        timeout: Per-request timeout in seconds
        headers: Extra request headers
        params: Query string parameters
        json_body: Body serialized as JSON (POST only)

    Returns:
        The decoded JSON document

    Raises:
        requests.exceptions.RequestException: On transport errors and non-2xx
        ValueError: If the body is not valid JSON
    """
    logger.debug("%s %s", method, url)
    return await asyncio.to_thread(
        _send,
        method,
        url,
        timeout=timeout,
        headers=headers,
        params=params,
        json_body=json_body,
    )


async def request_json_or_raise(
    method: str,
    url: str,
    *,
    timeout: float,
    upstream: str,
    headers: dict[str, str] | None = None,
    params: dict[str, Any] | None = None,
    json_body: Any = None,
) -> Any:
    """Like :func:`request_json`, translating transport failures.

    Raises:
        UpstreamUnavailable: On transport errors and non-2xx statuses
        ValueError: If the body is not valid JSON
    """
    try:
        return await request_json(
            method,
            url,
            timeout=timeout,
            headers=headers,
            params=params,
            json_body=json_body,
        )
    except requests.exceptions.RequestException as e:
        raise UpstreamUnavailable(f"{upstream} request failed: {e}") from e
