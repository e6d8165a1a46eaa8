# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_dashboard_auth

"""
Size-limited JSON fetching from the Identity Provider.
"""

import json
from typing import Any

import httpx

from coreason_dashboard_auth.exceptions import OversizedResponseError

MAX_RESPONSE_BYTES = 1_000_000


async def safe_json_fetch(client: httpx.AsyncClient, url: str, max_bytes: int = MAX_RESPONSE_BYTES) -> Any:
    """
    GETs a JSON document, refusing responses larger than `max_bytes`.

    Args:
        client: The async HTTP client to use.
        url: The URL to fetch.
        max_bytes: Maximum accepted body size.

    Returns:
        Any: The decoded JSON document.

    Raises:
        httpx.HTTPError: On transport errors or an error status.
        OversizedResponseError: If the body exceeds `max_bytes`.
        json.JSONDecodeError: If the body is not valid JSON.
    """
    async with client.stream("GET", url, follow_redirects=True) as response:
        response.raise_for_status()

        content_length = response.headers.get("Content-Length")
        if content_length and content_length.isdigit() and int(content_length) > max_bytes:
            raise OversizedResponseError(f"Response from {url} too large")

        content = bytearray()
        async for chunk in response.aiter_bytes():
            content.extend(chunk)
            if len(content) > max_bytes:
                raise OversizedResponseError(f"Response from {url} too large")

    return json.loads(content)
