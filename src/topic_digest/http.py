from __future__ import annotations

from typing import Any

import httpx

from .errors import ParseError, UpstreamError


def default_timeout() -> httpx.Timeout:
    return httpx.Timeout(connect=10.0, read=60.0, write=20.0, pool=10.0)


def default_limits() -> httpx.Limits:
    return httpx.Limits(max_connections=100, max_keepalive_connections=20)


class HttpClientFactory:
    """Creates shared httpx clients with sane defaults.

    Keep one client per provider; do not create per-request.
    """

    @staticmethod
    def client(base_url: str | None = None, headers: dict | None = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=(base_url or "").rstrip("/"),
            headers=headers,
            timeout=default_timeout(),
            limits=default_limits(),
            follow_redirects=True,
        )


async def request_json(
    client: httpx.AsyncClient, method: str, url: str, *, provider: str, **kwargs: Any
) -> Any:
    """Send one request and decode the JSON body.

    No retries: anything but HTTP 200 aborts the caller with UpstreamError.
    """
    try:
        r = await client.request(method, url, **kwargs)
    except httpx.HTTPError as e:
        raise UpstreamError(f"{provider} API request failed: {e}") from e

    if r.status_code != 200:
        raise UpstreamError(f"{provider} API error: HTTP {r.status_code} -> {r.text}")

    try:
        return r.json()
    except ValueError as e:
        raise ParseError(f"{provider} API returned invalid JSON: {e}") from e
