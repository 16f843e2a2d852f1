"""HTTP utilities shared by the Graph and SharePoint REST clients."""

from __future__ import annotations

import json
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Mapping, Optional

import httpx

from graphsync.core.errors import (
    AuthError,
    FilterError,
    NotFoundError,
    ParseError,
    UpstreamError,
)

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def bearer_headers(
    access_token: str, extra: Optional[Mapping[str, str]] = None
) -> Dict[str, str]:
    headers = {"Authorization": f"Bearer {access_token}", **NO_CACHE_HEADERS}
    if extra:
        headers.update(extra)
    return headers


@asynccontextmanager
async def client_scope(
    http_client: Optional[httpx.AsyncClient], timeout: float
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield the shared client when one was injected, else a short-lived one."""
    if http_client is not None:
        yield http_client
        return
    async with httpx.AsyncClient(timeout=timeout) as client:
        yield client


async def send(client: httpx.AsyncClient, method: str, url: str, **kwargs) -> httpx.Response:
    """Issue a request, surfacing transport failures as ``UpstreamError``."""
    try:
        return await client.request(method, url, **kwargs)
    except httpx.HTTPError as exc:
        raise UpstreamError(f"{method} {url} failed: {exc}") from exc


def raise_for_graph_status(
    response: httpx.Response,
    *,
    context: str,
    filtered: bool = False,
    not_found_message: Optional[str] = None,
) -> None:
    """Translate a non-success status into the matching error kind."""
    if response.is_success:
        return
    status_code = response.status_code
    body = response.text
    if status_code in (401, 403):
        raise AuthError(
            f"{context}: access denied ({status_code}).",
            status_code=status_code,
            body=body,
        )
    if status_code == 400 and filtered:
        raise FilterError(
            f"{context}: filter rejected, the column is probably not indexed.",
            status_code=status_code,
            body=body,
        )
    if status_code == 404 and not_found_message:
        raise NotFoundError(not_found_message, status_code=status_code, body=body)
    raise UpstreamError(
        f"{context}: unexpected status {status_code}.",
        status_code=status_code,
        body=body,
    )


def decode_object(response: httpx.Response, *, context: str) -> Dict[str, Any]:
    """Decode a JSON object body or raise ``ParseError``."""
    try:
        payload = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ParseError(f"{context}: response is not valid JSON.", body=response.text) from exc
    if not isinstance(payload, dict):
        raise ParseError(f"{context}: expected a JSON object.", body=response.text)
    return payload


__all__ = [
    "NO_CACHE_HEADERS",
    "bearer_headers",
    "client_scope",
    "decode_object",
    "raise_for_graph_status",
    "send",
]
