"""
Resolve a human-readable site URL and list display name into Graph ids.
"""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import quote, urlsplit

import httpx

from graphsync.core.config import GraphSettings
from graphsync.core.errors import ConfigError, NotFoundError, ParseError
from graphsync.models import ResourceIdentity
from graphsync.utils.http import (
    bearer_headers,
    client_scope,
    decode_object,
    raise_for_graph_status,
    send,
)

logger = logging.getLogger(__name__)


class ResourceResolver:
    """Looks up ``(site_id, list_id)``; nothing is cached between calls."""

    def __init__(
        self,
        graph_settings: GraphSettings,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._graph = graph_settings
        self._http_client = http_client

    def site_lookup_url(self, site_url: str) -> str:
        if not site_url:
            raise ConfigError("Missing required setting: site_url.", field="site_url")
        parts = urlsplit(site_url.strip().rstrip("/"))
        if not parts.hostname:
            raise ConfigError(f"Invalid site URL: {site_url!r}.", field="site_url")
        path = parts.path
        if not path or path == "/":
            return f"{self._graph.graph_base_url}/sites/{parts.hostname}"
        return f"{self._graph.graph_base_url}/sites/{parts.hostname}:{path}"

    async def resolve(
        self, site_url: str, list_name: str, access_token: str
    ) -> ResourceIdentity:
        site_lookup = self.site_lookup_url(site_url)
        async with client_scope(self._http_client, self._graph.http_timeout_seconds) as client:
            site_id = await self._site_id(client, site_lookup, site_url, access_token)
            list_id = await self._list_id(client, site_id, list_name, access_token)
        logger.debug("Resolved list %s to %s/%s", list_name, site_id, list_id)
        return ResourceIdentity(site_id=site_id, list_id=list_id)

    async def _site_id(
        self,
        client: httpx.AsyncClient,
        url: str,
        site_url: str,
        access_token: str,
    ) -> str:
        response = await send(client, "GET", url, headers=bearer_headers(access_token))
        raise_for_graph_status(
            response,
            context="Site lookup",
            not_found_message=f"Site {site_url} not found.",
        )
        payload = decode_object(response, context="Site lookup")
        site_id = payload.get("id")
        if not isinstance(site_id, str) or not site_id:
            raise ParseError("Site lookup response carried no id.", body=response.text)
        return site_id

    async def _list_id(
        self,
        client: httpx.AsyncClient,
        site_id: str,
        list_name: str,
        access_token: str,
    ) -> str:
        odata_name = list_name.replace("'", "''")
        filter_expr = f"displayName eq '{odata_name}'"
        url = (
            f"{self._graph.graph_base_url}/sites/{site_id}/lists"
            f"?$filter={quote(filter_expr, safe='')}"
        )
        response = await send(client, "GET", url, headers=bearer_headers(access_token))
        raise_for_graph_status(
            response,
            context="List lookup",
            not_found_message=f"List '{list_name}' not found.",
        )
        payload = decode_object(response, context="List lookup")
        candidates = payload.get("value")
        if not isinstance(candidates, list):
            raise ParseError("List lookup response carried no value array.", body=response.text)

        matches = [
            entry
            for entry in candidates
            if isinstance(entry, dict) and entry.get("displayName") == list_name
        ] or [entry for entry in candidates if isinstance(entry, dict)]
        for entry in matches:
            list_id = entry.get("id")
            if isinstance(list_id, str) and list_id:
                return list_id
        raise NotFoundError(f"List '{list_name}' not found.")


__all__ = ["ResourceResolver"]
