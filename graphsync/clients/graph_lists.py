"""
Read list items through Microsoft Graph and write them back through the
SharePoint REST API.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import quote

import httpx

from graphsync.core.config import GraphSettings
from graphsync.core.errors import ConfigError, ParseError
from graphsync.models import RawItem, ResourceIdentity
from graphsync.utils.http import (
    bearer_headers,
    client_scope,
    decode_object,
    raise_for_graph_status,
    send,
)

logger = logging.getLogger(__name__)

PAGE_SIZE = 500
MAX_PAGES = 100

# Graph has returned the continuation link under both keys.
NEXT_LINK_KEYS = ("@odata.nextLink", "@odata.next")

_FILTER_OPERATORS = ("ge", "lt", "eq", "gt")
_LEGACY_FILTER_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("DATA_PRELIEVO", "fields/DATA_PRELIEVO"),
    ("Data_Prelievo", "fields/DATA_PRELIEVO"),
    ("Data", "fields/Data"),
    ("Created", "createdDateTime"),
)
FILTER_REPLACEMENTS: Tuple[Tuple[str, str], ...] = tuple(
    (f"{legacy} {op} datetime'", f"{graph} {op} ")
    for legacy, graph in _LEGACY_FILTER_FIELDS
    for op in _FILTER_OPERATORS
)

UPDATE_HEADERS = {
    "Accept": "application/json;odata=verbose",
    "Content-Type": "application/json;odata=verbose",
    "X-HTTP-Method": "MERGE",
    "IF-MATCH": "*",
}


def translate_filter(raw_filter: str) -> str:
    """
    Rewrite a SharePoint REST filter into Graph query syntax.

    ``DATA_PRELIEVO ge datetime'2025-12-28T00:00:00Z'`` becomes
    ``fields/DATA_PRELIEVO ge 2025-12-28T00:00:00Z``. Filters that contain no
    legacy ``datetime'`` literal are left alone so quoted string comparisons
    keep their quotes.
    """
    translated = raw_filter
    for legacy, graph in FILTER_REPLACEMENTS:
        translated = translated.replace(legacy, graph)
    # Only filters that carried a legacy datetime literal lose their quotes;
    # Graph needs them around native string comparisons.
    if translated != raw_filter:
        translated = translated.replace("'", "")
    return translated


class GraphListClient:
    """Paginated reads and partial updates of SharePoint list items."""

    def __init__(
        self,
        graph_settings: GraphSettings,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        max_pages: int = MAX_PAGES,
    ) -> None:
        self._graph = graph_settings
        self._http_client = http_client
        self._max_pages = max_pages

    def items_url(
        self, identity: ResourceIdentity, graph_filter: Optional[str] = None
    ) -> str:
        # No $orderby: the server order is not stable across pages.
        url = (
            f"{self._graph.graph_base_url}/sites/{identity.site_id}"
            f"/lists/{identity.list_id}/items"
            f"?$expand=fields&$select=id,fields,createdDateTime&$top={PAGE_SIZE}"
        )
        if graph_filter:
            url += f"&$filter={quote(graph_filter, safe='')}"
        return url

    async def fetch(
        self,
        identity: ResourceIdentity,
        access_token: str,
        *,
        raw_filter: Optional[str] = None,
    ) -> List[RawItem]:
        """
        Follow continuation links until the list is exhausted.

        Any failure aborts the whole fetch; pages already read are discarded.
        A 400 on a filtered request raises ``FilterError`` so callers can
        retry without the filter.
        """
        graph_filter = translate_filter(raw_filter) if raw_filter else None
        if graph_filter:
            logger.info("Fetching list %s with filter %s", identity.list_id, graph_filter)

        url: Optional[str] = self.items_url(identity, graph_filter)
        items: List[RawItem] = []
        page = 0

        async with client_scope(self._http_client, self._graph.http_timeout_seconds) as client:
            while url:
                if page >= self._max_pages:
                    logger.warning(
                        "Stopped paging list %s after %d pages (%d items)",
                        identity.list_id,
                        page,
                        len(items),
                    )
                    break
                page += 1

                response = await send(
                    client, "GET", url, headers=bearer_headers(access_token)
                )
                raise_for_graph_status(
                    response,
                    context=f"List items page {page}",
                    filtered=bool(graph_filter),
                )
                payload = decode_object(response, context=f"List items page {page}")
                values = payload.get("value")
                if not isinstance(values, list):
                    raise ParseError(
                        f"List items page {page} carried no value array.",
                        body=response.text,
                    )
                logger.debug("Page %d returned %d items", page, len(values))
                if not values:
                    break

                items.extend(self._to_items(values))
                url = _next_link(payload)

        logger.info(
            "Fetched %d items from list %s in %d pages", len(items), identity.list_id, page
        )
        return items

    @staticmethod
    def _to_items(values: List[Any]) -> List[RawItem]:
        items = []
        for entry in values:
            item = RawItem.from_graph(entry) if isinstance(entry, dict) else None
            if item is None:
                logger.debug("Skipping list entry without fields")
                continue
            items.append(item)
        return items

    def update_url(self, site_url: str, list_name: str, item_id: int) -> str:
        if not site_url:
            raise ConfigError("Missing required setting: site_url.", field="site_url")
        title = list_name.replace("'", "''")
        return (
            f"{site_url.rstrip('/')}/_api/web/lists/getbytitle('{title}')"
            f"/items({item_id})"
        )

    async def update_item(
        self,
        site_url: str,
        list_name: str,
        item_id: int,
        fields: Mapping[str, Any],
        access_token: str,
    ) -> None:
        """Merge ``fields`` (already remote column names) into one list item."""
        url = self.update_url(site_url, list_name, item_id)
        body: Dict[str, Any] = dict(fields)
        async with client_scope(self._http_client, self._graph.http_timeout_seconds) as client:
            response = await send(
                client,
                "POST",
                url,
                headers=bearer_headers(access_token, UPDATE_HEADERS),
                content=json.dumps(body).encode("utf-8"),
            )
        raise_for_graph_status(
            response,
            context=f"Update of item {item_id}",
            not_found_message=f"Item {item_id} not found in list '{list_name}'.",
        )
        logger.info("Updated item %s in list %s", item_id, list_name)


def _next_link(payload: Mapping[str, Any]) -> Optional[str]:
    for key in NEXT_LINK_KEYS:
        link = payload.get(key)
        if isinstance(link, str) and link:
            return link
    return None


__all__ = [
    "FILTER_REPLACEMENTS",
    "GraphListClient",
    "MAX_PAGES",
    "NEXT_LINK_KEYS",
    "PAGE_SIZE",
    "translate_filter",
]
