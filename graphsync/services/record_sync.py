"""
Orchestrate authentication, list retrieval and record mapping.

``RecordSyncService`` is the single entry point used by the HTTP layer: it
hands out ordered domain records per logical list, falls back to local
filtering when the server rejects a filter, and pushes partial updates.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Tuple,
    TypeVar,
    Union,
)

from graphsync.clients.graph_auth import GraphOAuthClient
from graphsync.clients.graph_lists import GraphListClient
from graphsync.clients.graph_sites import ResourceResolver
from graphsync.core.config import ListSettings, OAuthSettings
from graphsync.core.errors import AuthError, FilterError, NotFoundError
from graphsync.models import Credential, RawItem
from graphsync.models.credential import utcnow
from graphsync.schemas import AuthStatus, ServiceDetail
from graphsync.services import field_tables as tables
from graphsync.services.graph_tokens import GraphTokenService
from graphsync.services.list_views import VIEWS, FilterSpec, ListType
from graphsync.services.record_mapper import map_items, map_to_service_detail
from graphsync.services.sorting import sort_services

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class AuthorizationRequest:
    url: str
    state: str


@dataclass(frozen=True)
class PendingAuthorization:
    """The app registration and site a consent URL was issued for."""

    issued_at: datetime
    tenant_id: Optional[str] = None
    client_id: Optional[str] = None
    site_url: Optional[str] = None
    redirect_uri: Optional[str] = None


class RecordSyncService:
    """High-level operations over the SharePoint lists of one session."""

    def __init__(
        self,
        *,
        token_service: GraphTokenService,
        oauth_client: GraphOAuthClient,
        resolver: ResourceResolver,
        list_client: GraphListClient,
        list_settings: ListSettings,
        oauth_settings: OAuthSettings,
        redirect_uri: Optional[str] = None,
        tz: Optional[tzinfo] = None,
        now: Callable[[], datetime] = utcnow,
    ) -> None:
        self._tokens = token_service
        self._oauth = oauth_client
        self._resolver = resolver
        self._lists = list_client
        self._list_settings = list_settings
        self._oauth_settings = oauth_settings
        self._redirect_uri = redirect_uri
        self._tz = tz
        self._now = now
        self._pending_states: Dict[str, PendingAuthorization] = {}

    # -- authentication -------------------------------------------------

    async def is_authenticated(self) -> bool:
        return await self._tokens.is_authenticated()

    async def auth_status(self) -> AuthStatus:
        credential = await self._tokens.get_credential()
        return AuthStatus(
            authenticated=credential.is_authenticated(self._now()),
            site_url=credential.site_url or None,
            expires_at=credential.expires_at.isoformat() if credential.expires_at else None,
        )

    async def begin_authorization(
        self,
        *,
        tenant_id: Optional[str] = None,
        client_id: Optional[str] = None,
        site_url: Optional[str] = None,
        redirect_uri: Optional[str] = None,
    ) -> AuthorizationRequest:
        """
        Build the consent URL and remember the CSRF state issued with it.

        The tenant, client, site and redirect URI used for the URL are kept
        with the state so the code is later exchanged against the same app
        registration.
        """
        credential = await self._tokens.get_credential()
        pending = PendingAuthorization(
            issued_at=self._now(),
            tenant_id=tenant_id or credential.tenant_id,
            client_id=client_id or credential.client_id,
            site_url=(site_url or credential.site_url).rstrip("/") or None,
            redirect_uri=redirect_uri or self._redirect_uri,
        )
        state = uuid.uuid4().hex
        url = self._oauth.build_authorization_url(
            state=state,
            tenant_id=pending.tenant_id,
            client_id=pending.client_id,
            redirect_uri=pending.redirect_uri,
        )
        self._prune_states()
        self._pending_states[state] = pending
        return AuthorizationRequest(url=url, state=state)

    def verify_state(self, state: str) -> PendingAuthorization:
        """Consume a state issued by ``begin_authorization``; unknown or stale states fail."""
        pending = self._pending_states.pop(state, None)
        if pending is None:
            raise AuthError("Unknown OAuth state.", field="state")
        ttl = timedelta(seconds=self._oauth_settings.state_ttl_seconds)
        if self._now() - pending.issued_at > ttl:
            raise AuthError("OAuth state has expired.", field="state")
        return pending

    async def complete_authorization(
        self,
        code: str,
        *,
        tenant_id: Optional[str] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        site_url: Optional[str] = None,
        redirect_uri: Optional[str] = None,
    ) -> Credential:
        """Exchange ``code`` and make the resulting credential the session's."""
        current = await self._tokens.get_credential()
        base = current.model_copy(
            update={
                "tenant_id": tenant_id or current.tenant_id,
                "client_id": client_id or current.client_id,
                "client_secret": client_secret or current.client_secret,
                "site_url": (site_url or current.site_url).rstrip("/"),
            }
        )
        credential = await self._oauth.exchange_code(
            base, code=code, redirect_uri=redirect_uri or self._redirect_uri
        )
        await self._tokens.replace(credential)
        logger.info("Authorization completed for %s", credential.site_url)
        return credential

    def _prune_states(self) -> None:
        ttl = timedelta(seconds=self._oauth_settings.state_ttl_seconds)
        now = self._now()
        for state, pending in list(self._pending_states.items()):
            if now - pending.issued_at > ttl:
                del self._pending_states[state]

    # -- reads ----------------------------------------------------------

    def today(self) -> date:
        return self._now().astimezone(self._tz).date()

    async def fetch_records(
        self,
        list_type: Union[ListType, str],
        filter_spec: Optional[Union[FilterSpec, str]] = None,
    ) -> List[Any]:
        """
        Return the mapped records of a logical list.

        ``filter_spec`` replaces the view's default server filter. When the
        server rejects a filter the list is fetched unfiltered and narrowed
        locally; the view's own predicate is applied in every case.
        """
        view = VIEWS[ListType(list_type)]
        today = self.today()
        if isinstance(filter_spec, str):
            filter_spec = FilterSpec.parse(filter_spec) if filter_spec.strip() else None
        custom = filter_spec is not None
        active = filter_spec if custom else view.filter_for(today)

        list_name = self._list_settings.name_for(view.source)
        local_equivalent = not custom or active.evaluable
        items, unfiltered = await self._fetch_with_fallback(
            list_name, active, local_equivalent=local_equivalent
        )
        if custom and unfiltered:
            items = [item for item in items if active.matches(item)]
        if view.predicate is not None:
            items = [item for item in items if view.predicate(item, today, self._tz)]

        records = map_items(items, view.bind_mapper(self._tz))
        if view.sorted_by_date:
            records = sort_services(records)
        logger.info("Mapped %d %s records", len(records), view.list_type.value)
        return records

    async def get_service_detail(self, service_id: int) -> ServiceDetail:
        list_name = self._list_settings.name_for(VIEWS[ListType.SERVIZI_COMPLETI].source)
        items = await self._fetch(list_name, None)
        for detail in map_items(items, lambda item: map_to_service_detail(item, self._tz)):
            if detail.id == service_id:
                return detail
        raise NotFoundError(f"Service {service_id} not found.")

    async def _fetch_with_fallback(
        self,
        list_name: str,
        filter_spec: Optional[FilterSpec],
        *,
        local_equivalent: bool,
    ) -> Tuple[List[RawItem], bool]:
        """Fetch with ``filter_spec``; the flag tells whether the unfiltered retry ran."""
        try:
            return await self._fetch(list_name, filter_spec.raw if filter_spec else None), False
        except FilterError as exc:
            if not local_equivalent:
                raise
            logger.warning(
                "Server rejected filter on %s (%s); fetching unfiltered",
                list_name,
                exc.status_code,
            )
        return await self._fetch(list_name, None), True

    async def _fetch(self, list_name: str, raw_filter: Optional[str]) -> List[RawItem]:
        site_url = (await self._tokens.get_credential()).site_url

        async def run(token: str) -> List[RawItem]:
            identity = await self._resolver.resolve(site_url, list_name, token)
            return await self._lists.fetch(identity, token, raw_filter=raw_filter)

        return await self._with_token(run)

    # -- writes ---------------------------------------------------------

    async def update_record(
        self,
        list_type: Union[ListType, str],
        record_id: int,
        fields: Mapping[str, Any],
    ) -> Dict[str, Any]:
        """Merge known logical fields into one remote item; returns what was sent."""
        view = VIEWS[ListType(list_type)]
        remote_fields = {
            tables.UPDATE_FIELD_MAP[name]: value
            for name, value in fields.items()
            if name in tables.UPDATE_FIELD_MAP
        }
        ignored = sorted(set(fields) - set(tables.UPDATE_FIELD_MAP))
        if ignored:
            logger.debug("Ignoring unknown update fields: %s", ", ".join(ignored))
        if not remote_fields:
            return remote_fields

        list_name = self._list_settings.name_for(view.source)
        site_url = (await self._tokens.get_credential()).site_url

        async def run(token: str) -> None:
            await self._lists.update_item(site_url, list_name, record_id, remote_fields, token)

        await self._with_token(run)
        return remote_fields

    async def _with_token(self, operation: Callable[[str], Awaitable[T]]) -> T:
        """Run ``operation`` with a valid token, refreshing once if it is rejected."""
        token = await self._tokens.get_access_token()
        try:
            return await operation(token)
        except AuthError as rejected:
            logger.info("Access token rejected; refreshing and retrying once")
            try:
                token = await self._tokens.force_refresh(token)
            except AuthError as exc:
                raise exc from rejected
        return await operation(token)


__all__ = ["AuthorizationRequest", "PendingAuthorization", "RecordSyncService"]
