try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import json
from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs

import httpx
import pytest

from graphsync.clients import GraphListClient, GraphOAuthClient, ResourceResolver
from graphsync.core.config import GraphSettings, ListSettings, OAuthSettings
from graphsync.core.errors import AuthError, FilterError, NotFoundError
from graphsync.models import Credential
from graphsync.schemas import Card, Member, Service, ServiceDetail
from graphsync.services import GraphTokenService, ListType, RecordSyncService

NOW = datetime(2025, 1, 10, 8, 0, tzinfo=timezone.utc)
SITE_URL = "https://contoso.sharepoint.com/sites/trasporti"


def _service_item(item_id: int, day: str, pickup_time: str = "", created: str = "") -> dict:
    return {
        "id": str(item_id),
        "createdDateTime": created or f"{day}T06:00:00Z",
        "fields": {
            "IDSERVIZIO": item_id,
            "DATA_PRELIEVO": f"{day}T00:00:00Z",
            "ORA_PRELIEVO": pickup_time,
            "TRASP": f"Persona {item_id}",
        },
    }


def _member_item(item_id: int, member_type: str, name: str) -> dict:
    return {
        "id": str(item_id),
        "createdDateTime": "2024-05-01T10:00:00Z",
        "fields": {"TIPOLOGIASOCIO": member_type, "Nominativo_SOCIO": name},
    }


class FakeMicrosoft:
    """Serves the token endpoint, Graph lookups, list items and REST updates."""

    def __init__(self, items: list[dict], *, reject_filter: bool = False) -> None:
        self.items = items
        self.reject_filter = reject_filter
        self.rejected_tokens: set[str] = set()
        self.requests: list[httpx.Request] = []

    @property
    def item_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/items")]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "login.microsoftonline.com":
            form = parse_qs(request.content.decode("utf-8"))
            token = "exchanged" if form["grant_type"] == ["authorization_code"] else "refreshed"
            return httpx.Response(
                200,
                json={"access_token": token, "refresh_token": "rt-2", "expires_in": 3600},
            )

        bearer = request.headers.get("Authorization", "").removeprefix("Bearer ")
        if bearer in self.rejected_tokens:
            return httpx.Response(401, text="token expired")

        path = request.url.path
        if "/_api/web/" in path:
            return httpx.Response(204)
        if path.endswith("/items"):
            if self.reject_filter and "$filter" in request.url.params:
                return httpx.Response(400, text="field not indexed")
            return httpx.Response(200, json={"value": self.items})
        if path.endswith("/lists"):
            name = request.url.params["$filter"].split("'")[1]
            return httpx.Response(200, json={"value": [{"id": f"id-{name}", "displayName": name}]})
        return httpx.Response(200, json={"id": "site-id"})


def _service(fake: FakeMicrosoft, credential: Credential | None = None, clock=None):
    clock = clock or (lambda: NOW)
    graph = GraphSettings()
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake))
    oauth_client = GraphOAuthClient(graph, http_client=http_client, now=clock)
    tokens = GraphTokenService(
        oauth_client,
        initial=credential
        or Credential(
            site_url=SITE_URL,
            tenant_id="tenant",
            client_id="client",
            client_secret="secret",
            access_token="valid-token",
            refresh_token="rt-1",
            expires_at=NOW + timedelta(hours=1),
        ),
        now=clock,
    )
    return RecordSyncService(
        token_service=tokens,
        oauth_client=oauth_client,
        resolver=ResourceResolver(graph, http_client=http_client),
        list_client=GraphListClient(graph, http_client=http_client),
        list_settings=ListSettings(),
        oauth_settings=OAuthSettings(),
        redirect_uri="https://example.com/callback",
        tz=timezone.utc,
        now=clock,
    )


@pytest.mark.anyio
async def test_rejected_filter_falls_back_to_local_filtering() -> None:
    fake = FakeMicrosoft(
        [
            _service_item(1, "2025-01-10", "09:00"),
            _service_item(2, "2025-01-09", "07:00"),
            _service_item(3, "2025-01-10", "10:00"),
            _service_item(4, "2025-01-11", "08:00"),
        ],
        reject_filter=True,
    )

    records = await _service(fake).fetch_records(ListType.SERVIZI_GIORNO)

    assert [record.id for record in records] == [3, 1]
    assert all(isinstance(record, Service) for record in records)
    filtered, unfiltered = fake.item_requests
    assert filtered.url.params["$filter"] == "fields/DATA_PRELIEVO ge 2025-01-10T00:00:00Z"
    assert "$filter" not in unfiltered.url.params


@pytest.mark.anyio
async def test_accepted_filter_still_applies_view_predicate() -> None:
    fake = FakeMicrosoft(
        [_service_item(1, "2025-01-10"), _service_item(2, "2025-01-12")]
    )

    records = await _service(fake).fetch_records("servizi_giorno")

    assert [record.id for record in records] == [1]
    assert len(fake.item_requests) == 1


@pytest.mark.anyio
async def test_upcoming_services_start_tomorrow() -> None:
    fake = FakeMicrosoft(
        [
            _service_item(1, "2025-01-10"),
            _service_item(2, "2025-01-11", "08:00"),
            _service_item(3, "2025-01-15", "08:00"),
        ]
    )

    records = await _service(fake).fetch_records(ListType.PROSSIMI_SERVIZI)

    assert [record.id for record in records] == [3, 2]


@pytest.mark.anyio
async def test_services_created_today() -> None:
    fake = FakeMicrosoft(
        [
            _service_item(1, "2025-02-01", created="2025-01-10T07:00:00Z"),
            _service_item(2, "2025-02-02", created="2025-01-09T18:00:00Z"),
        ],
        reject_filter=True,
    )

    records = await _service(fake).fetch_records(ListType.SERVIZI_INSERITI_OGGI)

    assert [record.id for record in records] == [1]
    assert fake.item_requests[0].url.params["$filter"] == (
        "createdDateTime ge 2025-01-10T00:00:00Z"
    )


@pytest.mark.anyio
async def test_cards_come_from_members_list() -> None:
    fake = FakeMicrosoft(
        [
            _member_item(1, "NUOVO", "Rossi Mario"),
            _member_item(2, "ORDINARIO", "Bianchi Anna"),
            _member_item(3, "esterno", "Verdi Luca"),
        ],
        reject_filter=True,
    )

    records = await _service(fake).fetch_records(ListType.TESSERE_DA_FARE)

    assert records == [Card(id=1, description="Rossi Mario"), Card(id=3, description="Verdi Luca")]
    list_lookup = next(r for r in fake.requests if r.url.path.endswith("/lists"))
    assert list_lookup.url.params["$filter"] == "displayName eq 'LOREAPP_TESSERATI'"


@pytest.mark.anyio
async def test_members_keep_remote_order() -> None:
    fake = FakeMicrosoft([_member_item(5, "ORDINARIO", "B"), _member_item(2, "NUOVO", "A")])

    records = await _service(fake).fetch_records(ListType.TESSERATI)

    assert [record.id for record in records] == [5, 2]
    assert all(isinstance(record, Member) for record in records)
    assert "$filter" not in fake.item_requests[0].url.params


@pytest.mark.anyio
async def test_custom_filter_falls_back_when_locally_evaluable() -> None:
    fake = FakeMicrosoft(
        [_member_item(1, "ORDINARIO", "A"), _member_item(2, "NUOVO", "B")],
        reject_filter=True,
    )

    records = await _service(fake).fetch_records(
        ListType.TESSERATI, "fields/TIPOLOGIASOCIO eq 'ORDINARIO'"
    )

    assert [record.id for record in records] == [1]


@pytest.mark.anyio
async def test_custom_filter_without_local_equivalent_surfaces_filter_error() -> None:
    fake = FakeMicrosoft([_member_item(1, "ORDINARIO", "A")], reject_filter=True)

    with pytest.raises(FilterError):
        await _service(fake).fetch_records(
            ListType.TESSERATI, "startswith(fields/Nominativo_SOCIO, 'A')"
        )
    assert len(fake.item_requests) == 1


@pytest.mark.anyio
async def test_rejected_token_is_refreshed_once_and_retried() -> None:
    fake = FakeMicrosoft([_member_item(1, "NUOVO", "A")])
    fake.rejected_tokens.add("valid-token")

    records = await _service(fake).fetch_records(ListType.TESSERATI)

    assert [record.id for record in records] == [1]
    token_requests = [r for r in fake.requests if r.url.host == "login.microsoftonline.com"]
    assert len(token_requests) == 1
    assert fake.requests[-1].headers["Authorization"] == "Bearer refreshed"


@pytest.mark.anyio
async def test_second_rejection_is_surfaced() -> None:
    fake = FakeMicrosoft([])
    fake.rejected_tokens.update({"valid-token", "refreshed"})

    with pytest.raises(AuthError):
        await _service(fake).fetch_records(ListType.TESSERATI)


@pytest.mark.anyio
async def test_get_service_detail() -> None:
    fake = FakeMicrosoft([_service_item(7, "2025-01-10", "09:00"), _service_item(8, "2025-01-11")])
    service = _service(fake)

    detail = await service.get_service_detail(8)

    assert isinstance(detail, ServiceDetail)
    assert detail.transported_person == "Persona 8"
    assert detail.pickup_date == "11/01/2025"
    with pytest.raises(NotFoundError):
        await service.get_service_detail(99)


@pytest.mark.anyio
async def test_update_record_translates_known_fields_only() -> None:
    fake = FakeMicrosoft([])

    applied = await _service(fake).update_record(
        ListType.SERVIZI_GIORNO,
        42,
        {"operator": "Luca", "pickup_time": "09:30", "colour": "red"},
    )

    assert applied == {"Operatore": "Luca", "OraSottoCasa": "09:30"}
    (update,) = [r for r in fake.requests if "/_api/web/" in r.url.path]
    assert json.loads(update.content) == applied
    assert update.url.host == "contoso.sharepoint.com"


@pytest.mark.anyio
async def test_update_with_no_known_fields_sends_nothing() -> None:
    fake = FakeMicrosoft([])

    assert await _service(fake).update_record("servizi_giorno", 1, {"colour": "red"}) == {}
    assert fake.requests == []


@pytest.mark.anyio
async def test_authorization_round_trip() -> None:
    fake = FakeMicrosoft([])
    service = _service(fake, credential=Credential(tenant_id="tenant", client_id="client"))

    request = await service.begin_authorization(site_url=SITE_URL + "/")
    assert f"state={request.state}" in request.url
    pending = service.verify_state(request.state)
    assert pending.site_url == SITE_URL

    credential = await service.complete_authorization(
        "the-code",
        client_secret="secret",
        site_url=pending.site_url,
        redirect_uri=pending.redirect_uri,
    )

    assert credential.access_token == "exchanged"
    assert credential.site_url == SITE_URL
    assert credential.expires_at == NOW + timedelta(seconds=3300)
    assert await service.is_authenticated() is True
    status = await service.auth_status()
    assert status.authenticated is True
    assert status.site_url == SITE_URL


@pytest.mark.anyio
async def test_authorization_overrides_reach_the_code_exchange() -> None:
    fake = FakeMicrosoft([])
    service = _service(
        fake,
        credential=Credential(
            tenant_id="cfg-tenant", client_id="cfg-client", client_secret="secret"
        ),
    )

    request = await service.begin_authorization(
        tenant_id="other-tenant",
        client_id="other-client",
        redirect_uri="https://other.example.com/callback",
    )
    assert request.url.startswith("https://login.microsoftonline.com/other-tenant/")
    pending = service.verify_state(request.state)

    credential = await service.complete_authorization(
        "the-code",
        tenant_id=pending.tenant_id,
        client_id=pending.client_id,
        redirect_uri=pending.redirect_uri,
    )

    (token_request,) = fake.requests
    assert token_request.url.path == "/other-tenant/oauth2/v2.0/token"
    form = parse_qs(token_request.content.decode("utf-8"))
    assert form["client_id"] == ["other-client"]
    assert form["redirect_uri"] == ["https://other.example.com/callback"]
    assert credential.tenant_id == "other-tenant"
    assert credential.client_id == "other-client"


@pytest.mark.anyio
async def test_rejection_without_refresh_token_keeps_upstream_error() -> None:
    fake = FakeMicrosoft([])
    fake.rejected_tokens.add("valid-token")
    service = _service(
        fake,
        credential=Credential(
            site_url=SITE_URL,
            tenant_id="tenant",
            client_id="client",
            client_secret="secret",
            access_token="valid-token",
        ),
    )

    with pytest.raises(AuthError) as excinfo:
        await service.fetch_records(ListType.TESSERATI)

    upstream = excinfo.value.__cause__
    assert isinstance(upstream, AuthError)
    assert upstream.status_code == 401
    assert upstream.body == "token expired"


@pytest.mark.anyio
async def test_state_is_single_use_and_expires() -> None:
    current = {"now": NOW}
    service = _service(FakeMicrosoft([]), clock=lambda: current["now"])

    used = await service.begin_authorization()
    service.verify_state(used.state)
    with pytest.raises(AuthError):
        service.verify_state(used.state)

    stale = await service.begin_authorization()
    current["now"] = NOW + timedelta(seconds=901)
    with pytest.raises(AuthError):
        service.verify_state(stale.state)
