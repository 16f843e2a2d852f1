"""
FastAPI routes for the SharePoint list sync service.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Any, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse, RedirectResponse

from graphsync.core.errors import AuthError, ErrorKind, GraphSyncError
from graphsync.dependencies import get_app_settings, get_record_sync_service
from graphsync.schemas import AuthStatus, OAuthCallbackPayload, RecordUpdateRequest
from graphsync.services import ListType

router = APIRouter()
logger = logging.getLogger(__name__)

_STATUS_BY_KIND = {
    ErrorKind.CONFIG: HTTPStatus.INTERNAL_SERVER_ERROR,
    ErrorKind.AUTH: HTTPStatus.UNAUTHORIZED,
    ErrorKind.NOT_FOUND: HTTPStatus.NOT_FOUND,
    ErrorKind.FILTER: HTTPStatus.BAD_GATEWAY,
    ErrorKind.UPSTREAM: HTTPStatus.BAD_GATEWAY,
    ErrorKind.PARSE: HTTPStatus.BAD_GATEWAY,
}


def _raise_http(exc: GraphSyncError) -> NoReturn:
    status_code = _STATUS_BY_KIND.get(exc.kind, HTTPStatus.BAD_GATEWAY)
    if status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
        logger.error("%s failure: %s", exc.kind.value, exc.message)
    raise HTTPException(status_code=status_code, detail=exc.to_dict()) from exc


def _wants_html(request: Request) -> bool:
    return "text/html" in request.headers.get("accept", "").lower()


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.get("/auth/status", response_model=AuthStatus)
async def auth_status(
    service: Annotated[Any, Depends(get_record_sync_service)],
) -> AuthStatus:
    return await service.auth_status()


@router.get("/auth/authorize", status_code=HTTPStatus.OK)
async def start_oauth_flow(
    request: Request,
    service: Annotated[Any, Depends(get_record_sync_service)],
    tenant_id: str | None = Query(default=None, description="Overrides the configured tenant."),
    client_id: str | None = Query(default=None, description="Overrides the configured app id."),
    site_url: str | None = Query(default=None, description="SharePoint site to connect."),
    redirect: bool = Query(
        default=False,
        description="When true, respond with a redirect to the Microsoft consent screen.",
    ),
) -> Any:
    """Kick off the OAuth flow by generating a state token and authorization URL."""
    try:
        authorization = await service.begin_authorization(
            tenant_id=tenant_id, client_id=client_id, site_url=site_url
        )
    except GraphSyncError as exc:
        _raise_http(exc)

    if redirect or _wants_html(request):
        return RedirectResponse(
            url=authorization.url, status_code=HTTPStatus.TEMPORARY_REDIRECT
        )
    return {"authorization_url": authorization.url, "state": authorization.state}


@router.post("/auth/callback", status_code=HTTPStatus.OK)
async def handle_oauth_callback(
    payload: OAuthCallbackPayload,
    service: Annotated[Any, Depends(get_record_sync_service)],
) -> dict:
    """Verify the state, exchange the code and store the resulting tokens."""
    try:
        pending = service.verify_state(payload.state)
    except AuthError as exc:
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST, detail=exc.to_dict()
        ) from exc

    try:
        credential = await service.complete_authorization(
            payload.code,
            tenant_id=pending.tenant_id,
            client_id=pending.client_id,
            site_url=pending.site_url,
            redirect_uri=pending.redirect_uri,
        )
    except GraphSyncError as exc:
        _raise_http(exc)

    return {
        "status": "connected",
        "site_url": credential.site_url,
        "expires_at": credential.expires_at.isoformat() if credential.expires_at else None,
    }


@router.get("/auth/callback", status_code=HTTPStatus.OK)
async def handle_oauth_callback_get(
    request: Request,
    service: Annotated[Any, Depends(get_record_sync_service)],
    settings: Annotated[Any, Depends(get_app_settings)],
    state: str = Query(..., description="OAuth state token."),
    code: str = Query(..., description="Authorization code returned by Microsoft identity."),
) -> Response:
    result = await handle_oauth_callback(
        payload=OAuthCallbackPayload(state=state, code=code),
        service=service,
    )
    if _wants_html(request) and settings.graph.site_url:
        return RedirectResponse(
            url=settings.graph.site_url, status_code=HTTPStatus.TEMPORARY_REDIRECT
        )
    return JSONResponse(content=result)


@router.get("/records/{list_type}", status_code=HTTPStatus.OK)
async def list_records(
    list_type: ListType,
    service: Annotated[Any, Depends(get_record_sync_service)],
    raw_filter: str | None = Query(
        default=None,
        alias="filter",
        description=(
            "Server-side filter, either Graph syntax (fields/DATA_PRELIEVO ge 2025-01-01T00:00:00Z) "
            "or SharePoint REST syntax (DATA_PRELIEVO ge datetime'2025-01-01T00:00:00Z')."
        ),
    ),
) -> dict:
    """Return the ordered records of one logical list."""
    try:
        records = await service.fetch_records(list_type, raw_filter)
    except GraphSyncError as exc:
        _raise_http(exc)
    return {
        "list_type": list_type.value,
        "count": len(records),
        "records": [record.model_dump() for record in records],
    }


@router.get("/services/{service_id}", status_code=HTTPStatus.OK)
async def get_service(
    service_id: int,
    service: Annotated[Any, Depends(get_record_sync_service)],
) -> dict:
    try:
        detail = await service.get_service_detail(service_id)
    except GraphSyncError as exc:
        _raise_http(exc)
    return detail.model_dump()


@router.patch("/records/{list_type}/{record_id}", status_code=HTTPStatus.OK)
async def update_record(
    list_type: ListType,
    record_id: int,
    payload: RecordUpdateRequest,
    service: Annotated[Any, Depends(get_record_sync_service)],
) -> dict:
    """Apply a partial update; unknown field names are ignored."""
    try:
        applied = await service.update_record(list_type, record_id, payload.fields)
    except GraphSyncError as exc:
        _raise_http(exc)
    return {"id": record_id, "updated_fields": sorted(applied)}


__all__ = ["router"]
