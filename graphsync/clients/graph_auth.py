"""
Microsoft identity platform OAuth utilities.

These helpers manage the authorization-code flow and the refresh lifecycle of
the delegated Graph token used to read and write SharePoint lists.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional
from urllib.parse import quote

import httpx

from graphsync.core.config import GraphSettings
from graphsync.core.errors import AuthError, ConfigError, ParseError
from graphsync.models import Credential
from graphsync.models.credential import utcnow
from graphsync.utils.http import client_scope, decode_object, send

logger = logging.getLogger(__name__)


class GraphOAuthClient:
    """Build authorization URLs, exchange authorization codes and refresh tokens."""

    SCOPE = "https://graph.microsoft.com/Sites.ReadWrite.All offline_access"
    EXPIRY_MARGIN = timedelta(seconds=300)

    def __init__(
        self,
        graph_settings: GraphSettings,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        now: Callable[[], datetime] = utcnow,
    ) -> None:
        self._graph = graph_settings
        self._http_client = http_client
        self._now = now

    def _endpoint(self, tenant_id: str, name: str) -> str:
        return f"{self._graph.authority_url}/{tenant_id}/oauth2/v2.0/{name}"

    def build_authorization_url(
        self,
        *,
        state: str,
        tenant_id: Optional[str],
        client_id: Optional[str],
        redirect_uri: Optional[str],
    ) -> str:
        """Construct the Microsoft consent URL for the authorization-code flow."""
        tenant_id = _require(tenant_id, "tenant_id")
        client_id = _require(client_id, "client_id")
        redirect_uri = _require(redirect_uri, "redirect_uri")

        params = [
            ("client_id", client_id),
            ("response_type", "code"),
            ("redirect_uri", redirect_uri),
            ("response_mode", "query"),
            ("scope", self.SCOPE),
            ("state", state),
        ]
        query = "&".join(f"{key}={quote(value, safe='')}" for key, value in params)
        return f"{self._endpoint(tenant_id, 'authorize')}?{query}"

    async def exchange_code(
        self, credential: Credential, *, code: str, redirect_uri: Optional[str]
    ) -> Credential:
        """Exchange an authorization code and return the credential with fresh tokens."""
        payload = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": _require(redirect_uri, "redirect_uri"),
        }
        return await self._request_tokens(credential, payload)

    async def refresh(self, credential: Credential) -> Credential:
        """Use the stored refresh token to obtain a new access token."""
        if not credential.refresh_token:
            raise AuthError("Access token expired and no refresh token is available.")
        payload = {
            "grant_type": "refresh_token",
            "refresh_token": credential.refresh_token,
        }
        logger.info("Refreshing Graph access token for %s", credential.site_url)
        return await self._request_tokens(credential, payload)

    async def ensure_valid(self, credential: Credential) -> Credential:
        """
        Return a credential that is usable right now.

        A credential whose recorded expiry has passed is refreshed exactly once.
        A credential with a token but no expiry is returned as-is.
        """
        if not credential.has_access_token and not credential.refresh_token:
            raise AuthError("Not authenticated: no access token stored.")
        if not credential.has_access_token or credential.is_expired(self._now()):
            return await self.refresh(credential)
        return credential

    async def _request_tokens(
        self, credential: Credential, grant: Dict[str, str]
    ) -> Credential:
        tenant_id = _require(credential.tenant_id, "tenant_id")
        payload = {
            **grant,
            "client_id": _require(credential.client_id, "client_id"),
            "client_secret": _require(credential.client_secret, "client_secret"),
            "scope": self.SCOPE,
        }

        issued_at = self._now()
        response = await self._post_form(self._endpoint(tenant_id, "token"), payload)

        if not response.is_success:
            raise AuthError(
                f"Token endpoint rejected the {grant['grant_type']} grant.",
                status_code=response.status_code,
                body=response.text,
            )

        token_payload = decode_object(response, context="Token response")
        access_token = token_payload.get("access_token")
        if not access_token:
            raise ParseError(
                "Token response did not include an access token.",
                body=response.text,
                field="access_token",
            )

        expires_in = token_payload.get("expires_in")
        expires_at = None
        if expires_in is not None:
            try:
                expires_at = (
                    issued_at + timedelta(seconds=int(expires_in)) - self.EXPIRY_MARGIN
                )
            except (TypeError, ValueError) as exc:
                raise ParseError(
                    "Token response carried a non-numeric expires_in.",
                    body=response.text,
                    field="expires_in",
                ) from exc
        else:
            logger.warning("Token response carried no expires_in; expiry unknown")

        return credential.with_tokens(
            access_token=access_token,
            refresh_token=token_payload.get("refresh_token") or credential.refresh_token,
            expires_at=expires_at,
        )

    async def _post_form(self, url: str, data: Dict[str, str]) -> httpx.Response:
        async with client_scope(self._http_client, self._graph.http_timeout_seconds) as client:
            return await send(client, "POST", url, data=data)


def _require(value: Optional[str], field: str) -> str:
    if not value:
        raise ConfigError(f"Missing required setting: {field}.", field=field)
    return value


__all__ = ["GraphOAuthClient"]
