"""
Session credential ownership and token lifecycle.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from graphsync.clients.credential_repository import CredentialRepository
from graphsync.clients.graph_auth import GraphOAuthClient
from graphsync.core.errors import AuthError
from graphsync.models import Credential
from graphsync.models.credential import utcnow
from graphsync.services.credential_cipher import CredentialCipher

logger = logging.getLogger(__name__)


class GraphTokenService:
    """
    Owns the credential of one authenticated session.

    Every read and replacement of the credential happens under a single
    ``asyncio.Lock`` so no caller ever observes a half-refreshed credential.
    Holding the lock across the refresh request also means concurrent callers
    that find the token expired wait for one refresh instead of issuing their
    own.
    """

    def __init__(
        self,
        oauth_client: GraphOAuthClient,
        *,
        initial: Optional[Credential] = None,
        repository: Optional[CredentialRepository] = None,
        cipher: Optional[CredentialCipher] = None,
        session_key: str = "default",
        now: Callable[[], datetime] = utcnow,
    ) -> None:
        if repository is not None and cipher is None:
            raise ValueError("A cipher is required to persist credentials.")
        self._oauth = oauth_client
        self._credential = initial or Credential()
        self._repository = repository
        self._cipher = cipher
        self._session_key = session_key
        self._now = now
        self._lock = asyncio.Lock()
        self._loaded = repository is None

    async def get_credential(self) -> Credential:
        async with self._lock:
            self._load_once()
            return self._credential

    async def replace(self, credential: Credential) -> None:
        """Swap in a new credential, e.g. after an authorization-code exchange."""
        async with self._lock:
            self._loaded = True
            self._store(credential)

    async def is_authenticated(self) -> bool:
        credential = await self.get_credential()
        return credential.is_authenticated(self._now())

    async def get_access_token(self) -> str:
        """Return a usable access token, refreshing an expired one first."""
        async with self._lock:
            self._load_once()
            credential = await self._oauth.ensure_valid(self._credential)
            if credential is not self._credential:
                self._store(credential)
            return _token_of(credential)

    async def force_refresh(self, rejected_token: Optional[str] = None) -> str:
        """
        Refresh after the remote API rejected ``rejected_token``.

        When another caller already replaced that token the current one is
        returned without a second refresh.
        """
        async with self._lock:
            self._load_once()
            current = self._credential
            if (
                rejected_token is not None
                and current.access_token
                and current.access_token != rejected_token
            ):
                return current.access_token
            refreshed = await self._oauth.refresh(current)
            self._store(refreshed)
            return _token_of(refreshed)

    def _store(self, credential: Credential) -> None:
        self._credential = credential
        if self._repository is None or self._cipher is None:
            return
        now = self._now()
        self._repository.save(
            self._session_key,
            self._to_record(credential),
            updated_at=now.isoformat(),
        )

    def _load_once(self) -> None:
        if self._loaded:
            return
        self._loaded = True
        record = self._repository.load(self._session_key) if self._repository else None
        if not record:
            return
        try:
            stored = self._from_record(record)
        except ValueError:
            logger.warning(
                "Stored credential for session %s could not be decrypted; "
                "re-authentication required",
                self._session_key,
            )
            return
        self._credential = _merge(self._credential, stored)
        logger.info("Loaded stored credential for %s", self._credential.site_url)

    def _to_record(self, credential: Credential) -> Dict[str, Any]:
        cipher = self._cipher
        return {
            "site_url": credential.site_url,
            "tenant_id": credential.tenant_id,
            "client_id": credential.client_id,
            "client_secret_encrypted": cipher.encrypt(credential.client_secret),
            "access_token_encrypted": cipher.encrypt(credential.access_token),
            "refresh_token_encrypted": cipher.encrypt(credential.refresh_token),
            "expires_at": (
                credential.expires_at.isoformat() if credential.expires_at else None
            ),
        }

    def _from_record(self, record: Dict[str, Any]) -> Credential:
        cipher = self._cipher
        expires_at = record.get("expires_at")
        return Credential(
            site_url=record.get("site_url") or "",
            tenant_id=record.get("tenant_id"),
            client_id=record.get("client_id"),
            client_secret=cipher.decrypt(record.get("client_secret_encrypted")),
            access_token=cipher.decrypt(record.get("access_token_encrypted")),
            refresh_token=cipher.decrypt(record.get("refresh_token_encrypted")),
            expires_at=datetime.fromisoformat(expires_at) if expires_at else None,
        )


def _merge(configured: Credential, stored: Credential) -> Credential:
    """Stored tokens win; configured identity fills anything the record lacks."""
    return stored.model_copy(
        update={
            "site_url": stored.site_url or configured.site_url,
            "tenant_id": stored.tenant_id or configured.tenant_id,
            "client_id": stored.client_id or configured.client_id,
            "client_secret": stored.client_secret or configured.client_secret,
        }
    )


def _token_of(credential: Credential) -> str:
    if not credential.access_token:
        raise AuthError("Not authenticated: no access token stored.")
    return credential.access_token


__all__ = ["GraphTokenService"]
