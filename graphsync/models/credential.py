"""
Domain model for the OAuth2 state of one authenticated session.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Credential(BaseModel):
    """Tokens plus tenant/client identity for one SharePoint site.

    Instances are immutable; a token exchange produces a new credential with
    the access token, refresh token and expiry replaced together.
    """

    model_config = ConfigDict(frozen=True)

    site_url: str = Field("", description="Site the tokens were issued for.")
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = Field(
        None, description="UTC instant after which the access token is stale."
    )
    tenant_id: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None

    @field_validator("expires_at")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def has_access_token(self) -> bool:
        return bool(self.access_token)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """True when an expiry is recorded and already in the past."""
        if self.expires_at is None:
            return False
        return self.expires_at < (now or utcnow())

    def is_authenticated(self, now: Optional[datetime] = None) -> bool:
        """A non-empty access token that is not known to be expired."""
        if not self.has_access_token:
            return False
        if self.expires_at is None:
            return True
        return self.expires_at > (now or utcnow())

    def with_tokens(
        self,
        *,
        access_token: str,
        refresh_token: Optional[str],
        expires_at: Optional[datetime],
    ) -> "Credential":
        """Return a copy carrying a freshly issued token set."""
        return self.model_copy(
            update={
                "access_token": access_token,
                "refresh_token": refresh_token,
                "expires_at": expires_at,
            }
        )


__all__ = ["Credential", "utcnow"]
