"""Schemas related to OAuth flows."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class OAuthCallbackPayload(BaseModel):
    """Payload sent to complete the OAuth callback exchange."""

    code: str = Field(..., description="Authorization code returned by Microsoft identity.")
    state: str = Field(..., description="Opaque state token issued when starting OAuth.")


class AuthStatus(BaseModel):
    """Authentication state of the current session."""

    authenticated: bool
    site_url: Optional[str] = None
    expires_at: Optional[str] = None


__all__ = ["AuthStatus", "OAuthCallbackPayload"]
