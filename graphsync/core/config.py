"""
Application configuration models and helpers.

Centralizes settings management so the record service, the Graph clients and
the HTTP surface share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


class GraphSettings(BaseSettings):
    """Site and app registration used to talk to Microsoft Graph."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    site_url: Optional[str] = Field(
        None,
        alias="SHAREPOINT_SITE_URL",
        description="Human-readable SharePoint site URL, e.g. https://contoso.sharepoint.com/sites/app.",
    )
    tenant_id: Optional[str] = Field(None, alias="SHAREPOINT_TENANT_ID")
    client_id: Optional[str] = Field(None, alias="SHAREPOINT_CLIENT_ID")
    client_secret: Optional[str] = Field(None, alias="SHAREPOINT_CLIENT_SECRET")
    redirect_uri: Optional[str] = Field(
        None,
        alias="SHAREPOINT_REDIRECT_URI",
        description="Redirect URI registered for the authorization-code flow.",
    )
    http_timeout_seconds: float = Field(30.0, alias="GRAPH_HTTP_TIMEOUT")
    graph_base_url: str = Field(
        "https://graph.microsoft.com/v1.0", alias="GRAPH_BASE_URL"
    )
    authority_url: str = Field(
        "https://login.microsoftonline.com", alias="GRAPH_AUTHORITY_URL"
    )

    @field_validator("site_url", "graph_base_url", "authority_url")
    @classmethod
    def _strip_trailing_slash(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return value.strip().rstrip("/") or None


class ListSettings(BaseSettings):
    """Display names of the remote lists, one per logical list type."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    servizi_giorno: str = Field("LOREAPP_SERVIZI", alias="LIST_SERVIZI_GIORNO")
    prossimi_servizi: str = Field("LOREAPP_SERVIZI", alias="LIST_PROSSIMI_SERVIZI")
    servizi_inseriti_oggi: str = Field(
        "LOREAPP_SERVIZI", alias="LIST_SERVIZI_INSERITI_OGGI"
    )
    tesserati: str = Field("LOREAPP_TESSERATI", alias="LIST_TESSERATI")

    def name_for(self, list_key: str) -> str:
        """Return the configured display name, defaulting to the services list."""
        if list_key in type(self).model_fields:
            return getattr(self, list_key)
        return self.servizi_giorno


class OAuthSettings(BaseSettings):
    """OAuth flow configuration."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    state_ttl_seconds: int = Field(900, alias="OAUTH_STATE_TTL")


class SecuritySettings(BaseSettings):
    """Security-related configuration."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    token_encryption_secret: Optional[str] = Field(
        None,
        alias="TOKEN_ENCRYPTION_SECRET",
        description=(
            "Secret used to derive the symmetric key for encrypting stored tokens."
        ),
    )


class AppSettings(BaseSettings):
    """Root settings object for the sync service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    environment: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="APP_LOG_LEVEL")
    credential_db_path: str = Field(
        "data/credentials.db",
        alias="CREDENTIAL_DB_PATH",
        description="SQLite file holding the encrypted session credential.",
    )
    graph: GraphSettings = Field(default_factory=GraphSettings)
    lists: ListSettings = Field(default_factory=ListSettings)
    oauth: OAuthSettings = Field(default_factory=OAuthSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "GraphSettings",
    "ListSettings",
    "OAuthSettings",
    "SecuritySettings",
    "get_settings",
]
