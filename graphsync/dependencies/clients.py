"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from functools import lru_cache

from graphsync.clients import (
    CredentialRepository,
    GraphListClient,
    GraphOAuthClient,
    ResourceResolver,
)
from graphsync.core.config import get_settings
from graphsync.models import Credential
from graphsync.services import CredentialCipher, GraphTokenService, RecordSyncService


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_graph_oauth_client() -> GraphOAuthClient:
    """Create a singleton Microsoft identity OAuth client."""
    return GraphOAuthClient(_settings().graph)


@lru_cache()
def get_resource_resolver() -> ResourceResolver:
    return ResourceResolver(_settings().graph)


@lru_cache()
def get_graph_list_client() -> GraphListClient:
    return GraphListClient(_settings().graph)


@lru_cache()
def get_credential_repository() -> CredentialRepository:
    """Provide shared SQLite credential store."""
    return CredentialRepository(_settings().credential_db_path)


@lru_cache()
def get_credential_cipher() -> CredentialCipher:
    """Provide symmetric encryption helper for credential storage."""
    settings = _settings()
    secret = settings.security.token_encryption_secret or settings.graph.client_secret
    return CredentialCipher(secret=secret)


@lru_cache()
def get_graph_token_service() -> GraphTokenService:
    """Provide the owner of the session credential, seeded from configuration."""
    graph = _settings().graph
    return GraphTokenService(
        get_graph_oauth_client(),
        initial=Credential(
            site_url=graph.site_url or "",
            tenant_id=graph.tenant_id,
            client_id=graph.client_id,
            client_secret=graph.client_secret,
        ),
        repository=get_credential_repository(),
        cipher=get_credential_cipher(),
    )


@lru_cache()
def get_record_sync_service() -> RecordSyncService:
    settings = _settings()
    return RecordSyncService(
        token_service=get_graph_token_service(),
        oauth_client=get_graph_oauth_client(),
        resolver=get_resource_resolver(),
        list_client=get_graph_list_client(),
        list_settings=settings.lists,
        oauth_settings=settings.oauth,
        redirect_uri=settings.graph.redirect_uri,
    )


__all__ = [
    "get_credential_cipher",
    "get_credential_repository",
    "get_graph_list_client",
    "get_graph_oauth_client",
    "get_graph_token_service",
    "get_record_sync_service",
    "get_resource_resolver",
]
