"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_credential_cipher,
    get_credential_repository,
    get_graph_list_client,
    get_graph_oauth_client,
    get_graph_token_service,
    get_record_sync_service,
    get_resource_resolver,
)
from .config import get_app_settings

__all__ = [
    "get_app_settings",
    "get_credential_cipher",
    "get_credential_repository",
    "get_graph_list_client",
    "get_graph_oauth_client",
    "get_graph_token_service",
    "get_record_sync_service",
    "get_resource_resolver",
]
