"""Expose constructed client wrappers."""

from .credential_repository import CredentialRepository
from .graph_auth import GraphOAuthClient
from .graph_lists import GraphListClient
from .graph_sites import ResourceResolver

__all__ = [
    "CredentialRepository",
    "GraphListClient",
    "GraphOAuthClient",
    "ResourceResolver",
]
