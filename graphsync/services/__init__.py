"""Service layer exports."""

from .credential_cipher import CredentialCipher
from .graph_tokens import GraphTokenService
from .list_views import FilterSpec, ListType
from .record_sync import AuthorizationRequest, PendingAuthorization, RecordSyncService

__all__ = [
    "AuthorizationRequest",
    "CredentialCipher",
    "FilterSpec",
    "GraphTokenService",
    "ListType",
    "PendingAuthorization",
    "RecordSyncService",
]
