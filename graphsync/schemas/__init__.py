"""Public schema exports."""

from .auth import AuthStatus, OAuthCallbackPayload
from .records import Card, Member, Service, ServiceDetail
from .updates import RecordUpdateRequest

__all__ = [
    "AuthStatus",
    "Card",
    "Member",
    "OAuthCallbackPayload",
    "RecordUpdateRequest",
    "Service",
    "ServiceDetail",
]
