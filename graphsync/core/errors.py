"""
Error taxonomy shared by the Graph clients and the record service.

Every failure the core surfaces is one of a closed set of kinds so callers can
branch on ``exc.kind`` (for example to run the unfiltered retry on
``ErrorKind.FILTER``) instead of parsing messages.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Closed enumeration of failure kinds."""

    CONFIG = "config"
    AUTH = "auth"
    NOT_FOUND = "not_found"
    FILTER = "filter"
    UPSTREAM = "upstream"
    PARSE = "parse"


class GraphSyncError(Exception):
    """Base class carrying structured context about a failure."""

    kind: ErrorKind = ErrorKind.UPSTREAM

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
        field: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body
        self.field = field

    def to_dict(self) -> dict:
        payload = {"kind": self.kind.value, "message": self.message}
        if self.status_code is not None:
            payload["status_code"] = self.status_code
        if self.field is not None:
            payload["field"] = self.field
        return payload


class ConfigError(GraphSyncError):
    """A required credential or configuration value is missing."""

    kind = ErrorKind.CONFIG


class AuthError(GraphSyncError):
    """Token missing, rejected, or impossible to refresh."""

    kind = ErrorKind.AUTH


class NotFoundError(GraphSyncError):
    """A named remote resource does not exist."""

    kind = ErrorKind.NOT_FOUND


class UpstreamError(GraphSyncError):
    """Non-success response from the remote API."""

    kind = ErrorKind.UPSTREAM

    @property
    def filter_related(self) -> bool:
        return self.kind is ErrorKind.FILTER


class FilterError(UpstreamError):
    """The server rejected a server-side filter (HTTP 400 on a filtered request)."""

    kind = ErrorKind.FILTER


class ParseError(GraphSyncError):
    """A response body could not be decoded into the expected shape."""

    kind = ErrorKind.PARSE


__all__ = [
    "AuthError",
    "ConfigError",
    "ErrorKind",
    "FilterError",
    "GraphSyncError",
    "NotFoundError",
    "ParseError",
    "UpstreamError",
]
