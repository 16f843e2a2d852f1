"""
Models describing remote lists and their raw items.
"""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class ResourceIdentity(BaseModel):
    """Provider identifiers resolved from a site URL and list display name."""

    model_config = ConfigDict(frozen=True)

    site_id: str
    list_id: str


class RawItem(BaseModel):
    """One list item exactly as returned by Graph, before normalization."""

    model_config = ConfigDict(frozen=True)

    id: str = ""
    fields: Dict[str, Any] = Field(default_factory=dict)
    created_at: str = Field("", description="The item's createdDateTime.")

    @classmethod
    def from_graph(cls, payload: Dict[str, Any]) -> "RawItem | None":
        """Build from a Graph ``listItem``; items without ``fields`` yield None."""
        fields = payload.get("fields")
        if not isinstance(fields, dict):
            return None
        raw_id = payload.get("id")
        return cls(
            id="" if raw_id is None else str(raw_id),
            fields=fields,
            created_at=str(payload.get("createdDateTime") or ""),
        )


__all__ = ["RawItem", "ResourceIdentity"]
