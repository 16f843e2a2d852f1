"""Schemas for partial record updates."""

from typing import Any, Dict

from pydantic import BaseModel, Field


class RecordUpdateRequest(BaseModel):
    """Logical field names mapped to their new values."""

    fields: Dict[str, Any] = Field(
        ...,
        description=(
            "Logical service fields (operator, date, counterpart_name, pickup_time, "
            "dropoff_time, service_type). Unknown names are ignored."
        ),
    )


__all__ = ["RecordUpdateRequest"]
