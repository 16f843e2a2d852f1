"""
Pydantic models for the domain records produced from remote list items.

Dates are ``DD/MM/YYYY`` strings and times ``HH:MM`` strings; fields the remote
item does not carry are empty strings rather than ``None``.
"""

from pydantic import BaseModel, ConfigDict, Field


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)


class Service(_Record):
    """Short form of a transport service, used by the day/upcoming views."""

    id: int = Field(..., gt=0, description="Service number (IDSERVIZIO).")
    operator: str = ""
    date: str = Field("", description="Pickup date, DD/MM/YYYY.")
    counterpart_name: str = Field("", description="Person being transported.")
    pickup_time: str = ""
    dropoff_time: str = ""
    service_type: str = ""


class ServiceDetail(_Record):
    """Every column of a transport service."""

    id: int = Field(..., gt=0)
    pickup_date: str = ""
    member_id: str = ""
    transported_person: str = ""
    start_time: str = ""
    pickup_city: str = ""
    pickup_address: str = ""
    service_type: str = ""
    wheelchair: str = ""
    requester: str = ""
    reason: str = ""
    arrival_time: str = ""
    dest_city: str = ""
    dest_address: str = ""
    payment: str = ""
    collection_status: str = ""
    operator: str = ""
    operator2: str = ""
    vehicle: str = ""
    duration: str = ""
    distance_km: str = ""
    payment_type: str = ""
    transfer_date: str = ""
    receipt_date: str = ""
    status: str = ""
    pickup_notes: str = ""
    arrival_notes: str = ""
    closing_notes: str = ""


class Card(_Record):
    """Membership card still to be issued."""

    id: int = Field(..., gt=0, description="Internal list item id.")
    description: str


class Member(_Record):
    """Registered member of the association."""

    id: int = Field(..., gt=0, description="Internal list item id.")
    member_id: str = ""
    full_name: str = ""
    fiscal_code: str = ""
    card_number: str = ""
    card_expiry: str = ""
    phone: str = ""
    member_type: str = ""
    is_operator: bool = False
    is_active: bool = False
    availability: str = ""
    note: str = ""


__all__ = ["Card", "Member", "Service", "ServiceDetail"]
