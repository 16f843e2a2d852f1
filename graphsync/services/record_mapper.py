"""
Map raw list items onto the fixed domain record shapes.

Every mapper returns ``None`` when the item has no usable positive integer
identifier; such records cannot be referenced by updates so they are dropped
rather than surfaced with a placeholder id.
"""

from __future__ import annotations

import logging
from datetime import tzinfo
from typing import Any, Iterable, List, Mapping, Optional

from graphsync.models import RawItem
from graphsync.schemas import Card, Member, Service, ServiceDetail
from graphsync.services import field_tables as tables
from graphsync.utils.dates import normalize_date, normalize_time
from graphsync.utils.fields import coerce_identifier, extract, first_non_empty

logger = logging.getLogger(__name__)


def is_truthy(value: Optional[str]) -> bool:
    """Closed truthy-set check used for free-text boolean columns."""
    if not value:
        return False
    return value.strip().upper() in tables.TRUTHY_TOKENS


def _resolve_id(candidates: Iterable[Any]) -> Optional[int]:
    for candidate in candidates:
        identifier = coerce_identifier(candidate)
        if identifier is not None:
            return identifier
    return None


def _service_id(item: RawItem) -> Optional[int]:
    return _resolve_id(item.fields.get(name) for name in tables.SERVICE_ID_FIELDS)


def _item_id(item: RawItem) -> Optional[int]:
    return _resolve_id((item.id, item.fields.get(tables.ITEM_TITLE_FIELD)))


def _full_name(fields: Mapping[str, Any]) -> str:
    surname = extract(fields, tables.SURNAME_FIELD).strip()
    given = extract(fields, tables.GIVEN_NAME_FIELD).strip()
    return " ".join(part for part in (surname, given) if part)


def _columns(
    fields: Mapping[str, Any],
    columns: Mapping[str, str],
    date_columns: Mapping[str, str],
    tz: Optional[tzinfo],
    time_columns: Optional[Mapping[str, str]] = None,
) -> dict:
    values = {attr: extract(fields, column) for attr, column in columns.items()}
    for attr, column in date_columns.items():
        values[attr] = normalize_date(extract(fields, column), tz)
    for attr, column in (time_columns or {}).items():
        values[attr] = normalize_time(extract(fields, column))
    return values


def map_to_service(item: RawItem, tz: Optional[tzinfo] = None) -> Optional[Service]:
    identifier = _service_id(item)
    if identifier is None:
        logger.debug("Dropping service item %s without identifier", item.id)
        return None
    values = _columns(
        item.fields,
        tables.SERVICE_COLUMNS,
        tables.SERVICE_DATE_COLUMNS,
        tz,
        tables.SERVICE_TIME_COLUMNS,
    )
    return Service(id=identifier, **values)


def map_to_service_detail(
    item: RawItem, tz: Optional[tzinfo] = None
) -> Optional[ServiceDetail]:
    identifier = _service_id(item)
    if identifier is None:
        logger.debug("Dropping service item %s without identifier", item.id)
        return None
    values = _columns(
        item.fields,
        tables.SERVICE_DETAIL_COLUMNS,
        tables.SERVICE_DETAIL_DATE_COLUMNS,
        tz,
        tables.SERVICE_DETAIL_TIME_COLUMNS,
    )
    return ServiceDetail(id=identifier, **values)


def is_card_candidate(item: RawItem) -> bool:
    member_type = extract(item.fields, tables.MEMBER_TYPE_FIELD)
    return member_type.strip().casefold() in tables.CARD_MEMBER_TYPES


def map_to_card(item: RawItem) -> Optional[Card]:
    """Build a card entry for members whose card still has to be issued.

    Only new and external members qualify; the description falls back from
    the member name to the surname/name pair and then to free-text columns.
    """
    if not is_card_candidate(item):
        return None
    identifier = _item_id(item)
    if identifier is None:
        logger.debug("Dropping card item %s without identifier", item.id)
        return None

    fields = item.fields
    description = (
        first_non_empty(fields, tables.CARD_DESCRIPTION_FIELDS)
        or _full_name(fields)
        or first_non_empty(fields, tables.CARD_FALLBACK_DESCRIPTION_FIELDS)
    ).strip()
    if not description:
        logger.debug("Dropping card item %s without description", item.id)
        return None
    return Card(id=identifier, description=description)


def map_to_member(item: RawItem, tz: Optional[tzinfo] = None) -> Optional[Member]:
    identifier = _item_id(item)
    if identifier is None:
        logger.debug("Dropping member item %s without identifier", item.id)
        return None

    fields = item.fields
    member_id = (
        extract(fields, tables.MEMBER_ID_PRIMARY_FIELD)
        or first_non_empty(fields, tables.MEMBER_ID_FIELDS)
        or str(identifier)
    )
    full_name = first_non_empty(fields, tables.MEMBER_NAME_FIELDS) or _full_name(fields)
    values = _columns(fields, tables.MEMBER_COLUMNS, tables.MEMBER_DATE_COLUMNS, tz)
    return Member(
        id=identifier,
        member_id=member_id,
        full_name=full_name,
        fiscal_code=first_non_empty(fields, tables.FISCAL_CODE_FIELDS),
        is_operator=is_truthy(first_non_empty(fields, tables.OPERATOR_FLAG_FIELDS)),
        is_active=is_truthy(first_non_empty(fields, tables.ACTIVE_FLAG_FIELDS)),
        **values,
    )


def map_items(items: Iterable[RawItem], mapper) -> List[Any]:
    """Apply ``mapper`` to every item, keeping only the records it produced."""
    records = []
    for item in items:
        record = mapper(item)
        if record is not None:
            records.append(record)
    return records


__all__ = [
    "is_card_candidate",
    "is_truthy",
    "map_items",
    "map_to_card",
    "map_to_member",
    "map_to_service",
    "map_to_service_detail",
]
