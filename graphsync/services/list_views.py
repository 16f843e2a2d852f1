"""
Logical list views and the filters that narrow them.

A view names the source list, the record shape, the server-side filter tried
first and the client-side predicate that is always applied to whatever the
server returned.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from enum import Enum
from functools import partial
from typing import Any, Callable, Optional, Tuple

from graphsync.models import RawItem
from graphsync.services import field_tables as tables
from graphsync.services.record_mapper import (
    is_card_candidate,
    map_to_card,
    map_to_member,
    map_to_service,
    map_to_service_detail,
)
from graphsync.utils.dates import normalize_date, parse_display_date, parse_rfc3339
from graphsync.utils.fields import extract


class ListType(str, Enum):
    """Logical lists exposed to callers."""

    SERVIZI_GIORNO = "servizi_giorno"
    PROSSIMI_SERVIZI = "prossimi_servizi"
    SERVIZI_INSERITI_OGGI = "servizi_inseriti_oggi"
    TESSERE_DA_FARE = "tessere_da_fare"
    TESSERATI = "tesserati"
    SERVIZI_COMPLETI = "servizi_completi"


_CLAUSE_PATTERN = re.compile(
    r"^(?:fields/)?(?P<field>\w+)\s+(?P<op>eq|ne|gt|ge|lt|le)\s+"
    r"(?:datetime)?'?(?P<value>[^']*)'?$",
    re.IGNORECASE,
)
_JOIN_PATTERN = re.compile(r"\s+(and|or)\s+", re.IGNORECASE)
_CREATED_FIELDS = {"created", "createddatetime"}
_FIELD_ALIASES = {"Data_Prelievo": tables.SERVICE_DATE_FIELD}


def _as_instant(text: str) -> Optional[datetime]:
    parsed = parse_rfc3339(text)
    if parsed is not None:
        return parsed
    try:
        return datetime.strptime(text.strip(), "%Y-%m-%d").replace(tzinfo=timezone.utc)
    except ValueError:
        return None


def _as_number(text: str) -> Optional[float]:
    try:
        return float(text)
    except ValueError:
        return None


def _compare(left: Any, op: str, right: Any) -> bool:
    if op == "eq":
        return left == right
    if op == "ne":
        return left != right
    if op == "gt":
        return left > right
    if op == "ge":
        return left >= right
    if op == "lt":
        return left < right
    return left <= right


@dataclass(frozen=True)
class FilterClause:
    """One ``<field> <op> <value>`` comparison."""

    field: str
    op: str
    value: str

    @property
    def on_created(self) -> bool:
        return self.field.lower() in _CREATED_FIELDS

    def matches(self, item: RawItem) -> bool:
        actual = item.created_at if self.on_created else extract(item.fields, self.field)
        if not actual:
            return self.op == "ne"

        left_instant, right_instant = _as_instant(actual), _as_instant(self.value)
        if left_instant is not None and right_instant is not None:
            return _compare(left_instant, self.op, right_instant)

        left_number, right_number = _as_number(actual), _as_number(self.value)
        if left_number is not None and right_number is not None:
            return _compare(left_number, self.op, right_number)

        return _compare(actual.strip().casefold(), self.op, self.value.strip().casefold())


@dataclass(frozen=True)
class FilterSpec:
    """
    A server-side filter plus, when it could be parsed, its local equivalent.

    ``raw`` is sent to the server as-is (after legacy syntax translation).
    ``clauses`` is empty when the expression is too complex to evaluate
    locally, in which case a rejected filter cannot fall back.
    """

    raw: str
    clauses: Tuple[FilterClause, ...] = ()
    any_of: bool = False

    @classmethod
    def parse(cls, raw: str) -> "FilterSpec":
        text = raw.strip()
        parts = _JOIN_PATTERN.split(text)
        expressions = parts[::2]
        joins = {join.lower() for join in parts[1::2]}
        if len(joins) > 1:
            return cls(raw=text)

        clauses = []
        for expression in expressions:
            match = _CLAUSE_PATTERN.match(expression.strip().strip("()").strip())
            if match is None:
                return cls(raw=text)
            field = match.group("field")
            clauses.append(
                FilterClause(
                    field=_FIELD_ALIASES.get(field, field),
                    op=match.group("op").lower(),
                    value=match.group("value").strip(),
                )
            )
        return cls(raw=text, clauses=tuple(clauses), any_of=joins == {"or"})

    @property
    def evaluable(self) -> bool:
        return bool(self.clauses)

    def matches(self, item: RawItem) -> bool:
        results = (clause.matches(item) for clause in self.clauses)
        return any(results) if self.any_of else all(results)


Predicate = Callable[[RawItem, date, Optional[tzinfo]], bool]


def _local_date(raw: str, tz: Optional[tzinfo]) -> Optional[date]:
    return parse_display_date(normalize_date(raw, tz))


def _pickup_on(item: RawItem, today: date, tz: Optional[tzinfo]) -> bool:
    return _local_date(extract(item.fields, tables.SERVICE_DATE_FIELD), tz) == today


def _pickup_after_today(item: RawItem, today: date, tz: Optional[tzinfo]) -> bool:
    pickup = _local_date(extract(item.fields, tables.SERVICE_DATE_FIELD), tz)
    return pickup is not None and pickup >= today + timedelta(days=1)


def _created_since(item: RawItem, today: date, tz: Optional[tzinfo]) -> bool:
    created = _local_date(item.created_at, tz)
    return created is not None and created >= today


def _card_candidate(item: RawItem, today: date, tz: Optional[tzinfo]) -> bool:
    return is_card_candidate(item)


@dataclass(frozen=True)
class ListView:
    list_type: ListType
    source: str
    mapper: Callable[..., Any]
    default_filter: Optional[Callable[[date], str]] = None
    predicate: Optional[Predicate] = None
    sorted_by_date: bool = False
    takes_timezone: bool = True

    def filter_for(self, today: date) -> Optional[FilterSpec]:
        if self.default_filter is None:
            return None
        return FilterSpec.parse(self.default_filter(today))

    def bind_mapper(self, tz: Optional[tzinfo]) -> Callable[[RawItem], Any]:
        if self.takes_timezone:
            return partial(self.mapper, tz=tz)
        return self.mapper


VIEWS = {
    ListType.SERVIZI_GIORNO: ListView(
        list_type=ListType.SERVIZI_GIORNO,
        source="servizi_giorno",
        mapper=map_to_service,
        default_filter=lambda today: f"fields/DATA_PRELIEVO ge {today.isoformat()}T00:00:00Z",
        predicate=_pickup_on,
        sorted_by_date=True,
    ),
    ListType.PROSSIMI_SERVIZI: ListView(
        list_type=ListType.PROSSIMI_SERVIZI,
        source="prossimi_servizi",
        mapper=map_to_service,
        default_filter=lambda today: (
            f"fields/DATA_PRELIEVO ge {(today + timedelta(days=1)).isoformat()}T00:00:00Z"
        ),
        predicate=_pickup_after_today,
        sorted_by_date=True,
    ),
    ListType.SERVIZI_INSERITI_OGGI: ListView(
        list_type=ListType.SERVIZI_INSERITI_OGGI,
        source="servizi_inseriti_oggi",
        mapper=map_to_service,
        default_filter=lambda today: f"Created ge datetime'{today.isoformat()}T00:00:00Z'",
        predicate=_created_since,
        sorted_by_date=True,
    ),
    ListType.TESSERE_DA_FARE: ListView(
        list_type=ListType.TESSERE_DA_FARE,
        source="tesserati",
        mapper=map_to_card,
        default_filter=lambda today: (
            "fields/TIPOLOGIASOCIO eq 'NUOVO' or fields/TIPOLOGIASOCIO eq 'ESTERNO'"
        ),
        predicate=_card_candidate,
        takes_timezone=False,
    ),
    ListType.TESSERATI: ListView(
        list_type=ListType.TESSERATI,
        source="tesserati",
        mapper=map_to_member,
    ),
    ListType.SERVIZI_COMPLETI: ListView(
        list_type=ListType.SERVIZI_COMPLETI,
        source="servizi_giorno",
        mapper=map_to_service_detail,
        sorted_by_date=True,
    ),
}


__all__ = ["FilterClause", "FilterSpec", "ListType", "ListView", "VIEWS"]
