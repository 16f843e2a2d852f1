"""Newest-first ordering of service records."""

from __future__ import annotations

from datetime import date, time
from typing import Callable, Iterable, List, Optional, Tuple, TypeVar

from graphsync.utils.dates import parse_display_date, parse_display_time

T = TypeVar("T")


def _date_of(record) -> str:
    return getattr(record, "date", "") or getattr(record, "pickup_date", "")


def _time_of(record) -> str:
    return getattr(record, "pickup_time", "") or getattr(record, "start_time", "")


def _sort_key(
    parsed_date: Optional[date], parsed_time: Optional[time]
) -> Tuple[bool, int, bool, int]:
    # Unparseable values land in a trailing bucket at their own level.
    day = -parsed_date.toordinal() if parsed_date is not None else 0
    seconds = (
        -(parsed_time.hour * 3600 + parsed_time.minute * 60 + parsed_time.second)
        if parsed_time is not None
        else 0
    )
    return (parsed_date is None, day, parsed_time is None, seconds)


def sort_services(
    records: Iterable[T],
    *,
    date_getter: Callable[[T], str] = _date_of,
    time_getter: Callable[[T], str] = _time_of,
) -> List[T]:
    """Sort by date then time, both descending; equal keys keep input order."""
    return sorted(
        records,
        key=lambda record: _sort_key(
            parse_display_date(date_getter(record)),
            parse_display_time(time_getter(record)),
        ),
    )


__all__ = ["sort_services"]
