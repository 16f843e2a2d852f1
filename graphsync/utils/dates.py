"""Date and time helpers for list values shown as DD/MM/YYYY and HH:MM."""

from __future__ import annotations

from datetime import date, datetime, time, tzinfo
from typing import Optional

DISPLAY_DATE_FORMAT = "%d/%m/%Y"
DISPLAY_TIME_FORMAT = "%H:%M"

_NAIVE_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"
_PLAIN_DATE_FORMAT = "%Y-%m-%d"
_TIME_FORMATS = ("%H:%M", "%H:%M:%S")


def parse_rfc3339(raw: str) -> Optional[datetime]:
    """Parse an offset-qualified ISO timestamp; naive or malformed input gives None."""
    if "T" not in raw and " " not in raw.strip():
        return None
    text = raw.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return None
    return parsed


def normalize_date(raw: Optional[str], tz: Optional[tzinfo] = None) -> str:
    """Render a remote date value as DD/MM/YYYY.

    Offset-qualified timestamps are converted to ``tz`` (the local timezone by
    default) before formatting. Values already containing ``/`` and values in
    any unrecognised format are returned unchanged.
    """
    if not raw:
        return ""

    parsed = parse_rfc3339(raw)
    if parsed is not None:
        return parsed.astimezone(tz).strftime(DISPLAY_DATE_FORMAT)

    for fmt in (_NAIVE_TIMESTAMP_FORMAT, _PLAIN_DATE_FORMAT):
        try:
            return datetime.strptime(raw, fmt).strftime(DISPLAY_DATE_FORMAT)
        except ValueError:
            continue

    return raw


def normalize_time(raw: Optional[str]) -> str:
    """Render a remote time value as HH:MM when it is a full timestamp.

    The clock time is taken as written in the timestamp, without moving it to
    another timezone.
    """
    if not raw:
        return ""
    if ":" in raw and len(raw) <= 5:
        return raw
    parsed = parse_rfc3339(raw)
    if parsed is not None:
        return parsed.strftime(DISPLAY_TIME_FORMAT)
    return raw


def parse_display_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return datetime.strptime(value.strip(), DISPLAY_DATE_FORMAT).date()
    except ValueError:
        return None


def parse_display_time(value: Optional[str]) -> Optional[time]:
    if not value:
        return None
    for fmt in _TIME_FORMATS:
        try:
            return datetime.strptime(value.strip(), fmt).time()
        except ValueError:
            continue
    return None


__all__ = [
    "DISPLAY_DATE_FORMAT",
    "normalize_date",
    "normalize_time",
    "parse_display_date",
    "parse_display_time",
    "parse_rfc3339",
]
