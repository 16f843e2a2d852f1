try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from datetime import date, time, timedelta, timezone

from graphsync.utils.dates import (
    normalize_date,
    normalize_time,
    parse_display_date,
    parse_display_time,
)

ROME_WINTER = timezone(timedelta(hours=1))


def test_normalize_date_converts_utc_timestamps_to_local_day() -> None:
    assert normalize_date("2025-12-28T00:00:00Z", timezone.utc) == "28/12/2025"
    # Midnight in Rome is stored as 23:00 UTC of the previous day.
    assert normalize_date("2025-12-27T23:00:00Z", ROME_WINTER) == "28/12/2025"
    assert normalize_date("2025-12-28T10:00:00+01:00", timezone.utc) == "28/12/2025"


def test_normalize_date_accepts_naive_timestamps_and_plain_dates() -> None:
    assert normalize_date("2025-12-28T08:30:00") == "28/12/2025"
    assert normalize_date("2025-12-28") == "28/12/2025"


def test_normalize_date_passes_through_other_values() -> None:
    assert normalize_date("28/12/2025") == "28/12/2025"
    assert normalize_date("domani") == "domani"
    assert normalize_date("2025-13-45") == "2025-13-45"
    assert normalize_date("") == ""
    assert normalize_date(None) == ""


def test_normalize_time() -> None:
    assert normalize_time("09:15") == "09:15"
    assert normalize_time("2025-12-28T08:15:00Z") == "08:15"
    assert normalize_time("2025-12-28T08:15:00+01:00") == "08:15"
    assert normalize_time("2025-12-28T23:30:00-05:00") == "23:30"
    assert normalize_time("mattina") == "mattina"
    assert normalize_time("") == ""


def test_parse_display_values() -> None:
    assert parse_display_date("10/01/2025") == date(2025, 1, 10)
    assert parse_display_date("2025-01-10") is None
    assert parse_display_date("") is None
    assert parse_display_time("09:00") == time(9, 0)
    assert parse_display_time("09:00:30") == time(9, 0, 30)
    assert parse_display_time("-") is None
