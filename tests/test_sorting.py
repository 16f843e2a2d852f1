try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from graphsync.schemas import Service, ServiceDetail
from graphsync.services.sorting import sort_services


def _service(service_id: int, day: str, pickup_time: str = "") -> Service:
    return Service(id=service_id, date=day, pickup_time=pickup_time)


def test_sort_orders_by_date_then_time_descending() -> None:
    records = [
        _service(1, "10/01/2025", "09:00"),
        _service(2, "09/01/2025"),
        _service(3, "da definire"),
        _service(4, "10/01/2025", "10:00"),
    ]

    ordered = sort_services(records)

    assert [record.id for record in ordered] == [4, 1, 2, 3]


def test_unparseable_times_sort_after_parsed_times_on_the_same_day() -> None:
    records = [
        _service(1, "10/01/2025", "mattina"),
        _service(2, "10/01/2025", "08:00"),
        _service(3, "10/01/2025", "18:30"),
    ]

    assert [record.id for record in sort_services(records)] == [3, 2, 1]


def test_equal_keys_keep_input_order() -> None:
    records = [
        _service(1, "", ""),
        _service(2, "x", ""),
        _service(3, "05/05/2025", "07:00"),
        _service(4, "05/05/2025", "07:00"),
    ]

    assert [record.id for record in sort_services(records)] == [3, 4, 1, 2]


def test_sort_reads_long_form_services() -> None:
    records = [
        ServiceDetail(id=1, pickup_date="01/03/2025", start_time="08:00"),
        ServiceDetail(id=2, pickup_date="02/03/2025", start_time="07:00"),
    ]

    assert [record.id for record in sort_services(records)] == [2, 1]
