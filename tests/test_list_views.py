try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from datetime import date

from graphsync.models import RawItem
from graphsync.services.list_views import VIEWS, FilterSpec, ListType


def _item(fields: dict, created_at: str = "") -> RawItem:
    return RawItem(id="1", fields=fields, created_at=created_at)


def test_parse_graph_and_legacy_clauses() -> None:
    graph = FilterSpec.parse("fields/DATA_PRELIEVO ge 2025-01-10T00:00:00Z")
    legacy = FilterSpec.parse("Data_Prelievo ge datetime'2025-01-10T00:00:00Z'")

    assert graph.evaluable and legacy.evaluable
    assert graph.clauses[0].field == legacy.clauses[0].field == "DATA_PRELIEVO"
    assert graph.clauses[0].value == legacy.clauses[0].value == "2025-01-10T00:00:00Z"


def test_date_clause_compares_instants() -> None:
    parsed = FilterSpec.parse("DATA_PRELIEVO ge datetime'2025-01-10T00:00:00Z'")

    assert parsed.matches(_item({"DATA_PRELIEVO": "2025-01-10T08:00:00Z"}))
    assert parsed.matches(_item({"DATA_PRELIEVO": "2025-01-11"}))
    assert not parsed.matches(_item({"DATA_PRELIEVO": "2025-01-09T23:59:59Z"}))
    assert not parsed.matches(_item({}))


def test_created_clause_reads_item_timestamp() -> None:
    parsed = FilterSpec.parse("Created ge datetime'2025-01-10T00:00:00Z'")

    assert parsed.matches(_item({}, created_at="2025-01-10T07:12:00Z"))
    assert not parsed.matches(_item({}, created_at="2025-01-09T07:12:00Z"))


def test_or_filters_match_any_clause_case_insensitively() -> None:
    parsed = FilterSpec.parse(
        "fields/TIPOLOGIASOCIO eq 'NUOVO' or fields/TIPOLOGIASOCIO eq 'ESTERNO'"
    )

    assert parsed.any_of is True
    assert parsed.matches(_item({"TIPOLOGIASOCIO": "Esterno"}))
    assert not parsed.matches(_item({"TIPOLOGIASOCIO": "Ordinario"}))


def test_numeric_comparison() -> None:
    parsed = FilterSpec.parse("fields/KM gt 100")

    assert parsed.matches(_item({"KM": 120.5}))
    assert not parsed.matches(_item({"KM": "99"}))


def test_unsupported_expressions_are_not_evaluable() -> None:
    assert not FilterSpec.parse("startswith(fields/TRASP, 'A')").evaluable
    assert not FilterSpec.parse("fields/A eq 1 and fields/B eq 2 or fields/C eq 3").evaluable


def test_default_filters_per_view() -> None:
    today = date(2025, 1, 10)

    assert VIEWS[ListType.SERVIZI_GIORNO].filter_for(today).raw == (
        "fields/DATA_PRELIEVO ge 2025-01-10T00:00:00Z"
    )
    assert VIEWS[ListType.PROSSIMI_SERVIZI].filter_for(today).raw == (
        "fields/DATA_PRELIEVO ge 2025-01-11T00:00:00Z"
    )
    assert VIEWS[ListType.SERVIZI_INSERITI_OGGI].filter_for(today).raw == (
        "Created ge datetime'2025-01-10T00:00:00Z'"
    )
    assert VIEWS[ListType.TESSERATI].filter_for(today) is None
    assert VIEWS[ListType.TESSERE_DA_FARE].source == "tesserati"
