try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from graphsync.utils.fields import coerce_identifier, extract, first_non_empty


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Mario Rossi", "Mario Rossi"),
        ({"value": "Bianchi"}, "Bianchi"),
        ({"value": ["Auto", "Furgone"]}, "Auto - Furgone"),
        ({"LookupValue": "Verdi"}, "Verdi"),
        ([{"LookupValue": "Mattina"}, {"value": "Sera"}, "Notte"], "Mattina - Sera - Notte"),
        (None, ""),
        (12.0, "12"),
        (3.5, "3.5"),
        (7, "7"),
        (True, "true"),
    ],
)
def test_extract_flattens_every_field_shape(raw, expected) -> None:
    assert extract({"COLUMN": raw}, "COLUMN") == expected


def test_extract_missing_field_is_empty() -> None:
    assert extract({"OTHER": "x"}, "COLUMN") == ""
    assert extract(None, "COLUMN") == ""


def test_extract_skips_empty_parts_in_arrays() -> None:
    assert extract({"C": ["a", None, "", {"value": "b"}]}, "C") == "a - b"


def test_extract_serializes_unknown_objects() -> None:
    assert extract({"C": {"Email": "a@b.it"}}, "C") == '{"Email": "a@b.it"}'


def test_first_non_empty_respects_candidate_order() -> None:
    fields = {"CF": "", "Codice Fiscale": "RSSMRA80A01H501U", "cf": "ignored"}

    assert first_non_empty(fields, ("CF", "Codice Fiscale", "cf")) == "RSSMRA80A01H501U"
    assert first_non_empty(fields, ("missing",)) == ""


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("42", 42),
        (" 17 ", 17),
        (42, 42),
        (8.0, 8),
        ({"value": "7"}, 7),
        (0, None),
        ("0", None),
        ("-3", None),
        (4.5, None),
        ("abc", None),
        ("²", None),
        ("1³", None),
        (True, None),
        (None, None),
    ],
)
def test_coerce_identifier(raw, expected) -> None:
    assert coerce_identifier(raw) == expected
