from __future__ import annotations

from asset_engine.models.raw_row import RawRow, normalize_header

"""Unit tests for RawRow (tolerant header lookups, text accessors)."""


def test_from_mapping_converts_values_to_text():
    row = RawRow.from_mapping({"IMEI": 356789012345678, "Notes": None, "RAM": 15.8}, row_number=3)
    assert row.values == {"IMEI": "356789012345678", "Notes": "", "RAM": "15.8"}
    assert row.row_number == 3


def test_lookup_ignores_case_and_whitespace():
    row = RawRow.from_mapping({"  Device   Name ": "IPHONE 13", "BAN": "1"})
    assert row.has("device name")
    assert row.get("DEVICE NAME") == "IPHONE 13"
    assert row.get("Missing") is None
    assert row.get("Missing", "x") == "x"


def test_exact_header_wins_over_normalized_match():
    row = RawRow.from_mapping({"imei": "lower", "IMEI": "upper"})
    assert row.get("IMEI") == "upper"
    assert row.get("imei") == "lower"


def test_text_strips_and_treats_blank_as_absent():
    row = RawRow.from_mapping({"A": "  value  ", "B": "   "})
    assert row.text("A") == "value"
    assert row.text("B") is None
    assert row.text("C") is None
    # get は生の値を返す
    assert row.get("B") == "   "


def test_blank_row_detection():
    assert RawRow.from_mapping({"A": "", "B": "  "}).is_blank()
    assert not RawRow.from_mapping({"A": "", "B": "x"}).is_blank()


def test_iteration_and_len_follow_columns():
    row = RawRow.from_mapping({"A": "1", "B": "2"})
    assert list(row) == ["A", "B"]
    assert row.columns == ["A", "B"]
    assert len(row) == 2


def test_normalize_header():
    assert normalize_header("  Last   LoggedIn User ") == "last loggedin user"
