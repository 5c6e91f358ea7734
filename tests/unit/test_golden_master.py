from __future__ import annotations

import copy
from pathlib import Path

import pytest

from asset_engine.models.raw_row import RawRow
from asset_engine.services.golden_master import (
    GoldenMismatch,
    build_golden_master,
    compare_golden_master,
    load_golden_master,
    write_golden_master,
)
from asset_engine.sources.registry import UnsupportedSourceError

"""Unit tests for golden-master snapshot helpers."""


def test_build_uses_canonical_source_id(telus_good_row):
    payload = build_golden_master("telus", [telus_good_row])
    assert payload["source"] == "telus"
    case = payload["cases"][0]
    assert case["input"] == telus_good_row
    assert case["expected"]["directFields"]["make"] == "Samsung"
    assert case["expected"]["validationErrors"] == []


def test_build_accepts_raw_rows_and_none_cells(telus_good_row):
    row = RawRow.from_mapping(telus_good_row, row_number=2)
    with_none = dict(telus_good_row, Status=None)
    payload = build_golden_master("telus", [row, with_none])
    assert payload["cases"][0]["input"] == telus_good_row
    assert payload["cases"][1]["input"]["Status"] == ""


def test_build_rejects_unknown_source():
    with pytest.raises(UnsupportedSourceError):
        build_golden_master("bell", [])


def test_write_then_load_then_compare(temp_workdir: Path, telus_good_row, telus_bad_row):
    payload = build_golden_master("telus", [telus_good_row, telus_bad_row])
    path = write_golden_master(temp_workdir / "golden" / "telus.json", payload)
    assert path.exists()
    assert path.read_text(encoding="utf-8").endswith("\n")
    loaded = load_golden_master(path)
    assert loaded == payload
    assert compare_golden_master(loaded) == []


def test_compare_reports_changed_sections(telus_good_row):
    payload = build_golden_master("telus", [telus_good_row])
    tampered = copy.deepcopy(payload)
    tampered["cases"][0]["expected"]["directFields"]["make"] = "Apple"
    tampered["cases"][0]["expected"]["processingNotes"] = []

    mismatches = compare_golden_master(tampered)
    assert [m.section for m in mismatches] == ["directFields", "processingNotes"]
    assert all(m.case_index == 0 for m in mismatches)
    assert mismatches[0].actual["make"] == "Samsung"
    assert mismatches[0].expected["make"] == "Apple"


def test_mismatch_describe():
    m = GoldenMismatch(3, "specifications", {"ram": "8 GB"}, {"ram": "16 GB"})
    assert m.describe() == "case 3 specifications: expected {'ram': '8 GB'}, got {'ram': '16 GB'}"
