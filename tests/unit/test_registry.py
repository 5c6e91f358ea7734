from __future__ import annotations

from unittest.mock import patch

import pytest

from asset_engine.models.raw_row import RawRow
from asset_engine.sources import registry
from asset_engine.sources.registry import (
    ImportSource,
    UnsupportedSourceError,
    filter_rows,
    get_column_mapping_template,
    get_transformer,
    is_supported,
    list_supported_sources,
    transform_batch,
    transform_row,
    validate,
)

"""Unit tests for the transformation registry."""


def test_supported_sources():
    assert list_supported_sources() == frozenset({"ninjaone", "ninjaone-servers", "telus", "rogers", "bgc-template"})
    assert is_supported("TELUS")
    assert is_supported(ImportSource.ROGERS)
    assert not is_supported("bell")


class TestTransformRow:
    def test_accepts_plain_mapping(self, telus_good_row):
        result = transform_row("telus", telus_good_row)
        assert result.direct_fields["source"] == "TELUS"

    @pytest.mark.parametrize("source_id", ["bell", "", None, "ninja one"])
    def test_unsupported_source_raises(self, source_id, telus_good_row):
        with pytest.raises(UnsupportedSourceError, match="Unsupported import source"):
            transform_row(source_id, telus_good_row)

    def test_unsupported_source_error_keeps_identifier(self):
        with pytest.raises(UnsupportedSourceError) as exc_info:
            get_transformer("bell")
        assert exc_info.value.source_id == "bell"


class TestTransformBatch:
    def test_one_result_per_row_in_order(self, telus_good_row, telus_bad_row):
        rows = [telus_good_row, telus_bad_row] * 50
        results = transform_batch("telus", rows)
        assert len(results) == 100
        assert [r.is_valid for r in results] == [True, False] * 50

    def test_parallel_matches_sequential(self, telus_good_row, telus_bad_row):
        rows = [dict(telus_good_row, IMEI=f"3567890123{i:05d}") for i in range(100)] + [telus_bad_row]
        sequential = [r.to_dict() for r in transform_batch("telus", rows)]
        parallel = [r.to_dict() for r in transform_batch("telus", rows, max_workers=4)]
        assert parallel == sequential

    @pytest.mark.parametrize("workers", [None, 4])
    def test_blank_row_leaves_other_results_unchanged(self, telus_good_row, workers):
        rows = [dict(telus_good_row, IMEI=f"3567890123{i:05d}") for i in range(100)]
        baseline = [r.to_dict() for r in transform_batch("telus", rows, max_workers=workers)]
        blanked = 37
        rows[blanked] = {k: "" for k in telus_good_row}
        results = transform_batch("telus", rows, max_workers=workers)
        after = [r.to_dict() for r in results]
        assert len(after) == 100
        for i in range(100):
            if i != blanked:
                assert after[i] == baseline[i], i
        assert after[blanked] != baseline[blanked]
        assert not results[blanked].is_valid

    def test_unexpected_exception_is_isolated(self, telus_good_row):
        transformer = get_transformer("telus")
        calls = {"n": 0}

        def flaky(row: RawRow):
            calls["n"] += 1
            if calls["n"] == 2:
                raise RuntimeError("kaboom")
            return transformer.transform_row(row)

        patched = dict(registry._REGISTRY)
        patched[ImportSource.TELUS] = registry.SourceTransformer(
            source=ImportSource.TELUS,
            label=transformer.label,
            transform_row=flaky,
            mappings=transformer.mappings,
            validate=transformer.validate,
        )
        with patch.object(registry, "_REGISTRY", patched):
            results = transform_batch("telus", [telus_good_row] * 3)
        assert [r.is_valid for r in results] == [True, False, True]
        assert results[1].validation_errors == ["Unexpected error while transforming row: kaboom"]

    def test_on_result_callback_sees_every_row(self, telus_good_row):
        seen = []
        transform_batch("telus", [telus_good_row] * 5, max_workers=2, on_result=lambda i, r: seen.append(i))
        assert seen == [0, 1, 2, 3, 4]


def test_column_mapping_template():
    template = get_column_mapping_template("telus")
    by_target = {(t.external_column, t.target_field): t for t in template}
    imei = by_target[("IMEI", "imei")]
    assert imei.target_kind == "specifications"
    assert imei.required is True
    assert by_target[("Status", "")].target_kind == "ignore"
    assert [t.external_column for t in template].count("Device Name") == 3


def test_template_for_every_source_is_non_empty():
    for source in list_supported_sources():
        assert get_column_mapping_template(source)


class TestValidate:
    def test_valid_phone(self):
        outcome = validate("rogers", {"model": "iPhone 14", "specifications": {"imei": "3567"}})
        assert outcome.is_valid
        assert outcome.errors == ()

    def test_invalid_ninjaone(self):
        outcome = validate("ninjaone", {"assetTag": "BGC000001", "assetType": "LAPTOP"})
        assert not outcome.is_valid
        assert outcome.errors == ("Serial Number is required",)

    def test_unsupported(self):
        with pytest.raises(UnsupportedSourceError):
            validate("bell", {})


def test_filter_rows_by_role():
    rows = [{"Role": "WINDOWS_LAPTOP"}, {"Role": "WINDOWS_SERVER"}, {"Role": "MAC_DESKTOP"}]
    endpoints, rest = filter_rows("ninjaone", rows)
    assert [r.get("Role") for r in endpoints] == ["WINDOWS_LAPTOP", "MAC_DESKTOP"]
    assert [r.get("Role") for r in rest] == ["WINDOWS_SERVER"]
    servers, _ = filter_rows("ninjaone-servers", rows)
    assert [r.get("Role") for r in servers] == ["WINDOWS_SERVER"]


def test_filter_rows_without_filter_keeps_everything(telus_good_row):
    included, excluded = filter_rows("telus", [telus_good_row])
    assert len(included) == 1
    assert excluded == []
