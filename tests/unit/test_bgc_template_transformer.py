from __future__ import annotations

import pytest

from asset_engine.models.raw_row import RawRow
from asset_engine.sources.bgc_template import (
    normalize_template_asset_tag,
    parse_purchase_price,
    transform_bgc_template_row,
    validate_bgc_template_fields,
)

"""Unit tests for the company spreadsheet template transformer."""

ROW = {
    "Service Tag": "7xk2p93",
    "Brand": "Lenovo",
    "Model": "ThinkPad T14",
    "Purchase date": "2023-09-01",
    "Location of computer": "tor",
    "Asset Tag": "",
    "Assigned User": "",
    "Device Type": "Desktop",
    "Status": "Spare",
    "Condition": "Fair",
    "Purchase Price": "1,299.00",
}


def test_template_row():
    result = transform_bgc_template_row(RawRow.from_mapping(ROW))
    assert result.is_valid
    fields = result.direct_fields
    assert fields["serialNumber"] == "7xk2p93"
    assert fields["make"] == "Lenovo"
    assert fields["assetType"] == "DESKTOP"
    assert fields["status"] == "SPARE"
    assert fields["condition"] == "FAIR"
    assert fields["locationName"] == "Toronto"
    assert fields["purchaseDate"] == "2023-09-01T00:00:00.000Z"
    assert fields["purchasePrice"] == 1299.0
    assert fields["source"] == "EXCEL"


def test_generated_asset_tag_uses_type_prefix():
    result = transform_bgc_template_row(RawRow.from_mapping(ROW))
    assert result.direct_fields["assetTag"] == "DT-7XK2P93"
    assert result.processing_notes == ['Asset tag "DT-7XK2P93" generated from service tag']


def test_generated_asset_tag_is_stable():
    tags = {transform_bgc_template_row(RawRow.from_mapping(ROW)).direct_fields["assetTag"] for _ in range(5)}
    assert tags == {"DT-7XK2P93"}


def test_defaults_for_blank_template():
    result = transform_bgc_template_row(RawRow.from_mapping({"Service Tag": "ABC"}))
    fields = result.direct_fields
    assert fields["make"] == "Dell"
    assert fields["model"] == "Unknown"
    assert fields["assetType"] == "LAPTOP"
    assert fields["condition"] == "GOOD"
    assert fields["status"] == "AVAILABLE"
    assert fields["assetTag"] == "LT-ABC"


def test_unknown_device_type_and_location():
    row = dict(ROW, **{"Device Type": "Projector", "Location of computer": "Remote"})
    result = transform_bgc_template_row(RawRow.from_mapping(row))
    assert result.direct_fields["assetType"] == "OTHER"
    assert result.direct_fields["assetTag"] == "AS-7XK2P93"
    assert result.direct_fields["locationName"] == "Remote"


def test_unknown_status_is_reported_and_inferred():
    row = dict(ROW, Status="Lost", **{"Assigned User": "Jane Doe"})
    result = transform_bgc_template_row(RawRow.from_mapping(row))
    assert result.validation_errors == ['Could not normalize Status value "Lost"']
    assert result.direct_fields["status"] == "ASSIGNED"


def test_missing_service_tag():
    row = dict(ROW, **{"Service Tag": ""})
    result = transform_bgc_template_row(RawRow.from_mapping(row))
    assert result.validation_errors == ["Required field serialNumber is missing"]
    assert "assetTag" not in result.direct_fields


@pytest.mark.parametrize(
    "value, expected",
    [("4521", "BGC004521"), ("bgc001122", "BGC001122"), ("lt77", "BGCLT77"), ("LT-0042", "LT-0042")],
)
def test_normalize_template_asset_tag(value, expected):
    assert normalize_template_asset_tag(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [("$1,849.99", 1849.99), ("€ 900", 900.0), ("250000", 100000.0), ("free", None)],
)
def test_parse_purchase_price(value, expected):
    assert parse_purchase_price(value) == expected


def test_validate_bgc_template_fields():
    assert validate_bgc_template_fields({"serialNumber": "X"}) == []
    assert validate_bgc_template_fields({}) == ["Serial Number (Service Tag) is required"]
