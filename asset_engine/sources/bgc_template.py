from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from ..models.raw_row import RawRow
from ..models.transformation_result import TransformationResult
from .common import (
    ColumnMapping,
    TargetKind,
    apply_column_mappings,
    field_value,
    infer_status,
    resolve_location,
    to_iso,
)

"""Standardized company spreadsheet template transformer.

Hand-maintained inventory sheets use a fixed template (Service Tag, Brand,
Device Type, Status, ...). Blank cells fall back to the template defaults:
Dell laptops in good condition.
"""

__all__ = [
    "BGC_TEMPLATE_MAPPINGS",
    "normalize_template_asset_tag",
    "parse_purchase_price",
    "transform_bgc_template_row",
    "validate_bgc_template_fields",
]

DEVICE_TYPES = {
    "laptop": "LAPTOP",
    "desktop": "DESKTOP",
    "tablet": "TABLET",
    "phone": "PHONE",
    "server": "SERVER",
    "workstation": "DESKTOP",
    "all-in-one": "DESKTOP",
}

STATUSES = {
    "active": "AVAILABLE",
    "available": "AVAILABLE",
    "assigned": "ASSIGNED",
    "in use": "ASSIGNED",
    "spare": "SPARE",
    "maintenance": "MAINTENANCE",
    "repair": "MAINTENANCE",
    "retired": "RETIRED",
    "disposed": "DISPOSED",
}

CONDITIONS = {
    "new": "NEW",
    "brand new": "NEW",
    "excellent": "GOOD",
    "very good": "GOOD",
    "good": "GOOD",
    "fair": "FAIR",
    "poor": "POOR",
    "damaged": "POOR",
    "broken": "POOR",
}

# 資産タグ未記入時の接頭辞 (assetType ごと)
TAG_PREFIXES = {"LAPTOP": "LT", "DESKTOP": "DT", "PHONE": "PH"}

MAX_PURCHASE_PRICE = 100_000.0


def normalize_template_asset_tag(value: str) -> str:
    text = value.strip()
    if text.isdigit():
        return f"BGC{text.zfill(6)}"
    upper = text.upper()
    if not upper.startswith("BGC") and re.fullmatch(r"[A-Za-z0-9]+", text):
        return f"BGC{upper}"
    return upper


def parse_purchase_price(value: str) -> float | None:
    cleaned = re.sub(r"[$,€£¥\s]", "", value)
    m = re.match(r"^\d+(?:\.\d+)?", cleaned)
    if not m:
        return None
    return min(float(m.group(0)), MAX_PURCHASE_PRICE)


def _lookup(table: dict[str, str]):
    def processor(value: str) -> str | None:
        return table.get(" ".join(value.split()).lower())
    return processor


def _device_type(value: str) -> str:
    return DEVICE_TYPES.get(value.strip().lower(), "OTHER")


def _location(value: str) -> str:
    return resolve_location(value) or value.strip()


def _strip(value: str) -> str:
    return value.strip()


BGC_TEMPLATE_MAPPINGS: tuple[ColumnMapping, ...] = (
    ColumnMapping("Service Tag", "serialNumber", TargetKind.DIRECT, "Device serial number", required=True, processor=_strip),
    ColumnMapping("Brand", "make", TargetKind.DIRECT, "Manufacturer (Dell, Lenovo, ...)", processor=_strip),
    ColumnMapping("Model", "model", TargetKind.DIRECT, "Device model", processor=_strip),
    ColumnMapping("Purchase date", "purchaseDate", TargetKind.DIRECT, "Purchase date", processor=to_iso),
    ColumnMapping("Location of computer", "locationName", TargetKind.DIRECT, "Office (abbreviations expanded)", processor=_location),
    ColumnMapping("Asset Tag", "assetTag", TargetKind.DIRECT, "Company asset tag", processor=normalize_template_asset_tag),
    ColumnMapping("Assigned User", "assignedToAadId", TargetKind.DIRECT, "Assigned user (requires directory lookup)", processor=_strip),
    ColumnMapping("Device Type", "assetType", TargetKind.DIRECT, "Asset type", processor=_device_type),
    ColumnMapping("Status", "status", TargetKind.DIRECT, "Asset status", processor=_lookup(STATUSES)),
    ColumnMapping("Condition", "condition", TargetKind.DIRECT, "Device condition", processor=_lookup(CONDITIONS)),
    ColumnMapping("Purchase Price", "purchasePrice", TargetKind.DIRECT, "Purchase price", processor=parse_purchase_price),
    ColumnMapping("Warranty Start", "warrantyStartDate", TargetKind.DIRECT, "Warranty start date", processor=to_iso),
    ColumnMapping("Warranty End", "warrantyEndDate", TargetKind.DIRECT, "Warranty end date", processor=to_iso),
    ColumnMapping("Notes", "notes", TargetKind.DIRECT, "Additional notes", processor=_strip),
)


def transform_bgc_template_row(row: RawRow) -> TransformationResult:
    result = apply_column_mappings(row, BGC_TEMPLATE_MAPPINGS)
    fields = result.direct_fields

    fields.setdefault("condition", "GOOD")
    fields.setdefault("assetType", "LAPTOP")
    fields.setdefault("make", "Dell")
    fields.setdefault("model", "Unknown")
    fields["source"] = "EXCEL"

    if not fields.get("assetTag"):
        serial = fields.get("serialNumber")
        if serial:
            prefix = TAG_PREFIXES.get(fields["assetType"], "AS")
            fields["assetTag"] = f"{prefix}-{serial.upper()}"
            result.add_note(f'Asset tag "{fields["assetTag"]}" generated from service tag')

    infer_status(result)

    user = fields.get("assignedToAadId")
    if user:
        result.add_note(f'Username "{user}" requires directory lookup')
    return result


def validate_bgc_template_fields(fields: Mapping[str, Any]) -> list[str]:
    if not str(field_value(fields, "serialNumber") or "").strip():
        return ["Serial Number (Service Tag) is required"]
    return []
