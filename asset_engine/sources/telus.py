from __future__ import annotations

from ..models.raw_row import RawRow
from ..models.transformation_result import TransformationResult
from .common import ColumnMapping, TargetKind, apply_column_mappings, to_iso
from .devices import parse_device_name
from .phones import device_mappings, finish_phone_result, optional_text, phone_digits

"""Telus corporate billing export transformer."""

__all__ = [
    "TELUS_MAPPINGS",
    "transform_telus_row",
]

DEVICE_COLUMN = "Device Name"

TELUS_MAPPINGS: tuple[ColumnMapping, ...] = (
    ColumnMapping(
        "Subscriber Name", "assignedToAadId", TargetKind.DIRECT,
        "Subscriber (requires directory lookup)", processor=optional_text,
    ),
    ColumnMapping("Phone Number", "phoneNumber", TargetKind.SPECIFICATIONS, "Phone number (digits only)", processor=phone_digits),
    ColumnMapping("Rate Plan", "planType", TargetKind.SPECIFICATIONS, "Plan type", processor=optional_text),
    *device_mappings(DEVICE_COLUMN, parse_device_name),
    ColumnMapping("IMEI", "imei", TargetKind.SPECIFICATIONS, "IMEI number", required=True, processor=optional_text),
    ColumnMapping("IMEI", "serialNumber", TargetKind.DIRECT, "IMEI as serial number", processor=optional_text),
    ColumnMapping("Contract end date", "contractEndDate", TargetKind.SPECIFICATIONS, "Contract end date", processor=to_iso),
    # BAN 列の存在をトリガーに assetType = PHONE
    ColumnMapping("BAN", "assetType", TargetKind.DIRECT, "Billing account (sets asset type PHONE)", required=True, processor=lambda _: "PHONE"),
    ColumnMapping("Status", "", TargetKind.IGNORE, "Line status (ignored)"),
)


def transform_telus_row(row: RawRow) -> TransformationResult:
    result = apply_column_mappings(row, TELUS_MAPPINGS)
    return finish_phone_result(result, row, device_column=DEVICE_COLUMN, source="TELUS", carrier="Telus")
