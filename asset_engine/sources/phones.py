from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from ..models.raw_row import RawRow
from ..models.transformation_result import TransformationResult
from .common import (
    ColumnMapping,
    TargetKind,
    apply_imei_fallback,
    clean_phone_number,
    field_value,
    infer_status,
    phone_asset_tag,
)
from .devices import DeviceInfo

"""Shared pieces of the carrier (phone) transformers.

Telus and Rogers exports differ in column names and device naming, but the
resulting phone assets follow the same rules: PHONE asset type, IMEI as serial
number fallback, deterministic PH- asset tags and status from assignment.
"""

__all__ = [
    "device_mappings",
    "finish_phone_result",
    "validate_phone_fields",
    "optional_text",
]

DeviceParser = Callable[[str], DeviceInfo]


def optional_text(value: str) -> str:
    return value.strip()


def phone_digits(value: str) -> str | None:
    return clean_phone_number(value) or None


def device_mappings(column: str, parser: DeviceParser) -> tuple[ColumnMapping, ...]:
    """make / model / storage mappings fed by one device description column."""
    return (
        ColumnMapping(
            column, "model", TargetKind.DIRECT, "Device model (make is extracted separately)",
            required=True, processor=lambda v: parser(v).model or None,
        ),
        ColumnMapping(
            column, "make", TargetKind.DIRECT, "Device manufacturer (extracted from the description)",
            processor=lambda v: parser(v).make,
        ),
        ColumnMapping(
            column, "storage", TargetKind.SPECIFICATIONS, "Storage capacity from the description",
            processor=lambda v: parser(v).storage, optional_result=True,
        ),
    )


def finish_phone_result(
    result: TransformationResult,
    row: RawRow,
    *,
    device_column: str,
    source: str,
    carrier: str,
) -> TransformationResult:
    fields = result.direct_fields
    specs = result.specifications

    fields["assetType"] = "PHONE"
    fields.setdefault("condition", "GOOD")
    fields["source"] = source
    specs.setdefault("carrier", carrier)

    apply_imei_fallback(result)

    tag = phone_asset_tag(fields.get("assignedToAadId"), specs.get("imei"), specs.get("phoneNumber"))
    if tag is not None:
        fields["assetTag"] = tag
    else:
        result.add_error("Could not derive an asset tag: no assigned user, IMEI or phone number")

    infer_status(result)

    description = row.text(device_column)
    if description:
        # 端末表示用に元の記述をそのまま保持
        specs["operatingSystem"] = description
        if fields.get("make") == "":
            result.add_error(f'Could not determine manufacturer from device name "{description}"')

    user = fields.get("assignedToAadId")
    if user:
        result.add_note(f'Username "{user}" requires directory lookup')
    return result


def validate_phone_fields(fields: Mapping[str, Any]) -> list[str]:
    errors: list[str] = []
    model = str(field_value(fields, "model") or "").strip()
    imei = str(field_value(fields, "imei") or "").strip()
    serial = str(field_value(fields, "serialNumber") or "").strip()
    if not model:
        errors.append("Device model is required")
    if not imei:
        errors.append("IMEI is required")
    if not serial and not imei:
        errors.append("Either Serial Number or IMEI is required")
    return errors
