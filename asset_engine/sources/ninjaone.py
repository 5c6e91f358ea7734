from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..models.raw_row import RawRow
from ..models.transformation_result import TransformationResult
from .common import (
    ColumnMapping,
    TargetKind,
    aggregate_server_volumes,
    aggregate_volumes,
    apply_column_mappings,
    detect_virtualization,
    field_value,
    infer_status,
    normalize_asset_tag,
    resolve_server_location,
    simplify_ram,
    strip_domain,
    to_iso,
)

"""NinjaOne RMM export transformer (endpoints and servers).

The same device export feeds two sources: ``ninjaone`` keeps workstations,
laptops and tablets, ``ninjaone-servers`` keeps servers and infrastructure
devices. The Role column decides which rows belong to which.
"""

__all__ = [
    "ROLE_TO_ASSET_TYPE",
    "ENDPOINT_ROLES",
    "SERVER_ROLES",
    "NINJAONE_MAPPINGS",
    "NINJAONE_SERVER_MAPPINGS",
    "map_role",
    "transform_ninjaone_row",
    "transform_ninjaone_server_row",
    "validate_ninjaone_fields",
    "is_endpoint_row",
    "is_server_row",
]

ROLE_TO_ASSET_TYPE: dict[str, str] = {
    "WINDOWS_DESKTOP": "DESKTOP",
    "WINDOWS_LAPTOP": "LAPTOP",
    "WINDOWS WORKSTATION": "LAPTOP",  # NinjaOne はノート PC をこの名前で出力する
    "MAC_DESKTOP": "DESKTOP",
    "MAC_LAPTOP": "LAPTOP",
    "LINUX_DESKTOP": "DESKTOP",
    "LINUX_LAPTOP": "LAPTOP",
    "WINDOWS_SERVER": "SERVER",
    "LINUX_SERVER": "SERVER",
    "HYPER-V_SERVER": "SERVER",
    "VMWARE_SERVER": "SERVER",
    "SERVER": "SERVER",
    "TABLET": "TABLET",
    "MOBILE": "OTHER",
    "NETWORK_DEVICE": "OTHER",
    "PRINTER": "OTHER",
}

ENDPOINT_ROLES = frozenset({
    "WINDOWS_DESKTOP", "WINDOWS_LAPTOP", "WINDOWS WORKSTATION", "MAC_DESKTOP", "MAC_LAPTOP",
    "LINUX_DESKTOP", "LINUX_LAPTOP", "TABLET", "MOBILE",
})

SERVER_ROLES = frozenset({
    "WINDOWS_SERVER", "LINUX_SERVER", "HYPER-V_SERVER", "VMWARE_SERVER",
    "SERVER", "NETWORK_DEVICE", "PRINTER",
})


def map_role(value: str) -> str:
    return ROLE_TO_ASSET_TYPE.get(value.strip().upper(), "OTHER")


def _server_role(value: str) -> str:
    return "SERVER" if map_role(value) == "SERVER" else "OTHER"


def _strip(value: str) -> str:
    return value.strip()


def _mappings_common_tail(volumes_processor) -> tuple[ColumnMapping, ...]:
    return (
        ColumnMapping("Warranty End Date", "warrantyEndDate", TargetKind.DIRECT, "Warranty End Date", processor=to_iso),
        ColumnMapping(
            "Last LoggedIn User", "assignedToAadId", TargetKind.DIRECT,
            "Last logged in user (requires directory lookup)", processor=strip_domain,
        ),
        ColumnMapping("RAM", "ram", TargetKind.SPECIFICATIONS, "RAM (rounded to common size)", processor=simplify_ram),
        ColumnMapping("OS Name", "operatingSystem", TargetKind.SPECIFICATIONS, "Operating System", processor=_strip),
        ColumnMapping("OS Architecture", "osArchitecture", TargetKind.SPECIFICATIONS, "OS Architecture", processor=_strip),
        ColumnMapping("OS Build Number", "osBuildNumber", TargetKind.SPECIFICATIONS, "OS Build Number", processor=_strip),
        ColumnMapping("OS Version", "osVersion", TargetKind.SPECIFICATIONS, "Operating System Version", processor=_strip),
        ColumnMapping("Processor", "processor", TargetKind.SPECIFICATIONS, "Processor", processor=_strip),
        ColumnMapping("Volumes", "storage", TargetKind.SPECIFICATIONS, "Storage (aggregated volumes)", processor=volumes_processor),
        ColumnMapping("Graphics", "graphics", TargetKind.SPECIFICATIONS, "Graphics Card", processor=_strip),
        ColumnMapping("Network Adapters", "networkAdapters", TargetKind.SPECIFICATIONS, "Network Adapters", processor=_strip),
        ColumnMapping("Serial Number", "serialNumber", TargetKind.DIRECT, "Serial Number", required=True, processor=_strip),
        ColumnMapping("Manufacturer", "make", TargetKind.DIRECT, "Manufacturer", processor=_strip),
        ColumnMapping("Model", "model", TargetKind.DIRECT, "Product Model", processor=_strip),
        ColumnMapping("System Model", "model", TargetKind.DIRECT, "System Model", processor=_strip),
        ColumnMapping("Last Online", "lastOnline", TargetKind.SPECIFICATIONS, "Last Online Date", processor=to_iso),
        ColumnMapping("System Name", "systemName", TargetKind.SPECIFICATIONS, "System Name", processor=_strip),
    )


NINJAONE_MAPPINGS: tuple[ColumnMapping, ...] = (
    ColumnMapping("Display Name", "assetTag", TargetKind.DIRECT, "Asset Tag", required=True, processor=normalize_asset_tag),
    ColumnMapping("Role", "assetType", TargetKind.DIRECT, "Asset Type (mapped from Role)", required=True, processor=map_role),
    *_mappings_common_tail(aggregate_volumes),
)

NINJAONE_SERVER_MAPPINGS: tuple[ColumnMapping, ...] = (
    ColumnMapping(
        "Display Name", "assetTag", TargetKind.DIRECT, "Server Asset Tag",
        required=True, processor=lambda v: v.strip().upper(),
    ),
    ColumnMapping("Role", "assetType", TargetKind.DIRECT, "Asset Type (mapped from Role)", required=True, processor=_server_role),
    ColumnMapping(
        "Display Name", "locationName", TargetKind.DIRECT, "Location (office code in server name)",
        processor=resolve_server_location, optional_result=True,
    ),
    ColumnMapping(
        "System Model", "virtualizationType", TargetKind.SPECIFICATIONS, "Virtual or Physical server",
        processor=detect_virtualization,
    ),
    *_mappings_common_tail(aggregate_server_volumes),
)


def _apply_defaults(result: TransformationResult) -> None:
    result.direct_fields.setdefault("condition", "GOOD")
    for name in ("make", "model"):
        if not result.direct_fields.get(name):
            result.direct_fields[name] = "Unknown"
    result.direct_fields["source"] = "NINJAONE"


def _note_user_lookup(result: TransformationResult) -> None:
    user = result.direct_fields.get("assignedToAadId")
    if user:
        result.add_note(f'Username "{user}" requires directory lookup')


def transform_ninjaone_row(row: RawRow) -> TransformationResult:
    result = apply_column_mappings(row, NINJAONE_MAPPINGS)
    _apply_defaults(result)
    infer_status(result)
    _note_user_lookup(result)
    return result


def transform_ninjaone_server_row(row: RawRow) -> TransformationResult:
    result = apply_column_mappings(row, NINJAONE_SERVER_MAPPINGS)
    _apply_defaults(result)
    # サーバは個人に割り当てず常に稼働中扱い
    result.direct_fields["status"] = "ASSIGNED"
    location = result.direct_fields.get("locationName")
    if location:
        result.add_note(f'Location "{location}" will be matched to existing locations')
    elif row.text("Display Name"):
        result.add_note(f'No office code recognized in server name "{row.text("Display Name")}"')
    _note_user_lookup(result)
    return result


def validate_ninjaone_fields(fields: Mapping[str, Any]) -> list[str]:
    errors: list[str] = []
    if not str(field_value(fields, "assetTag") or "").strip():
        errors.append("Asset Tag is required")
    if not str(field_value(fields, "serialNumber") or "").strip():
        errors.append("Serial Number is required")
    if not str(field_value(fields, "assetType") or "").strip():
        errors.append("Asset Type is required")
    return errors


def _role(row: RawRow) -> str:
    return (row.text("Role") or "").upper()


def is_endpoint_row(row: RawRow) -> bool:
    return _role(row) in ENDPOINT_ROLES


def is_server_row(row: RawRow) -> bool:
    return _role(row) in SERVER_ROLES
