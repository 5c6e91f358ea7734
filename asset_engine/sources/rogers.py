from __future__ import annotations

from ..models.raw_row import RawRow
from ..models.transformation_result import TransformationResult
from .common import ColumnMapping, TargetKind, apply_column_mappings, to_iso
from .devices import parse_rogers_device_name
from .phones import device_mappings, finish_phone_result, optional_text, phone_digits

"""Rogers wireless account export transformer."""

__all__ = [
    "ROGERS_MAPPINGS",
    "parse_hup_eligible",
    "transform_rogers_row",
]

DEVICE_COLUMN = "Device Description"


def parse_hup_eligible(value: str) -> bool:
    """Hardware Upgrade Program flag: y / yes / true are eligible."""
    return value.strip().lower() in ("y", "yes", "true")


ROGERS_MAPPINGS: tuple[ColumnMapping, ...] = (
    ColumnMapping(
        "Usernames", "assignedToAadId", TargetKind.DIRECT,
        "Username (requires directory lookup)", processor=optional_text,
    ),
    ColumnMapping("Subscriber Number", "phoneNumber", TargetKind.SPECIFICATIONS, "Phone number (digits only)", processor=phone_digits),
    ColumnMapping("Price Plan Description", "planType", TargetKind.SPECIFICATIONS, "Plan type", processor=optional_text),
    *device_mappings(DEVICE_COLUMN, parse_rogers_device_name),
    ColumnMapping("IMEI", "imei", TargetKind.SPECIFICATIONS, "IMEI number", required=True, processor=optional_text),
    ColumnMapping("IMEI", "serialNumber", TargetKind.DIRECT, "IMEI as serial number", processor=optional_text),
    ColumnMapping("SIM Card", "simCard", TargetKind.SPECIFICATIONS, "SIM card number", processor=optional_text),
    ColumnMapping("Commit Start Date", "purchaseDate", TargetKind.DIRECT, "Purchase date (commit start)", processor=to_iso),
    ColumnMapping("Commit Start Date", "contractStartDate", TargetKind.SPECIFICATIONS, "Contract start date", processor=to_iso),
    ColumnMapping("Commit End Date", "contractEndDate", TargetKind.SPECIFICATIONS, "Contract end date", processor=to_iso),
    ColumnMapping("HUP Eligible (y/n)", "hupEligible", TargetKind.SPECIFICATIONS, "Hardware Upgrade Program eligible", processor=parse_hup_eligible),
    ColumnMapping("Account Number", "assetType", TargetKind.DIRECT, "Account (sets asset type PHONE)", required=True, processor=lambda _: "PHONE"),
    ColumnMapping("Status", "", TargetKind.IGNORE, "Line status (ignored)"),
    ColumnMapping("# of Months Remaining", "", TargetKind.IGNORE, "Months remaining (ignored)"),
    ColumnMapping("Early Cancellation Fee", "", TargetKind.IGNORE, "Early cancellation fee (ignored)"),
    ColumnMapping("Applicable Pre-HUP", "", TargetKind.IGNORE, "Pre-HUP credit (ignored)"),
    ColumnMapping("Available HUP Date(s)", "", TargetKind.IGNORE, "HUP available dates (ignored)"),
)


def transform_rogers_row(row: RawRow) -> TransformationResult:
    result = apply_column_mappings(row, ROGERS_MAPPINGS)
    return finish_phone_result(result, row, device_column=DEVICE_COLUMN, source="ROGERS", carrier="Rogers")
