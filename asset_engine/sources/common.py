from __future__ import annotations

import math
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from enum import Enum
from typing import Any

from ..models.raw_row import RawRow
from ..models.transformation_result import TransformationResult

"""Shared building blocks for source transformers.

Every source transformer is a tuple of ColumnMapping entries applied by
``apply_column_mappings`` plus a little source-specific post-processing.
The normalizers here are pure functions: same input, same output, no clock.
"""

__all__ = [
    "TargetKind",
    "ColumnMapping",
    "apply_column_mappings",
    "to_iso",
    "simplify_ram",
    "round_to_common_storage_size",
    "aggregate_volumes",
    "aggregate_server_volumes",
    "clean_phone_number",
    "normalize_asset_tag",
    "strip_domain",
    "resolve_location",
    "resolve_server_location",
    "detect_virtualization",
    "infer_status",
    "phone_asset_tag",
    "apply_imei_fallback",
    "field_value",
    "LOCATION_ABBREVIATIONS",
    "CUSTOM_FIELD_PREFIX",
]

CUSTOM_FIELD_PREFIX = "cf_"

Processor = Callable[[str], Any]


class TargetKind(str, Enum):
    DIRECT = "direct"
    SPECIFICATIONS = "specifications"
    CUSTOM = "custom"
    IGNORE = "ignore"


@dataclass(frozen=True)
class ColumnMapping:
    """One external column -> one canonical target.

    A column may appear in several mappings (Device Name feeds make, model and
    storage).
    """
    column: str  # 外部列名 (大文字小文字・前後空白は無視して照合)
    target_field: str  # "cf_" 始まりは custom field
    target_kind: TargetKind
    description: str = ""
    required: bool = False
    processor: Processor | None = None
    optional_result: bool = False  # True: processor の None は欠損扱い (エラーにしない)

    @property
    def resolved_kind(self) -> TargetKind:
        if self.target_kind is not TargetKind.IGNORE and self.target_field.startswith(CUSTOM_FIELD_PREFIX):
            return TargetKind.CUSTOM
        return self.target_kind


def apply_column_mappings(row: RawRow, mappings: Iterable[ColumnMapping]) -> TransformationResult:
    """Apply mappings to a row. Never raises for bad cell content."""
    result = TransformationResult()
    for mapping in mappings:
        kind = mapping.resolved_kind
        if kind is TargetKind.IGNORE:
            continue
        raw = row.get(mapping.column)
        if raw is None or not raw.strip():
            if mapping.required:
                result.add_error(f"Required field {mapping.target_field} is missing")
            continue

        value: Any = raw
        if mapping.processor is not None:
            try:
                value = mapping.processor(raw)
            except Exception as e:  # processor の例外は行エラーに変換
                result.add_error(f"Failed to process {mapping.column}: {e}")
                continue
            if value is None:
                if mapping.optional_result:
                    continue
                result.add_error(f'Could not normalize {mapping.column} value "{raw.strip()}"')
                continue

        if kind is TargetKind.CUSTOM:
            result.custom_fields[mapping.target_field[len(CUSTOM_FIELD_PREFIX):]] = value
        elif kind is TargetKind.DIRECT:
            result.direct_fields[mapping.target_field] = value
        else:
            result.specifications[mapping.target_field] = value
    return result


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

EXCEL_EPOCH = datetime(1899, 12, 30, tzinfo=UTC)

_OFFSET_WITHOUT_COLON = re.compile(r"([+-]\d{2})(\d{2})$")
_DIGITS = re.compile(r"^\d+(?:\.\d+)?$")
_COMPACT_DATE = re.compile(r"^(\d{4})(\d{2})(\d{2})$")

_DATE_FORMATS = (
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %I:%M %p",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%y",
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M:%S",
    "%d-%b-%Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%b %d %Y",
    "%a %b %d %Y",
)


def _format_iso(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)  # タイムゾーン無しは UTC とみなす
    dt = dt.astimezone(UTC)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def _compact_date(text: str) -> datetime | None:
    m = _COMPACT_DATE.match(text)
    if not m:
        return None
    year, month, day = (int(g) for g in m.groups())
    if not 1900 <= year <= 2200:
        return None
    try:
        return datetime(year, month, day, tzinfo=UTC)
    except ValueError:
        return None


def to_iso(value: Any) -> str | None:
    """Normalize a date cell to ISO-8601 UTC with milliseconds.

    Accepts ISO strings (with or without offset), US style dates, compact
    YYYYMMDD, Excel serial day numbers and datetime objects. Unparseable
    input gives None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return _format_iso(value)
    if isinstance(value, date):
        return _format_iso(datetime(value.year, value.month, value.day, tzinfo=UTC))
    text = str(value).strip()
    if not text:
        return None

    if _DIGITS.match(text):
        compact = _compact_date(text)
        if compact is not None:
            return _format_iso(compact)
        serial = float(text)
        try:
            return _format_iso(EXCEL_EPOCH + timedelta(days=serial))
        except OverflowError:
            return None

    cleaned = _OFFSET_WITHOUT_COLON.sub(r"\1:\2", text)
    if cleaned.endswith(("Z", "z")):
        cleaned = cleaned[:-1] + "+00:00"
    try:
        return _format_iso(datetime.fromisoformat(cleaned))
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return _format_iso(datetime.strptime(text, fmt))
        except ValueError:
            continue
    return None


# ---------------------------------------------------------------------------
# Capacity
# ---------------------------------------------------------------------------

_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)")

# (しきい値 GiB, 表示) 上から順に評価
_STORAGE_TIERS = (
    (1800, "2 TB"),
    (900, "1 TB"),
    (450, "512 GB"),
    (230, "256 GB"),
    (110, "128 GB"),
    (55, "64 GB"),
    (28, "32 GB"),
    (14, "16 GB"),
    (6, "8 GB"),
)

_RAM_TIERS = (
    (120, "128 GB"),
    (90, "96 GB"),
    (60, "64 GB"),
    (30, "32 GB"),
    (14, "16 GB"),
    (6, "8 GB"),
    (2, "4 GB"),
)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _leading_float(value: str) -> float | None:
    m = _LEADING_NUMBER.match(value.strip())
    return float(m.group(0)) if m else None


def round_to_common_storage_size(gib: float) -> str:
    for threshold, label in _STORAGE_TIERS:
        if gib > threshold:
            return label
    return f"{_round_half_up(gib)} GB"


def simplify_ram(value: str) -> str | None:
    """Snap a RAM reading in GiB ("15.8") to the common size label ("16 GB")."""
    gib = _leading_float(str(value))
    if gib is None:
        return None
    for threshold, label in _RAM_TIERS:
        if gib > threshold:
            return label
    return f"{_round_half_up(gib)} GB"


_VOLUME = re.compile(r'Type: "(.*?)"(?:[^(]*)\((\d+\.?\d*)\s*GiB\)')


def _local_volume_total(value: str) -> float:
    total = 0.0
    for volume_type, capacity in _VOLUME.findall(value):
        # リムーバブルディスクはローカルストレージに含めない
        if volume_type.strip().lower() != "removable disk":
            total += float(capacity)
    return total


def aggregate_volumes(value: str) -> str | None:
    """Total local storage of a NinjaOne "Volumes" cell as a common size label."""
    total = _local_volume_total(value)
    return round_to_common_storage_size(total) if total > 0 else None


def aggregate_server_volumes(value: str) -> str | None:
    """Server variant: multi-terabyte totals keep one decimal ("3.5 TB")."""
    total = _local_volume_total(value)
    if total <= 0:
        return None
    if total > 1800:
        tb = round(total / 1024, 1)
        text = f"{tb:.1f}".rstrip("0").rstrip(".")
        return f"{text} TB"
    return round_to_common_storage_size(total)


# ---------------------------------------------------------------------------
# Identity / tags
# ---------------------------------------------------------------------------

def clean_phone_number(value: str) -> str:
    return re.sub(r"\D", "", str(value))


def normalize_asset_tag(value: str, *, prefix: str = "BGC", width: int = 6) -> str:
    """Numeric tags get the company prefix and zero padding; others upper-case."""
    text = str(value).strip()
    if text.isdigit():
        return f"{prefix}{text.zfill(width)}"
    return text.upper()


def strip_domain(value: str) -> str:
    """``BGC\\jdoe`` -> ``jdoe``."""
    text = str(value).strip()
    if "\\" in text:
        text = text.rsplit("\\", 1)[1]
    return text.strip()


def phone_asset_tag(assigned: str | None, imei: str | None = None, phone: str | None = None) -> str | None:
    """Deterministic phone asset tag.

    PH-<First> <Last> from the assigned user, else PH-<IMEI>, else PH-<last 4
    digits of the phone number>. None when the row carries none of them.
    """
    if assigned and assigned.strip():
        parts = assigned.split()
        if len(parts) >= 2:
            return f"PH-{parts[0]} {parts[-1]}"
        return f"PH-{parts[0]}"
    if imei and imei.strip():
        return f"PH-{imei.strip()}"
    if phone:
        digits = clean_phone_number(phone)
        if len(digits) >= 10:
            return f"PH-{digits[-4:]}"
    return None


def apply_imei_fallback(result: TransformationResult) -> None:
    """Use the IMEI as serial number when the source has no serial."""
    imei = result.specifications.get("imei")
    if imei and not result.direct_fields.get("serialNumber"):
        result.direct_fields["serialNumber"] = imei


def infer_status(result: TransformationResult) -> None:
    """Explicit status wins; otherwise assignment decides."""
    if result.direct_fields.get("status"):
        return
    result.direct_fields["status"] = "ASSIGNED" if result.direct_fields.get("assignedToAadId") else "AVAILABLE"


# ---------------------------------------------------------------------------
# Locations / servers
# ---------------------------------------------------------------------------

LOCATION_ABBREVIATIONS: dict[str, str] = {
    "CAL": "Calgary",
    "VAN": "Vancouver",
    "TOR": "Toronto",
    "EDM": "Edmonton",
    "MTL": "Montreal",
    "OTT": "Ottawa",
}


def resolve_location(value: str) -> str | None:
    """Office name from an abbreviation (CAL) or a full name (calgary)."""
    text = str(value).strip().upper()
    if not text:
        return None
    if text in LOCATION_ABBREVIATIONS:
        return LOCATION_ABBREVIATIONS[text]
    for name in LOCATION_ABBREVIATIONS.values():
        if name.upper() == text:
            return name
    return None


def resolve_server_location(display_name: str) -> str | None:
    """Office encoded in a server name: ``CAL-DC01`` / ``VANFS02`` -> city, else None."""
    text = str(display_name).strip().upper()
    token = re.split(r"[-_ .]", text, maxsplit=1)[0]
    found = resolve_location(token)
    if found is None and len(token) >= 3:
        found = resolve_location(token[:3])
    return found


_VIRTUAL_MARKERS = ("VIRTUAL MACHINE", "VMWARE", "VIRTUALBOX", "KVM", "QEMU", "HVM DOMU", "XEN", "PARALLELS")


def detect_virtualization(system_model: str) -> str:
    upper = str(system_model).upper()
    return "Virtual" if any(marker in upper for marker in _VIRTUAL_MARKERS) else "Physical"


def field_value(fields: Mapping[str, Any], name: str) -> Any:
    """Look a field up in a flat dict or in a bag with a specifications sub-bag."""
    value = fields.get(name)
    if value in (None, ""):
        specs = fields.get("specifications")
        if isinstance(specs, Mapping):
            value = specs.get(name)
    return value
