from __future__ import annotations

import re
from dataclasses import dataclass

"""Device-name parsing for carrier exports.

Carrier billing exports describe handsets as free text ("SWAP IPHONE 14 PRO
128GB SPACE BLACK", "SS GALAXY S24 ULTRA 256GB", "APLE IP11PM"). These
helpers split such text into make, model and storage. An unrecognized name
keeps its full text as the model and an empty make; callers decide how to
report that.
"""

__all__ = [
    "DeviceInfo",
    "MANUFACTURER_TOKENS",
    "parse_device_name",
    "parse_rogers_device_name",
]


@dataclass(frozen=True)
class DeviceInfo:
    make: str  # 不明な場合は ""
    model: str
    storage: str | None = None  # "128GB"

    @property
    def recognized(self) -> bool:
        return bool(self.make)


# 先頭トークン -> メーカー表記
MANUFACTURER_TOKENS: dict[str, str] = {
    "APPLE": "Apple",
    "APLE": "Apple",
    "SAMSUNG": "Samsung",
    "SS": "Samsung",
    "GOOGLE": "Google",
    "MOTOROLA": "Motorola",
    "MOTO": "Motorola",
    "LG": "LG",
    "NOKIA": "Nokia",
    "SONY": "Sony",
    "HUAWEI": "Huawei",
    "ONEPLUS": "OnePlus",
    "BLACKBERRY": "BlackBerry",
    "ALCATEL": "Alcatel",
    "ZTE": "ZTE",
    "TCL": "TCL",
    "KYOCERA": "Kyocera",
    "SONIM": "Sonim",
    "XIAOMI": "Xiaomi",
    "CAT": "CAT",
}

_STORAGE = re.compile(r"(\d+)\s?(GB|TB)\b")
_STORAGE_WORD = re.compile(r"^\d+\s?(?:GB|TB)$", re.IGNORECASE)

_IPHONE = re.compile(r"IPHONE\s+(\d+|SE|XR|XS|X)((?:\s+(?:PRO|PLUS|MINI|MAX))*)")
_GALAXY = re.compile(r"GALAXY\s+([A-Z]\d+[A-Z]?(?:\s+(?:PLUS|ULTRA|FE))*)")
_PIXEL = re.compile(r"PIXEL\s+(\d+[A-Z]*(?:\s+(?:PRO|XL|FOLD))*)")

_IPAD_NOISE = {
    "SPACE", "SPC", "GRAY", "GRY", "GREY", "SILVER", "SLV", "ARTL", "TL", "ML", "AL", "TI",
    "BLK", "BLACK", "MID", "MIDNIGHT", "ROSE", "GOLD", "WIFI", "WI-FI", "CELL", "LTE",
}
_WATCH_NOISE = {
    "SPACE", "SPC", "GRAY", "GRY", "GREY", "BLACK", "BLK", "MID", "MIDNIGHT", "BLUE", "RED",
    "PINK", "ORANGE", "YELLOW", "WHITE", "SILVER", "STAINLESS", "STARLIGHT",
}
_KEEP_UPPER = {"SE", "XR", "XS", "X", "GPS", "LTE", "FE"}


def _title(words: list[str]) -> str:
    out = []
    for word in words:
        if word in _KEEP_UPPER:
            out.append(word)
        else:
            out.append(word[:1] + word[1:].lower())
    return " ".join(out)


def _extract_storage(normalized: str) -> tuple[str, str | None]:
    m = _STORAGE.search(normalized)
    if not m:
        return normalized, None
    storage = f"{m.group(1)}{m.group(2)}"
    stripped = (normalized[: m.start()] + normalized[m.end():]).strip()
    return " ".join(stripped.split()), storage


def _remainder(text: str) -> str:
    """Original-cased words after the manufacturer token, storage removed."""
    words = text.split()
    if words and words[0].upper() == "SWAP":
        words = words[1:]
    words = words[1:]
    return " ".join(w for w in words if not _STORAGE_WORD.match(w))


def parse_device_name(device_name: str | None) -> DeviceInfo:
    if device_name is None or not str(device_name).strip():
        return DeviceInfo(make="", model="")
    text = " ".join(str(device_name).split())

    normalized = text.upper()
    if normalized.startswith("SWAP "):
        normalized = normalized[5:]
    normalized, storage = _extract_storage(normalized)

    if "IPHONE" in normalized:
        m = _IPHONE.search(normalized)
        if not m:
            return DeviceInfo(make="Apple", model="iPhone", storage=storage)
        words = [m.group(1)] + m.group(2).split()
        return DeviceInfo(make="Apple", model=f"iPhone {_title(words)}", storage=storage)

    if "IPAD" in normalized:
        words = [w for w in normalized.split() if w not in _IPAD_NOISE and w not in ("APPLE", "APLE")]
        rest = [w for w in words if w != "IPAD"]
        model = " ".join(["iPad"] + ([_title(rest)] if rest else []))
        return DeviceInfo(make="Apple", model=model, storage=storage)

    if "WATCH" in normalized:
        words = [w for w in normalized.split() if w not in _WATCH_NOISE and w not in ("APPLE", "APLE")]
        rest = [w for w in words if w != "WATCH"]
        model = " ".join(["Watch"] + ([_title(rest)] if rest else []))
        return DeviceInfo(make="Apple", model=model, storage=storage)

    if normalized.startswith("SS "):
        normalized = "SAMSUNG " + normalized[3:]

    if "GALAXY" in normalized:
        m = _GALAXY.search(normalized)
        if not m:
            return DeviceInfo(make="Samsung", model="Galaxy", storage=storage)
        return DeviceInfo(make="Samsung", model=f"Galaxy {_title(m.group(1).split())}", storage=storage)

    if "PIXEL" in normalized:
        m = _PIXEL.search(normalized)
        if not m:
            return DeviceInfo(make="Google", model="Pixel", storage=storage)
        return DeviceInfo(make="Google", model=f"Pixel {_title(m.group(1).split())}", storage=storage)

    first = normalized.split()[0] if normalized else ""
    make = MANUFACTURER_TOKENS.get(first)
    if make is not None:
        return DeviceInfo(make=make, model=_remainder(text), storage=storage)

    return DeviceInfo(make="", model=text, storage=storage)


# ---------------------------------------------------------------------------
# Rogers abbreviations
# ---------------------------------------------------------------------------

_IPAD_PRO_CODE = re.compile(r"IPDP(\d{1,2})?")
_IPAD_AIR_CODE = re.compile(r"IPADAIR(\d{2,3})?")
_IPAD_PRO_FULL = re.compile(r"IPAD\s+PRO(?:\s+(\d{1,2}(?:\.\d+)?))?")
_IPAD_CODE = re.compile(r"IPAD(PRO|MINI|AIR)?(\d{2,3})?")
_IPHONE_CODE = re.compile(r"IP(\d{2})(PROMAX|PRO|PLUS|PM|P)?")
_GALAXY_S_CODE = re.compile(r"^(S\d+[A-Z]*)")
_CODE_STORAGE = re.compile(r"\b(32|64|128|256|512)(?:\s?GB)?\b")

_IPHONE_SUFFIX = {
    "P": " Pro",
    "PRO": " Pro",
    "PM": " Pro Max",
    "PROMAX": " Pro Max",
    "PLUS": " Plus",
}
_IPAD_SUBTYPE = {"PRO": "Pro", "MINI": "mini", "AIR": "Air"}

# 共通パーサで判定できなかった場合のキーワード
_BRAND_KEYWORDS = (
    (("SAMSUNG",), "Samsung"),
    (("APPLE", "IPHONE", "IPAD"), "Apple"),
    (("GOOGLE", "PIXEL"), "Google"),
    (("ONEPLUS",), "OnePlus"),
    (("HUAWEI",), "Huawei"),
)


def _code_storage(upper: str) -> str | None:
    m = _CODE_STORAGE.search(upper)
    return f"{m.group(1)}GB" if m else None


def parse_rogers_device_name(device_name: str | None) -> DeviceInfo:
    """Rogers device descriptions, including the abbreviated catalogue codes."""
    if device_name is None or not str(device_name).strip():
        return DeviceInfo(make="", model="")
    upper = " ".join(str(device_name).split()).upper()
    compact = re.sub(r"[^A-Z0-9]", "", upper)

    m = _IPAD_PRO_CODE.search(compact)
    if m:
        model = f'iPad Pro {m.group(1)}"' if m.group(1) else "iPad Pro"
        return DeviceInfo(make="Apple", model=model, storage=_code_storage(upper))

    m = _IPAD_AIR_CODE.search(upper)
    if m:
        return DeviceInfo(make="Apple", model="iPad Air", storage=f"{m.group(1)}GB" if m.group(1) else None)

    m = _IPAD_PRO_FULL.search(upper)
    if m:
        model = f"iPad Pro {m.group(1)}" if m.group(1) else "iPad Pro"
        return DeviceInfo(make="Apple", model=model, storage=_code_storage(upper))

    if re.search(r"IPAD[A-Z0-9]", upper):
        m = _IPAD_CODE.search(upper)
        if m:
            subtype = _IPAD_SUBTYPE.get(m.group(1) or "", "")
            return DeviceInfo(
                make="Apple",
                model=f"iPad {subtype}".strip(),
                storage=f"{m.group(2)}GB" if m.group(2) else None,
            )

    m = _IPHONE_CODE.search(upper)
    if m:
        suffix = _IPHONE_SUFFIX.get(m.group(2) or "", "")
        return DeviceInfo(make="Apple", model=f"iPhone {m.group(1)}{suffix}", storage=_code_storage(upper))

    m = _GALAXY_S_CODE.match(upper)
    if m:
        storage = re.search(r"(\d+)GB", upper)
        return DeviceInfo(
            make="Samsung",
            model=f"Galaxy {m.group(1)}",
            storage=f"{storage.group(1)}GB" if storage else None,
        )

    parsed = parse_device_name(device_name)
    if parsed.recognized:
        return parsed
    for keywords, make in _BRAND_KEYWORDS:
        if any(k in upper for k in keywords):
            return DeviceInfo(make=make, model=parsed.model, storage=parsed.storage)
    return parsed
