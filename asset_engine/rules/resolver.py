from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

"""Field resolver for classification rules.

A rule's source field is either a top-level asset field (``make``) or one
level into a mapping-valued field (``specifications.ram``). Paths nesting
deeper than one level never resolve. None means "absent", which is distinct
from an empty string.
"""

__all__ = [
    "resolve_field",
    "split_path",
    "MAX_DEPTH",
]

MAX_DEPTH = 2  # "parent.child" まで


def split_path(path: str) -> list[str]:
    return str(path).strip().split(".")


def _as_mapping(value: Any) -> Mapping[str, Any] | None:
    if isinstance(value, Mapping):
        return value
    # specifications は DB 上 JSON 文字列で保存されている
    if isinstance(value, str) and value.lstrip().startswith("{"):
        try:
            decoded = json.loads(value)
        except ValueError:
            return None
        if isinstance(decoded, dict):
            return decoded
    return None


def resolve_field(fields: Mapping[str, Any] | None, path: str) -> Any | None:
    if not fields or not path:
        return None
    parts = split_path(path)
    if len(parts) > MAX_DEPTH or any(not p for p in parts):
        return None
    if len(parts) == 1:
        return fields.get(parts[0])
    parent = _as_mapping(fields.get(parts[0]))
    if parent is None:
        return None
    return parent.get(parts[1])
