from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

"""Workload category and classification rule models.

Rules come from the rules file (snake_case keys) or from the storage layer
(camelCase record shape ``{id, categoryId, priority, sourceField, operator,
value, isActive}``); both are accepted by ``WorkloadCategoryRule.from_dict``.
"""

__all__ = [
    "Operator",
    "WorkloadCategory",
    "WorkloadCategoryRule",
    "ClassificationMatch",
    "RuleTestResult",
    "RuleDefinitionError",
]


class RuleDefinitionError(Exception):
    """Raised when a rule record is structurally malformed."""


class Operator(str, Enum):
    EQ = "="
    NE = "!="
    GE = ">="
    LE = "<="
    GT = ">"
    LT = "<"
    INCLUDES = "includes"
    REGEX = "regex"

    @classmethod
    def parse(cls, text: Any) -> Operator | None:
        if isinstance(text, Operator):
            return text
        if text is None:
            return None
        key = str(text).strip().lower()
        for op in cls:
            if op.value == key:
                return op
        return None

    @property
    def is_numeric(self) -> bool:
        return self in (Operator.GE, Operator.LE, Operator.GT, Operator.LT)


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return default


def _as_bool(value: Any, default: bool = True) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "y")
    return bool(value)


@dataclass(frozen=True)
class WorkloadCategory:
    id: str
    name: str
    description: str | None = None
    is_active: bool = True  # 削除は論理削除 (非アクティブ化)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> WorkloadCategory:
        cid = _pick(data, "id")
        name = _pick(data, "name")
        if cid is None or name is None:
            raise RuleDefinitionError(f"category requires id and name: {dict(data)}")
        return cls(
            id=str(cid),
            name=str(name),
            description=_pick(data, "description"),
            is_active=_as_bool(_pick(data, "is_active", "isActive")),
        )


@dataclass(frozen=True)
class WorkloadCategoryRule:
    id: str
    category_id: str
    priority: int  # 小さいほど先に評価 (1 = 最優先)
    source_field: str  # "make" / "specifications.ram"
    operator: str  # 未知の演算子も保持し評価時に False
    value: str
    is_active: bool = True
    description: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> WorkloadCategoryRule:
        missing = [
            name
            for name, keys in (
                ("id", ("id",)),
                ("category_id", ("category_id", "categoryId")),
                ("priority", ("priority",)),
                ("source_field", ("source_field", "sourceField")),
                ("operator", ("operator",)),
            )
            if _pick(data, *keys) is None
        ]
        if missing:
            raise RuleDefinitionError(f"rule missing required keys {missing}: {dict(data)}")

        raw_priority = _pick(data, "priority")
        try:
            if isinstance(raw_priority, bool):
                raise ValueError(raw_priority)
            priority = int(raw_priority)
            if isinstance(raw_priority, float) and raw_priority != priority:
                raise ValueError(raw_priority)
        except (TypeError, ValueError, OverflowError) as e:
            raise RuleDefinitionError(f"rule {_pick(data, 'id')}: priority must be an integer, got {raw_priority!r}") from e
        if priority < 1:
            raise RuleDefinitionError(f"rule {_pick(data, 'id')}: priority must be >= 1, got {priority}")

        value = _pick(data, "value", default="")
        return cls(
            id=str(_pick(data, "id")),
            category_id=str(_pick(data, "category_id", "categoryId")),
            priority=priority,
            source_field=str(_pick(data, "source_field", "sourceField")),
            operator=str(_pick(data, "operator")),
            value="" if value is None else str(value),
            is_active=_as_bool(_pick(data, "is_active", "isActive")),
            description=_pick(data, "description"),
        )

    @property
    def label(self) -> str:
        """Human readable rule name used in logs and reports."""
        return self.description or f"{self.source_field} {self.operator} {self.value}"


@dataclass(frozen=True)
class ClassificationMatch:
    category_id: str
    rule: WorkloadCategoryRule


@dataclass(frozen=True)
class RuleTestResult:
    result: bool
    explanation: str
    error: str | None = None
