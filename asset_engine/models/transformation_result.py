from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""Transformation result models.

TransformationResult is what every source transformer returns: canonical
direct fields, free-form specifications, custom fields, plus the notes and
validation errors collected while normalizing the row. Validation errors never
abort a row; a row with errors still carries its best-effort partial fields.
"""

__all__ = [
    "TransformationResult",
    "ValidationOutcome",
]


@dataclass
class TransformationResult:
    direct_fields: dict[str, Any] = field(default_factory=dict)  # assetTag, serialNumber, make, ...
    specifications: dict[str, Any] = field(default_factory=dict)  # ram, storage, imei, ...
    custom_fields: dict[str, Any] = field(default_factory=dict)  # cf_ 付きターゲット
    processing_notes: list[str] = field(default_factory=list)
    validation_errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.validation_errors

    def add_note(self, message: str) -> None:
        self.processing_notes.append(message)

    def add_error(self, message: str) -> None:
        self.validation_errors.append(message)

    def field_bag(self) -> dict[str, Any]:
        """Asset field bag consumed by the rule engine.

        Direct fields sit at the top level; specifications and custom fields are
        exposed as one level of nesting (``specifications.ram``).
        """
        bag: dict[str, Any] = dict(self.direct_fields)
        bag["specifications"] = dict(self.specifications)
        if self.custom_fields:
            bag["customFields"] = dict(self.custom_fields)
        return bag

    def to_dict(self) -> dict[str, Any]:
        """JSON shape shared with golden-master fixtures and API consumers."""
        return {
            "directFields": dict(self.direct_fields),
            "specifications": dict(self.specifications),
            "customFields": dict(self.custom_fields),
            "processingNotes": list(self.processing_notes),
            "validationErrors": list(self.validation_errors),
        }


@dataclass(frozen=True)
class ValidationOutcome:
    is_valid: bool
    errors: tuple[str, ...] = ()
