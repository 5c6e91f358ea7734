from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..models.raw_row import RawRow
from ..sources.registry import get_transformer, transform_row

"""Golden-master snapshots of transformer output.

A golden master is a JSON document ``{"source": id, "cases": [{"input":
{...}, "expected": {...}}]}`` where ``expected`` is
``TransformationResult.to_dict()``. Snapshots are generated from real export
rows with the CLI (``--golden-master``) and replayed by the contract tests.
"""

__all__ = [
    "GoldenMismatch",
    "build_golden_master",
    "write_golden_master",
    "load_golden_master",
    "compare_golden_master",
]

RESULT_SECTIONS = ("directFields", "specifications", "customFields", "processingNotes", "validationErrors")


@dataclass(frozen=True)
class GoldenMismatch:
    case_index: int
    section: str  # directFields / specifications / ...
    expected: Any
    actual: Any

    def describe(self) -> str:
        return f"case {self.case_index} {self.section}: expected {self.expected!r}, got {self.actual!r}"


def build_golden_master(source_id: str, rows: Iterable[RawRow | Mapping[str, Any]]) -> dict[str, Any]:
    source = get_transformer(source_id).source.value
    cases = []
    for raw in rows:
        values = dict(raw.values) if isinstance(raw, RawRow) else {str(k): "" if v is None else str(v) for k, v in raw.items()}
        cases.append({"input": values, "expected": transform_row(source, values).to_dict()})
    return {"source": source, "cases": cases}


def write_golden_master(path: Path, payload: Mapping[str, Any]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
    return path


def load_golden_master(path: Path) -> dict[str, Any]:
    return json.loads(path.read_text(encoding="utf-8"))


def compare_golden_master(payload: Mapping[str, Any]) -> list[GoldenMismatch]:
    """Re-run every case and report sections that differ from the snapshot."""
    source = payload["source"]
    mismatches: list[GoldenMismatch] = []
    for index, case in enumerate(payload["cases"]):
        actual = transform_row(source, case["input"]).to_dict()
        expected = case["expected"]
        for section in RESULT_SECTIONS:
            if expected.get(section) != actual[section]:
                mismatches.append(GoldenMismatch(index, section, expected.get(section), actual[section]))
    return mismatches
