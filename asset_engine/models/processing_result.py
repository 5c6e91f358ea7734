from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .transformation_result import TransformationResult

"""Run result models for the import harness.

ImportRunResult aggregates everything the SUMMARY line and the exit code need;
RowOutcome keeps the per-row transformation and classification for reports
and golden-master generation.
"""

__all__ = [
    "RowOutcome",
    "ImportRunResult",
]


@dataclass(frozen=True)
class RowOutcome:
    row_number: int  # スプレッドシート行番号
    result: TransformationResult
    category_id: str | None = None  # 分類結果 (None = 未分類)
    rule_id: str | None = None  # 勝ったルール


@dataclass(frozen=True)
class ImportRunResult:
    """Aggregated results of one import run."""
    source: str
    file_name: str
    total_rows: int  # フィルタ後に変換した行数
    valid_rows: int
    invalid_rows: int  # validation error を1件以上持つ行
    classified_rows: int
    unclassified_rows: int
    filtered_rows: int  # ソース行フィルタで除外
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    throughput_rows_per_sec: float
    category_counts: dict[str, int] = field(default_factory=dict)
    outcomes: list[RowOutcome] = field(default_factory=list)
    error_log_path: str | None = None
