from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""Error log line for one problem found during an import run.

Transformers report data problems as plain strings on the result; the harness
turns each of them into an ErrorRecord tied to the input file and the
spreadsheet row it came from. FILE_LEVEL_ROW marks problems that belong to the
whole file (it could not be decoded at all).
"""

__all__ = [
    "ErrorRecord",
    "FILE_LEVEL_ROW",
    "VALIDATION_ERROR",
    "READ_ERROR",
    "TRANSFORM_ERROR",
    "TRANSFORM_FAILURE_PREFIX",
]

FILE_LEVEL_ROW = -1

VALIDATION_ERROR = "VALIDATION_ERROR"  # 変換結果の validationErrors
READ_ERROR = "READ_ERROR"  # CSV / XLSX を読めない
TRANSFORM_ERROR = "TRANSFORM_ERROR"  # 変換関数そのものの想定外例外

TRANSFORM_FAILURE_PREFIX = "Unexpected error while transforming row"


def _utc_now() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class ErrorRecord:
    timestamp: str  # ISO8601 UTC, 'Z' 付き
    file: str
    source: str  # telus / ninjaone / ...
    row: int  # スプレッドシート行番号 (ヘッダー = 1)
    error_type: str
    message: str

    @staticmethod
    def create(file: str, source: str, row: int, error_type: str, message: str) -> ErrorRecord:
        return ErrorRecord(_utc_now(), file, source, row, error_type, message)

    @classmethod
    def for_row(cls, file: str, source: str, row: int, message: str) -> ErrorRecord:
        """Validation problem of one transformed row."""
        error_type = TRANSFORM_ERROR if message.startswith(TRANSFORM_FAILURE_PREFIX) else VALIDATION_ERROR
        return cls.create(file, source, row, error_type, message)

    @classmethod
    def for_file(cls, file: str, source: str, message: str) -> ErrorRecord:
        return cls.create(file, source, FILE_LEVEL_ROW, READ_ERROR, message)

    @property
    def is_file_level(self) -> bool:
        return self.row == FILE_LEVEL_ROW

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
