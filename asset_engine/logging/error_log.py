from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""JSON Lines error log of an import run.

Records are collected while rows are transformed and written in one go at the
end of the run, so a clean import leaves no file behind. The file name carries
the UTC start of the first flush: ``<log_dir>/errors-YYYYMMDD-HHMMSS.log``.
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    def __init__(self, log_dir: Path | str | None = None) -> None:
        self.log_dir = Path(log_dir) if log_dir is not None else LOGS_DIR
        self._pending: list[ErrorRecord] = []
        self._path: Path | None = None
        self._written: Counter[str] = Counter()

    def append(self, record: ErrorRecord) -> None:
        self._pending.append(record)

    def extend(self, records: Iterable[ErrorRecord]) -> None:
        self._pending.extend(records)

    def __len__(self) -> int:
        return len(self._pending)

    @property
    def path(self) -> Path | None:
        """Log file of this buffer once something has been written."""
        return self._path

    def affected_rows(self) -> list[int]:
        """Spreadsheet rows with at least one pending record, file-level entries excluded."""
        return sorted({r.row for r in self._pending if not r.is_file_level})

    def counts_by_type(self) -> dict[str, int]:
        """error_type -> number of records, written and pending."""
        counts = self._written + Counter(r.error_type for r in self._pending)
        return dict(sorted(counts.items()))

    def _target(self) -> Path:
        if self._path is None:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._path = self.log_dir / f"errors-{stamp}.log"
        return self._path

    def flush(self) -> Path | None:
        """Append pending records to the log file; None when nothing was pending."""
        if not self._pending:
            return None
        target = self._target()
        with target.open("a", encoding="utf-8") as f:
            f.writelines(r.to_json_line() + "\n" for r in self._pending)
        self._written.update(r.error_type for r in self._pending)
        self._pending.clear()
        return target
