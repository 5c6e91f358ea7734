from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm

from ..models.transformation_result import TransformationResult

"""Row progress bar for harness runs (tqdm, TTY only).

ProgressTracker doubles as the ``on_result`` callback of
``sources.registry.transform_batch``. Without a TTY (CI, piped output) it only
counts, keeping logs free of control sequences.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]

BAR_OPTIONS: dict[str, Any] = {"unit": "row", "leave": True, "ncols": 80, "ascii": True}


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """Counts transformed rows and how many of them carry validation errors."""

    def __init__(self, total_rows: int, *, description: str = "Transforming rows") -> None:
        self.total_rows = total_rows
        self.processed = 0
        self.invalid = 0
        self.pbar: Any | None = tqdm(total=total_rows, desc=description, **BAR_OPTIONS) if is_tty_enabled() else None

    @property
    def enabled(self) -> bool:
        return self.pbar is not None

    def __call__(self, index: int, result: TransformationResult) -> None:
        self.advance(valid=result.is_valid)

    def advance(self, *, valid: bool = True) -> None:
        self.processed += 1
        if not valid:
            self.invalid += 1
        if self.pbar is None:
            return
        self.pbar.update(1)
        if not valid:
            self.pbar.set_postfix(invalid=self.invalid)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
