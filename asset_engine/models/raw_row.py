from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

"""RawRow model for third-party inventory exports.

A RawRow is one data row of an export file: header name -> cell text. Headers
coming from carrier and RMM exports are not stable (trailing blanks, changing
case between export versions), so lookups fall back to a case- and
whitespace-insensitive match.
"""

__all__ = [
    "RawRow",
    "normalize_header",
]


def normalize_header(name: str) -> str:
    """Canonical form of a header used for tolerant lookups."""
    return " ".join(str(name).split()).lower()


@dataclass(frozen=True)
class RawRow:
    """Single row of an import file before transformation.

    row_number is the spreadsheet row (header = 1), or 0 when the row did not
    come from a file (API payloads, tests).
    """
    values: dict[str, str]  # 列名 -> セル文字列
    row_number: int = 0

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any], row_number: int = 0) -> RawRow:
        values: dict[str, str] = {}
        for key, value in mapping.items():
            values[str(key)] = "" if value is None else str(value)
        return cls(values=values, row_number=row_number)

    @property
    def columns(self) -> list[str]:
        return list(self.values)

    def _find_key(self, column: str) -> str | None:
        if column in self.values:
            return column
        wanted = normalize_header(column)
        for key in self.values:
            if normalize_header(key) == wanted:
                return key
        return None

    def has(self, column: str) -> bool:
        return self._find_key(column) is not None

    def get(self, column: str, default: str | None = None) -> str | None:
        """Cell value for column, or default when the column is absent."""
        key = self._find_key(column)
        if key is None:
            return default
        return self.values[key]

    def text(self, column: str) -> str | None:
        """Stripped cell value; None when the column is absent or blank."""
        value = self.get(column)
        if value is None:
            return None
        value = value.strip()
        return value or None

    def is_blank(self) -> bool:
        return all(not v.strip() for v in self.values.values())

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)
