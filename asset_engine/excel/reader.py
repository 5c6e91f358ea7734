from __future__ import annotations

import zipfile
from pathlib import Path

import pandas as pd

from ..models.raw_row import RawRow

"""Import file reader (CSV / XLSX -> RawRow).

Every cell is read as text (dtype=str, keep_default_na=False) so that values
such as "NA", "0012" or long IMEIs reach the transformers exactly as exported.
The first row is the header; data rows keep their spreadsheet row number
(first data row = 2). Completely blank rows are skipped.
"""

__all__ = [
    "UnsupportedFileError",
    "read_rows",
    "frame_to_rows",
    "SUPPORTED_SUFFIXES",
    "READ_ERRORS",
]

SUPPORTED_SUFFIXES = (".csv", ".xlsx", ".xlsm")


class UnsupportedFileError(Exception):
    """Raised when the input file type cannot be read."""


# read_rows が投げうる例外 (壊れた xlsx は zipfile.BadZipFile)
READ_ERRORS = (OSError, ValueError, zipfile.BadZipFile, UnsupportedFileError)


def frame_to_rows(df: pd.DataFrame) -> list[RawRow]:
    rows: list[RawRow] = []
    columns = [str(c) for c in df.columns]
    for offset, values in enumerate(df.itertuples(index=False, name=None)):
        record = {}
        for col, val in zip(columns, values, strict=False):
            # dtype=str でも読み込み方により NaN が残るケースを吸収
            record[col] = "" if val is None or (isinstance(val, float) and pd.isna(val)) else str(val)
        row = RawRow.from_mapping(record, row_number=offset + 2)
        if row.is_blank():
            continue
        rows.append(row)
    return rows


def read_rows(path: Path, sheet: str | None = None) -> list[RawRow]:
    """Read an import file into RawRows.

    Parameters
    ----------
    path: CSV または Excel ファイル
    sheet: Excel のシート名 (None なら先頭シート)
    """
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise UnsupportedFileError(f"unsupported input file type: {path.name}")
    if suffix == ".csv":
        df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8-sig")
    else:
        df = pd.read_excel(path, sheet_name=sheet if sheet is not None else 0, dtype=str, keep_default_na=False, engine="openpyxl")
    return frame_to_rows(df)
