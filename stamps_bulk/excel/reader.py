from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd
import pandas._libs.parsers as parsers

"""Spreadsheet reader.

The first row of the sheet is the header row; every following row is a data
row. Fully blank rows are skipped. Cell values keep their native types
(str / int / float / datetime) so the field mapper can decide how to
normalize them; NaN cells become None.

Supported inputs: .xlsx / .xlsm (first sheet unless named) and .csv
(read as text so identity numbers keep their leading zeros).
"""

__all__ = [
    "SheetHeaderError",
    "TableReadError",
    "TableData",
    "read_table",
    "normalize_sheet",
]

EXCEL_SUFFIXES = {".xlsx", ".xlsm"}


class SheetHeaderError(Exception):
    """Raised when the header row is missing."""


class TableReadError(Exception):
    """Raised when the input table cannot be read."""


@dataclass
class TableData:
    sheet_name: str
    columns: list[str]
    rows: list[dict[str, Any]]  # header -> cell value


def _na_options(keep_na_strings: list[str] | None) -> dict[str, Any]:
    # pandas の既定 NA 文字列から keep_na_strings を除外する
    if not keep_na_strings:
        return {"keep_default_na": True, "na_values": None}
    custom_na = parsers.STR_NA_VALUES - set(keep_na_strings)
    return {"keep_default_na": False, "na_values": list(custom_na)}


def _read_raw(path: Path, sheet_name: str | None, keep_na_strings: list[str] | None) -> tuple[str, pd.DataFrame]:
    suffix = path.suffix.lower()
    na_opts = _na_options(keep_na_strings)
    if suffix == ".csv":
        df = pd.read_csv(path, header=None, dtype=object, encoding="utf-8-sig", **na_opts)
        return path.stem, df
    if suffix in EXCEL_SUFFIXES:
        with pd.ExcelFile(path) as xls:
            names = [str(n) for n in xls.sheet_names]
            if sheet_name is None:
                target = names[0]
            elif sheet_name in names:
                target = sheet_name
            else:
                raise TableReadError(f"sheet '{sheet_name}' not found in {path.name} (sheets: {names})")
            df = xls.parse(target, header=None, dtype=object, **na_opts)
        return target, df
    raise TableReadError(f"unsupported input file type: {path.suffix or '<none>'}")


def read_table(
    path: Path,
    sheet_name: str | None = None,
    keep_na_strings: list[str] | None = None,
) -> TableData:
    """Read a spreadsheet into header-keyed rows.

    Parameters
    ----------
    path: Input .xlsx / .xlsm / .csv file
    sheet_name: Sheet to read (None = first sheet; ignored for CSV)
    keep_na_strings: Strings to keep as text instead of pandas' default NaN
        conversion (e.g. ['NA'])

    Raises
    ------
    TableReadError: missing / unreadable / unsupported file, unknown sheet
    SheetHeaderError: the sheet has no header row
    """
    if not path.exists():
        raise TableReadError(f"input file not found: {path}")
    try:
        name, df = _read_raw(path, sheet_name, keep_na_strings)
    except (TableReadError, SheetHeaderError):
        raise
    except pd.errors.EmptyDataError as e:
        raise SheetHeaderError(f"sheet in '{path.name}' lacks a header row") from e
    except (OSError, ValueError) as e:
        raise TableReadError(f"failed to read {path.name}: {e}") from e
    return normalize_sheet(df, name)


def normalize_sheet(df: pd.DataFrame, sheet_name: str) -> TableData:
    """Turn a raw (header=None) DataFrame into header-keyed rows.

    Steps:
    1. Validate at least 1 row exists (header)
    2. Extract header from the first row, dropping blank header cells
    3. Remaining rows become data rows; fully blank rows are skipped
    """
    if df.shape[0] < 1:
        raise SheetHeaderError(f"sheet '{sheet_name}' lacks a header row")
    header: list[tuple[int, str]] = []
    for position, cell in enumerate(df.iloc[0].tolist()):
        if cell is None or (not isinstance(cell, str) and pd.isna(cell)):
            continue
        text = str(cell).strip()
        if text:
            header.append((position, text))
    if not header:
        raise SheetHeaderError(f"sheet '{sheet_name}' has an empty header row")

    rows: list[dict[str, Any]] = []
    for _, raw in df.iloc[1:].iterrows():
        if raw.isna().all():
            continue
        values = raw.tolist()
        row: dict[str, Any] = {}
        for position, column in header:
            val = values[position] if position < len(values) else None
            row[column] = None if (val is not None and not isinstance(val, str) and pd.isna(val)) else val
        rows.append(row)

    return TableData(sheet_name=sheet_name, columns=[c for _, c in header], rows=rows)
