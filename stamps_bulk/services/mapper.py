from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any

import pandas as pd

from ..config.filing_schema import COLUMN_MAP, DATE_FIELDS
from ..models.record import FieldPath, InstrumentRecord, Party, PartyType, resolve_field_path

"""Field mapper: raw spreadsheet rows -> InstrumentRecord.

Mapping never fails. Cells are normalized to text, date columns are reformatted
to DD/MM/YYYY when they can be interpreted as dates, and anything that cannot be
interpreted is passed through unchanged so the validator can report it.
"""

__all__ = [
    "map_row",
    "map_rows",
    "format_date",
    "cell_text",
]

logger = logging.getLogger(__name__)

DATE_PATTERN = re.compile(r"\d{2}/\d{2}/\d{4}", re.ASCII)
EXCEL_EPOCH = pd.Timestamp("1899-12-30")
# YYYY-MM-DD, optionally followed by a time part
ISO_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}(?:[ T].*)?", re.ASCII)

# header -> resolved path, checked once at import
COLUMN_FIELDS: dict[str, FieldPath] = {header: resolve_field_path(path) for header, path in COLUMN_MAP.items()}
_DATE_PATHS = frozenset(DATE_FIELDS)


def cell_text(value: Any) -> str | None:
    """Normalize a cell value to text. None / NaN become None."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, (datetime, date)):
        if pd.isna(value):  # NaT
            return None
        return value.strftime("%d/%m/%Y")
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return str(value)


def _parse_date_text(text: str) -> Any:
    # "today" や "now" を実行日に変換させない
    if not any(ch.isdigit() for ch in text):
        return None
    if ISO_DATE_PATTERN.fullmatch(text):
        return pd.to_datetime(text, format="ISO8601", errors="coerce")
    return pd.to_datetime(text, dayfirst=True, errors="coerce")


def format_date(value: Any) -> Any:
    """Reformat a date cell to DD/MM/YYYY, or return it unchanged if impossible.

    Accepts datetime/date objects, Excel serial numbers and date strings
    (ISO YYYY-MM-DD as written, anything else day-first). Canonical DD/MM/YYYY
    strings pass through untouched. Text without a digit is never a date.
    """
    if value is None or value == "":
        return value
    if isinstance(value, str) and DATE_PATTERN.fullmatch(value):
        return value
    try:
        if isinstance(value, (datetime, date)):
            parsed = pd.Timestamp(value)
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            parsed = EXCEL_EPOCH + pd.Timedelta(days=float(value))
        elif isinstance(value, str):
            parsed = _parse_date_text(value.strip())
        else:
            return value
    except (ValueError, TypeError, OverflowError):
        return value
    if parsed is None or pd.isna(parsed):
        return value
    return parsed.strftime("%d/%m/%Y")


def map_row(row: Mapping[str, Any], row_number: int) -> InstrumentRecord:
    """Map a single raw row (header -> cell) into an InstrumentRecord.

    Headers missing from the row leave the field unset; headers unknown to the
    column dictionary are ignored.
    """
    instrument: dict[str, Any] = {}
    parties: dict[str, dict[str, Any]] = {"transferor": {}, "transferee": {}}

    for header, field_path in COLUMN_FIELDS.items():
        if header not in row:
            continue
        value = row[header]
        if field_path.path in _DATE_PATHS:
            value = format_date(value)
        text = cell_text(value)
        if field_path.party is None:
            instrument[field_path.attribute] = text
            continue
        if field_path.attribute == "type":
            parties[field_path.party]["type"] = PartyType.parse(text) or text
        else:
            parties[field_path.party][field_path.attribute] = text

    return InstrumentRecord(
        **instrument,
        transferor=Party(**parties["transferor"]),
        transferee=Party(**parties["transferee"]),
        row_number=row_number,
        raw=dict(row),
    )


def map_rows(rows: Iterable[Mapping[str, Any]], header_rows: int = 1) -> list[InstrumentRecord]:
    """Map an ordered sequence of raw rows.

    The first data row gets row_number = header_rows + 1 (row 2 under a
    single header row).
    """
    records = [map_row(row, header_rows + position) for position, row in enumerate(rows, start=1)]
    logger.debug("mapped %d rows", len(records))
    return records
