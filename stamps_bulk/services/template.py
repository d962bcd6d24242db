from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd
from openpyxl.utils import get_column_letter

from ..config.filing_schema import CODE_REFERENCE, INSTRUCTIONS, TEMPLATE_COLUMNS

"""Excel template generation.

Writes a workbook users fill in before running the generator:
- Data Entry: column headers plus one example row
- Column Reference: header, XML tag, data type, example, notes per column
- Code Reference: party type / nationality / business type / yes-no codes
- Instructions
"""

__all__ = [
    "generate_template",
    "DATA_SHEET",
]

logger = logging.getLogger(__name__)

DATA_SHEET = "Data Entry"
REFERENCE_SHEET = "Column Reference"
CODES_SHEET = "Code Reference"
INSTRUCTIONS_SHEET = "Instructions"


def _set_widths(worksheet, widths: list[int]) -> None:
    for index, width in enumerate(widths, start=1):
        worksheet.column_dimensions[get_column_letter(index)].width = width


def _code_rows() -> list[list[str]]:
    rows: list[list[str]] = [["CODE REFERENCE GUIDE", ""], ["", ""]]
    for title, codes in CODE_REFERENCE:
        rows.append([title, ""])
        rows.append(["Code", "Description"])
        rows.extend([code, text] for code, text in codes)
        rows.append(["", ""])
    return rows


def generate_template(path: Path) -> Path:
    """Write the Excel template to path (parent directories created)."""
    headers = [c.header for c in TEMPLATE_COLUMNS]
    data = pd.DataFrame([[c.example for c in TEMPLATE_COLUMNS]], columns=headers)
    reference = pd.DataFrame(
        [[c.header, c.xml_tag, c.data_type, c.example, c.notes] for c in TEMPLATE_COLUMNS],
        columns=["Column Header", "XML Tag", "Data Type", "Example", "Notes"],
    )
    codes = pd.DataFrame(_code_rows())
    instructions = pd.DataFrame([[line] for line in INSTRUCTIONS])

    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        data.to_excel(writer, sheet_name=DATA_SHEET, index=False)
        reference.to_excel(writer, sheet_name=REFERENCE_SHEET, index=False)
        codes.to_excel(writer, sheet_name=CODES_SHEET, index=False, header=False)
        instructions.to_excel(writer, sheet_name=INSTRUCTIONS_SHEET, index=False, header=False)

        _set_widths(writer.sheets[DATA_SHEET], [max(len(h), 15) for h in headers])
        _set_widths(writer.sheets[REFERENCE_SHEET], [30, 30, 20, 20, 40])
        _set_widths(writer.sheets[CODES_SHEET], [35, 40])
        _set_widths(writer.sheets[INSTRUCTIONS_SHEET], [70])

    logger.info("template written: %s (%d columns)", path, len(headers))
    return path
