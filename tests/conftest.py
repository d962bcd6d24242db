# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from stamps_bulk.logging.init import reset_logging
from stamps_bulk.models.record import InstrumentRecord, Party, PartyType


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "attachments").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        for name in ("STAMPS_INPUT_FILE", "STAMPS_OUTPUT_DIR", "STAMPS_ATTACHMENTS_DIR"):
            monkeypatch.delenv(name, raising=False)
        yield p


@pytest.fixture(autouse=True)
def _fresh_logging():
    # StreamHandler は sys.stdout を生成時に掴むため、テスト毎に作り直す (capsys 対応)
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """input_file: ./data/stamps.xlsx
output_directory: ./output
attachments_directory: ./attachments
validation_profile: standard
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "stamps.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def make_row(ref: str = "REF001", attachment: str | None = "doc1.pdf", **overrides: Any) -> dict[str, Any]:
    """A complete, valid spreadsheet row (header -> cell)."""
    row: dict[str, Any] = {
        "Ref No": ref,
        "Date Signed": "15/12/2024",
        "Date Received": "16/12/2024",
        "Principal (-1) / Sub (0)": -1,
        "Subsidiary Ref": 0,
        "Instrument Type Code": 1,
        "Other Instrument (Desc)": "Loan Agreement",
        "Transferor Type": 0,
        "Transferor Name": "ALI BIN ABU",
        "Transferor Nationality": 1,
        "Transferor IC": "800101145566",
        "Transferee Type": 1,
        "Transferee Name": "ACME SDN BHD",
        "Transferee ROC": "123456-A",
        "Transferee Bus. Type": 1,
        "Loan/Consideration Amt": 100000.5,
        "No of Copies": 1,
    }
    if attachment is not None:
        row["Filename Only"] = attachment
    row.update(overrides)
    return row


def write_input(path: Path, rows: list[dict[str, Any]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame(rows)
    if path.suffix == ".csv":
        df.to_csv(path, index=False)
    else:
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name="Data Entry", index=False)
    return path


def make_record(row_number: int = 2, **overrides: Any) -> InstrumentRecord:
    """A valid InstrumentRecord built directly (no spreadsheet)."""
    fields: dict[str, Any] = {
        "ref_no": "REF001",
        "instrument_date": "15/12/2024",
        "principal": "-1",
        "type_of_instrument_others": "Loan Agreement",
        "transferor": Party(type=PartyType.INDIVIDUAL, name="ALI BIN ABU", nationality="1", ic_no="800101145566"),
        "transferee": Party(type=PartyType.COMPANY, name="ACME SDN BHD", roc_no="123456-A"),
        "consideration": "100000.50",
        "attachment": "doc1.pdf",
        "row_number": row_number,
    }
    fields.update(overrides)
    return InstrumentRecord(**fields)


@pytest.fixture()
def row_factory():
    return make_row


@pytest.fixture()
def record_factory():
    return make_record


@pytest.fixture()
def input_writer():
    return write_input
