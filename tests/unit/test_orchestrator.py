from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from stamps_bulk.config.loader import AppConfig
from stamps_bulk.excel.reader import TableData, TableReadError
from stamps_bulk.logging.error_log import ErrorLogBuffer
from stamps_bulk.logging.init import setup_logging
from stamps_bulk.services.attachments import DirectoryAttachmentStore, MemoryAttachmentStore
from stamps_bulk.services.orchestrator import (
    ProcessingError,
    build_attachment_store,
    load_records,
    run_pipeline,
)


def _config(tmp_path: Path, **overrides) -> AppConfig:
    fields = dict(
        input_file=str(tmp_path / "stamps.xlsx"),
        output_directory=str(tmp_path / "output"),
        attachments_directory=None,
    )
    fields.update(overrides)
    return AppConfig(**fields)


def test_load_records_wraps_reader_errors(tmp_path: Path) -> None:
    with patch("stamps_bulk.services.orchestrator.read_table", side_effect=TableReadError("boom")):
        with pytest.raises(ProcessingError) as e:
            load_records(_config(tmp_path))
    assert "boom" in str(e.value)


def test_load_records_maps_rows(tmp_path: Path, row_factory) -> None:
    table = TableData(sheet_name="Data Entry", columns=list(row_factory()), rows=[row_factory(), row_factory("REF002")])
    with patch("stamps_bulk.services.orchestrator.read_table", return_value=table) as mock_read:
        _, records = load_records(_config(tmp_path, keep_na_strings=["NA"], sheet_name="Data Entry"))
    mock_read.assert_called_once_with(Path(tmp_path / "stamps.xlsx"), sheet_name="Data Entry", keep_na_strings=["NA"])
    assert [r.row_number for r in records] == [2, 3]
    assert [r.ref_no for r in records] == ["REF001", "REF002"]


def test_load_records_warns_on_unrecognised_header(tmp_path: Path, capsys) -> None:
    setup_logging()
    table = TableData(sheet_name="Sheet1", columns=["foo", "bar"], rows=[{"foo": 1, "bar": 2}])
    with patch("stamps_bulk.services.orchestrator.read_table", return_value=table):
        load_records(_config(tmp_path))
    assert "WARN sheet=Sheet1 has no recognised columns" in capsys.readouterr().out


def test_build_attachment_store(tmp_path: Path) -> None:
    assert isinstance(build_attachment_store(_config(tmp_path)), MemoryAttachmentStore)
    (tmp_path / "att").mkdir()
    store = build_attachment_store(_config(tmp_path, attachments_directory=str(tmp_path / "att")))
    assert isinstance(store, DirectoryAttachmentStore)
    with pytest.raises(ProcessingError):
        build_attachment_store(_config(tmp_path, attachments_directory=str(tmp_path / "missing")))


def test_run_pipeline_empty_table(tmp_path: Path) -> None:
    table = TableData(sheet_name="Sheet1", columns=["Ref No"], rows=[])
    with patch("stamps_bulk.services.orchestrator.read_table", return_value=table):
        result = run_pipeline(_config(tmp_path), error_log=ErrorLogBuffer(tmp_path / "logs"))
    assert result.total_records == 0
    assert result.batch_count == 0
    assert result.blocked is False
    assert result.issue_log is None
    assert not (tmp_path / "output").exists()


def test_run_pipeline_stops_on_write_failure(tmp_path: Path, row_factory) -> None:
    from stamps_bulk.output.writer import BatchWriteError

    table = TableData(sheet_name="Sheet1", columns=list(row_factory()), rows=[row_factory(attachment=None)])
    with patch("stamps_bulk.services.orchestrator.read_table", return_value=table), \
         patch("stamps_bulk.services.orchestrator.write_batch", side_effect=BatchWriteError("disk full")):
        with pytest.raises(ProcessingError) as e:
            run_pipeline(_config(tmp_path), error_log=ErrorLogBuffer(tmp_path / "logs"))
    assert "disk full" in str(e.value)
    # 警告 (MISSING_ATTACHMENT) は生成前にログへ書き出し済み
    assert list((tmp_path / "logs").glob("issues-*.log"))


def test_run_pipeline_logs_write_timing_in_debug(tmp_path: Path, row_factory, capsys) -> None:
    setup_logging(debug=True)
    table = TableData(sheet_name="Sheet1", columns=list(row_factory()), rows=[row_factory(attachment=None)])
    with patch("stamps_bulk.services.orchestrator.read_table", return_value=table):
        result = run_pipeline(_config(tmp_path), error_log=ErrorLogBuffer(tmp_path / "logs"))
    assert result.batch_count == 1
    out = capsys.readouterr().out
    assert f"DEBUG write Output.xml bytes={result.batches[0].byte_size} elapsed=" in out
