from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

from ..config.filing_schema import COLUMN_MAP
from ..config.loader import AppConfig
from ..excel.reader import SheetHeaderError, TableData, TableReadError, read_table
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.processing_result import BatchStat, RunResult
from ..models.record import InstrumentRecord
from ..models.validation import ValidationReport
from ..output.writer import BatchWriteError, WriteMetrics, write_batch
from .attachments import (
    AttachmentError,
    AttachmentStore,
    DirectoryAttachmentStore,
    MemoryAttachmentStore,
    base64_resolver,
)
from .mapper import map_rows
from .progress import ProgressTracker
from .serializer import SerializationError, iter_batches
from .summary import format_file_size
from .validator import validate_records

"""Pipeline orchestration for the bulk stamping generator.

run_pipeline() coordinates one run:
1. Read the input table
2. Map rows to instrument records
3. Build the attachment store
4. Validate; every issue goes to the JSON Lines issue log
5. Gate: stop before generation when errors exist (unless allow_errors)
6. Serialize to size-bounded batches, writing each one as soon as it is final
"""

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Fatal error that stops the run."""
    pass


def load_records(config: AppConfig) -> tuple[TableData, list[InstrumentRecord]]:
    """Read the configured input table and map it to records.

    Raises:
        ProcessingError: if the table cannot be read
    """
    path = Path(config.input_file)
    try:
        table = read_table(path, sheet_name=config.sheet_name, keep_na_strings=config.keep_na_strings or None)
    except (TableReadError, SheetHeaderError) as e:
        raise ProcessingError(str(e)) from e

    unknown = [c for c in table.columns if c not in COLUMN_MAP]
    if unknown:
        logger.debug("ignored columns: %s", unknown)
    if table.columns and len(unknown) == len(table.columns):
        logger.warning("sheet=%s has no recognised columns; check the header row", table.sheet_name)

    records = map_rows(table.rows)
    logger.info("read %d records from %s (sheet=%s)", len(records), path.name, table.sheet_name)
    return table, records


def build_attachment_store(config: AppConfig) -> AttachmentStore:
    """Directory store for the configured attachments directory, or an empty store."""
    if not config.attachments_directory:
        logger.debug("no attachments_directory configured; using empty attachment store")
        return MemoryAttachmentStore()
    try:
        store = DirectoryAttachmentStore(Path(config.attachments_directory))
    except AttachmentError as e:
        raise ProcessingError(str(e)) from e
    logger.info("attachments available: %d (%s)", len(store), config.attachments_directory)
    return store


def _log_write(metrics: WriteMetrics) -> None:
    logger.debug("write %s bytes=%d elapsed=%.3fs", metrics.filename, metrics.byte_size, metrics.elapsed_seconds)


def _log_issues(report: ValidationReport, file_name: str, error_log: ErrorLogBuffer) -> None:
    for issue in (*report.errors, *report.warnings):
        error_log.append(ErrorRecord.from_issue(file_name, issue))
    for issue in report.errors:
        logger.error("row=%d field=%s %s: %s", issue.row_number, issue.field_name, issue.error_type, issue.message)
    for issue in report.warnings:
        logger.debug("row=%d field=%s %s: %s", issue.row_number, issue.field_name, issue.error_type, issue.message)


def run_pipeline(
    config: AppConfig,
    *,
    allow_errors: bool = False,
    error_log: ErrorLogBuffer | None = None,
) -> RunResult:
    """Run read -> map -> validate -> gate -> serialize -> write.

    Args:
        config: Loaded application configuration
        allow_errors: Generate XML even when validation reports errors
        error_log: Issue log buffer (a new one under ./logs by default)

    Returns:
        RunResult with validation totals and written batch stats

    Raises:
        ProcessingError: For fatal errors (unreadable input, missing attachments
            directory, serialization or write failure)
    """
    start_time = datetime.now(UTC)
    if error_log is None:
        error_log = ErrorLogBuffer()

    _, records = load_records(config)
    store = build_attachment_store(config)

    report = validate_records(records, store, config.profile)
    file_name = Path(config.input_file).name
    _log_issues(report, file_name, error_log)
    issue_log = error_log.flush()
    logger.info(
        "validation profile=%s valid=%d/%d errors=%d warnings=%d",
        config.validation_profile,
        report.valid_count,
        len(records),
        report.error_count,
        report.warning_count,
    )

    def _result(batches: list[BatchStat], blocked: bool) -> RunResult:
        end_time = datetime.now(UTC)
        elapsed = (end_time - start_time).total_seconds()
        generated = sum(b.record_count for b in batches)
        return RunResult(
            total_records=len(records),
            valid_records=report.valid_count,
            error_count=report.error_count,
            warning_count=report.warning_count,
            start_time=start_time,
            end_time=end_time,
            elapsed_seconds=elapsed,
            throughput_records_per_sec=generated / elapsed if elapsed > 0 else 0.0,
            batches=batches,
            blocked=blocked,
            issue_log=issue_log,
        )

    if not report.valid and not allow_errors:
        logger.warning("generation skipped: %d validation errors (use --allow-errors to override)", report.error_count)
        return _result([], blocked=True)

    if not records:
        logger.info("no records to generate")
        return _result([], blocked=False)

    output_dir = Path(config.output_directory)
    batches: list[BatchStat] = []
    resolver = base64_resolver(store)
    with ProgressTracker(len(records)) as progress:
        try:
            for batch in iter_batches(records, resolver, config.max_batch_bytes, progress):
                path = write_batch(batch, output_dir, _log_write)
                batches.append(BatchStat(batch.filename, batch.record_count, batch.byte_size, path))
                progress.set_postfix(batches=len(batches))
                logger.info(
                    "wrote %s records=%d size=%s", batch.filename, batch.record_count, format_file_size(batch.byte_size)
                )
        except (SerializationError, BatchWriteError) as e:
            raise ProcessingError(f"generation aborted after {len(batches)} batch(es): {e}") from e

    return _result(batches, blocked=False)
