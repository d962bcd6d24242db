from __future__ import annotations

from ..models.processing_result import RunResult

"""SUMMARY line rendering and size formatting.

Format:
SUMMARY records={n} valid={v} errors={e} warnings={w} batches={b} bytes={size}
elapsed_sec={elapsed} throughput_rps={throughput}
"""

SIZE_UNITS = ("B", "KB", "MB", "GB")


def _format_number(value: float) -> str:
    # integers without ".0", tiny values without scientific notation
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(value)


def render_summary_line(result: RunResult) -> str:
    """Render the SUMMARY line for a run.

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = RunResult(
        ...     total_records=3, valid_records=3, error_count=0, warning_count=1,
        ...     start_time=start, end_time=end, elapsed_seconds=2.0,
        ...     throughput_records_per_sec=1.5,
        ... )
        >>> render_summary_line(result)
        'SUMMARY records=3 valid=3 errors=0 warnings=1 batches=0 bytes=0 elapsed_sec=2 throughput_rps=1.5'
    """
    return (
        f"SUMMARY records={result.total_records} "
        f"valid={result.valid_records} "
        f"errors={result.error_count} "
        f"warnings={result.warning_count} "
        f"batches={result.batch_count} "
        f"bytes={result.total_bytes} "
        f"elapsed_sec={_format_number(result.elapsed_seconds)} "
        f"throughput_rps={_format_number(result.throughput_records_per_sec)}"
    )


def format_file_size(size: int) -> str:
    """Human readable byte size, e.g. 1536 -> '1.5 KB'."""
    if size <= 0:
        return "0 B"
    exponent = 0
    while size >= 1024 ** (exponent + 1) and exponent < len(SIZE_UNITS) - 1:
        exponent += 1
    value = round(size / 1024**exponent, 2)
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {SIZE_UNITS[exponent]}"
