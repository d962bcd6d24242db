from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

"""Run result models for the bulk stamping generator.

RunResult aggregates everything the CLI needs for the SUMMARY line and the
exit code decision.
"""


@dataclass(frozen=True)
class BatchStat:
    """Per-batch output statistics (one written XML document)."""
    filename: str
    record_count: int
    byte_size: int
    path: Path | None = None  # None when the batch was not persisted


@dataclass(frozen=True)
class RunResult:
    """Aggregated result of one pipeline run."""
    total_records: int
    valid_records: int
    error_count: int
    warning_count: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    throughput_records_per_sec: float  # serialized records / elapsed
    batches: list[BatchStat] | None = None
    blocked: bool = False  # generation skipped because validation found errors
    issue_log: Path | None = None

    @property
    def total_bytes(self) -> int:
        return sum(b.byte_size for b in self.batches or [])

    @property
    def batch_count(self) -> int:
        return len(self.batches or [])
