from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from ..models.batch import OutputBatch

"""Batch writer: persists finalized OutputBatches as XML files.

Batches are written one at a time as the serializer yields them, so a fatal
error later in the run leaves the files already written complete and usable.
metrics_callback receives the timing of each write; the pipeline logs it at DEBUG.
"""

__all__ = [
    "BatchWriteError",
    "WriteMetrics",
    "write_batch",
]


class BatchWriteError(Exception):
    pass


@dataclass(frozen=True)
class WriteMetrics:
    """Metrics for a single batch write."""
    filename: str
    byte_size: int
    elapsed_seconds: float


def write_batch(
    batch: OutputBatch,
    directory: Path,
    metrics_callback: Callable[[WriteMetrics], None] | None = None,
) -> Path:
    """Write one batch as UTF-8 bytes into directory (created if needed).

    Returns:
        Path of the written file

    Raises:
        BatchWriteError: if the directory or file cannot be written
    """
    start = time.perf_counter()
    target = directory / batch.filename
    try:
        directory.mkdir(parents=True, exist_ok=True)
        target.write_bytes(batch.content.encode("utf-8"))
    except OSError as e:
        raise BatchWriteError(f"failed writing {target}: {e}") from e
    if metrics_callback is not None:
        metrics_callback(
            WriteMetrics(
                filename=batch.filename,
                byte_size=batch.byte_size,
                elapsed_seconds=time.perf_counter() - start,
            )
        )
    return target
