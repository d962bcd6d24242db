from __future__ import annotations

from dataclasses import dataclass

"""Output batch models for the XML serializer."""

__all__ = [
    "OutputBatch",
    "BatchProgress",
]


@dataclass(frozen=True)
class OutputBatch:
    """One complete XML document (envelope + instrument fragments).

    byte_size is the UTF-8 encoded length of content. A batch holding a single
    record may exceed the configured maximum size; it is never split.
    """
    filename: str
    content: str
    byte_size: int
    record_count: int
    index: int  # 1-based finalize order


@dataclass(frozen=True)
class BatchProgress:
    """Progress event emitted after each serialized record."""
    current: int
    total: int
    percentage: int
    current_batch: int  # 1-based batch the record ended up in
