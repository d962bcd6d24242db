from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

from ..models.batch import BatchProgress

"""Record progress bar for XML generation.

The serializer calls a ProgressTracker once per rendered record. The bar
counts records and its label names the batch currently being filled. When
stdout is not a terminal (CI, pipes) no bar is created at all, so redirected
output stays free of control sequences.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


def _make_bar(total: int, description: str) -> TqdmType[Any]:
    return tqdm(
        total=total,
        desc=description,
        unit="record",
        disable=False,
        leave=True,
        position=0,
        ncols=80,
        ascii=True,
    )


class ProgressTracker:
    """Progress sink consuming BatchProgress events.

    Usable as a context manager; the bar is closed on exit.
    """

    def __init__(self, total_records: int, *, description: str = "Generating XML") -> None:
        self.total_records = total_records
        self.description = description
        self.current = 0
        self.current_batch = 0
        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None = _make_bar(total_records, description) if self.enabled else None

    def __call__(self, event: BatchProgress) -> None:
        advanced = event.current - self.current
        self.current = event.current
        new_batch = event.current_batch != self.current_batch
        self.current_batch = event.current_batch

        if self.pbar is None:
            return
        if new_batch:
            self.pbar.set_description(f"{self.description} (batch {event.current_batch})")
        if advanced > 0:
            self.pbar.update(advanced)

    def set_postfix(self, **kwargs: Any) -> None:
        if self.pbar is not None:
            self.pbar.set_postfix(**kwargs)

    def close(self) -> None:
        if self.pbar is None:
            return
        self.pbar.close()
        self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
