from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""Per-run issue log written as JSON Lines.

Validation issues are collected in memory and appended to
`logs/issues-YYYYMMDD-HHMMSS.log` (UTC start stamp) on flush(). The file is
only created once there is something to write. Not thread safe; the pipeline
is serial.
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """Collects ErrorRecords until flush()."""

    def __init__(self, logs_dir: Path | None = None) -> None:
        self._logs_dir = logs_dir if logs_dir is not None else LOGS_DIR
        self._pending: list[ErrorRecord] = []
        self._path: Path | None = None

    def __len__(self) -> int:
        return len(self._pending)

    def append(self, record: ErrorRecord) -> None:
        self._pending.append(record)

    @property
    def file_path(self) -> Path:
        """Log file for this run; the name is fixed on first access."""
        if self._path is None:
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._path = self._logs_dir / f"issues-{stamp}.log"
        return self._path

    def flush(self) -> Path | None:
        """Append pending records and clear them.

        Returns the log path, or None while nothing has been written yet.
        """
        if not self._pending:
            return self._path
        target = self.file_path
        target.parent.mkdir(parents=True, exist_ok=True)
        lines = "".join(r.to_json_line() + "\n" for r in self._pending)
        with target.open("a", encoding="utf-8") as fh:
            fh.write(lines)
        self._pending.clear()
        return target
