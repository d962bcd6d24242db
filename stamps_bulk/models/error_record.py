from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

from .validation import ValidationIssue

"""One line of the JSON Lines issue log.

The key set is closed: timestamp, file, row, field, error_type, severity,
message. Nothing else may be added, since downstream tooling validates the
lines against a fixed schema.
"""

__all__ = [
    "ErrorRecord",
]


def _utc_now() -> str:
    # 例: 2024-12-15T03:04:05.123456Z
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class ErrorRecord:
    timestamp: str
    file: str
    row: int  # header row included; -1 when no row applies
    field: str  # schema path, e.g. "transferee.rocNo"
    error_type: str
    severity: str  # "error" | "warning"
    message: str

    @classmethod
    def create(cls, file: str, row: int, field: str, error_type: str, severity: str, message: str) -> ErrorRecord:
        """Build a record stamped with the current UTC time."""
        return cls(_utc_now(), file, row, field, error_type, severity, message)

    @classmethod
    def from_issue(cls, file: str, issue: ValidationIssue) -> ErrorRecord:
        return cls.create(
            file,
            issue.row_number,
            issue.field_name,
            issue.error_type.value,
            issue.severity.value,
            issue.message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
