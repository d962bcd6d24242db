from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""Validation result models.

ErrorType is a closed enumeration. Severity is never chosen at the call site:
it is looked up in SEVERITY_POLICY, so moving an error type between error and
warning is a one-line change here.
"""

__all__ = [
    "ErrorType",
    "Severity",
    "SEVERITY_POLICY",
    "ValidationIssue",
    "ValidationReport",
    "ValidationProfile",
]


class ErrorType(Enum):
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_DATE = "INVALID_DATE"
    INVALID_NUMBER = "INVALID_NUMBER"
    MISSING_FILE = "MISSING_FILE"
    MISSING_ATTACHMENT = "MISSING_ATTACHMENT"
    MISSING_ID = "MISSING_ID"

    def __str__(self) -> str:
        return self.value


class Severity(Enum):
    ERROR = "error"  # blocks generation
    WARNING = "warning"  # informational

    def __str__(self) -> str:
        return self.value


SEVERITY_POLICY: dict[ErrorType, Severity] = {
    ErrorType.MISSING_FIELD: Severity.ERROR,
    ErrorType.INVALID_DATE: Severity.ERROR,
    ErrorType.MISSING_FILE: Severity.ERROR,
    ErrorType.INVALID_NUMBER: Severity.WARNING,
    ErrorType.MISSING_ATTACHMENT: Severity.WARNING,
    ErrorType.MISSING_ID: Severity.WARNING,
}


@dataclass(frozen=True)
class ValidationIssue:
    """A single rule violation found in one record."""
    row_number: int
    field_name: str  # schema path, e.g. transferor.rocNo
    error_type: ErrorType
    message: str

    @property
    def severity(self) -> Severity:
        return SEVERITY_POLICY[self.error_type]


@dataclass(frozen=True)
class ValidationReport:
    """Aggregated validation result over a sequence of records.

    valid is True iff errors is empty. valid_count counts records with zero
    errors (warnings do not block).
    """
    valid: bool
    valid_count: int
    error_count: int
    warning_count: int
    errors: tuple[ValidationIssue, ...] = ()
    warnings: tuple[ValidationIssue, ...] = ()

    def issues_for_row(self, row_number: int) -> list[ValidationIssue]:
        return [i for i in (*self.errors, *self.warnings) if i.row_number == row_number]


@dataclass(frozen=True)
class ValidationProfile:
    """Rule set variant used by the validator.

    identity_error_type decides how missing conditional identity fields
    (ROC, IC/passport, nationality, passport country) are reported.
    """
    name: str
    mandatory_fields: tuple[str, ...]
    identity_error_type: ErrorType = ErrorType.MISSING_ID
    company_requires_bus_type: bool = False
