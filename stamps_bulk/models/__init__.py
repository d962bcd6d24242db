"""Domain models for the bulk stamping XML generator.

This package contains the record, validation, batch and run result models used
throughout the pipeline.
"""

from .batch import BatchProgress, OutputBatch
from .error_record import ErrorRecord
from .processing_result import BatchStat, RunResult
from .record import FieldPath, InstrumentRecord, Party, PartyType, get_field, resolve_field_path
from .validation import (
    SEVERITY_POLICY,
    ErrorType,
    Severity,
    ValidationIssue,
    ValidationProfile,
    ValidationReport,
)

__all__ = [
    # Record models
    "InstrumentRecord",
    "Party",
    "PartyType",
    "FieldPath",
    "resolve_field_path",
    "get_field",
    # Validation models
    "ErrorType",
    "Severity",
    "SEVERITY_POLICY",
    "ValidationIssue",
    "ValidationReport",
    "ValidationProfile",
    # Output models
    "OutputBatch",
    "BatchProgress",
    "BatchStat",
    "RunResult",
    "ErrorRecord",
]
