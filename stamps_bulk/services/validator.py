from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import Any

from ..config.filing_schema import DATE_FIELDS, NUMERIC_FIELDS, STANDARD_PROFILE, display_name
from ..models.record import FieldPath, InstrumentRecord, Party, PartyType, get_field, resolve_field_path
from ..models.validation import (
    ErrorType,
    Severity,
    ValidationIssue,
    ValidationProfile,
    ValidationReport,
)
from .attachments import AttachmentStore

"""Rule validator for mapped instrument records.

Per record, checks run in a fixed order so the issue lists are deterministic:
1. mandatory fields (profile dependent)
2. date format (DD/MM/YYYY)
3. numeric format (warning only)
4. attachment presence
5. conditional identity checks for transferor, then transferee

The validator is a pure function: records and the attachment store are only read.
"""

__all__ = [
    "validate_record",
    "validate_records",
    "is_missing",
    "is_numeric",
]

logger = logging.getLogger(__name__)

DATE_REGEX = re.compile(r"\d{2}/\d{2}/\d{4}", re.ASCII)
# Leading numeric prefix, the way a lenient float parser reads "12abc" as 12.
NUMERIC_PREFIX = re.compile(r"\s*[+-]?(?:Infinity|\d+(?:\.\d*)?|\.\d+)", re.ASCII)

_DATE_PATHS = tuple(resolve_field_path(p) for p in DATE_FIELDS)
_NUMERIC_PATHS = tuple(resolve_field_path(p) for p in NUMERIC_FIELDS)


def is_missing(value: Any) -> bool:
    return value is None or value == ""


def is_numeric(value: str) -> bool:
    return NUMERIC_PREFIX.match(value) is not None


def _resolve_mandatory(profile: ValidationProfile) -> tuple[FieldPath, ...]:
    return tuple(resolve_field_path(p) for p in profile.mandatory_fields)


def _check_party(
    side: str,
    party: Party,
    row_number: int,
    profile: ValidationProfile,
) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    id_type = profile.identity_error_type

    def issue(field: str, message: str) -> None:
        issues.append(ValidationIssue(row_number, f"{side}.{field}", id_type, message))

    if party.type is PartyType.COMPANY:
        if not party.roc_no:
            issue("rocNo", f"Company {side} requires ROC Number")
        if profile.company_requires_bus_type and not party.bus_type:
            issue("busType", f"Company {side} requires Business Type (1=Local, 2=Foreign)")
    elif party.type is PartyType.INDIVIDUAL:
        if not party.ic_no and not party.passport_no:
            issue("icNo", f"Individual {side} requires IC Number (citizen) or Passport (non-citizen)")
        elif party.ic_no:
            if not party.nationality:
                issue("nationality", f"Citizen {side} requires Nationality (set to 1)")
        elif not party.passport_country:
            issue("passportCountry", f"Non-citizen {side} requires Passport Country Code")
    return issues


def validate_record(
    record: InstrumentRecord,
    store: AttachmentStore | None,
    profile: ValidationProfile = STANDARD_PROFILE,
) -> list[ValidationIssue]:
    """Return every issue found in one record, in check order."""
    row = record.row_number
    issues: list[ValidationIssue] = []

    for fp in _resolve_mandatory(profile):
        if is_missing(get_field(record, fp)):
            issues.append(
                ValidationIssue(row, fp.path, ErrorType.MISSING_FIELD, f"Missing required field: {display_name(fp.path)}")
            )

    for fp in _DATE_PATHS:
        value = get_field(record, fp)
        if value and not DATE_REGEX.fullmatch(value):
            issues.append(
                ValidationIssue(
                    row,
                    fp.path,
                    ErrorType.INVALID_DATE,
                    f"Invalid date format for {display_name(fp.path)}. Expected DD/MM/YYYY, got: {value}",
                )
            )

    for fp in _NUMERIC_PATHS:
        value = get_field(record, fp)
        if not is_missing(value) and not is_numeric(value):
            issues.append(
                ValidationIssue(
                    row, fp.path, ErrorType.INVALID_NUMBER, f"Non-numeric value for {display_name(fp.path)}: {value}"
                )
            )

    if record.attachment:
        filename = record.attachment.strip()
        if store is None or not store.has(filename):
            issues.append(
                ValidationIssue(row, "attachment", ErrorType.MISSING_FILE, f"Attachment file not uploaded: {filename}")
            )
    else:
        issues.append(
            ValidationIssue(row, "attachment", ErrorType.MISSING_ATTACHMENT, "No attachment specified for this record")
        )

    for side in ("transferor", "transferee"):
        issues.extend(_check_party(side, record.party(side), row, profile))

    return issues


def validate_records(
    records: Iterable[InstrumentRecord],
    store: AttachmentStore | None,
    profile: ValidationProfile = STANDARD_PROFILE,
) -> ValidationReport:
    """Validate every record independently and aggregate the result.

    Args:
        records: Mapped records in input order
        store: Attachment store used for the attachment presence check
        profile: Rule set variant (standard or strict)

    Returns:
        ValidationReport with errors and warnings in encounter order
    """
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []
    valid_count = 0
    total = 0

    for record in records:
        total += 1
        record_errors = 0
        for found in validate_record(record, store, profile):
            if found.severity is Severity.ERROR:
                errors.append(found)
                record_errors += 1
            else:
                warnings.append(found)
        if record_errors == 0:
            valid_count += 1

    logger.debug(
        "validated records=%d valid=%d errors=%d warnings=%d profile=%s",
        total,
        valid_count,
        len(errors),
        len(warnings),
        profile.name,
    )
    return ValidationReport(
        valid=not errors,
        valid_count=valid_count,
        error_count=len(errors),
        warning_count=len(warnings),
        errors=tuple(errors),
        warnings=tuple(warnings),
    )
