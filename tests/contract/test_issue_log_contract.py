from __future__ import annotations

import json

import jsonschema
import pytest

from stamps_bulk.logging.error_log import ErrorRecord
from stamps_bulk.models.validation import ErrorType, ValidationIssue

"""Issue log JSON Lines contract (fixed key set, no extras)."""

ISSUE_LOG_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "required": ["timestamp", "file", "row", "field", "error_type", "severity", "message"],
    "properties": {
        "timestamp": {"type": "string", "pattern": "Z$"},
        "file": {"type": "string"},
        "row": {"type": "integer", "minimum": -1},
        "field": {"type": "string"},
        "error_type": {"enum": [e.value for e in ErrorType]},
        "severity": {"enum": ["error", "warning"]},
        "message": {"type": "string"},
    },
}


@pytest.mark.parametrize("error_type", list(ErrorType))
def test_issue_records_match_schema(error_type):
    issue = ValidationIssue(2, "refNo", error_type, "message")
    record = json.loads(ErrorRecord.from_issue("stamps.xlsx", issue).to_json_line())
    jsonschema.validate(record, ISSUE_LOG_SCHEMA)


def test_schema_rejects_extra_key():
    record = json.loads(ErrorRecord.create("stamps.xlsx", -1, "", "MISSING_FIELD", "error", "x").to_json_line())
    record["extra"] = "not allowed"
    with pytest.raises(jsonschema.ValidationError):
        jsonschema.validate(record, ISSUE_LOG_SCHEMA)
