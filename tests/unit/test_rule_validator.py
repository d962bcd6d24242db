from __future__ import annotations

import pytest

from stamps_bulk.config.filing_schema import STRICT_PROFILE
from stamps_bulk.models.record import Party, PartyType
from stamps_bulk.models.validation import ErrorType, Severity
from stamps_bulk.services.attachments import MemoryAttachmentStore
from stamps_bulk.services.mapper import map_row
from stamps_bulk.services.validator import validate_record, validate_records

STORE = MemoryAttachmentStore({"doc1.pdf": b"%PDF-1.4"})


def _types(issues):
    return [(i.field_name, i.error_type) for i in issues]


def test_valid_record_has_no_issues(record_factory):
    assert validate_record(record_factory(), STORE) == []


@pytest.mark.parametrize("value", [None, ""])
def test_missing_mandatory_field(record_factory, value):
    issues = validate_record(record_factory(ref_no=value), STORE)
    assert _types(issues) == [("refNo", ErrorType.MISSING_FIELD)]
    assert issues[0].severity is Severity.ERROR
    assert issues[0].message == "Missing required field: Reference Number"
    assert issues[0].row_number == 2


def test_missing_party_name_uses_schema_path(record_factory):
    record = record_factory(transferee=Party(type=PartyType.COMPANY, roc_no="1-A"))
    assert _types(validate_record(record, STORE)) == [("transferee.name", ErrorType.MISSING_FIELD)]


@pytest.mark.parametrize("value", ["2024-12-15", "1/2/2024", "15/12/24", "１５/１２/２０２４", "15/12/2024x"])
def test_invalid_date(record_factory, value):
    issues = validate_record(record_factory(instrument_date=value), STORE)
    assert _types(issues) == [("instrumentDate", ErrorType.INVALID_DATE)]
    assert value in issues[0].message


@pytest.mark.parametrize("value", ["today", "now"])
def test_date_words_from_sheet_are_invalid(row_factory, value):
    record = map_row(row_factory(**{"Date Signed": value}), 2)
    issues = validate_record(record, STORE)
    assert _types(issues) == [("instrumentDate", ErrorType.INVALID_DATE)]


def test_iso_date_from_sheet_is_valid_and_unchanged(row_factory):
    record = map_row(row_factory(**{"Date Signed": "2024-12-05"}), 2)
    assert record.instrument_date == "05/12/2024"
    assert validate_record(record, STORE) == []


def test_date_received_optional_but_checked(record_factory):
    assert validate_record(record_factory(instrument_date_receive=None), STORE) == []
    issues = validate_record(record_factory(instrument_date_receive="tomorrow"), STORE)
    assert _types(issues) == [("instrumentDateReceive", ErrorType.INVALID_DATE)]


@pytest.mark.parametrize("value", ["12abc", ".5", "-3", " 42", "1e5"])
def test_numeric_prefix_accepted(record_factory, value):
    assert validate_record(record_factory(consideration=value), STORE) == []


def test_non_numeric_is_warning(record_factory):
    issues = validate_record(record_factory(consideration="abc"), STORE)
    assert _types(issues) == [("consideration", ErrorType.INVALID_NUMBER)]
    assert issues[0].severity is Severity.WARNING


def test_attachment_checks(record_factory):
    issues = validate_record(record_factory(attachment=None), STORE)
    assert _types(issues) == [("attachment", ErrorType.MISSING_ATTACHMENT)]
    assert issues[0].severity is Severity.WARNING

    issues = validate_record(record_factory(attachment="missing.pdf"), STORE)
    assert _types(issues) == [("attachment", ErrorType.MISSING_FILE)]
    assert issues[0].severity is Severity.ERROR
    assert issues[0].message == "Attachment file not uploaded: missing.pdf"

    # 前後の空白は照合前に除去
    assert validate_record(record_factory(attachment="  doc1.pdf "), STORE) == []
    # ストア無し = 全て未アップロード扱い
    assert _types(validate_record(record_factory(), None)) == [("attachment", ErrorType.MISSING_FILE)]


def test_company_requires_roc(record_factory):
    record = record_factory(transferee=Party(type=PartyType.COMPANY, name="ACME"))
    issues = validate_record(record, STORE)
    assert _types(issues) == [("transferee.rocNo", ErrorType.MISSING_ID)]
    assert issues[0].severity is Severity.WARNING


def test_individual_identity_rules(record_factory):
    no_id = record_factory(transferor=Party(type=PartyType.INDIVIDUAL, name="A"))
    assert _types(validate_record(no_id, STORE)) == [("transferor.icNo", ErrorType.MISSING_ID)]

    citizen = record_factory(transferor=Party(type=PartyType.INDIVIDUAL, name="A", ic_no="800101145566"))
    assert _types(validate_record(citizen, STORE)) == [("transferor.nationality", ErrorType.MISSING_ID)]

    foreigner = record_factory(transferor=Party(type=PartyType.INDIVIDUAL, name="A", passport_no="P1"))
    assert _types(validate_record(foreigner, STORE)) == [("transferor.passportCountry", ErrorType.MISSING_ID)]

    ok = record_factory(transferor=Party(type=PartyType.INDIVIDUAL, name="A", passport_no="P1", passport_country="SG"))
    assert validate_record(ok, STORE) == []


def test_unrecognised_party_type_skips_identity_checks(record_factory):
    record = record_factory(transferor=Party(type="X", name="A"))
    assert validate_record(record, STORE) == []


def test_issue_order_follows_check_order(record_factory):
    record = record_factory(
        ref_no=None,
        instrument_date="bad",
        consideration="abc",
        attachment=None,
        transferee=Party(type=PartyType.COMPANY, name="ACME"),
    )
    assert [i.error_type for i in validate_record(record, STORE)] == [
        ErrorType.MISSING_FIELD,
        ErrorType.INVALID_DATE,
        ErrorType.INVALID_NUMBER,
        ErrorType.MISSING_ATTACHMENT,
        ErrorType.MISSING_ID,
    ]


def test_strict_profile_reports_identity_as_errors(record_factory):
    record = record_factory(transferee=Party(type=PartyType.COMPANY, name="ACME"))
    issues = validate_record(record, STORE, STRICT_PROFILE)
    by_field = {i.field_name: i for i in issues}
    assert by_field["transferee.rocNo"].error_type is ErrorType.MISSING_FIELD
    assert by_field["transferee.busType"].error_type is ErrorType.MISSING_FIELD
    # address / phone are mandatory under strict
    assert by_field["transferor.street1"].error_type is ErrorType.MISSING_FIELD
    assert by_field["transferee.telNo"].severity is Severity.ERROR


def test_validate_records_aggregates(record_factory):
    records = [
        record_factory(row_number=2),
        record_factory(row_number=3, attachment=None),  # warning only
        record_factory(row_number=4, attachment="missing.pdf", ref_no=None),  # 2 errors
    ]
    report = validate_records(records, STORE)
    assert report.valid is False
    assert report.valid_count == 2
    assert report.error_count == 2
    assert report.warning_count == 1
    assert [i.row_number for i in report.errors] == [4, 4]
    assert [i.field_name for i in report.issues_for_row(4)] == ["refNo", "attachment"]


def test_validate_records_warnings_do_not_block(record_factory):
    report = validate_records([record_factory(attachment=None)], STORE)
    assert report.valid is True
    assert report.valid_count == 1
    assert report.warning_count == 1


def test_validate_records_empty():
    report = validate_records([], STORE)
    assert report.valid is True
    assert (report.valid_count, report.error_count, report.warning_count) == (0, 0, 0)

