from __future__ import annotations

from dataclasses import dataclass

from ..models.validation import ErrorType, ValidationProfile

"""Filing schema configuration data for the bulk stamping generator.

This module holds the versioned, data-only part of the filing schema:
- COLUMN_MAP: spreadsheet header -> schema field path (camelCase, dotted for parties)
- mandatory field lists for the two validation profiles
- date / numeric typed fields
- display names used in validation messages
- template column descriptions (header, XML tag, data type, example, notes)

Changing the filing schema means changing this module, not the mapper,
validator or serializer algorithms.
"""

__all__ = [
    "SCHEMA_VERSION",
    "COLUMN_MAP",
    "DATE_FIELDS",
    "NUMERIC_FIELDS",
    "STANDARD_MANDATORY_FIELDS",
    "STRICT_MANDATORY_FIELDS",
    "DISPLAY_NAMES",
    "TemplateColumn",
    "TEMPLATE_COLUMNS",
    "CODE_REFERENCE",
    "INSTRUCTIONS",
    "display_name",
    "STANDARD_PROFILE",
    "STRICT_PROFILE",
    "PROFILES",
]

SCHEMA_VERSION = "2024.12"

PARTY_SIDES = ("transferor", "transferee")

# Header -> schema path. Several headers may feed the same field (attachment);
# the last one present in this order wins.
COLUMN_MAP: dict[str, str] = {
    "Ref No": "refNo",
    "Date Signed": "instrumentDate",
    "Date Received": "instrumentDateReceive",
    "Principal (-1) / Sub (0)": "principal",
    "Subsidiary Ref": "subsidiary",
    "Instrument Type Code": "typeOfInstrument",
    "Other Instrument (Desc)": "typeOfInstrumentOthers",
}

_PARTY_COLUMNS: dict[str, str] = {
    "Type": "type",
    "Name": "name",
    "Nationality": "nationality",
    "IC": "icNo",
    "Passport": "passportNo",
    "Passport Country": "passportCountry",
    "ROC": "rocNo",
    "Bus. Type": "busType",
    "Income Tax": "incomeTaxNo",
    "Branch Code": "incomeTaxBranch",
    "Address 1": "street1",
    "Address 2": "street2",
    "Address 3": "street3",
    "Postcode": "postcode",
    "City": "city",
    "State Code": "state",
    "Country Code": "country",
    "Phone": "telNo",
    "Email": "email",
}

for _side in PARTY_SIDES:
    for _suffix, _field in _PARTY_COLUMNS.items():
        COLUMN_MAP[f"{_side.capitalize()} {_suffix}"] = f"{_side}.{_field}"

COLUMN_MAP.update(
    {
        "Loan/Consideration Amt": "consideration",
        "Duration Fixed?": "duration",
        "Duration Desc": "durationDesc",
        "Collateral: Land?": "colLand",
        "Collateral: Land Desc": "colLandDesc",
        "Collateral: Share?": "colShare",
        "Collateral: Deposit?": "colDeposit",
        "Collateral: Other?": "colOthers",
        "Collateral: Other Desc": "colOthersDesc",
        "No of Copies": "noOfCopy",
        "Exemption Code": "exemption",
        "Exemption Others": "exemptionOthers",
        "Remission Code": "remession",
        "Remission Others": "remessionOthers",
        "Filename Only": "attachment",
        "Attachment": "attachment",
        "Attachment Filename": "attachment",
    }
)

DATE_FIELDS: tuple[str, ...] = ("instrumentDate", "instrumentDateReceive")

NUMERIC_FIELDS: tuple[str, ...] = (
    "principal",
    "subsidiary",
    "typeOfInstrument",
    "consideration",
    "noOfCopy",
)

STANDARD_MANDATORY_FIELDS: tuple[str, ...] = (
    "refNo",
    "instrumentDate",
    "principal",
    "typeOfInstrumentOthers",
    "transferor.type",
    "transferor.name",
    "transferee.type",
    "transferee.name",
)

_ADDRESS_FIELDS = ("street1", "street2", "postcode", "city", "state", "country", "telNo")

STRICT_MANDATORY_FIELDS: tuple[str, ...] = (
    "refNo",
    "instrumentDate",
    "principal",
    "typeOfInstrumentOthers",
    "transferor.type",
    "transferor.name",
    *(f"transferor.{f}" for f in _ADDRESS_FIELDS),
    "transferee.type",
    "transferee.name",
    *(f"transferee.{f}" for f in _ADDRESS_FIELDS),
)

DISPLAY_NAMES: dict[str, str] = {
    "refNo": "Reference Number",
    "instrumentDate": "Date Signed",
    "instrumentDateReceive": "Date Received",
    "principal": "Principal/Subsidiary",
    "subsidiary": "Subsidiary Reference",
    "typeOfInstrumentOthers": "Agreement Name",
    "typeOfInstrument": "Instrument Type",
    "consideration": "Consideration Amount",
    "noOfCopy": "Number of Copies",
    "attachment": "Attachment",
}

_PARTY_DISPLAY = {
    "type": "Type",
    "name": "Name",
    "icNo": "IC",
    "rocNo": "ROC",
    "busType": "Business Type",
    "nationality": "Nationality",
    "passportNo": "Passport",
    "passportCountry": "Passport Country",
    "street1": "Address Line 1",
    "street2": "Address Line 2",
    "postcode": "Postcode",
    "city": "City",
    "state": "State",
    "country": "Country",
    "telNo": "Phone",
}

for _side in PARTY_SIDES:
    for _field, _label in _PARTY_DISPLAY.items():
        DISPLAY_NAMES[f"{_side}.{_field}"] = f"{_side.capitalize()} {_label}"


def display_name(path: str) -> str:
    """Human readable name for a schema path (falls back to the path itself)."""
    return DISPLAY_NAMES.get(path, path)


@dataclass(frozen=True)
class TemplateColumn:
    header: str
    xml_tag: str
    data_type: str
    example: str
    notes: str


def _party_template(side: str, label: str, example: dict[str, str]) -> list[TemplateColumn]:
    title = side.capitalize()
    tag = f"<{side}>"
    return [
        TemplateColumn(f"{title} Type", f"{tag}<type>", "Number", example.get("type", ""), "0=Individual, 1=Company"),
        TemplateColumn(f"{title} Name", f"{tag}<name>", "Text", example.get("name", ""), f"Full name/company name ({label})"),
        TemplateColumn(f"{title} Nationality", f"{tag}<nationality>", "Number", example.get("nationality", ""), "1=Citizen, 2=Non-Citizen, 3=PR"),
        TemplateColumn(f"{title} IC", f"{tag}<icNo>", "Text", example.get("icNo", ""), "IC number (no dashes)"),
        TemplateColumn(f"{title} Passport", f"{tag}<pasportNo>", "Text", "", "Passport number if non-citizen"),
        TemplateColumn(f"{title} Passport Country", f"{tag}<pasportCountry>", "Code", "", "Country code (e.g., SG, US)"),
        TemplateColumn(f"{title} ROC", f"{tag}<rocNo>", "Text", "", "Company registration number"),
        TemplateColumn(f"{title} Bus. Type", f"{tag}<busType>", "Number", "", "1=Local, 2=Foreign"),
        TemplateColumn(f"{title} Income Tax", f"{tag}<incomeTaxNo>", "Text", "", "Income tax number"),
        TemplateColumn(f"{title} Branch Code", f"{tag}<incomeTaxBranch>", "Number", "", "Tax branch code"),
        TemplateColumn(f"{title} Address 1", f"{tag}<street1>", "Text", example.get("street1", ""), "Street address line 1"),
        TemplateColumn(f"{title} Address 2", f"{tag}<street2>", "Text", example.get("street2", ""), "Street address line 2"),
        TemplateColumn(f"{title} Address 3", f"{tag}<street3>", "Text", "", "Street address line 3"),
        TemplateColumn(f"{title} Postcode", f"{tag}<postcode>", "Text", "50000", "Postcode"),
        TemplateColumn(f"{title} City", f"{tag}<city>", "Text", "Kuala Lumpur", "City name"),
        TemplateColumn(f"{title} State Code", f"{tag}<state>", "Number", "14", "State code (1-16)"),
        TemplateColumn(f"{title} Country Code", f"{tag}<country>", "Number", "146", "Country code (146=Malaysia)"),
        TemplateColumn(f"{title} Phone", f"{tag}<telNo>", "Text", example.get("telNo", ""), "Phone number"),
        TemplateColumn(f"{title} Email", f"{tag}<email>", "Text", example.get("email", ""), "Email address"),
    ]


TEMPLATE_COLUMNS: tuple[TemplateColumn, ...] = (
    TemplateColumn("Ref No", "<refNo>", "Text", "REF001", "Unique reference number"),
    TemplateColumn("Date Signed", "<instrumentDate>", "Date (DD/MM/YYYY)", "15/12/2024", "Date instrument was signed"),
    TemplateColumn("Date Received", "<instrumentDateReceive>", "Date (DD/MM/YYYY)", "16/12/2024", "Date instrument was received"),
    TemplateColumn("Principal (-1) / Sub (0)", "<principal>", "Number", "-1", "-1 = Principal, 0 = Subsidiary"),
    TemplateColumn("Subsidiary Ref", "<subsidiary>", "Number", "0", "Subsidiary reference number"),
    TemplateColumn("Instrument Type Code", "<typeOfInstrument>", "Number", "1", "Instrument type code"),
    TemplateColumn("Other Instrument (Desc)", "<typeOfInstrumentOthers>", "Text", "", "Description if Other type"),
    *_party_template(
        "transferor",
        "Pihak 1",
        {
            "type": "0",
            "name": "ALI BIN ABU",
            "nationality": "1",
            "icNo": "800101145566",
            "street1": "No. 10, Jalan 1/1",
            "street2": "Taman ABC",
            "telNo": "0123456789",
            "email": "ali@email.com",
        },
    ),
    *_party_template(
        "transferee",
        "Pihak 2",
        {
            "type": "0",
            "name": "SITI BINTI ABU",
            "nationality": "1",
            "icNo": "850202145577",
            "street1": "No. 20, Jalan 2/2",
            "street2": "Taman XYZ",
            "telNo": "0198765432",
            "email": "siti@email.com",
        },
    ),
    TemplateColumn("Loan/Consideration Amt", "<consideration>", "Number (14,2)", "100000.00", "Amount in RM"),
    TemplateColumn("Duration Fixed?", "<duration>", "Number", "1", "1=Yes, 2=No"),
    TemplateColumn("Duration Desc", "<durationDesc>", "Text", "12 months", "Duration description"),
    TemplateColumn("Collateral: Land?", "<colLand>", "Number", "2", "1=Yes, 2=No"),
    TemplateColumn("Collateral: Land Desc", "<colLandDesc>", "Text", "", "Land description if Yes"),
    TemplateColumn("Collateral: Share?", "<colShare>", "Number", "2", "1=Yes, 2=No"),
    TemplateColumn("Collateral: Deposit?", "<colDeposit>", "Number", "2", "1=Yes, 2=No"),
    TemplateColumn("Collateral: Other?", "<colOthers>", "Number", "2", "1=Yes, 2=No"),
    TemplateColumn("Collateral: Other Desc", "<colOthersDesc>", "Text", "", "Other collateral description"),
    TemplateColumn("No of Copies", "<noOfCopy>", "Number", "1", "Number of copies"),
    TemplateColumn("Exemption Code", "<exemption>", "Text", "", "Exemption code if applicable"),
    TemplateColumn("Exemption Others", "<exemptionOthers>", "Text", "", "Exemption description"),
    TemplateColumn("Remission Code", "<remession>", "Text", "", "Remission code if applicable"),
    TemplateColumn("Remission Others", "<remessionOthers>", "Text", "", "Remission description"),
    TemplateColumn("Attachment Filename", "<attachment>", "Text", "document.pdf", "Filename in Attachments folder"),
)

# (section title, [(code, description), ...])
CODE_REFERENCE: tuple[tuple[str, tuple[tuple[str, str], ...]], ...] = (
    ("PARTY TYPE CODES", (("0", "Individual (Individu)"), ("1", "Company (Syarikat)"))),
    (
        "NATIONALITY CODES",
        (
            ("1", "Citizen (Warganegara)"),
            ("2", "Non-Citizen (Bukan Warganegara)"),
            ("3", "Permanent Resident (Pemastautin Tetap)"),
        ),
    ),
    ("BUSINESS TYPE CODES", (("1", "Local (Tempatan)"), ("2", "Foreign (Asing)"))),
    ("YES/NO CODES (Duration, Collateral)", (("1", "Yes (Ya)"), ("2", "No (Tidak)"))),
    ("PRINCIPAL/SUBSIDIARY", (("-1", "Principal"), ("0", "Subsidiary"))),
    ("COUNTRY CODE (Malaysia)", (("146", "Malaysia"),)),
)

INSTRUCTIONS: tuple[str, ...] = (
    "STAMPS BULK GENERATOR - TEMPLATE INSTRUCTIONS",
    "",
    "HOW TO USE THIS TEMPLATE:",
    '1. Enter your data in the "Data Entry" sheet',
    '2. Use the "Column Reference" sheet to understand each field',
    '3. Use the "Code Reference" sheet for valid code values',
    "4. Save this file as .xlsx format",
    "5. Place attachment files (PDF/JPG) in the attachments directory",
    "6. Run stamps-bulk with a config pointing at this file",
    "",
    "IMPORTANT NOTES:",
    "- Date format must be DD/MM/YYYY (e.g., 15/12/2024)",
    "- IC Number should not contain dashes (e.g., 800101145566)",
    "- Consideration amount should be numeric (e.g., 100000.00)",
    "- Malaysia country code is 146",
    "- Application Type (43) is added automatically",
)

STANDARD_PROFILE = ValidationProfile(
    name="standard",
    mandatory_fields=STANDARD_MANDATORY_FIELDS,
    identity_error_type=ErrorType.MISSING_ID,
)

STRICT_PROFILE = ValidationProfile(
    name="strict",
    mandatory_fields=STRICT_MANDATORY_FIELDS,
    identity_error_type=ErrorType.MISSING_FIELD,
    company_requires_bus_type=True,
)

PROFILES: dict[str, ValidationProfile] = {p.name: p for p in (STANDARD_PROFILE, STRICT_PROFILE)}
