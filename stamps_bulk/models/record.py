from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

"""Instrument record domain models.

InstrumentRecord is the normalized unit produced by the field mapper and consumed
independently by the validator and the serializer. Every business field is
optional here; requiredness is decided by the validation layer.

Schema paths (``refNo``, ``transferor.rocNo``) are configuration data. They are
resolved once into FieldPath accessors over the closed set of attributes below,
so an unknown path fails at import time instead of silently reading nothing.
"""

__all__ = [
    "PartyType",
    "Party",
    "InstrumentRecord",
    "FieldPath",
    "resolve_field_path",
    "get_field",
]


class PartyType(Enum):
    """Party type code (0 = individual, 1 = company)."""
    INDIVIDUAL = 0
    COMPANY = 1

    @classmethod
    def parse(cls, value: Any) -> PartyType | None:
        """Return the matching PartyType for 0/1 in int, float or text form, else None."""
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, PartyType):
            return value
        try:
            number = float(str(value).strip())
        except ValueError:
            return None
        for member in cls:
            if number == member.value:
                return member
        return None

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Party:
    """Transferor or transferee of an instrument."""
    type: PartyType | str | None = None  # unrecognised codes are kept as text
    name: str | None = None
    nationality: str | None = None
    ic_no: str | None = None
    passport_no: str | None = None
    passport_country: str | None = None
    roc_no: str | None = None
    bus_type: str | None = None
    income_tax_no: str | None = None
    income_tax_branch: str | None = None
    street1: str | None = None
    street2: str | None = None
    street3: str | None = None
    postcode: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    tel_no: str | None = None
    email: str | None = None


@dataclass(frozen=True)
class InstrumentRecord:
    """One filing record (a single instrument) after column mapping.

    row_number is the 1-based spreadsheet row (header row included), used only
    for diagnostics. raw keeps the source row for debugging and takes no part in
    equality.
    """
    ref_no: str | None = None
    instrument_date: str | None = None  # DD/MM/YYYY when parseable
    instrument_date_receive: str | None = None
    principal: str | None = None
    subsidiary: str | None = None
    type_of_instrument: str | None = None
    type_of_instrument_others: str | None = None
    transferor: Party = field(default_factory=Party)
    transferee: Party = field(default_factory=Party)
    consideration: str | None = None
    duration: str | None = None
    duration_desc: str | None = None
    col_land: str | None = None
    col_land_desc: str | None = None
    col_share: str | None = None
    col_deposit: str | None = None
    col_others: str | None = None
    col_others_desc: str | None = None
    no_of_copy: str | None = None
    exemption: str | None = None
    exemption_others: str | None = None
    remission: str | None = None
    remission_others: str | None = None
    attachment: str | None = None
    row_number: int = 0
    raw: dict[str, Any] | None = field(default=None, compare=False, repr=False)

    def party(self, side: str) -> Party:
        if side == "transferor":
            return self.transferor
        if side == "transferee":
            return self.transferee
        raise KeyError(side)


# schema name -> attribute name
INSTRUMENT_ATTRIBUTES: dict[str, str] = {
    "refNo": "ref_no",
    "instrumentDate": "instrument_date",
    "instrumentDateReceive": "instrument_date_receive",
    "principal": "principal",
    "subsidiary": "subsidiary",
    "typeOfInstrument": "type_of_instrument",
    "typeOfInstrumentOthers": "type_of_instrument_others",
    "consideration": "consideration",
    "duration": "duration",
    "durationDesc": "duration_desc",
    "colLand": "col_land",
    "colLandDesc": "col_land_desc",
    "colShare": "col_share",
    "colDeposit": "col_deposit",
    "colOthers": "col_others",
    "colOthersDesc": "col_others_desc",
    "noOfCopy": "no_of_copy",
    "exemption": "exemption",
    "exemptionOthers": "exemption_others",
    "remession": "remission",
    "remessionOthers": "remission_others",
    "attachment": "attachment",
}

PARTY_ATTRIBUTES: dict[str, str] = {
    "type": "type",
    "name": "name",
    "nationality": "nationality",
    "icNo": "ic_no",
    "passportNo": "passport_no",
    "passportCountry": "passport_country",
    "rocNo": "roc_no",
    "busType": "bus_type",
    "incomeTaxNo": "income_tax_no",
    "incomeTaxBranch": "income_tax_branch",
    "street1": "street1",
    "street2": "street2",
    "street3": "street3",
    "postcode": "postcode",
    "city": "city",
    "state": "state",
    "country": "country",
    "telNo": "tel_no",
    "email": "email",
}


@dataclass(frozen=True)
class FieldPath:
    """Resolved schema path: optional party side plus attribute name."""
    path: str
    attribute: str
    party: str | None = None


def resolve_field_path(path: str) -> FieldPath:
    """Resolve a schema path into a FieldPath.

    Raises:
        KeyError: if the path does not name a field of the filing schema
    """
    if "." in path:
        side, name = path.split(".", 1)
        if side not in ("transferor", "transferee") or name not in PARTY_ATTRIBUTES:
            raise KeyError(f"unknown schema field path: {path}")
        return FieldPath(path=path, attribute=PARTY_ATTRIBUTES[name], party=side)
    if path not in INSTRUMENT_ATTRIBUTES:
        raise KeyError(f"unknown schema field path: {path}")
    return FieldPath(path=path, attribute=INSTRUMENT_ATTRIBUTES[path])


def get_field(record: InstrumentRecord, field_path: FieldPath) -> Any:
    target: Any = record.party(field_path.party) if field_path.party else record
    return getattr(target, field_path.attribute)
