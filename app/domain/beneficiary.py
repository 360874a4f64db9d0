"""
app/domain/beneficiary.py

Typed records used by the beneficiary bulk-import flow.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Mapping, Union


class CanonicalField(str, Enum):
    """
    Closed set of target attributes every imported row is normalized into.
    """

    FIRST_NAME = "first_name"
    LAST_NAME = "last_name"
    NATIONALITY = "nationality"
    BIRTH_DATE = "birth_date"
    GENDER = "gender"
    BLOOD_TYPE = "blood_type"
    IDENTITY_NUMBER = "identity_number"
    EMAIL = "email"
    MOBILE_PHONE = "mobile_phone"
    LANDLINE_PHONE = "landline_phone"
    FOREIGN_PHONE = "foreign_phone"
    COUNTRY = "country"
    CITY = "city"
    DISTRICT = "district"
    NEIGHBORHOOD = "neighborhood"
    ADDRESS = "address"
    IBAN = "iban"

    @classmethod
    def parse(cls, value: Union["CanonicalField", str]) -> "CanonicalField":
        if isinstance(value, CanonicalField):
            return value
        return cls(value.strip())


CANONICAL_FIELDS: tuple[CanonicalField, ...] = tuple(CanonicalField)

# Untyped representation, only used between file parsing and normalization.
RawRecord = dict[str, str]


@dataclass(frozen=True)
class NormalizedRecord:
    """
    One normalized beneficiary row. Every value is a trimmed string or None.
    """

    first_name: str | None = None
    last_name: str | None = None
    nationality: str | None = None
    birth_date: str | None = None
    gender: str | None = None
    blood_type: str | None = None
    identity_number: str | None = None
    email: str | None = None
    mobile_phone: str | None = None
    landline_phone: str | None = None
    foreign_phone: str | None = None
    country: str | None = None
    city: str | None = None
    district: str | None = None
    neighborhood: str | None = None
    address: str | None = None
    iban: str | None = None

    @classmethod
    def from_fields(cls, values: Mapping[CanonicalField, str | None]) -> "NormalizedRecord":
        return cls(**{field.value: value for field, value in values.items()})

    def get(self, field: CanonicalField) -> str | None:
        return getattr(self, field.value)

    def to_payload(self) -> dict[str, str | None]:
        """
        Plain dict keyed by canonical field name, ready for a record store.
        """

        return asdict(self)


@dataclass(frozen=True)
class Accepted:
    """
    A row that passed validation.
    """

    row_number: int
    record: NormalizedRecord

    @property
    def accepted(self) -> bool:
        return True


@dataclass(frozen=True)
class Rejected:
    """
    A row that failed validation, with a human-readable reason.
    """

    row_number: int
    code: str
    reason: str
    field: str | None = None

    @property
    def accepted(self) -> bool:
        return False


ValidationOutcome = Union[Accepted, Rejected]
