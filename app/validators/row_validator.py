"""
app/validators/row_validator.py

Row-level acceptance rules for normalized beneficiary records.
"""

from __future__ import annotations

from app.domain.beneficiary import Accepted, CanonicalField, NormalizedRecord, Rejected, ValidationOutcome

IDENTITY_FIELDS_MISSING = "identity_fields_missing"
MALFORMED_EMAIL = "malformed_email"


class RowValidator:
    """
    Classifies normalized records as accepted or rejected.

    Only missing identity and a malformed email are rejected. Stateless, so
    rows may be validated in any order.
    """

    def validate(self, record: NormalizedRecord, row_number: int) -> ValidationOutcome:
        """
        Apply the rules to one record; ``row_number`` is 1-based.
        """

        if self._is_blank(record.first_name) and self._is_blank(record.last_name):
            return Rejected(
                row_number=row_number,
                code=IDENTITY_FIELDS_MISSING,
                reason=f"Row {row_number}: identity fields missing (first_name and last_name are empty).",
                field=CanonicalField.FIRST_NAME.value,
            )

        if record.email is not None and "@" not in record.email:
            return Rejected(
                row_number=row_number,
                code=MALFORMED_EMAIL,
                reason=f"Row {row_number}: malformed email {record.email!r}.",
                field=CanonicalField.EMAIL.value,
            )

        return Accepted(row_number=row_number, record=record)

    @staticmethod
    def _is_blank(value: str | None) -> bool:
        return value is None or value.strip() == ""
