"""
app/normalizers/row_normalizer.py

Turns one raw row into a NormalizedRecord using a FieldMapping.
"""

from __future__ import annotations

from typing import Callable, Mapping

from app.domain.beneficiary import CANONICAL_FIELDS, CanonicalField, NormalizedRecord
from app.mappers.header_mapper import FieldMapping
from app.normalizers.date_normalizer import DateNormalizer

FieldNormalizer = Callable[[str | None], str | None]


def clean_cell(value: str | None) -> str | None:
    """
    Trim a raw cell; empty or missing becomes None.
    """

    if value is None:
        return None
    stripped = str(value).strip()
    return stripped if stripped else None


class RowNormalizer:
    """
    Every field passes through as a trimmed string except those with a
    dedicated normalizer (by default only birth_date).
    """

    def __init__(
        self,
        *,
        date_normalizer: DateNormalizer | None = None,
        field_normalizers: Mapping[CanonicalField, FieldNormalizer] | None = None,
    ) -> None:
        self._date_normalizer = date_normalizer or DateNormalizer()
        self._field_normalizers: dict[CanonicalField, FieldNormalizer] = {
            CanonicalField.BIRTH_DATE: self._date_normalizer.normalize,
        }
        if field_normalizers:
            self._field_normalizers.update(field_normalizers)

    def normalize(self, raw: Mapping[str, str], mapping: FieldMapping) -> NormalizedRecord:
        values: dict[CanonicalField, str | None] = {}
        for field in CANONICAL_FIELDS:
            header = mapping[field]
            cell = clean_cell(raw.get(header)) if header is not None else None
            normalizer = self._field_normalizers.get(field)
            values[field] = normalizer(cell) if normalizer is not None and cell is not None else cell
        return NormalizedRecord.from_fields(values)
