"""
app/mappers/header_mapper.py

Maps arbitrary Turkish or English column headers onto canonical beneficiary fields.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterator, Mapping, Sequence

from app.domain.beneficiary import CANONICAL_FIELDS, CanonicalField

# Priority-ordered: Turkish primary header first, English synonyms after.
DEFAULT_HEADER_ALIASES: dict[CanonicalField, tuple[str, ...]] = {
    CanonicalField.FIRST_NAME: ("Ad", "Name", "First Name"),
    CanonicalField.LAST_NAME: ("Soyad", "Surname", "Last Name"),
    CanonicalField.NATIONALITY: ("Uyruk", "Nationality"),
    CanonicalField.BIRTH_DATE: ("Doğum Tarihi", "BirthDate", "Birth Date"),
    CanonicalField.GENDER: ("Cinsiyet", "Gender"),
    CanonicalField.BLOOD_TYPE: ("Kan Grubu", "Blood", "Blood Type"),
    CanonicalField.IDENTITY_NUMBER: ("Kimlik Numarası", "Identity", "Identity Number"),
    CanonicalField.EMAIL: ("Eposta", "Mail", "E-mail", "Email"),
    CanonicalField.MOBILE_PHONE: ("Cep Telefonu", "GSM", "Mobile"),
    CanonicalField.LANDLINE_PHONE: ("Sabit Telefon", "Phone"),
    CanonicalField.FOREIGN_PHONE: ("Yurtdışı Telefon", "AbroadPhone"),
    CanonicalField.COUNTRY: ("Ülke", "Country"),
    CanonicalField.CITY: ("Şehir", "City"),
    CanonicalField.DISTRICT: ("İlçe", "Town", "District"),
    CanonicalField.NEIGHBORHOOD: ("Mahalle", "Neighborhood"),
    CanonicalField.ADDRESS: ("Adres", "Address"),
    CanonicalField.IBAN: ("IBAN",),
}

_DIACRITIC_TRANSLATION = str.maketrans(
    {
        "ı": "i",
        "İ": "i",
        "ş": "s",
        "Ş": "s",
        "ğ": "g",
        "Ğ": "g",
        "ü": "u",
        "Ü": "u",
        "ö": "o",
        "Ö": "o",
        "ç": "c",
        "Ç": "c",
        "â": "a",
        "Â": "a",
        "î": "i",
        "Î": "i",
        "û": "u",
        "Û": "u",
    }
)
_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_header(header: str) -> str:
    """
    Locale-insensitive form of a header: diacritics folded to base Latin,
    lowercased, internal whitespace collapsed, trimmed.
    """

    folded = header.translate(_DIACRITIC_TRANSLATION).lower()
    return _WHITESPACE_RUN.sub(" ", folded).strip()


class MatchStrategy:
    EXACT = "exact"
    NORMALIZED = "normalized"
    CONFIG = "config"
    OVERRIDE = "override"


@dataclass(frozen=True)
class MappingErrorDetail:
    """
    Structured mapping error detail.
    """

    code: str
    message: str
    canonical_field: str | None = None
    source_column: str | None = None
    context: dict[str, Any] | None = None


class HeaderMappingError(ValueError):
    """
    Raised when a mapping override cannot be applied.
    """

    def __init__(self, *, message: str, errors: Sequence[MappingErrorDetail]) -> None:
        super().__init__(message)
        self.message = message
        self.errors = tuple(errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "errors": [
                {
                    "code": error.code,
                    "message": error.message,
                    "canonical_field": error.canonical_field,
                    "source_column": error.source_column,
                    "context": error.context,
                }
                for error in self.errors
            ],
        }


class FieldMapping:
    """
    Canonical field -> source header (None when unmapped).

    Owned by one import session and editable until the run is committed.
    Two canonical fields may point at the same header.
    """

    def __init__(
        self,
        source_headers: Sequence[str],
        assignments: Mapping[CanonicalField, str | None] | None = None,
        strategies: Mapping[CanonicalField, str] | None = None,
    ) -> None:
        self._source_headers = tuple(source_headers)
        self._assignments: dict[CanonicalField, str | None] = {field: None for field in CANONICAL_FIELDS}
        self._strategies: dict[CanonicalField, str] = {}
        for field, header in (assignments or {}).items():
            self._assignments[CanonicalField.parse(field)] = header
        for field, strategy in (strategies or {}).items():
            self._strategies[CanonicalField.parse(field)] = strategy

    @property
    def source_headers(self) -> tuple[str, ...]:
        return self._source_headers

    def __getitem__(self, field: CanonicalField | str) -> str | None:
        return self._assignments[CanonicalField.parse(field)]

    def __iter__(self) -> Iterator[CanonicalField]:
        return iter(self._assignments)

    def items(self) -> Iterator[tuple[CanonicalField, str | None]]:
        return iter(self._assignments.items())

    def strategy(self, field: CanonicalField | str) -> str | None:
        return self._strategies.get(CanonicalField.parse(field))

    def mapped_fields(self) -> tuple[CanonicalField, ...]:
        return tuple(field for field, header in self._assignments.items() if header is not None)

    def unmapped_fields(self) -> tuple[CanonicalField, ...]:
        return tuple(field for field, header in self._assignments.items() if header is None)

    def set_mapping(
        self,
        field: CanonicalField | str,
        header: str | None,
        *,
        strategy: str = MatchStrategy.OVERRIDE,
    ) -> "FieldMapping":
        """
        Point one canonical field at a source header, or unmap it with None.
        """

        canonical = _parse_field(field, source_column=header)
        if header is not None and header not in self._source_headers:
            raise HeaderMappingError(
                message="Mapping override points to a source column not present in the file.",
                errors=[
                    MappingErrorDetail(
                        code="override_source_not_found",
                        message="Manual override points to a source column not present in file headers.",
                        canonical_field=canonical.value,
                        source_column=header,
                        context={"source_headers": list(self._source_headers)},
                    )
                ],
            )
        self._assignments[canonical] = header
        if header is None:
            self._strategies.pop(canonical, None)
        else:
            self._strategies[canonical] = strategy
        return self

    def to_dict(self) -> dict[str, str | None]:
        return {field.value: header for field, header in self._assignments.items()}

    def strategies_dict(self) -> dict[str, str]:
        return {field.value: strategy for field, strategy in self._strategies.items()}


class HeaderMapper:
    """
    Builds default header mappings and applies saved or manual overrides.
    """

    def __init__(self, *, aliases: Mapping[CanonicalField, Sequence[str]] | None = None) -> None:
        self._aliases: dict[CanonicalField, tuple[str, ...]] = {
            CanonicalField.parse(field): tuple(values)
            for field, values in (aliases or DEFAULT_HEADER_ALIASES).items()
        }

    def build_default_mapping(self, headers: Sequence[str]) -> FieldMapping:
        """
        Resolve every canonical field against the headers: exact alias match
        first, then a match on normalized forms, in alias priority order.
        """

        mapping = FieldMapping(headers)
        for field in CANONICAL_FIELDS:
            match = self._find_match(self._aliases.get(field, ()), headers)
            if match is not None:
                header, strategy = match
                mapping.set_mapping(field, header, strategy=strategy)
        return mapping

    def resolve_mapping(
        self,
        headers: Sequence[str],
        *,
        manual_overrides: Mapping[str, str | None] | None = None,
        mapping_config: Any | None = None,
    ) -> FieldMapping:
        """
        Default mapping, then saved config aliases and overrides, then manual overrides.
        """

        mapping = self.build_default_mapping(headers)
        errors: list[MappingErrorDetail] = []

        if mapping_config is not None:
            for field, extra_aliases in self._config_aliases(mapping_config).items():
                if mapping[field] is not None:
                    continue
                match = self._find_match(extra_aliases, headers)
                if match is not None:
                    mapping.set_mapping(field, match[0], strategy=MatchStrategy.CONFIG)
            self._apply_overrides(
                mapping,
                self._config_overrides(mapping_config),
                strategy=MatchStrategy.CONFIG,
                errors=errors,
            )

        if manual_overrides:
            self._apply_overrides(mapping, manual_overrides, strategy=MatchStrategy.OVERRIDE, errors=errors)

        if errors:
            raise HeaderMappingError(message="Header mapping overrides could not be applied.", errors=errors)
        return mapping

    @staticmethod
    def _find_match(candidates: Sequence[str], headers: Sequence[str]) -> tuple[str, str] | None:
        header_set = set(headers)
        for candidate in candidates:
            if candidate in header_set:
                return candidate, MatchStrategy.EXACT

        normalized_headers = [(header, normalize_header(header)) for header in headers]
        for candidate in candidates:
            normalized_candidate = normalize_header(candidate)
            for header, normalized in normalized_headers:
                if normalized and normalized == normalized_candidate:
                    return header, MatchStrategy.NORMALIZED
        return None

    @staticmethod
    def _apply_overrides(
        mapping: FieldMapping,
        overrides: Mapping[str, str | None],
        *,
        strategy: str,
        errors: list[MappingErrorDetail],
    ) -> None:
        for raw_field, header in overrides.items():
            try:
                mapping.set_mapping(raw_field, header or None, strategy=strategy)
            except HeaderMappingError as exc:
                errors.extend(exc.errors)

    @staticmethod
    def _config_overrides(mapping_config: Any) -> dict[str, str]:
        config_mapping = getattr(mapping_config, "field_mapping_json", None)
        if not isinstance(config_mapping, dict):
            return {}
        return {
            key.strip(): value.strip()
            for key, value in config_mapping.items()
            if isinstance(key, str) and isinstance(value, str) and key.strip() and value.strip()
        }

    @staticmethod
    def _config_aliases(mapping_config: Any) -> dict[CanonicalField, list[str]]:
        aliases_json = getattr(mapping_config, "alias_overrides_json", None)
        if not isinstance(aliases_json, dict):
            return {}
        resolved: dict[CanonicalField, list[str]] = {}
        for key, raw_aliases in aliases_json.items():
            if not isinstance(raw_aliases, list):
                continue
            try:
                field = CanonicalField.parse(key)
            except ValueError:
                continue
            resolved[field] = [alias for alias in raw_aliases if isinstance(alias, str) and alias.strip()]
        return resolved


def _parse_field(field: CanonicalField | str, *, source_column: str | None) -> CanonicalField:
    try:
        return CanonicalField.parse(field)
    except ValueError as exc:
        raise HeaderMappingError(
            message="Mapping override contains an unknown canonical field.",
            errors=[
                MappingErrorDetail(
                    code="invalid_override_field",
                    message="Manual override contains unknown canonical field.",
                    canonical_field=str(field),
                    source_column=source_column,
                )
            ],
        ) from exc
