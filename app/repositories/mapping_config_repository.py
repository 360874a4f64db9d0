"""
app/repositories/mapping_config_repository.py

Saved header mappings for recurring upload layouts.

A config is scoped by (name, organization). Lookups for an organization fall
back to the organization-less config of the same name.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from app.mappers.header_mapper import FieldMapping
from db.models.mapping_config import MappingConfig


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


class MappingConfigRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_active(
        self,
        *,
        name: str | None = None,
        organization: str | None = None,
    ) -> MappingConfig | None:
        """
        Most recently updated active config matching the scope.

        With an organization, its own config wins over a shared one
        (organization NULL) of the same name.
        """

        name = _clean(name)
        organization = _clean(organization)

        stmt = self._active(name)
        if organization is None:
            return self._first(stmt)

        scoped = self._first(stmt.where(MappingConfig.organization == organization))
        if scoped is not None or name is None:
            return scoped
        return self._first(stmt.where(MappingConfig.organization.is_(None)))

    def list_active(self, *, organization: str | None = None) -> list[MappingConfig]:
        stmt = self._active(None).order_by(None).order_by(MappingConfig.name)
        organization = _clean(organization)
        if organization is not None:
            stmt = stmt.where(MappingConfig.organization == organization)
        return list(self._session.scalars(stmt).all())

    def save(
        self,
        *,
        name: str,
        field_mapping: dict[str, str],
        organization: str | None = None,
        alias_overrides: dict[str, list[str]] | None = None,
        notes: str | None = None,
        metadata_json: dict[str, Any] | None = None,
        is_active: bool = True,
    ) -> MappingConfig:
        """
        Insert or replace the config keyed by (name, organization).
        """

        config_name = _clean(name)
        if config_name is None:
            raise ValueError("Mapping config name must not be blank.")
        config_organization = _clean(organization)

        config = self._find(config_name, config_organization)
        if config is None:
            config = MappingConfig(name=config_name, organization=config_organization)
            self._session.add(config)

        config.field_mapping_json = field_mapping
        config.alias_overrides_json = alias_overrides
        config.notes = notes
        config.metadata_json = metadata_json
        config.is_active = is_active
        self._session.flush()
        return config

    def save_field_mapping(
        self,
        *,
        name: str,
        mapping: FieldMapping,
        organization: str | None = None,
        notes: str | None = None,
    ) -> MappingConfig:
        """
        Store the mapped fields of a resolved FieldMapping for reuse on the
        next upload with the same layout.
        """

        return self.save(
            name=name,
            organization=organization,
            field_mapping={field: header for field, header in mapping.to_dict().items() if header is not None},
            notes=notes,
            metadata_json={"source_headers": list(mapping.source_headers)},
        )

    def deactivate(self, *, name: str, organization: str | None = None) -> bool:
        config = self._find(_clean(name), _clean(organization))
        if config is None or not config.is_active:
            return False
        config.is_active = False
        self._session.flush()
        return True

    def _find(self, name: str | None, organization: str | None) -> MappingConfig | None:
        stmt = select(MappingConfig).where(MappingConfig.name == name)
        if organization is None:
            stmt = stmt.where(MappingConfig.organization.is_(None))
        else:
            stmt = stmt.where(MappingConfig.organization == organization)
        return self._first(stmt)

    @staticmethod
    def _active(name: str | None) -> Select[tuple[MappingConfig]]:
        stmt = select(MappingConfig).where(MappingConfig.is_active.is_(True))
        if name is not None:
            stmt = stmt.where(MappingConfig.name == name)
        return stmt.order_by(MappingConfig.updated_at.desc())

    def _first(self, stmt: Select[tuple[MappingConfig]]) -> MappingConfig | None:
        return self._session.execute(stmt).scalars().first()
