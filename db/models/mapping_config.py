"""
db/models/mapping_config.py

Saved header mappings for recurring beneficiary import layouts.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import JSON, Boolean, Index, String, UniqueConstraint, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin

JSONType = JSON().with_variant(JSONB(), "postgresql")


class MappingConfig(Base, TimestampMixin):
    __tablename__ = "mapping_configs"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(120),
        nullable=False,
        comment="Human-readable config name",
    )
    organization: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Optional uploading organization for scoped matching",
    )
    field_mapping_json: Mapped[dict[str, str]] = mapped_column(
        JSONType,
        nullable=False,
        comment="Canonical field -> source header overrides",
    )
    alias_overrides_json: Mapped[dict[str, list[str]] | None] = mapped_column(
        JSONType,
        nullable=True,
        comment="Optional extra header aliases per canonical field",
    )
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    metadata_json: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)

    __table_args__ = (
        UniqueConstraint("name", "organization", name="uq_mapping_configs_name_organization"),
        Index("ix_mapping_configs_name", "name"),
        Index("ix_mapping_configs_organization", "organization"),
        Index("ix_mapping_configs_is_active", "is_active"),
    )
