"""
db/models/import_run.py

History of beneficiary bulk-import runs and their final reports.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin
from db.models.mapping_config import JSONType


class ImportRun(Base, TimestampMixin):
    __tablename__ = "import_runs"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="pending, running, completed, partial_success, failed, cancelled",
    )
    filename: Mapped[str | None] = mapped_column(String(255), nullable=True)
    delimiter: Mapped[str | None] = mapped_column(String(8), nullable=True)
    total_rows: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    validated_rows: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rejected_rows: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    inserted_rows: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    field_mapping_json: Mapped[dict[str, str | None] | None] = mapped_column(JSONType, nullable=True)
    report_json: Mapped[dict[str, Any] | None] = mapped_column(
        JSONType,
        nullable=True,
        comment="Final report: rejections, failed batches and log",
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_import_runs_status", "status"),
        Index("ix_import_runs_created_at", "created_at"),
    )
