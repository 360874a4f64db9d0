"""
Repository for bulk-import run history.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from app.domain.ingestion_report import ImportRunStatus, IngestionSummary
from db.models.import_run import ImportRun


class ImportRunRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create_run(
        self,
        *,
        filename: str | None,
        delimiter: str | None,
    ) -> ImportRun:
        run = ImportRun(
            status=ImportRunStatus.RUNNING,
            filename=filename,
            delimiter=delimiter,
        )
        self._session.add(run)
        self._session.flush()
        return run

    def get_run(self, run_id: uuid.UUID) -> ImportRun | None:
        return self._session.get(ImportRun, run_id)

    def list_runs(self, *, limit: int = 50, status: str | None = None) -> list[ImportRun]:
        stmt: Select[tuple[ImportRun]] = select(ImportRun)
        if status:
            stmt = stmt.where(ImportRun.status == status)
        stmt = stmt.order_by(ImportRun.created_at.desc()).limit(max(1, limit))
        return list(self._session.scalars(stmt).all())

    def record_summary(
        self,
        run: ImportRun,
        *,
        summary: IngestionSummary,
        field_mapping: dict[str, str | None] | None = None,
    ) -> ImportRun:
        run.status = summary.status
        run.total_rows = summary.total_rows
        run.validated_rows = summary.validated_rows
        run.rejected_rows = summary.rejected_rows
        run.inserted_rows = summary.inserted_rows
        run.field_mapping_json = field_mapping
        run.report_json = summary.to_dict()
        run.started_at = summary.started_at
        run.completed_at = summary.completed_at
        run.error_message = None
        self._session.flush()
        return run

    def mark_failed(self, run: ImportRun, *, error_message: str, details: dict[str, Any] | None = None) -> ImportRun:
        run.status = ImportRunStatus.FAILED
        run.error_message = error_message
        run.report_json = details
        self._session.flush()
        return run
