"""
app/schemas/bulk_import.py

Response schemas for beneficiary bulk-import endpoints.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from app.domain.ingestion_report import IngestionSummary
from app.mappers.header_mapper import FieldMapping


class RowRejectionResponse(BaseModel):
    """
    API response model for one rejected row.
    """

    row_number: int = Field(..., ge=1)
    code: str
    message: str
    field: str | None = None


class BatchFailureResponse(BaseModel):
    """
    API response model for one batch refused by the store.
    """

    batch_index: int = Field(..., ge=1)
    size: int = Field(..., ge=0)
    error: str


class FieldMappingResponse(BaseModel):
    """
    Canonical field -> source header, plus how each header was matched.
    """

    mapping: dict[str, str | None]
    strategies: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_mapping(cls, mapping: FieldMapping) -> "FieldMappingResponse":
        return cls(mapping=mapping.to_dict(), strategies=mapping.strategies_dict())


class ImportPreviewResponse(BaseModel):
    headers: list[str]
    delimiter: str
    row_count: int = Field(..., ge=0)
    field_mapping: FieldMappingResponse


class IngestionReportResponse(BaseModel):
    """
    API response model for a bulk-import report.
    """

    run_id: uuid.UUID | None = None
    status: str
    total_rows: int = Field(..., ge=0)
    validated_rows: int = Field(..., ge=0)
    rejected_rows: int = Field(..., ge=0)
    inserted_rows: int = Field(..., ge=0)
    progress: int = Field(..., ge=0, le=100)
    rejections: list[RowRejectionResponse] = Field(default_factory=list)
    rejections_truncated: bool = False
    failed_batches: list[BatchFailureResponse] = Field(default_factory=list)
    log: list[str] = Field(default_factory=list)
    started_at: datetime | None = None
    completed_at: datetime | None = None
    field_mapping: dict[str, str | None] | None = None

    @classmethod
    def from_summary(
        cls,
        summary: IngestionSummary,
        *,
        run_id: uuid.UUID | None = None,
        field_mapping: dict[str, str | None] | None = None,
    ) -> "IngestionReportResponse":
        return cls(
            run_id=run_id,
            status=summary.status,
            total_rows=summary.total_rows,
            validated_rows=summary.validated_rows,
            rejected_rows=summary.rejected_rows,
            inserted_rows=summary.inserted_rows,
            progress=summary.progress,
            rejections=[
                RowRejectionResponse(
                    row_number=item.row_number,
                    code=item.code,
                    message=item.message,
                    field=item.field,
                )
                for item in summary.rejections
            ],
            rejections_truncated=summary.rejections_truncated,
            failed_batches=[
                BatchFailureResponse(batch_index=item.batch_index, size=item.size, error=item.error)
                for item in summary.failed_batches
            ],
            log=list(summary.log),
            started_at=summary.started_at,
            completed_at=summary.completed_at,
            field_mapping=field_mapping,
        )


class ImportRunResponse(BaseModel):
    """
    Persisted import run as stored in history.
    """

    run_id: uuid.UUID
    status: str
    filename: str | None = None
    delimiter: str | None = None
    total_rows: int = 0
    validated_rows: int = 0
    rejected_rows: int = 0
    inserted_rows: int = 0
    error_message: str | None = None
    field_mapping: dict[str, str | None] | None = None
    report: dict | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
