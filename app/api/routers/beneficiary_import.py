"""
app/api/routers/beneficiary_import.py

Beneficiary bulk-import HTTP endpoints.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import Literal

from fastapi import APIRouter, Depends, Form, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_bulk_import_service, get_csv_upload
from app.mappers.header_mapper import HeaderMappingError
from app.parsers.file_intake import FileIntakeError
from app.repositories.import_run_repository import ImportRunRepository
from app.repositories.mapping_config_repository import MappingConfigRepository
from app.schemas.bulk_import import (
    FieldMappingResponse,
    ImportPreviewResponse,
    ImportRunResponse,
    IngestionReportResponse,
)
from app.services.bulk_import_service import BulkImportService
from db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/beneficiaries/import", tags=["beneficiary-import"])

DelimiterOption = Literal["auto", ",", ";", "\t", "|"]


@router.post("/preview", response_model=ImportPreviewResponse)
def preview_import(
    file: UploadFile = Depends(get_csv_upload),
    delimiter: DelimiterOption | None = Query(default=None, description="Column delimiter or 'auto'"),
    import_service: BulkImportService = Depends(get_bulk_import_service),
) -> ImportPreviewResponse:
    """
    Parse a file and return its headers with the default field mapping.
    """

    try:
        preview = import_service.preview(file.file.read(), delimiter=delimiter)
    except FileIntakeError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    finally:
        file.file.close()

    return ImportPreviewResponse(
        headers=list(preview.headers),
        delimiter=preview.delimiter,
        row_count=preview.row_count,
        field_mapping=FieldMappingResponse.from_mapping(preview.mapping),
    )


@router.post("", response_model=IngestionReportResponse)
def run_import(
    file: UploadFile = Depends(get_csv_upload),
    delimiter: DelimiterOption | None = Query(default=None, description="Column delimiter or 'auto'"),
    mapping_config_name: str | None = Query(default=None, description="Optional saved mapping config name"),
    organization: str | None = Query(default=None, description="Optional organization to scope mapping config"),
    save_mapping_as: str | None = Query(default=None, description="Store the resolved mapping under this config name"),
    mapping: str | None = Form(default=None, description="JSON object of canonical field -> header overrides"),
    db: Session = Depends(get_db),
    import_service: BulkImportService = Depends(get_bulk_import_service),
) -> IngestionReportResponse:
    """
    Import one file into beneficiary records and return the run report.
    """

    manual_overrides = _parse_mapping_form(mapping)
    runs = ImportRunRepository(db)
    run = runs.create_run(filename=file.filename, delimiter=delimiter)
    db.commit()

    mapping_config = None
    if mapping_config_name or organization:
        mapping_config = MappingConfigRepository(db).get_active(
            name=mapping_config_name,
            organization=organization,
        )

    try:
        result = import_service.run(
            file.file.read(),
            delimiter=delimiter,
            manual_overrides=manual_overrides,
            mapping_config=mapping_config,
        )
    except HeaderMappingError as exc:
        runs.mark_failed(run, error_message=exc.message, details=exc.to_dict())
        db.commit()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.to_dict()) from exc
    except FileIntakeError as exc:
        runs.mark_failed(run, error_message=str(exc))
        db.commit()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        db.rollback()
        runs.mark_failed(run, error_message=str(exc) or type(exc).__name__)
        db.commit()
        logger.exception("Bulk import run aborted run_id=%s", run.id)
        raise
    finally:
        file.file.close()

    field_mapping = result.mapping.to_dict()
    run.delimiter = result.delimiter
    runs.record_summary(run, summary=result.summary, field_mapping=field_mapping)
    if save_mapping_as and save_mapping_as.strip():
        MappingConfigRepository(db).save_field_mapping(
            name=save_mapping_as,
            mapping=result.mapping,
            organization=organization,
            notes=f"Saved from import run {run.id}",
        )
    db.commit()
    logger.info("Bulk import run stored run_id=%s status=%s", run.id, run.status)

    return IngestionReportResponse.from_summary(result.summary, run_id=run.id, field_mapping=field_mapping)


@router.get("/runs/{run_id}", response_model=ImportRunResponse)
def get_import_run(run_id: uuid.UUID, db: Session = Depends(get_db)) -> ImportRunResponse:
    """
    Return one stored import run.
    """

    run = ImportRunRepository(db).get_run(run_id)
    if run is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Import run not found.")

    return ImportRunResponse(
        run_id=run.id,
        status=run.status,
        filename=run.filename,
        delimiter=run.delimiter,
        total_rows=run.total_rows,
        validated_rows=run.validated_rows,
        rejected_rows=run.rejected_rows,
        inserted_rows=run.inserted_rows,
        error_message=run.error_message,
        field_mapping=run.field_mapping_json,
        report=run.report_json,
        started_at=run.started_at,
        completed_at=run.completed_at,
    )


def _parse_mapping_form(raw: str | None) -> dict[str, str | None] | None:
    if raw is None or not raw.strip():
        return None
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="mapping must be a JSON object.",
        ) from exc
    if not isinstance(parsed, dict) or not all(
        isinstance(key, str) and (value is None or isinstance(value, str)) for key, value in parsed.items()
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="mapping must map canonical field names to header strings or null.",
        )
    return parsed
