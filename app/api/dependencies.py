"""
app/api/dependencies.py

Shared FastAPI dependencies for bulk-import requests.
"""

from __future__ import annotations

from fastapi import Depends, File, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from app.config import BulkImportSettings, load_bulk_import_settings
from app.repositories.record_store import RecordStore, SqlAlchemyRecordStore
from app.services.bulk_import_service import BulkImportService
from db.session import get_db

CSV_CONTENT_TYPES = {
    "text/csv",
    "text/plain",
    "text/tab-separated-values",
    "application/csv",
    "application/vnd.ms-excel",
}
DELIMITED_EXTENSIONS = (".csv", ".tsv", ".txt")


def get_csv_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Validate that the uploaded file is delimited text by extension or MIME type.
    """

    filename = (file.filename or "").strip().lower()
    content_type = (file.content_type or "").strip().lower()

    is_csv_filename = filename.endswith(DELIMITED_EXTENSIONS)
    is_csv_content_type = content_type in CSV_CONTENT_TYPES

    if not is_csv_filename and not is_csv_content_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only delimited text files (CSV) are allowed.",
        )

    return file


def get_bulk_import_settings() -> BulkImportSettings:
    return load_bulk_import_settings()


def get_record_store(
    db: Session = Depends(get_db),
    settings: BulkImportSettings = Depends(get_bulk_import_settings),
) -> RecordStore:
    return SqlAlchemyRecordStore(db, statement_timeout_ms=settings.batch_statement_timeout_ms)


def get_bulk_import_service(
    settings: BulkImportSettings = Depends(get_bulk_import_settings),
    store: RecordStore = Depends(get_record_store),
) -> BulkImportService:
    return BulkImportService(settings=settings, store=store)
