"""
app/schemas package marker.
"""

from app.schemas.bulk_import import (
    BatchFailureResponse,
    FieldMappingResponse,
    ImportPreviewResponse,
    ImportRunResponse,
    IngestionReportResponse,
    RowRejectionResponse,
)

__all__ = [
    "BatchFailureResponse",
    "FieldMappingResponse",
    "ImportPreviewResponse",
    "ImportRunResponse",
    "IngestionReportResponse",
    "RowRejectionResponse",
]
