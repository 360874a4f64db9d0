"""
app/domain package marker.
"""

from app.domain.beneficiary import (
    CANONICAL_FIELDS,
    Accepted,
    CanonicalField,
    NormalizedRecord,
    RawRecord,
    Rejected,
    ValidationOutcome,
)
from app.domain.ingestion_report import (
    BatchFailure,
    ImportRunStatus,
    IngestionReport,
    IngestionSummary,
    RowRejection,
)

__all__ = [
    "Accepted",
    "BatchFailure",
    "CANONICAL_FIELDS",
    "CanonicalField",
    "ImportRunStatus",
    "IngestionReport",
    "IngestionSummary",
    "NormalizedRecord",
    "RawRecord",
    "Rejected",
    "RowRejection",
    "ValidationOutcome",
]
