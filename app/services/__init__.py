"""
app/services package marker.
"""

from app.services.batch_committer import BatchCommitter, CancellationToken, partition
from app.services.bulk_import_service import BulkImportService, ImportPreview, ImportResult

__all__ = [
    "BatchCommitter",
    "BulkImportService",
    "CancellationToken",
    "ImportPreview",
    "ImportResult",
    "partition",
]
