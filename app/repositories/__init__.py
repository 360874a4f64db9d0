"""
app/repositories package marker.
"""

from app.repositories.import_run_repository import ImportRunRepository
from app.repositories.mapping_config_repository import MappingConfigRepository
from app.repositories.record_store import InsertResult, RecordStore, SqlAlchemyRecordStore

__all__ = [
    "ImportRunRepository",
    "InsertResult",
    "MappingConfigRepository",
    "RecordStore",
    "SqlAlchemyRecordStore",
]
