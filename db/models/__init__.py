"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.beneficiary import Beneficiary
from db.models.import_run import ImportRun
from db.models.mapping_config import MappingConfig

__all__ = [
    "Beneficiary",
    "ImportRun",
    "MappingConfig",
]
