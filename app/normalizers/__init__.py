"""
app/normalizers package marker.
"""

from app.normalizers.date_normalizer import DEFAULT_DATE_STRATEGIES, DateNormalizer, DateStrategy
from app.normalizers.row_normalizer import RowNormalizer, clean_cell

__all__ = [
    "DEFAULT_DATE_STRATEGIES",
    "DateNormalizer",
    "DateStrategy",
    "RowNormalizer",
    "clean_cell",
]
