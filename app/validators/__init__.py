"""
app/validators package marker.
"""

from app.validators.row_validator import IDENTITY_FIELDS_MISSING, MALFORMED_EMAIL, RowValidator

__all__ = [
    "IDENTITY_FIELDS_MISSING",
    "MALFORMED_EMAIL",
    "RowValidator",
]
