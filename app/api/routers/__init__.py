"""
app/api/routers package marker.
"""

from app.api.routers.beneficiary_import import router as beneficiary_import_router

__all__ = [
    "beneficiary_import_router",
]
