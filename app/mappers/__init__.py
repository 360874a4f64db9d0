"""
app/mappers package marker.
"""

from app.mappers.header_mapper import (
    DEFAULT_HEADER_ALIASES,
    FieldMapping,
    HeaderMapper,
    HeaderMappingError,
    MappingErrorDetail,
    MatchStrategy,
    normalize_header,
)

__all__ = [
    "DEFAULT_HEADER_ALIASES",
    "FieldMapping",
    "HeaderMapper",
    "HeaderMappingError",
    "MappingErrorDetail",
    "MatchStrategy",
    "normalize_header",
]
