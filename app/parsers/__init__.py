"""
app/parsers package marker.
"""

from app.parsers.file_intake import (
    AUTO_DELIMITER,
    FileIntakeError,
    ParsedFile,
    detect_delimiter,
    parse_delimited_file,
)

__all__ = [
    "AUTO_DELIMITER",
    "FileIntakeError",
    "ParsedFile",
    "detect_delimiter",
    "parse_delimited_file",
]
