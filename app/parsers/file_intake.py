"""
app/parsers/file_intake.py

Parse uploaded delimited text into headers and raw per-row field maps.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass

from app.domain.beneficiary import RawRecord

logger = logging.getLogger(__name__)

AUTO_DELIMITER = "auto"
DEFAULT_DELIMITER = ","
DELIMITER_CANDIDATES: tuple[str, ...] = (",", ";", "\t", "|")


class FileIntakeError(ValueError):
    """
    Raised when an uploaded file cannot be decoded or structurally parsed.
    """


@dataclass(frozen=True)
class ParsedFile:
    """
    Result of parsing one uploaded file.
    """

    headers: tuple[str, ...]
    rows: tuple[RawRecord, ...]
    delimiter: str

    @property
    def row_count(self) -> int:
        return len(self.rows)


def detect_delimiter(first_line: str) -> str:
    """
    Pick the candidate delimiter occurring most often in the header line.
    """

    best = DEFAULT_DELIMITER
    best_count = 0
    for candidate in DELIMITER_CANDIDATES:
        count = first_line.count(candidate)
        if count > best_count:
            best = candidate
            best_count = count
    return best


def resolve_delimiter(text: str, delimiter_hint: str | None) -> str:
    if delimiter_hint and delimiter_hint != AUTO_DELIMITER:
        if len(delimiter_hint) != 1:
            raise FileIntakeError(f"Delimiter must be a single character, got {delimiter_hint!r}.")
        return delimiter_hint
    first_line = text.splitlines()[0] if text else ""
    return detect_delimiter(first_line)


def parse_delimited_file(file_bytes: bytes, delimiter_hint: str | None = AUTO_DELIMITER) -> ParsedFile:
    """
    Decode and parse a delimited file.

    Blank rows are dropped. Short rows are padded with empty cells and surplus
    cells are ignored. When a header is duplicated, the first column with that
    name supplies the value in each RawRecord.

    A cell over ``csv.field_size_limit()`` makes the whole file unreadable
    and raises FileIntakeError.
    """

    try:
        text = file_bytes.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise FileIntakeError("File must be UTF-8 encoded.") from exc

    delimiter = resolve_delimiter(text, delimiter_hint)
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)

    try:
        header_row = next(reader, None)
        if header_row is None or not any(cell.strip() for cell in header_row):
            raise FileIntakeError("Header row is missing.")
        headers = tuple(cell.strip() for cell in header_row)

        rows: list[RawRecord] = []
        dropped = 0
        for cells in reader:
            if all(not cell.strip() for cell in cells):
                dropped += 1
                continue
            rows.append(_build_raw_record(headers, cells))
    except csv.Error as exc:
        raise FileIntakeError(f"Invalid delimited file format: {exc}") from exc

    logger.info(
        "Parsed delimited file delimiter=%r headers=%d rows=%d blank_rows_dropped=%d",
        delimiter,
        len(headers),
        len(rows),
        dropped,
    )
    return ParsedFile(headers=headers, rows=tuple(rows), delimiter=delimiter)


def _build_raw_record(headers: tuple[str, ...], cells: list[str]) -> RawRecord:
    record: RawRecord = {}
    for position, header in enumerate(headers):
        if header in record:
            continue
        record[header] = cells[position] if position < len(cells) else ""
    return record
