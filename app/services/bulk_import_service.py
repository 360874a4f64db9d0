"""
app/services/bulk_import_service.py

Service layer for beneficiary bulk import.

One run is a single sequential task: parse, map, normalize, validate, then
commit accepted rows batch by batch. Rejected rows and refused batches are
recorded in the IngestionReport; only an unreadable file or an unusable
mapping override aborts the run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from app.config import BulkImportSettings
from app.domain.beneficiary import Accepted, NormalizedRecord
from app.domain.ingestion_report import IngestionReport, IngestionSummary
from app.mappers.header_mapper import FieldMapping, HeaderMapper
from app.normalizers.row_normalizer import RowNormalizer
from app.parsers.file_intake import ParsedFile, parse_delimited_file
from app.repositories.record_store import RecordStore
from app.services.batch_committer import BatchCommitter, CancellationToken, ProgressCallback
from app.validators.row_validator import RowValidator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportPreview:
    """
    Parsed headers and the default mapping, for review before committing.
    """

    headers: tuple[str, ...]
    delimiter: str
    row_count: int
    mapping: FieldMapping


@dataclass(frozen=True)
class ImportResult:
    """
    Final summary of a run together with the mapping it used.
    """

    summary: IngestionSummary
    mapping: FieldMapping
    delimiter: str


class BulkImportService:
    """
    Coordinates file intake, header mapping, normalization, validation and
    batched persistence for beneficiary records.
    """

    def __init__(
        self,
        *,
        settings: BulkImportSettings,
        store: RecordStore,
        mapper: HeaderMapper | None = None,
        normalizer: RowNormalizer | None = None,
        validator: RowValidator | None = None,
    ) -> None:
        self._settings = settings
        self._store = store
        self._mapper = mapper or HeaderMapper()
        self._normalizer = normalizer or RowNormalizer()
        self._validator = validator or RowValidator()

    def preview(self, file_bytes: bytes, *, delimiter: str | None = None) -> ImportPreview:
        parsed = self._parse(file_bytes, delimiter)
        return ImportPreview(
            headers=parsed.headers,
            delimiter=parsed.delimiter,
            row_count=parsed.row_count,
            mapping=self._mapper.build_default_mapping(parsed.headers),
        )

    def run(
        self,
        file_bytes: bytes,
        *,
        delimiter: str | None = None,
        field_mapping: FieldMapping | None = None,
        manual_overrides: Mapping[str, str | None] | None = None,
        mapping_config: Any | None = None,
        report: IngestionReport | None = None,
        cancellation: CancellationToken | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> ImportResult:
        """
        Import one file end to end.

        ``field_mapping`` is used as-is when given (e.g. after a review step);
        otherwise the default mapping is resolved and the saved config and
        manual overrides are applied on top. Pass ``report`` to read progress
        while the run is in flight.

        Raises:
            FileIntakeError: the file cannot be decoded or parsed.
            HeaderMappingError: an override names an unknown field or header.
        """

        return self.run_parsed(
            self._parse(file_bytes, delimiter),
            field_mapping=field_mapping,
            manual_overrides=manual_overrides,
            mapping_config=mapping_config,
            report=report,
            cancellation=cancellation,
            on_progress=on_progress,
        )

    def run_parsed(
        self,
        parsed: ParsedFile,
        *,
        field_mapping: FieldMapping | None = None,
        manual_overrides: Mapping[str, str | None] | None = None,
        mapping_config: Any | None = None,
        report: IngestionReport | None = None,
        cancellation: CancellationToken | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> ImportResult:
        """
        Import rows that are already split into headers and raw records.

        Every row in ``parsed.rows`` counts toward the total, including rows
        whose cells are all empty; those are rejected by validation.
        """

        mapping = field_mapping or self._mapper.resolve_mapping(
            parsed.headers,
            manual_overrides=manual_overrides,
            mapping_config=mapping_config,
        )

        report = report or IngestionReport(max_displayed_rejections=self._settings.max_displayed_rejections)
        report.start(parsed.row_count)
        report.add_log(f"File parsed: {parsed.row_count} rows, {len(parsed.headers)} columns.")
        unmapped = [field.value for field in mapping.unmapped_fields()]
        if unmapped:
            report.add_log(f"Unmapped fields: {', '.join(unmapped)}.")

        accepted = self._classify_rows(parsed, mapping, report)
        if report.rejected_rows:
            report.add_log(
                f"{report.rejected_rows} rows failed validation; {report.validated_rows} valid rows will be imported."
            )

        if accepted:
            report.add_log("Import started.")
        committer = BatchCommitter(
            store=self._store,
            table=self._settings.target_table,
            chunk_size=self._settings.chunk_size,
        )
        committer.run(accepted, report, cancellation=cancellation, on_progress=on_progress)

        report.finish()
        report.add_log(f"Import finished. Total inserted records: {report.inserted_rows}.")
        logger.info(
            "Bulk import finished status=%s total=%d validated=%d rejected=%d inserted=%d failed_batches=%d",
            report.status,
            report.total_rows,
            report.validated_rows,
            report.rejected_rows,
            report.inserted_rows,
            len(report.failed_batches),
        )
        return ImportResult(summary=report.snapshot(), mapping=mapping, delimiter=parsed.delimiter)

    def _parse(self, file_bytes: bytes, delimiter: str | None) -> ParsedFile:
        return parse_delimited_file(file_bytes, delimiter or self._settings.default_delimiter)

    def _classify_rows(
        self,
        parsed: ParsedFile,
        mapping: FieldMapping,
        report: IngestionReport,
    ) -> list[NormalizedRecord]:
        accepted: list[NormalizedRecord] = []
        for row_number, raw in enumerate(parsed.rows, start=1):
            record = self._normalizer.normalize(raw, mapping)
            outcome = self._validator.validate(record, row_number)
            if isinstance(outcome, Accepted):
                accepted.append(outcome.record)
                report.record_accepted()
                continue

            report.record_rejection(outcome)
            if self._settings.log_rejections:
                logger.warning(
                    "Bulk import row rejected row=%s code=%s message=%s",
                    outcome.row_number,
                    outcome.code,
                    outcome.reason,
                )
        return accepted
