"""
tests/test_bulk_import_service.py

End-to-end tests for BulkImportService with an in-memory record store.
"""

from __future__ import annotations

from collections.abc import Sequence

import pytest

from app.config import BulkImportSettings
from app.domain.beneficiary import NormalizedRecord
from app.domain.ingestion_report import ImportRunStatus, IngestionReport
from app.mappers.header_mapper import HeaderMappingError
from app.parsers.file_intake import FileIntakeError, ParsedFile
from app.repositories.record_store import InsertResult
from app.services.batch_committer import CancellationToken
from app.services.bulk_import_service import BulkImportService


class MemoryStore:
    def __init__(self, *, fail_batches: set[int] | None = None) -> None:
        self.batches: list[list[NormalizedRecord]] = []
        self.tables: list[str] = []
        self._fail_batches = fail_batches or set()

    def insert_many(self, table: str, records: Sequence[NormalizedRecord]) -> InsertResult:
        self.tables.append(table)
        self.batches.append(list(records))
        if len(self.batches) in self._fail_batches:
            return InsertResult(error="statement timeout")
        return InsertResult(inserted_count=len(records))

    @property
    def records(self) -> list[NormalizedRecord]:
        return [
            record
            for index, batch in enumerate(self.batches, start=1)
            if index not in self._fail_batches
            for record in batch
        ]


def _service(store: MemoryStore, **overrides: object) -> BulkImportService:
    return BulkImportService(settings=BulkImportSettings(**overrides), store=store)


def _csv(*lines: str) -> bytes:
    return ("\n".join(lines) + "\n").encode("utf-8")


def test_turkish_file_end_to_end() -> None:
    store = MemoryStore()
    file_bytes = _csv("Ad,Soyad,Doğum Tarihi", "Ali,Veli,01.02.1990", ",,x")

    result = _service(store).run(file_bytes)
    summary = result.summary

    assert summary.total_rows == 2
    assert summary.validated_rows == 1
    assert summary.rejected_rows == 1
    assert summary.inserted_rows == 1
    assert summary.status == ImportRunStatus.PARTIAL_SUCCESS
    assert summary.progress == 100
    assert summary.rejections[0].row_number == 2
    assert store.records[0].first_name == "Ali"
    assert store.records[0].birth_date == "1990-02-01"
    assert store.tables == ["beneficiaries"]
    assert result.delimiter == ","
    assert result.mapping["birth_date"] == "Doğum Tarihi"


def test_parsed_rows_with_empty_row_end_to_end() -> None:
    store = MemoryStore()
    parsed = ParsedFile(
        headers=("Ad", "Soyad", "Doğum Tarihi"),
        rows=(
            {"Ad": "Ayşe", "Soyad": "Yılmaz", "Doğum Tarihi": "01.02.1990"},
            {"Ad": "", "Soyad": "", "Doğum Tarihi": ""},
        ),
        delimiter=",",
    )

    summary = _service(store).run_parsed(parsed).summary

    assert (summary.total_rows, summary.validated_rows, summary.rejected_rows) == (2, 1, 1)
    assert summary.inserted_rows == 1
    assert summary.rejections[0].row_number == 2
    assert summary.rejections[0].code == "identity_fields_missing"
    assert store.records[0].first_name == "Ayşe"
    assert store.records[0].last_name == "Yılmaz"
    assert store.records[0].birth_date == "1990-02-01"


def test_blank_line_in_file_is_dropped_before_counting() -> None:
    summary = _service(MemoryStore()).run(_csv("Ad,Soyad,Doğum Tarihi", "Ayşe,Yılmaz,01.02.1990", ",,")).summary

    assert (summary.total_rows, summary.validated_rows, summary.rejected_rows) == (1, 1, 0)


def test_counts_add_up_and_rows_are_submitted_once() -> None:
    lines = ["Ad;Soyad;Eposta"]
    for index in range(1, 1201):
        if index % 10 == 0:
            lines.append(f";;x{index}@example.com")
        elif index % 7 == 0:
            lines.append(f"Ad{index};Soyad{index};broken")
        else:
            lines.append(f"Ad{index};Soyad{index};a{index}@example.com")
    store = MemoryStore()

    summary = _service(store, chunk_size=500).run(_csv(*lines)).summary

    assert summary.total_rows == 1200
    assert summary.validated_rows + summary.rejected_rows == summary.total_rows
    assert summary.inserted_rows <= summary.validated_rows
    assert summary.inserted_rows == summary.validated_rows
    assert [len(batch) for batch in store.batches][:-1] == [500] * (len(store.batches) - 1)
    submitted = [record.first_name for record in store.records]
    assert len(submitted) == len(set(submitted)) == summary.validated_rows
    assert len(summary.rejections) == 200
    assert summary.rejections_truncated is True


def test_failed_batch_yields_partial_success() -> None:
    store = MemoryStore(fail_batches={1})
    lines = ["Ad,Soyad"] + [f"Ad{index},Soyad{index}" for index in range(4)]

    summary = _service(store, chunk_size=2).run(_csv(*lines)).summary

    assert summary.inserted_rows == 2
    assert summary.status == ImportRunStatus.PARTIAL_SUCCESS
    assert summary.failed_batches[0].batch_index == 1


def test_all_rows_rejected_is_failed() -> None:
    store = MemoryStore()

    summary = _service(store).run(_csv("Ad,Soyad,Eposta", ",,a@b.com")).summary

    assert summary.status == ImportRunStatus.FAILED
    assert store.batches == []


def test_manual_override_is_applied() -> None:
    store = MemoryStore()

    result = _service(store).run(
        _csv("Isim,Soyad", "Ali,Veli"),
        manual_overrides={"first_name": "Isim"},
    )

    assert result.mapping["first_name"] == "Isim"
    assert store.records[0].first_name == "Ali"


def test_bad_override_aborts_before_any_insert() -> None:
    store = MemoryStore()

    with pytest.raises(HeaderMappingError):
        _service(store).run(_csv("Ad", "Ali"), manual_overrides={"last_name": "Soyisim"})

    assert store.batches == []


def test_undecodable_file_raises() -> None:
    with pytest.raises(FileIntakeError):
        _service(MemoryStore()).run(b"\xff\xfe\x00A")


def test_external_report_tracks_progress_and_cancellation() -> None:
    store = MemoryStore()
    token = CancellationToken()
    report = IngestionReport()
    lines = ["Ad,Soyad"] + [f"Ad{index},Soyad{index}" for index in range(6)]

    token.cancel()
    result = _service(store, chunk_size=2).run(_csv(*lines), report=report, cancellation=token)

    assert store.batches == []
    assert result.summary.status == ImportRunStatus.CANCELLED
    assert report.status == ImportRunStatus.CANCELLED
    assert result.summary.validated_rows == 6


def test_preview_returns_headers_and_default_mapping() -> None:
    preview = _service(MemoryStore()).preview(_csv("Ad\tSoyad\tİlçe", "Ali\tVeli\tKadıköy"))

    assert preview.headers == ("Ad", "Soyad", "İlçe")
    assert preview.delimiter == "\t"
    assert preview.row_count == 1
    assert preview.mapping["district"] == "İlçe"


def test_log_lines_describe_the_run() -> None:
    summary = _service(MemoryStore()).run(_csv("Ad,Soyad", "Ali,Veli")).summary

    assert summary.log[0].startswith("File parsed: 1 rows")
    assert summary.log[-1] == "Import finished. Total inserted records: 1."
