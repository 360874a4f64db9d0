"""
app/services/batch_committer.py

Sequential, bounded-size submission of accepted records to a record store.

A batch the store refuses is logged and skipped: it is neither retried nor
split into single rows, and the run moves on to the next batch.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator, Sequence

from app.domain.beneficiary import NormalizedRecord
from app.domain.ingestion_report import BatchFailure, IngestionReport, IngestionSummary
from app.logging_utils import log_event
from app.repositories.record_store import RecordStore

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 500

ProgressCallback = Callable[[IngestionSummary], None]


class CancellationToken:
    """
    Cooperative cancellation flag, checked between batches.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def partition(records: Sequence[NormalizedRecord], chunk_size: int) -> Iterator[Sequence[NormalizedRecord]]:
    """
    Yield consecutive slices of at most ``chunk_size`` records.
    """

    size = max(1, chunk_size)
    for start in range(0, len(records), size):
        yield records[start : start + size]


class BatchCommitter:
    """
    Submits accepted records batch by batch and keeps the report current.
    """

    def __init__(
        self,
        *,
        store: RecordStore,
        table: str,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self._store = store
        self._table = table
        self._chunk_size = max(1, chunk_size)

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    def run(
        self,
        accepted_records: Sequence[NormalizedRecord],
        report: IngestionReport | None = None,
        *,
        cancellation: CancellationToken | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> IngestionReport:
        """
        Commit ``accepted_records`` in order. Without a report, a fresh one is
        created whose total and validated counts equal the input length.
        """

        total = len(accepted_records)
        if report is None:
            report = IngestionReport()
            report.start(total)
            report.validated_rows = total
        batch_count = -(-total // self._chunk_size)
        processed = 0

        for batch_index, batch in enumerate(partition(accepted_records, self._chunk_size), start=1):
            if cancellation is not None and cancellation.cancelled:
                report.mark_cancelled()
                report.add_log(f"Import cancelled before batch {batch_index}/{batch_count}.")
                log_event(
                    logger,
                    logging.WARNING,
                    "bulk_import.cancelled",
                    table=self._table,
                    batch_index=batch_index,
                    batch_count=batch_count,
                )
                return report

            result = self._store.insert_many(self._table, batch)
            processed += len(batch)

            if result.error is not None:
                report.record_batch_failure(
                    BatchFailure(batch_index=batch_index, size=len(batch), error=result.error)
                )
                report.add_log(f"Batch {batch_index}/{batch_count}: insert failed: {result.error}")
                log_event(
                    logger,
                    logging.ERROR,
                    "bulk_import.batch_failed",
                    table=self._table,
                    batch_index=batch_index,
                    batch_size=len(batch),
                    error=result.error,
                )
            else:
                # a store never inserts more than it was given
                inserted = len(batch) if result.inserted_count is None else min(result.inserted_count, len(batch))
                report.record_inserted(inserted)
                report.add_log(f"Batch {batch_index}/{batch_count}: {inserted} records inserted.")
                log_event(
                    logger,
                    logging.INFO,
                    "bulk_import.batch_inserted",
                    table=self._table,
                    batch_index=batch_index,
                    batch_size=len(batch),
                    inserted=inserted,
                )

            report.progress = processed * 100 // total
            if on_progress is not None:
                on_progress(report.snapshot())

        if total == 0:
            report.progress = 100
        return report
