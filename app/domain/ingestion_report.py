"""
app/domain/ingestion_report.py

Run-scoped aggregate of counts, rejections, batch failures and log lines.

The pipeline is the only writer of an IngestionReport; callers read it through
``snapshot()``, which returns an immutable IngestionSummary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from app.domain.beneficiary import Rejected

DEFAULT_MAX_DISPLAYED_REJECTIONS = 200


class ImportRunStatus:
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    PARTIAL_SUCCESS = "partial_success"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class RowRejection:
    """
    One rejected input row.
    """

    row_number: int
    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class BatchFailure:
    """
    One batch the record store refused as a whole.
    """

    batch_index: int
    size: int
    error: str


@dataclass(frozen=True)
class IngestionSummary:
    """
    Read-only view of an IngestionReport at one point in time.
    """

    status: str
    total_rows: int
    validated_rows: int
    rejected_rows: int
    inserted_rows: int
    progress: int
    rejections: tuple[RowRejection, ...] = ()
    rejections_truncated: bool = False
    failed_batches: tuple[BatchFailure, ...] = ()
    log: tuple[str, ...] = ()
    started_at: datetime | None = None
    completed_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "total_rows": self.total_rows,
            "validated_rows": self.validated_rows,
            "rejected_rows": self.rejected_rows,
            "inserted_rows": self.inserted_rows,
            "progress": self.progress,
            "rejections": [
                {
                    "row_number": item.row_number,
                    "code": item.code,
                    "message": item.message,
                    "field": item.field,
                }
                for item in self.rejections
            ],
            "rejections_truncated": self.rejections_truncated,
            "failed_batches": [
                {"batch_index": item.batch_index, "size": item.size, "error": item.error}
                for item in self.failed_batches
            ],
            "log": list(self.log),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


@dataclass
class IngestionReport:
    """
    Mutable aggregate for one import run.

    ``rejected_rows`` is always exact; ``rejections`` keeps only the first
    ``max_displayed_rejections`` entries for display.
    """

    max_displayed_rejections: int = DEFAULT_MAX_DISPLAYED_REJECTIONS
    status: str = ImportRunStatus.PENDING
    total_rows: int = 0
    validated_rows: int = 0
    rejected_rows: int = 0
    inserted_rows: int = 0
    progress: int = 0
    cancelled: bool = False
    rejections: list[RowRejection] = field(default_factory=list)
    failed_batches: list[BatchFailure] = field(default_factory=list)
    started_at: datetime | None = None
    completed_at: datetime | None = None
    _log: list[str] = field(default_factory=list, repr=False)

    @property
    def log(self) -> tuple[str, ...]:
        return tuple(self._log)

    def add_log(self, message: str) -> None:
        self._log.append(message)

    def start(self, total_rows: int) -> None:
        self.status = ImportRunStatus.RUNNING
        self.total_rows = total_rows
        self.started_at = datetime.now(timezone.utc)

    def record_accepted(self) -> None:
        self.validated_rows += 1

    def record_rejection(self, outcome: Rejected) -> None:
        self.rejected_rows += 1
        if len(self.rejections) < self.max_displayed_rejections:
            self.rejections.append(
                RowRejection(
                    row_number=outcome.row_number,
                    code=outcome.code,
                    message=outcome.reason,
                    field=outcome.field,
                )
            )

    def record_inserted(self, count: int) -> None:
        self.inserted_rows += count

    def record_batch_failure(self, failure: BatchFailure) -> None:
        self.failed_batches.append(failure)

    def mark_cancelled(self) -> None:
        self.cancelled = True

    def finish(self) -> None:
        if self.cancelled:
            self.status = ImportRunStatus.CANCELLED
        elif self.total_rows and not self.inserted_rows:
            self.status = ImportRunStatus.FAILED
        elif self.failed_batches or self.rejected_rows:
            self.status = ImportRunStatus.PARTIAL_SUCCESS
        else:
            self.status = ImportRunStatus.COMPLETED
        self.completed_at = datetime.now(timezone.utc)

    def snapshot(self) -> IngestionSummary:
        return IngestionSummary(
            status=self.status,
            total_rows=self.total_rows,
            validated_rows=self.validated_rows,
            rejected_rows=self.rejected_rows,
            inserted_rows=self.inserted_rows,
            progress=self.progress,
            rejections=tuple(self.rejections),
            rejections_truncated=self.rejected_rows > len(self.rejections),
            failed_batches=tuple(self.failed_batches),
            log=tuple(self._log),
            started_at=self.started_at,
            completed_at=self.completed_at,
        )
