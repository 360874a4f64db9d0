"""
app/repositories/record_store.py

Record store contract used by the batch committer, plus its SQLAlchemy implementation.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any, Protocol

from sqlalchemy import Table, insert, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.beneficiary import NormalizedRecord
from db.base import Base

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InsertResult:
    """
    Outcome of one bulk insert. ``inserted_count`` is None when the store
    cannot report a count; ``error`` is set when the batch was refused.
    """

    inserted_count: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class RecordStore(Protocol):
    """
    Bulk-insert collaborator. Implementations report refusals through
    ``InsertResult.error`` instead of raising.
    """

    def insert_many(self, table: str, records: Sequence[NormalizedRecord]) -> InsertResult:
        ...


class SqlAlchemyRecordStore:
    """
    Inserts each call as one transaction: commit on success, rollback and
    report the error on any SQLAlchemy failure.
    """

    def __init__(self, session: Session, *, statement_timeout_ms: int | None = None) -> None:
        self._session = session
        self._statement_timeout_ms = statement_timeout_ms

    def insert_many(self, table: str, records: Sequence[NormalizedRecord]) -> InsertResult:
        if not records:
            return InsertResult(inserted_count=0)

        target = Base.metadata.tables.get(table)
        if target is None:
            return InsertResult(error=f"Unknown table {table!r}.")

        try:
            payloads = [self._to_payload(target, record) for record in records]
        except ValueError as exc:
            logger.warning("Bulk insert into %s refused rows=%d: %s", table, len(records), exc)
            return InsertResult(error=f"Invalid value for {table}: {exc}")

        try:
            self._apply_statement_timeout()
            stmt = insert(target).values(payloads).returning(target.c.id)
            inserted = len(self._session.execute(stmt).all())
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.warning("Bulk insert into %s failed rows=%d: %s", table, len(payloads), exc)
            return InsertResult(error=str(getattr(exc, "orig", None) or exc))
        return InsertResult(inserted_count=inserted)

    def _apply_statement_timeout(self) -> None:
        if self._statement_timeout_ms is None:
            return
        if self._session.get_bind().dialect.name != "postgresql":
            return
        self._session.execute(text(f"SET LOCAL statement_timeout = {int(self._statement_timeout_ms)}"))

    @staticmethod
    def _to_payload(target: Table, record: NormalizedRecord) -> dict[str, Any]:
        payload: dict[str, Any] = {
            key: value for key, value in record.to_payload().items() if key in target.c
        }
        birth_date = payload.get("birth_date")
        if isinstance(birth_date, str):
            payload["birth_date"] = date.fromisoformat(birth_date)
        return payload
