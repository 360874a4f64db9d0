"""
tests/test_record_store.py

SqlAlchemyRecordStore and import-run persistence against in-memory SQLite.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.config import BulkImportSettings
from app.domain.beneficiary import NormalizedRecord
from app.domain.ingestion_report import ImportRunStatus
from app.mappers.header_mapper import HeaderMapper
from app.repositories.import_run_repository import ImportRunRepository
from app.repositories.mapping_config_repository import MappingConfigRepository
from app.repositories.record_store import SqlAlchemyRecordStore
from app.services.bulk_import_service import BulkImportService
from db.models import Beneficiary


def _count(session: Session) -> int:
    return session.scalar(select(func.count()).select_from(Beneficiary)) or 0


def test_insert_many_persists_records(db_session: Session) -> None:
    store = SqlAlchemyRecordStore(db_session)
    records = [
        NormalizedRecord(first_name="Ali", last_name="Veli", birth_date="1990-02-01", identity_number="1"),
        NormalizedRecord(first_name="Ayşe", identity_number="2"),
    ]

    result = store.insert_many("beneficiaries", records)

    assert result.ok
    assert result.inserted_count == 2
    stored = db_session.scalars(select(Beneficiary).where(Beneficiary.identity_number == "1")).one()
    assert stored.birth_date == date(1990, 2, 1)
    assert stored.id is not None


def test_unique_violation_refuses_whole_batch(db_session: Session) -> None:
    store = SqlAlchemyRecordStore(db_session)
    store.insert_many("beneficiaries", [NormalizedRecord(first_name="Ali", identity_number="42")])

    result = store.insert_many(
        "beneficiaries",
        [
            NormalizedRecord(first_name="Mehmet", identity_number="43"),
            NormalizedRecord(first_name="Can", identity_number="42"),
        ],
    )

    assert not result.ok
    assert result.error
    assert _count(db_session) == 1


def test_unknown_table_is_reported_not_raised(db_session: Session) -> None:
    result = SqlAlchemyRecordStore(db_session).insert_many("people", [NormalizedRecord(first_name="Ali")])

    assert result.error == "Unknown table 'people'."


def test_empty_batch_is_a_no_op(db_session: Session) -> None:
    result = SqlAlchemyRecordStore(db_session).insert_many("beneficiaries", [])

    assert result.inserted_count == 0


def test_statement_timeout_is_skipped_outside_postgresql(db_session: Session) -> None:
    store = SqlAlchemyRecordStore(db_session, statement_timeout_ms=1000)

    assert store.insert_many("beneficiaries", [NormalizedRecord(first_name="Ali")]).inserted_count == 1


def test_duplicate_batch_skipped_and_next_batch_committed(db_session: Session) -> None:
    service = BulkImportService(
        settings=BulkImportSettings(chunk_size=2),
        store=SqlAlchemyRecordStore(db_session),
    )
    file_bytes = "Ad,Kimlik Numarası\nA,1\nB,1\nC,3\nD,4\n".encode("utf-8")

    summary = service.run(file_bytes).summary

    assert summary.status == ImportRunStatus.PARTIAL_SUCCESS
    assert summary.inserted_rows == 2
    assert [failure.batch_index for failure in summary.failed_batches] == [1]
    assert _count(db_session) == 2


def test_import_run_repository_round_trip(db_session: Session) -> None:
    runs = ImportRunRepository(db_session)
    run = runs.create_run(filename="liste.csv", delimiter=None)
    db_session.commit()

    service = BulkImportService(settings=BulkImportSettings(), store=SqlAlchemyRecordStore(db_session))
    result = service.run(b"Ad,Soyad\nAli,Veli\n")
    runs.record_summary(run, summary=result.summary, field_mapping=result.mapping.to_dict())
    db_session.commit()

    stored = runs.get_run(run.id)
    assert stored is not None
    assert stored.status == ImportRunStatus.COMPLETED
    assert stored.inserted_rows == 1
    assert stored.report_json["inserted_rows"] == 1
    assert stored.field_mapping_json["first_name"] == "Ad"
    assert [item.id for item in runs.list_runs(status=ImportRunStatus.COMPLETED)] == [run.id]


def test_mapping_config_save_and_lookup(db_session: Session) -> None:
    configs = MappingConfigRepository(db_session)
    configs.save(
        name="afad-2024",
        organization="AFAD",
        field_mapping={"identity_number": "TCKN"},
        alias_overrides={"mobile_phone": ["Telefon No"]},
    )
    configs.save(name="afad-2024", organization="AFAD", field_mapping={"identity_number": "TC"})
    db_session.commit()

    found = configs.get_active(name="afad-2024", organization=" AFAD ")

    assert found is not None
    assert found.field_mapping_json == {"identity_number": "TC"}
    assert found.alias_overrides_json is None


def test_mapping_config_organization_falls_back_to_shared(db_session: Session) -> None:
    configs = MappingConfigRepository(db_session)
    configs.save(name="standart", field_mapping={"first_name": "Isim"})
    configs.save(name="standart", organization="Kizilay", field_mapping={"first_name": "Adi"})
    db_session.commit()

    assert configs.get_active(name="standart", organization="Kizilay").field_mapping_json == {"first_name": "Adi"}
    assert configs.get_active(name="standart", organization="AFAD").field_mapping_json == {"first_name": "Isim"}
    assert configs.deactivate(name="standart", organization="Kizilay") is True
    assert configs.get_active(name="standart", organization="Kizilay").organization is None
    assert [config.organization for config in configs.list_active()] == [None]


def test_save_field_mapping_keeps_only_mapped_fields(db_session: Session) -> None:
    mapping = HeaderMapper().build_default_mapping(["Ad", "Soyad", "Not"])

    config = MappingConfigRepository(db_session).save_field_mapping(name="liste", mapping=mapping)

    assert config.field_mapping_json == {"first_name": "Ad", "last_name": "Soyad"}
    assert config.metadata_json == {"source_headers": ["Ad", "Soyad", "Not"]}


def test_impossible_iso_birth_date_refuses_batch(db_session: Session) -> None:
    store = SqlAlchemyRecordStore(db_session)

    result = store.insert_many(
        "beneficiaries",
        [
            NormalizedRecord(first_name="Ali", birth_date="1990-02-01"),
            NormalizedRecord(first_name="Can", birth_date="2023-02-29"),
        ],
    )

    assert not result.ok
    assert "beneficiaries" in result.error
    assert _count(db_session) == 0


def test_non_iso_birth_date_from_custom_strategy_is_reported(db_session: Session) -> None:
    result = SqlAlchemyRecordStore(db_session).insert_many(
        "beneficiaries",
        [NormalizedRecord(first_name="Ali", birth_date="05/03/2024")],
    )

    assert result.error is not None
    assert result.inserted_count is None


def test_impossible_iso_date_fails_only_its_batch(db_session: Session) -> None:
    service = BulkImportService(
        settings=BulkImportSettings(chunk_size=1),
        store=SqlAlchemyRecordStore(db_session),
    )
    file_bytes = "Ad,Doğum Tarihi\nAli,1990-02-01\nCan,2023-02-29\nEce,\n".encode("utf-8")

    summary = service.run(file_bytes).summary

    assert summary.validated_rows == 3
    assert summary.inserted_rows == 2
    assert [failure.batch_index for failure in summary.failed_batches] == [2]
    assert _count(db_session) == 2
