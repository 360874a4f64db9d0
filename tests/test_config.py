from __future__ import annotations

import os
from pathlib import Path

import pytest

from app.config import BulkImportSettings, load_bulk_import_settings
from db.config import load_env_files, normalize_postgres_url

_SETTINGS_ENV = (
    "BULK_IMPORT_CHUNK_SIZE",
    "BULK_IMPORT_MAX_DISPLAYED_REJECTIONS",
    "BULK_IMPORT_LOG_REJECTIONS",
    "BULK_IMPORT_TARGET_TABLE",
    "BULK_IMPORT_DEFAULT_DELIMITER",
    "BULK_IMPORT_BATCH_TIMEOUT_MS",
)


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env: pytest.MonkeyPatch) -> None:
    assert load_bulk_import_settings() == BulkImportSettings()


def test_reads_environment(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("BULK_IMPORT_CHUNK_SIZE", "250")
    clean_env.setenv("BULK_IMPORT_MAX_DISPLAYED_REJECTIONS", "50")
    clean_env.setenv("BULK_IMPORT_LOG_REJECTIONS", "false")
    clean_env.setenv("BULK_IMPORT_TARGET_TABLE", "ihtiyac_sahipleri")
    clean_env.setenv("BULK_IMPORT_DEFAULT_DELIMITER", "\\t")
    clean_env.setenv("BULK_IMPORT_BATCH_TIMEOUT_MS", "30000")

    settings = load_bulk_import_settings()

    assert settings.chunk_size == 250
    assert settings.max_displayed_rejections == 50
    assert settings.log_rejections is False
    assert settings.target_table == "ihtiyac_sahipleri"
    assert settings.default_delimiter == "\t"
    assert settings.batch_statement_timeout_ms == 30000


def test_invalid_values_fall_back(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("BULK_IMPORT_CHUNK_SIZE", "lots")
    clean_env.setenv("BULK_IMPORT_DEFAULT_DELIMITER", "::")
    clean_env.setenv("BULK_IMPORT_BATCH_TIMEOUT_MS", "0")

    settings = load_bulk_import_settings()

    assert settings.chunk_size == 500
    assert settings.default_delimiter == "auto"
    assert settings.batch_statement_timeout_ms is None


def test_load_env_files_keeps_process_values(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / ".env").write_text(
        "export BULK_TEST_A='from-file'\nBULK_TEST_B=\"file\"\n# comment\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("BULK_TEST_A", "placeholder")
    monkeypatch.delenv("BULK_TEST_A")
    monkeypatch.setenv("BULK_TEST_B", "process")

    load_env_files(tmp_path)

    assert os.environ["BULK_TEST_A"] == "from-file"
    assert os.environ["BULK_TEST_B"] == "process"


def test_normalize_postgres_url() -> None:
    assert normalize_postgres_url("postgres://u:p@h/db") == "postgresql+psycopg://u:p@h/db"
    assert normalize_postgres_url("postgresql+psycopg://u:p@h/db") == "postgresql+psycopg://u:p@h/db"
