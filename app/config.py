"""
app/config.py

Application-level configuration helpers.

Settings are built by ``load_bulk_import_settings()`` and handed to the
services that need them; nothing here keeps a settings object alive between runs.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

_ALLOWED_DELIMITERS = {"auto", ",", ";", "\t", "|"}


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_optional_int_env(name: str) -> int | None:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None or not raw_value.strip():
        return None
    try:
        return int(raw_value)
    except ValueError:
        return None


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_delimiter_env(name: str, default: str) -> str:
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    if value == "\\t":
        value = "\t"
    candidate = value if value in _ALLOWED_DELIMITERS else value.strip()
    return candidate if candidate in _ALLOWED_DELIMITERS else default


@dataclass(frozen=True)
class BulkImportSettings:
    """
    Runtime settings for one beneficiary bulk-import run.
    """

    chunk_size: int = 500
    max_displayed_rejections: int = 200
    log_rejections: bool = True
    target_table: str = "beneficiaries"
    default_delimiter: str = "auto"
    batch_statement_timeout_ms: int | None = None


def load_bulk_import_settings() -> BulkImportSettings:
    """
    Build bulk-import settings from environment variables.
    """

    timeout_ms = _get_optional_int_env("BULK_IMPORT_BATCH_TIMEOUT_MS")
    return BulkImportSettings(
        chunk_size=max(1, _get_int_env("BULK_IMPORT_CHUNK_SIZE", 500)),
        max_displayed_rejections=max(1, _get_int_env("BULK_IMPORT_MAX_DISPLAYED_REJECTIONS", 200)),
        log_rejections=_get_bool_env("BULK_IMPORT_LOG_REJECTIONS", True),
        target_table=_get_str_env("BULK_IMPORT_TARGET_TABLE", "beneficiaries"),
        default_delimiter=_get_delimiter_env("BULK_IMPORT_DEFAULT_DELIMITER", "auto"),
        batch_statement_timeout_ms=timeout_ms if timeout_ms and timeout_ms > 0 else None,
    )
