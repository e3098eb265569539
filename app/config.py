"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading settings.
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


@dataclass(frozen=True)
class BulkTransferSettings:
    """
    Runtime settings for bulk import/export.
    """

    max_upload_bytes: int = 10 * 1024 * 1024
    max_import_rows: int = 50_000
    persist_batch_size: int = 500
    log_validation_errors: bool = True
    export_default_limit: int = 10_000
    export_max_limit: int = 100_000


@dataclass(frozen=True)
class DatabaseSettings:
    """
    Connection pool settings; the URL itself comes from db.config.
    """

    echo: bool = False
    pool_recycle: int = 1800
    pool_size: int = 5
    max_overflow: int = 10


@lru_cache(maxsize=1)
def get_bulk_transfer_settings() -> BulkTransferSettings:
    """
    Return cached bulk transfer settings from environment variables.
    """

    max_limit = max(1, _get_int_env("BULK_EXPORT_MAX_LIMIT", 100_000))
    return BulkTransferSettings(
        max_upload_bytes=max(1, _get_int_env("BULK_MAX_UPLOAD_BYTES", 10 * 1024 * 1024)),
        max_import_rows=max(1, _get_int_env("BULK_MAX_IMPORT_ROWS", 50_000)),
        persist_batch_size=max(1, _get_int_env("BULK_PERSIST_BATCH_SIZE", 500)),
        log_validation_errors=_get_bool_env("BULK_LOG_VALIDATION_ERRORS", True),
        export_default_limit=min(
            max_limit,
            max(1, _get_int_env("BULK_EXPORT_DEFAULT_LIMIT", 10_000)),
        ),
        export_max_limit=max_limit,
    )


@lru_cache(maxsize=1)
def get_database_settings() -> DatabaseSettings:
    """
    Return cached connection pool settings.
    """

    return DatabaseSettings(
        echo=_get_bool_env("SQL_ECHO", False),
        pool_recycle=_get_int_env("DB_POOL_RECYCLE", 1800),
        pool_size=max(1, _get_int_env("DB_POOL_SIZE", 5)),
        max_overflow=max(0, _get_int_env("DB_MAX_OVERFLOW", 10)),
    )
