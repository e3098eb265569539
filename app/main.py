from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI


def _validate_env() -> None:
    """
    Validate all required environment variables at startup.

    Runs before any service or database connection is initialised.
    Raises RuntimeError listing every missing or invalid variable so the
    operator can fix all problems in one restart cycle.

    Rules:
    - No empty-string values are accepted.
    - A PostgreSQL URL is required; SQLite fallbacks are not permitted.
    - Numeric bulk limits, when set, must be positive integers.
    """

    from db.config import load_env_files

    load_env_files()

    errors: list[str] = []

    # --- Database URL ---------------------------------------------------
    url_names = ("DATABASE_URL", "CLOUD_DATABASE_URL", "LOCAL_DATABASE_URL")
    if not any(os.getenv(name, "").strip() for name in url_names):
        errors.append(
            "No database URL configured. Set DATABASE_URL, CLOUD_DATABASE_URL or LOCAL_DATABASE_URL. "
            "SQLite fallbacks are not permitted."
        )

    # --- Bulk transfer limits -------------------------------------------
    for name in (
        "BULK_MAX_UPLOAD_BYTES",
        "BULK_MAX_IMPORT_ROWS",
        "BULK_PERSIST_BATCH_SIZE",
        "BULK_EXPORT_DEFAULT_LIMIT",
        "BULK_EXPORT_MAX_LIMIT",
    ):
        raw_value = os.getenv(name)
        if raw_value is None:
            continue
        raw_value = raw_value.strip()
        if not raw_value.isdigit() or int(raw_value) <= 0:
            errors.append(f"{name}='{raw_value}' is not valid. Expected a positive integer.")

    if errors:
        raise RuntimeError(
            "Startup validation failed. Missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_db() -> None:
    """Open a session and run SELECT 1. Raises RuntimeError if the DB is unreachable."""
    from sqlalchemy import text

    from db.session import SessionLocal

    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc


def _check_schema() -> None:
    """
    Every table registered on Base.metadata must exist in the database.

    Does NOT auto-migrate; a missing table aborts startup.
    """
    from sqlalchemy import inspect as sa_inspect

    import db.models  # noqa: F401  registers ORM models on Base.metadata
    from db.base import Base
    from db.session import get_engine

    inspector = sa_inspect(get_engine())
    actual: set[str] = set(inspector.get_table_names())
    expected: set[str] = set(Base.metadata.tables.keys())
    missing = expected - actual

    if missing:
        logging.getLogger(__name__).critical(
            "Schema mismatch: %d table(s) absent from the database: %s. "
            "Run 'alembic upgrade head' and restart.",
            len(missing),
            ", ".join(sorted(missing)),
        )
        raise RuntimeError(
            f"Schema mismatch: {len(missing)} table(s) missing from the database "
            f"({', '.join(sorted(missing))}). Run migrations and restart."
        )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Validate DB connectivity and schema on boot."""
    _check_db()
    logging.getLogger(__name__).info("Database connectivity confirmed")
    _check_schema()
    logging.getLogger(__name__).info("Database schema validated")
    yield


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="PharmPlus Bulk Transfer API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import bulk_export_router, bulk_import_router

    application.include_router(bulk_import_router)
    application.include_router(bulk_export_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
