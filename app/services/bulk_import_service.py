"""
app/services/bulk_import_service.py

Service layer for bulk CSV imports.

The engine validates; this service bounds the input, persists accepted rows
and logs the outcome. Row failures never abort the request: they come back
in the BatchResult, and accepted rows from the same file are still saved.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Callable, Mapping, Sequence

from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_bulk_transfer_settings
from app.domain.bulk_transfer import BulkImportSummary
from app.repositories.bulk_record_repository import BulkRecordRepository
from bulk.entities import EntityKind, resolve_kind
from bulk.orchestrator import BulkTransferOrchestrator, decode_payload
from bulk.types import BatchResult

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class BulkUploadError(ValueError):
    """
    Raised when an upload exceeds the configured size or row ceiling.
    """

    code = "invalid_upload"


class BulkPersistenceError(RuntimeError):
    """
    Raised when accepted rows cannot be persisted.
    """


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class BulkImportService:
    """
    Coordinates upload bounds, engine validation and persistence.
    """

    def __init__(
        self,
        *,
        max_upload_bytes: int,
        max_import_rows: int,
        persist_batch_size: int,
        log_validation_errors: bool,
        orchestrator: BulkTransferOrchestrator | None = None,
        repository_factory: Callable[[Session], Any] | None = None,
    ) -> None:
        self._max_upload_bytes = max(1, max_upload_bytes)
        self._max_import_rows = max(1, max_import_rows)
        self._batch_size = max(1, persist_batch_size)
        self._log_validation_errors = log_validation_errors
        self._orchestrator = orchestrator or BulkTransferOrchestrator()
        self._repository_factory = repository_factory or BulkRecordRepository

    def import_upload(
        self,
        *,
        upload_file: UploadFile,
        entity: EntityKind | str,
        db: Session | None,
        dry_run: bool = False,
    ) -> BulkImportSummary:
        """
        Read an uploaded CSV (bounded by ``max_upload_bytes``) and import it.
        """

        raw_file = upload_file.file
        raw_file.seek(0)
        payload = raw_file.read(self._max_upload_bytes + 1)
        if len(payload) > self._max_upload_bytes:
            limit_mb = self._max_upload_bytes / (1024 * 1024)
            raise BulkUploadError(f"File size exceeds {limit_mb:g}MB limit")

        return self.import_content(content=payload, entity=entity, db=db, dry_run=dry_run)

    def import_content(
        self,
        *,
        content: str | bytes,
        entity: EntityKind | str,
        db: Session | None,
        dry_run: bool = False,
    ) -> BulkImportSummary:
        """
        Validate ``content`` and persist the accepted rows unless ``dry_run``.

        Raises:
            UnsupportedEntityError: ``entity`` is not a known kind.
            MalformedInputError:    ``content`` is not UTF-8 text.
            BulkUploadError:        too many data rows.
            BulkPersistenceError:   accepted rows could not be saved.
        """

        kind = resolve_kind(entity)
        text = decode_payload(content)
        self._check_row_limit(text)

        result = self._orchestrator.import_batch(text, kind)
        self._log_issues(result)

        persisted = 0
        if not dry_run and result.records:
            if db is None:
                raise ValueError("A database session is required unless dry_run is set.")
            persisted = self._persist(db=db, entity=kind, records=result.records)

        logger.info(
            "Bulk import entity=%s total=%d imported=%d failed=%d persisted=%d dry_run=%s",
            kind.value,
            result.total_rows,
            result.imported_count,
            result.failed_count,
            persisted,
            dry_run,
        )
        return BulkImportSummary(result=result, persisted=persisted, dry_run=dry_run)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_row_limit(self, text: str) -> None:
        data_rows = max(0, len(text.strip().split("\n")) - 1)
        if data_rows > self._max_import_rows:
            raise BulkUploadError(
                f"Import has {data_rows} rows; the limit is {self._max_import_rows}"
            )

    def _persist(
        self,
        *,
        db: Session,
        entity: EntityKind,
        records: Sequence[Mapping[str, Any]],
    ) -> int:
        repository = self._repository_factory(db)
        try:
            inserted = repository.insert_records(entity, records, batch_size=self._batch_size)
            db.commit()
            return inserted
        except SQLAlchemyError as exc:
            db.rollback()
            raise BulkPersistenceError("Failed to persist valid import rows.") from exc

    def _log_issues(self, result: BatchResult) -> None:
        if not self._log_validation_errors:
            return
        for error in result.errors:
            logger.warning(
                "Bulk import validation error entity=%s row=%s field=%s message=%s value=%r",
                result.entity,
                error.row_number,
                error.field,
                error.message,
                error.value,
            )


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_bulk_import_service() -> BulkImportService:
    """
    Build and cache the import service with env-driven settings.
    """
    settings = get_bulk_transfer_settings()
    return BulkImportService(
        max_upload_bytes=settings.max_upload_bytes,
        max_import_rows=settings.max_import_rows,
        persist_batch_size=settings.persist_batch_size,
        log_validation_errors=settings.log_validation_errors,
    )
