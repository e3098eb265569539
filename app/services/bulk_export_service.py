"""
app/services/bulk_export_service.py

Bulk CSV export.

Filtering (date window, status, row limit) happens in the repository query;
column projection and CSV rendering are delegated to the bulk transfer
engine. No transformation logic lives in the router.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Callable

from sqlalchemy.orm import Session

from app.config import get_bulk_transfer_settings
from app.domain.bulk_transfer import BulkExportResult
from app.repositories.bulk_record_repository import BulkRecordRepository
from bulk.csv_codec import serialize_csv
from bulk.entities import get_schema
from bulk.orchestrator import BulkTransferOrchestrator
from bulk.types import ExportSpec

logger = logging.getLogger(__name__)


class BulkExportService:
    """
    Fetch, project and serialize records for download.

    Read-only; no session commits are issued.
    """

    def __init__(
        self,
        *,
        default_limit: int,
        max_limit: int,
        orchestrator: BulkTransferOrchestrator | None = None,
        repository_factory: Callable[[Session], Any] | None = None,
    ) -> None:
        self._max_limit = max(1, max_limit)
        self._default_limit = max(1, min(default_limit, self._max_limit))
        self._orchestrator = orchestrator or BulkTransferOrchestrator()
        self._repository_factory = repository_factory or BulkRecordRepository

    def export(self, db: Session, spec: ExportSpec) -> BulkExportResult:
        """
        Run the export described by ``spec``.

        Raises:
            UnsupportedEntityError: ``spec.entity`` is not a known kind.
            ValueError:             ``date_from`` is later than ``date_to``.
        """

        schema = get_schema(spec.entity)
        if spec.date_from and spec.date_to and spec.date_from > spec.date_to:
            raise ValueError("dateFrom must not be later than dateTo.")

        limit = self._resolve_limit(spec.limit)
        repository = self._repository_factory(db)
        records = repository.fetch_for_export(
            schema.kind,
            date_from=spec.date_from,
            date_to=spec.date_to,
            status=spec.status,
            limit=limit,
        )

        fields, rows = self._orchestrator.project(records, spec)
        content = serialize_csv(rows, fields)

        logger.info(
            "Bulk export entity=%s columns=%d rows=%d filters=%s",
            schema.kind.value,
            len(fields),
            len(rows),
            dict(spec.filters()),
        )
        return BulkExportResult(
            entity=schema.kind.value,
            fields=fields,
            rows=rows,
            content=content,
        )

    def _resolve_limit(self, requested: int | None) -> int:
        if requested is None:
            return self._default_limit
        return max(1, min(requested, self._max_limit))


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_bulk_export_service() -> BulkExportService:
    """
    Build and cache the export service with env-driven settings.
    """
    settings = get_bulk_transfer_settings()
    return BulkExportService(
        default_limit=settings.export_default_limit,
        max_limit=settings.export_max_limit,
    )
