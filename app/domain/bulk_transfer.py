"""
app/domain/bulk_transfer.py

Service-level results wrapping the bulk transfer engine's output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from bulk.types import BatchResult


@dataclass(frozen=True)
class BulkImportSummary:
    """
    Outcome of one import request.

    ``persisted`` counts rows written to the database; it is 0 on a dry run.
    """

    result: BatchResult
    persisted: int
    dry_run: bool

    @property
    def message(self) -> str:
        if self.result.success:
            return (
                f"Successfully imported {self.result.imported_count} "
                f"of {self.result.total_rows} records"
            )
        return f"Import completed with {self.result.failed_count} errors"


@dataclass
class BulkExportResult:
    """
    Projected export rows plus their CSV rendering.
    """

    entity: str
    fields: list[str]
    rows: list[dict[str, Any]] = field(default_factory=list)
    content: str = ""
