"""
bulk/types.py

Value types exchanged by the bulk transfer engine.

Everything here is ephemeral: built fresh for each call and never persisted
by the engine itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping, Sequence

Record = dict[str, str]
"""One parsed CSV row: column name -> raw string value."""


@dataclass(frozen=True)
class RowValidationError:
    """
    One blocking validation failure.
    """

    row_number: int
    field: str
    message: str
    value: str = ""


@dataclass(frozen=True)
class RowValidationWarning:
    """
    One non-blocking validation note.
    """

    row_number: int
    field: str
    message: str


@dataclass(frozen=True)
class ImportOutcome:
    """
    Result of validating a single data row.
    """

    row_number: int
    accepted: bool
    normalized_record: dict[str, Any] | None = None
    errors: tuple[RowValidationError, ...] = ()
    warnings: tuple[RowValidationWarning, ...] = ()


@dataclass
class BatchResult:
    """
    Aggregate over every row of one import call.

    ``imported_count + failed_count == total_rows`` always holds because
    both counts are derived from the same outcome list.
    """

    entity: str
    outcomes: list[ImportOutcome] = field(default_factory=list)

    @property
    def total_rows(self) -> int:
        return len(self.outcomes)

    @property
    def imported_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.accepted)

    @property
    def failed_count(self) -> int:
        return self.total_rows - self.imported_count

    @property
    def success(self) -> bool:
        return self.failed_count == 0

    @property
    def errors(self) -> list[RowValidationError]:
        return [error for outcome in self.outcomes for error in outcome.errors]

    @property
    def warnings(self) -> list[RowValidationWarning]:
        return [warning for outcome in self.outcomes for warning in outcome.warnings]

    @property
    def records(self) -> list[dict[str, Any]]:
        """Normalized records of accepted rows, in row order."""
        return [
            outcome.normalized_record
            for outcome in self.outcomes
            if outcome.accepted and outcome.normalized_record is not None
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "totalRows": self.total_rows,
            "imported": self.imported_count,
            "failed": self.failed_count,
            "errors": [
                {
                    "row": error.row_number,
                    "field": error.field,
                    "value": error.value,
                    "message": error.message,
                }
                for error in self.errors
            ],
            "warnings": [
                {
                    "row": warning.row_number,
                    "field": warning.field,
                    "message": warning.message,
                }
                for warning in self.warnings
            ],
        }


@dataclass(frozen=True)
class ExportSpec:
    """
    Caller-supplied export configuration.

    ``date_from``, ``date_to`` and ``status`` are applied by the data source
    before records reach the serializer; the engine only reads ``entity`` and
    ``columns``.
    """

    entity: str
    columns: Sequence[str] | None = None
    date_from: date | None = None
    date_to: date | None = None
    status: str | None = None
    limit: int | None = None

    def filters(self) -> Mapping[str, Any]:
        """Non-empty filters, keyed the way the HTTP layer reports them."""
        applied: dict[str, Any] = {}
        if self.date_from is not None:
            applied["dateFrom"] = self.date_from.isoformat()
        if self.date_to is not None:
            applied["dateTo"] = self.date_to.isoformat()
        if self.status:
            applied["status"] = self.status
        return applied
