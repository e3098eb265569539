"""
app/schemas/bulk_transfer.py

Request and response schemas for bulk import/export endpoints.

Responses are serialized with camelCase aliases (``totalRows``) to match the
column naming used in import files.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from bulk.types import BatchResult


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BulkRowErrorResponse(_CamelModel):
    """
    One blocking row error.
    """

    row: int = Field(..., ge=1)
    field: str
    value: str = ""
    message: str


class BulkRowWarningResponse(_CamelModel):
    """
    One non-blocking row warning.
    """

    row: int = Field(..., ge=1)
    field: str
    message: str


class BatchResultResponse(_CamelModel):
    """
    API view of a BatchResult.
    """

    success: bool
    total_rows: int = Field(..., ge=0)
    imported: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)
    errors: list[BulkRowErrorResponse] = Field(default_factory=list)
    warnings: list[BulkRowWarningResponse] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: BatchResult) -> "BatchResultResponse":
        return cls(
            success=result.success,
            total_rows=result.total_rows,
            imported=result.imported_count,
            failed=result.failed_count,
            errors=[
                BulkRowErrorResponse(
                    row=error.row_number,
                    field=error.field,
                    value=error.value,
                    message=error.message,
                )
                for error in result.errors
            ],
            warnings=[
                BulkRowWarningResponse(
                    row=warning.row_number,
                    field=warning.field,
                    message=warning.message,
                )
                for warning in result.warnings
            ],
        )


class BulkImportResponse(_CamelModel):
    """
    Envelope for POST /api/v1/bulk/import.
    """

    success: bool
    message: str
    dry_run: bool = False
    persisted: int = Field(0, ge=0)
    data: BatchResultResponse


class DateRangeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date_from: date | None = Field(default=None, alias="from")
    date_to: date | None = Field(default=None, alias="to")


class BulkExportRequest(_CamelModel):
    """
    Body for POST /api/v1/bulk/export.
    """

    entity: str
    format: Literal["csv", "json"] = "csv"
    columns: list[str] | None = None
    status: str | None = None
    date_range: DateRangeRequest | None = None
    limit: int | None = Field(default=None, ge=1)


class BulkExportMeta(_CamelModel):
    entity: str
    exported_at: str
    total_records: int = Field(..., ge=0)
    filters: dict[str, Any] = Field(default_factory=dict)


class BulkExportJSONResponse(_CamelModel):
    """
    Envelope for JSON-format exports.
    """

    success: bool = True
    data: list[dict[str, Any]] = Field(default_factory=list)
    meta: BulkExportMeta
