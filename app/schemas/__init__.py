"""
app/schemas package marker.
"""

from app.schemas.bulk_transfer import (
    BatchResultResponse,
    BulkExportJSONResponse,
    BulkExportMeta,
    BulkExportRequest,
    BulkImportResponse,
    BulkRowErrorResponse,
    BulkRowWarningResponse,
    DateRangeRequest,
)

__all__ = [
    "BatchResultResponse",
    "BulkExportJSONResponse",
    "BulkExportMeta",
    "BulkExportRequest",
    "BulkImportResponse",
    "BulkRowErrorResponse",
    "BulkRowWarningResponse",
    "DateRangeRequest",
]
