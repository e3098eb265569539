"""
app/services package marker.
"""

from app.services.bulk_export_service import BulkExportService, get_bulk_export_service
from app.services.bulk_import_service import (
    BulkImportService,
    BulkPersistenceError,
    BulkUploadError,
    get_bulk_import_service,
)

__all__ = [
    "BulkExportService",
    "get_bulk_export_service",
    "BulkImportService",
    "BulkPersistenceError",
    "BulkUploadError",
    "get_bulk_import_service",
]
