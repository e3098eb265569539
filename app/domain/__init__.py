"""
app/domain package marker.
"""

from app.domain.bulk_transfer import BulkExportResult, BulkImportSummary

__all__ = [
    "BulkExportResult",
    "BulkImportSummary",
]
