"""
app/repositories package marker.
"""

from app.repositories.bulk_record_repository import (
    ENTITY_BINDINGS,
    BulkRecordRepository,
    EntityBinding,
)

__all__ = [
    "BulkRecordRepository",
    "ENTITY_BINDINGS",
    "EntityBinding",
]
