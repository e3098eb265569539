"""
app/repositories/bulk_record_repository.py

Persistence for bulk-imported records and the row source for bulk exports.

Engine records use camelCase column names (``dateOfBirth``); model attributes
use snake_case (``date_of_birth``). The mapping is derived from the entity
schema so the two never drift apart.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Callable, Mapping

from sqlalchemy import select
from sqlalchemy.orm import Session

from bulk.entities import EntityKind, get_schema, resolve_kind
from db.base import Base
from db.models import Application, Claim, Member, Transaction

_DEFAULT_BATCH_SIZE = 500


def _snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


@dataclass(frozen=True)
class EntityBinding:
    """
    How one entity kind maps onto its SQLAlchemy model.
    """

    model: type[Base]
    number_attribute: str
    number_prefix: str
    date_attribute: str
    date_is_timestamp: bool = False
    overrides: Mapping[str, str] = field(default_factory=dict)

    def attribute_for(self, column: str) -> str:
        return self.overrides.get(column, _snake(column))


ENTITY_BINDINGS: dict[EntityKind, EntityBinding] = {
    EntityKind.MEMBERS: EntityBinding(
        model=Member,
        number_attribute="membership_number",
        number_prefix="PP",
        date_attribute="created_at",
        date_is_timestamp=True,
    ),
    EntityKind.APPLICATIONS: EntityBinding(
        model=Application,
        number_attribute="application_number",
        number_prefix="APP",
        date_attribute="submitted_at",
        date_is_timestamp=True,
    ),
    EntityKind.CLAIMS: EntityBinding(
        model=Claim,
        number_attribute="claim_number",
        number_prefix="CLM",
        date_attribute="service_date",
    ),
    EntityKind.TRANSACTIONS: EntityBinding(
        model=Transaction,
        number_attribute="transaction_number",
        number_prefix="TXN",
        date_attribute="transaction_date",
        overrides={"transactionId": "transaction_number", "date": "transaction_date"},
    ),
}


class BulkRecordRepository:
    """
    Batch inserts of validated records and filtered reads for export.

    The repository only flushes; the caller commits or rolls back.
    """

    def __init__(
        self,
        session: Session,
        *,
        clock: Callable[[], date] | None = None,
    ) -> None:
        self._session = session
        self._clock = clock or date.today

    def insert_records(
        self,
        entity: EntityKind | str,
        records: Sequence[Mapping[str, Any]],
        *,
        batch_size: int = _DEFAULT_BATCH_SIZE,
    ) -> int:
        """
        Insert normalized records and assign business numbers.

        Numbers follow ``<PREFIX>-<YEAR>-<ID:06d>`` and are written after the
        flush that allocates primary keys.
        """

        if not records:
            return 0

        kind = resolve_kind(entity)
        binding = ENTITY_BINDINGS[kind]
        columns = get_schema(kind).column_names
        year = self._clock().year
        size = max(1, batch_size)
        inserted = 0

        for start in range(0, len(records), size):
            chunk = records[start : start + size]
            models = [
                binding.model(
                    **{binding.attribute_for(column): record.get(column) for column in columns}
                )
                for record in chunk
            ]
            self._session.add_all(models)
            self._session.flush()
            for model in models:
                setattr(
                    model,
                    binding.number_attribute,
                    f"{binding.number_prefix}-{year}-{model.id:06d}",
                )
            self._session.flush()
            inserted += len(models)

        return inserted

    def fetch_for_export(
        self,
        entity: EntityKind | str,
        *,
        date_from: date | None = None,
        date_to: date | None = None,
        status: str | None = None,
        limit: int = 10_000,
    ) -> list[dict[str, Any]]:
        """
        Return newest-first rows keyed by the entity's export column names.
        """

        kind = resolve_kind(entity)
        binding = ENTITY_BINDINGS[kind]
        model = binding.model
        date_column = getattr(model, binding.date_attribute)

        stmt = select(model).order_by(date_column.desc(), model.id.desc())
        if date_from:
            lower = _date_start(date_from) if binding.date_is_timestamp else date_from
            stmt = stmt.where(date_column >= lower)
        if date_to:
            upper = _date_end(date_to) if binding.date_is_timestamp else date_to
            stmt = stmt.where(date_column <= upper)
        if status:
            stmt = stmt.where(model.status == status.strip().upper())
        stmt = stmt.limit(max(1, limit))

        export_columns = get_schema(kind).export_columns
        return [
            {column: getattr(row, binding.attribute_for(column)) for column in export_columns}
            for row in self._session.scalars(stmt)
        ]


# ---------------------------------------------------------------------------
# Date window helpers
# ---------------------------------------------------------------------------


def _date_start(d: date) -> datetime:
    return datetime(d.year, d.month, d.day, 0, 0, 0, tzinfo=timezone.utc)


def _date_end(d: date) -> datetime:
    return datetime(d.year, d.month, d.day, 23, 59, 59, 999999, tzinfo=timezone.utc)
