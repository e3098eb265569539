"""
tests/test_bulk_record_repository.py

Pytest unit tests for BulkRecordRepository and its entity bindings.

A fake session stands in for SQLAlchemy's: it hands out primary keys on
flush and returns canned rows from ``scalars``. Statements are inspected by
compiling them, never executed.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from app.repositories.bulk_record_repository import ENTITY_BINDINGS, BulkRecordRepository
from bulk.entities import EntityKind, get_schema
from db.models import Claim, Member, Transaction


class FakeSession:
    def __init__(self, rows: list | None = None) -> None:
        self.added: list = []
        self.flushes = 0
        self.statements: list = []
        self._rows = rows or []
        self._next_id = 1

    def add_all(self, models) -> None:
        self.added.extend(models)

    def flush(self) -> None:
        self.flushes += 1
        for model in self.added:
            if model.id is None:
                model.id = self._next_id
                self._next_id += 1

    def scalars(self, stmt):
        self.statements.append(stmt)
        return iter(self._rows)


def _member_record(first_name: str) -> dict:
    return {
        "firstName": first_name,
        "surname": "Doe",
        "email": f"{first_name.lower()}@example.com",
        "phone": "+263771234567",
        "idNumber": "63-123456-A-12",
        "dateOfBirth": date(1990, 1, 15),
        "address": None,
        "packageId": "basic",
        "notes": None,
    }


# ---------------------------------------------------------------------------
# Bindings
# ---------------------------------------------------------------------------


class TestBindings:
    @pytest.mark.parametrize("kind", list(EntityKind))
    def test_every_import_column_maps_to_a_model_attribute(self, kind: EntityKind) -> None:
        binding = ENTITY_BINDINGS[kind]
        for column in get_schema(kind).column_names:
            assert hasattr(binding.model, binding.attribute_for(column)), column

    @pytest.mark.parametrize("kind", list(EntityKind))
    def test_every_export_column_maps_to_a_model_attribute(self, kind: EntityKind) -> None:
        binding = ENTITY_BINDINGS[kind]
        for column in get_schema(kind).export_columns:
            assert hasattr(binding.model, binding.attribute_for(column)), column

    @pytest.mark.parametrize("kind", list(EntityKind))
    def test_number_and_date_attributes_exist(self, kind: EntityKind) -> None:
        binding = ENTITY_BINDINGS[kind]
        assert hasattr(binding.model, binding.number_attribute)
        assert hasattr(binding.model, binding.date_attribute)

    def test_camel_case_is_snake_cased(self) -> None:
        binding = ENTITY_BINDINGS[EntityKind.MEMBERS]
        assert binding.attribute_for("dateOfBirth") == "date_of_birth"
        assert binding.attribute_for("email") == "email"

    def test_transaction_overrides(self) -> None:
        binding = ENTITY_BINDINGS[EntityKind.TRANSACTIONS]
        assert binding.attribute_for("transactionId") == "transaction_number"
        assert binding.attribute_for("date") == "transaction_date"


# ---------------------------------------------------------------------------
# insert_records
# ---------------------------------------------------------------------------


class TestInsertRecords:
    def test_models_are_built_and_numbered(self) -> None:
        session = FakeSession()
        repository = BulkRecordRepository(session, clock=lambda: date(2025, 6, 1))  # type: ignore[arg-type]

        inserted = repository.insert_records(
            "members", [_member_record("John"), _member_record("Rudo")]
        )

        assert inserted == 2
        assert all(isinstance(model, Member) for model in session.added)
        assert [m.membership_number for m in session.added] == [
            "PP-2025-000001",
            "PP-2025-000002",
        ]
        assert session.added[1].first_name == "Rudo"
        assert session.added[0].date_of_birth == date(1990, 1, 15)

    def test_batches(self) -> None:
        session = FakeSession()
        repository = BulkRecordRepository(session, clock=lambda: date(2025, 6, 1))  # type: ignore[arg-type]

        repository.insert_records(
            EntityKind.MEMBERS,
            [_member_record("A"), _member_record("B"), _member_record("C")],
            batch_size=2,
        )

        # Two flushes per batch: one for keys, one for business numbers.
        assert session.flushes == 4

    def test_transaction_date_lands_on_transaction_date(self) -> None:
        session = FakeSession()
        repository = BulkRecordRepository(session, clock=lambda: date(2025, 6, 1))  # type: ignore[arg-type]

        repository.insert_records(
            "transactions",
            [
                {
                    "membershipNumber": "PP-2025-000001",
                    "type": "PAYMENT",
                    "method": "ECOCASH",
                    "amount": Decimal("45.00"),
                    "currency": "USD",
                    "reference": None,
                    "date": date(2025, 5, 1),
                }
            ],
        )

        model = session.added[0]
        assert isinstance(model, Transaction)
        assert model.transaction_date == date(2025, 5, 1)
        assert model.transaction_number == "TXN-2025-000001"

    def test_nothing_to_insert(self) -> None:
        session = FakeSession()
        assert BulkRecordRepository(session).insert_records("claims", []) == 0  # type: ignore[arg-type]
        assert session.flushes == 0


# ---------------------------------------------------------------------------
# fetch_for_export
# ---------------------------------------------------------------------------


class TestFetchForExport:
    def test_rows_are_keyed_by_export_columns(self) -> None:
        claim = Claim(
            claim_number="CLM-2025-000001",
            membership_number="PP-2025-000001",
            type="DENTAL",
            provider="Smile Dental",
            service_date=date(2025, 3, 4),
            amount=Decimal("80.00"),
            status="PENDING",
        )
        session = FakeSession(rows=[claim])
        rows = BulkRecordRepository(session).fetch_for_export("claims")  # type: ignore[arg-type]

        assert list(rows[0]) == list(get_schema("claims").export_columns)
        assert rows[0]["claimNumber"] == "CLM-2025-000001"
        assert rows[0]["serviceDate"] == date(2025, 3, 4)
        assert rows[0]["approvedAmount"] is None

    def test_statement_filters_and_orders(self) -> None:
        session = FakeSession()
        BulkRecordRepository(session).fetch_for_export(  # type: ignore[arg-type]
            "members",
            date_from=date(2025, 1, 1),
            date_to=date(2025, 1, 31),
            status=" active ",
            limit=25,
        )

        compiled = session.statements[0].compile()
        sql = str(compiled)
        assert "members.created_at >=" in sql
        assert "members.created_at <=" in sql
        assert "ORDER BY members.created_at DESC, members.id DESC" in sql
        assert "ACTIVE" in compiled.params.values()
        assert "LIMIT" in sql

    def test_transaction_rows_use_business_names(self) -> None:
        txn = Transaction(
            transaction_number="TXN-2025-000009",
            membership_number="PP-2025-000001",
            type="REFUND",
            method="CASH",
            amount=Decimal("10.00"),
            currency="USD",
            status="COMPLETED",
            transaction_date=date(2025, 4, 2),
        )
        rows = BulkRecordRepository(FakeSession(rows=[txn])).fetch_for_export(  # type: ignore[arg-type]
            EntityKind.TRANSACTIONS
        )
        assert rows[0]["transactionId"] == "TXN-2025-000009"
        assert rows[0]["date"] == date(2025, 4, 2)
