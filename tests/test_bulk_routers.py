"""
tests/test_bulk_routers.py

HTTP-level tests for the bulk import, template and export routers.

The routers are mounted on a bare FastAPI app; the database session and the
services are replaced through ``dependency_overrides``.
"""

from __future__ import annotations

from datetime import date
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import SQLAlchemyError

from app.api.routers import bulk_export_router, bulk_import_router
from app.services.bulk_export_service import BulkExportService, get_bulk_export_service
from app.services.bulk_import_service import BulkImportService, get_bulk_import_service
from db.session import get_db

HEADER = "firstName,surname,email,phone,idNumber,dateOfBirth,address,packageId,notes"
VALID = "John,Doe,john@example.com,+263771234567,63-123456-A-12,1990-01-15,,basic,"
INVALID = "Jane,Doe,not-an-email,0771234567,63-123456-A-12,1990-01-15,,basic,"

MEMBERS = [
    {
        "membershipNumber": "PP-2025-000001",
        "firstName": "John",
        "surname": "Doe",
        "email": "john@example.com",
        "status": "ACTIVE",
    }
]


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeSession:
    def __init__(self) -> None:
        self.commits = 0
        self.rollbacks = 0

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1


class FakeRepository:
    def __init__(self, *, fail: bool = False, records: list | None = None) -> None:
        self.fail = fail
        self.records = records or []
        self.inserted: list = []
        self.export_calls: list[dict[str, Any]] = []

    def insert_records(self, entity, records, *, batch_size):
        if self.fail:
            raise SQLAlchemyError("insert failed")
        self.inserted.extend(records)
        return len(records)

    def fetch_for_export(self, entity, **kwargs):
        self.export_calls.append({"entity": entity, **kwargs})
        return list(self.records)


def _client(repository: FakeRepository) -> TestClient:
    application = FastAPI()
    application.include_router(bulk_import_router)
    application.include_router(bulk_export_router)

    import_service = BulkImportService(
        max_upload_bytes=1024 * 1024,
        max_import_rows=100,
        persist_batch_size=50,
        log_validation_errors=False,
        repository_factory=lambda db: repository,
    )
    export_service = BulkExportService(
        default_limit=100,
        max_limit=1000,
        repository_factory=lambda db: repository,
    )
    application.dependency_overrides[get_db] = FakeSession
    application.dependency_overrides[get_bulk_import_service] = lambda: import_service
    application.dependency_overrides[get_bulk_export_service] = lambda: export_service
    return TestClient(application)


@pytest.fixture()
def repository() -> FakeRepository:
    return FakeRepository(records=MEMBERS)


@pytest.fixture()
def client(repository: FakeRepository) -> TestClient:
    return _client(repository)


def _upload(content: str, filename: str = "members.csv", content_type: str = "text/csv"):
    return {"file": (filename, content.encode("utf-8"), content_type)}


# ---------------------------------------------------------------------------
# POST /api/v1/bulk/import
# ---------------------------------------------------------------------------


class TestImportEndpoint:
    def test_valid_file(self, client: TestClient, repository: FakeRepository) -> None:
        response = client.post(
            "/api/v1/bulk/import",
            files=_upload("\n".join([HEADER, VALID])),
            data={"entity": "members"},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Successfully imported 1 of 1 records"
        assert body["persisted"] == 1
        assert body["data"]["totalRows"] == 1
        assert len(repository.inserted) == 1

    def test_row_errors_are_still_a_200(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/bulk/import",
            files=_upload("\n".join([HEADER, VALID, INVALID])),
            data={"entity": "members"},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert body["data"]["imported"] == 1
        assert body["data"]["failed"] == 1
        assert body["data"]["errors"] == [
            {"row": 3, "field": "email", "value": "not-an-email", "message": "Invalid email format"}
        ]
        assert body["data"]["warnings"][0]["field"] == "phone"

    def test_dry_run(self, client: TestClient, repository: FakeRepository) -> None:
        response = client.post(
            "/api/v1/bulk/import",
            files=_upload("\n".join([HEADER, VALID])),
            data={"entity": "members", "dry_run": "true"},
        )
        assert response.status_code == 200
        assert response.json()["dryRun"] is True
        assert response.json()["persisted"] == 0
        assert repository.inserted == []

    def test_missing_entity(self, client: TestClient) -> None:
        response = client.post("/api/v1/bulk/import", files=_upload(HEADER))
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "missing_entity"

    def test_unknown_entity(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/bulk/import",
            files=_upload(HEADER),
            data={"entity": "widgets"},
        )
        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["success"] is False
        assert detail["code"] == "unsupported_entity"

    def test_missing_file(self, client: TestClient) -> None:
        response = client.post("/api/v1/bulk/import", data={"entity": "members"})
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "missing_file"

    def test_non_csv_file(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/bulk/import",
            files=_upload(HEADER, filename="members.txt", content_type="text/plain"),
            data={"entity": "members"},
        )
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "unsupported_file_type"

    def test_persistence_failure(self) -> None:
        client = _client(FakeRepository(fail=True))
        response = client.post(
            "/api/v1/bulk/import",
            files=_upload("\n".join([HEADER, VALID])),
            data={"entity": "members"},
        )
        assert response.status_code == 500
        assert response.json()["detail"]["code"] == "persistence_failed"


# ---------------------------------------------------------------------------
# GET /api/v1/bulk/import/template
# ---------------------------------------------------------------------------


class TestTemplateEndpoint:
    def test_download(self, client: TestClient) -> None:
        response = client.get("/api/v1/bulk/import/template", params={"entity": "claims"})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "claims_import_template.csv" in response.headers["content-disposition"]
        assert response.text.startswith('"membershipNumber","type"')
        assert response.text.endswith("\n")

    def test_unknown_entity(self, client: TestClient) -> None:
        response = client.get("/api/v1/bulk/import/template", params={"entity": "widgets"})
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "unsupported_entity"


# ---------------------------------------------------------------------------
# /api/v1/bulk/export
# ---------------------------------------------------------------------------


class TestExportEndpoint:
    def test_csv_export(self, client: TestClient) -> None:
        response = client.get(
            "/api/v1/bulk/export",
            params={"entity": "members", "columns": "firstName, email"},
        )
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        expected_name = f"members_export_{date.today().isoformat()}.csv"
        assert expected_name in response.headers["content-disposition"]
        assert response.text.split("\n") == ['"firstName","email"', '"John","john@example.com"']

    def test_json_export(self, client: TestClient, repository: FakeRepository) -> None:
        response = client.get(
            "/api/v1/bulk/export",
            params={"entity": "members", "format": "json", "status": "ACTIVE", "limit": 5},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["meta"]["entity"] == "members"
        assert body["meta"]["totalRecords"] == 1
        assert body["meta"]["filters"] == {"status": "ACTIVE"}
        assert body["meta"]["exportedAt"]
        assert body["data"][0]["membershipNumber"] == "PP-2025-000001"
        assert repository.export_calls[0]["limit"] == 5

    def test_invalid_format(self, client: TestClient) -> None:
        response = client.get("/api/v1/bulk/export", params={"entity": "members", "format": "xml"})
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "invalid_format"

    def test_inverted_date_window(self, client: TestClient) -> None:
        response = client.get(
            "/api/v1/bulk/export",
            params={"entity": "members", "dateFrom": "2025-02-01", "dateTo": "2025-01-01"},
        )
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "invalid_filter"

    def test_missing_entity(self, client: TestClient) -> None:
        response = client.get("/api/v1/bulk/export")
        assert response.status_code == 400

    def test_post_export(self, client: TestClient, repository: FakeRepository) -> None:
        response = client.post(
            "/api/v1/bulk/export",
            json={
                "entity": "members",
                "format": "json",
                "columns": ["email"],
                "dateRange": {"from": "2025-01-01", "to": "2025-01-31"},
            },
        )
        assert response.status_code == 200
        body = response.json()
        assert body["data"] == [{"email": "john@example.com"}]
        assert body["meta"]["filters"] == {"dateFrom": "2025-01-01", "dateTo": "2025-01-31"}
        assert repository.export_calls[0]["date_from"] == date(2025, 1, 1)

    def test_post_unknown_entity(self, client: TestClient) -> None:
        response = client.post("/api/v1/bulk/export", json={"entity": "policies"})
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "unsupported_entity"
