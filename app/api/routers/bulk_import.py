"""
app/api/routers/bulk_import.py

Bulk import HTTP endpoints.

POST /api/v1/bulk/import           multipart: file, entity, dry_run
GET  /api/v1/bulk/import/template  ?entity=<kind>  -> header-only CSV

Row-level validation failures are part of a 200 response; only structural
problems (no file, unknown entity, undecodable or oversized upload) are 4xx.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Form, HTTPException, Query, UploadFile, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.api.dependencies import error_detail, get_csv_upload
from app.schemas.bulk_transfer import BatchResultResponse, BulkImportResponse
from app.services.bulk_import_service import (
    BulkImportService,
    BulkPersistenceError,
    BulkUploadError,
    get_bulk_import_service,
)
from bulk.entities import EntityKind
from bulk.errors import BulkTransferError
from bulk.templates import get_template
from db.session import get_db

router = APIRouter(prefix="/api/v1/bulk", tags=["bulk"])

_VALID_ENTITIES = ", ".join(kind.value for kind in EntityKind)


@router.post("/import", response_model=BulkImportResponse)
def import_bulk(
    file: UploadFile = Depends(get_csv_upload),
    entity: str | None = Form(default=None),
    dry_run: bool = Form(default=False),
    db: Session = Depends(get_db),
    import_service: BulkImportService = Depends(get_bulk_import_service),
) -> BulkImportResponse:
    """
    Validate one CSV file and persist its accepted rows.
    """

    if not entity:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail(
                f"Entity type is required ({_VALID_ENTITIES})",
                "missing_entity",
            ),
        )

    try:
        summary = import_service.import_upload(
            upload_file=file,
            entity=entity,
            db=db,
            dry_run=dry_run,
        )
    except BulkTransferError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail(exc.message, exc.code),
        ) from exc
    except BulkUploadError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail(str(exc), exc.code),
        ) from exc
    except BulkPersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error_detail("Unable to persist imported rows.", "persistence_failed"),
        ) from exc
    finally:
        file.file.close()

    return BulkImportResponse(
        success=summary.result.success,
        message=summary.message,
        dry_run=summary.dry_run,
        persisted=summary.persisted,
        data=BatchResultResponse.from_result(summary.result),
    )


@router.get("/import/template")
def download_template(
    entity: str | None = Query(default=None, description="Entity kind to build a template for."),
) -> Response:
    """
    Download a header-only CSV listing the columns an import must provide.
    """

    if not entity:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail("Entity type is required", "missing_entity"),
        )

    try:
        template = get_template(entity)
    except BulkTransferError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail(exc.message, exc.code),
        ) from exc

    return Response(
        content=template,
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="{entity.strip().lower()}_import_template.csv"',
        },
    )
