"""
app/api/routers/bulk_export.py

Bulk export endpoints.

GET  /api/v1/bulk/export
POST /api/v1/bulk/export   (JSON body, same options)

Query parameters
----------------
entity   : "members" | "applications" | "claims" | "transactions"
format   : "csv" | "json"                    (default: "csv")
columns  : comma-separated column subset, order preserved
dateFrom : optional ISO date lower bound (inclusive)
dateTo   : optional ISO date upper bound (inclusive)
status   : optional exact status filter
limit    : max rows returned

Responses
---------
CSV  → text/csv attachment <entity>_export_<YYYY-MM-DD>.csv
JSON → {"success": true, "data": [...], "meta": {...}}
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session

from app.api.dependencies import error_detail
from app.domain.bulk_transfer import BulkExportResult
from app.schemas.bulk_transfer import BulkExportJSONResponse, BulkExportMeta, BulkExportRequest
from app.services.bulk_export_service import BulkExportService, get_bulk_export_service
from bulk.errors import BulkTransferError
from bulk.types import ExportSpec
from db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/bulk", tags=["bulk"])

_VALID_FORMATS = frozenset({"csv", "json"})


# ---------------------------------------------------------------------------
# Serialisation helpers (no business logic)
# ---------------------------------------------------------------------------


def _to_csv_response(result: BulkExportResult) -> Response:
    filename = f"{result.entity}_export_{date.today().isoformat()}.csv"
    return Response(
        content=result.content,
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "X-Row-Count": str(len(result.rows)),
        },
    )


def _to_json_response(result: BulkExportResult, spec: ExportSpec) -> JSONResponse:
    body = BulkExportJSONResponse(
        data=jsonable_encoder(result.rows),
        meta=BulkExportMeta(
            entity=result.entity,
            exported_at=datetime.now(timezone.utc).isoformat(),
            total_records=len(result.rows),
            filters=dict(spec.filters()),
        ),
    )
    return JSONResponse(content=body.model_dump(by_alias=True, mode="json"))


def _split_columns(raw: str | None) -> list[str] | None:
    if not raw:
        return None
    columns = [name.strip() for name in raw.split(",") if name.strip()]
    return columns or None


def _run_export(
    *,
    service: BulkExportService,
    db: Session,
    spec: ExportSpec,
    output_format: str,
) -> Response:
    if output_format not in _VALID_FORMATS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail(
                f"Invalid format {output_format!r}. Must be one of: {sorted(_VALID_FORMATS)}.",
                "invalid_format",
            ),
        )

    try:
        result = service.export(db, spec)
    except BulkTransferError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail(exc.message, exc.code),
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail(str(exc), "invalid_filter"),
        ) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Bulk export failed entity=%r", spec.entity)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error_detail("Failed to process export", "export_failed"),
        ) from exc

    if output_format == "csv":
        return _to_csv_response(result)
    return _to_json_response(result, spec)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("/export", summary="Export records as CSV or JSON")
def export_bulk(
    entity: str | None = Query(default=None),
    output_format: str = Query(default="csv", alias="format"),
    columns: str | None = Query(default=None, description="Comma-separated column subset."),
    date_from: date | None = Query(default=None, alias="dateFrom"),
    date_to: date | None = Query(default=None, alias="dateTo"),
    status_filter: str | None = Query(default=None, alias="status"),
    limit: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db),
    service: BulkExportService = Depends(get_bulk_export_service),
) -> Response:
    """
    Export already-persisted records, filtered by date window and status.
    """

    if not entity:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail("Entity type is required", "missing_entity"),
        )

    spec = ExportSpec(
        entity=entity,
        columns=_split_columns(columns),
        date_from=date_from,
        date_to=date_to,
        status=status_filter,
        limit=limit,
    )
    return _run_export(service=service, db=db, spec=spec, output_format=output_format)


@router.post("/export", summary="Export records with a JSON body configuration")
def export_bulk_custom(
    request: BulkExportRequest,
    db: Session = Depends(get_db),
    service: BulkExportService = Depends(get_bulk_export_service),
) -> Response:
    date_range = request.date_range
    spec = ExportSpec(
        entity=request.entity,
        columns=request.columns or None,
        date_from=date_range.date_from if date_range else None,
        date_to=date_range.date_to if date_range else None,
        status=request.status,
        limit=request.limit,
    )
    return _run_export(service=service, db=db, spec=spec, output_format=request.format)
