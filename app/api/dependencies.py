"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation.
"""

from __future__ import annotations

from fastapi import File, HTTPException, UploadFile, status

CSV_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
    "application/vnd.ms-excel",
}


def get_csv_upload(file: UploadFile | None = File(default=None)) -> UploadFile:
    """
    Require an uploaded file and check it is a CSV by extension or MIME type.
    """

    if file is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"success": False, "error": "No file provided", "code": "missing_file"},
        )

    filename = (file.filename or "").strip().lower()
    content_type = (file.content_type or "").split(";")[0].strip().lower()

    if not filename.endswith(".csv") and content_type not in CSV_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "success": False,
                "error": "Only CSV files are supported",
                "code": "unsupported_file_type",
            },
        )

    return file


def error_detail(message: str, code: str) -> dict[str, object]:
    """Uniform error body used by the bulk endpoints."""
    return {"success": False, "error": message, "code": code}
