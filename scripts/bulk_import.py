"""
Validate or import a bulk CSV file from the shell.

    python -m scripts.bulk_import members.csv --entity members --dry-run

Exit status: 0 when every row is accepted, 1 when any row failed validation,
2 when the file could not be processed at all.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from app.domain.bulk_transfer import BulkImportSummary
from app.services.bulk_import_service import (
    BulkImportService,
    BulkPersistenceError,
    BulkUploadError,
    get_bulk_import_service,
)
from bulk.entities import EntityKind
from bulk.errors import BulkTransferError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ROW_FAILURES = 1
EXIT_STRUCTURAL = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Validate and import a bulk CSV file.")
    parser.add_argument("path", type=Path, help="CSV file to import.")
    parser.add_argument(
        "--entity",
        required=True,
        choices=[kind.value for kind in EntityKind],
        help="Entity kind the rows describe.",
    )
    parser.add_argument(
        "--dry-run",
        dest="dry_run",
        action="store_true",
        help="Validate only; nothing is written to the database.",
    )
    return parser


def _run(
    service: BulkImportService,
    content: bytes,
    entity: str,
    dry_run: bool,
) -> BulkImportSummary:
    if dry_run:
        return service.import_content(content=content, entity=entity, db=None, dry_run=True)

    from db.session import SessionLocal

    with SessionLocal() as db:
        return service.import_content(content=content, entity=entity, db=db)


def main(
    argv: Sequence[str] | None = None,
    *,
    service: BulkImportService | None = None,
) -> int:
    args = _build_parser().parse_args(argv)
    service = service or get_bulk_import_service()

    try:
        content = args.path.read_bytes()
    except OSError as exc:
        print(json.dumps({"success": False, "error": str(exc), "code": "unreadable_file"}))
        return EXIT_STRUCTURAL

    try:
        summary = _run(service, content, args.entity, args.dry_run)
    except BulkTransferError as exc:
        print(json.dumps({"success": False, "error": exc.message, "code": exc.code}))
        return EXIT_STRUCTURAL
    except BulkUploadError as exc:
        print(json.dumps({"success": False, "error": str(exc), "code": exc.code}))
        return EXIT_STRUCTURAL
    except BulkPersistenceError as exc:
        logger.error("Bulk import could not be persisted: %s", exc)
        print(json.dumps({"success": False, "error": str(exc), "code": "persistence_failed"}))
        return EXIT_STRUCTURAL

    payload = {
        "message": summary.message,
        "dryRun": summary.dry_run,
        "persisted": summary.persisted,
        **summary.result.to_dict(),
    }
    print(json.dumps(payload, indent=2))
    return EXIT_OK if summary.result.success else EXIT_ROW_FAILURES


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, stream=sys.stderr)
    raise SystemExit(main())
