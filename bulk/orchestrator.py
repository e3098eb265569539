"""
bulk/orchestrator.py

Entry point of the bulk transfer engine.

    import_batch: parse CSV text, validate every row, aggregate a BatchResult
    project:      reduce already-filtered records to the export columns
    export_batch: project, then serialize
    get_template: header-only CSV for an entity kind

The orchestrator performs no I/O and keeps no state between calls.
Persisting accepted rows and fetching export rows are the caller's job.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Callable, Mapping, Sequence

from bulk.csv_codec import parse_csv, serialize_csv
from bulk.entities import EntityKind, get_schema
from bulk.errors import MalformedInputError
from bulk.templates import get_template
from bulk.types import BatchResult, ExportSpec
from bulk.validator import RowValidator

# Row 1 is the header; the first data row is reported as row 2.
FIRST_DATA_ROW = 2


class BulkTransferOrchestrator:
    """
    Coordinates parsing, validation and serialization for bulk transfers.

    Row failures are returned as data. Only an unknown entity kind
    (``UnsupportedEntityError``) or a payload that is not text
    (``MalformedInputError``) raises.
    """

    def __init__(self, *, clock: Callable[[], date] | None = None) -> None:
        self._clock = clock

    def import_batch(self, text: str | bytes, entity: EntityKind | str) -> BatchResult:
        schema = get_schema(entity)
        content = decode_payload(text)
        validator = RowValidator(schema, clock=self._clock)

        result = BatchResult(entity=schema.kind.value)
        for offset, row in enumerate(parse_csv(content)):
            result.outcomes.append(validator.validate(row, FIRST_DATA_ROW + offset))
        return result

    def project(
        self,
        records: Sequence[Mapping[str, Any]],
        spec: ExportSpec,
    ) -> tuple[list[str], list[dict[str, Any]]]:
        """
        Return the export columns and each record reduced to exactly them.
        """
        schema = get_schema(spec.entity)
        columns = list(spec.columns) if spec.columns else list(schema.export_columns)
        rows = [{name: record.get(name) for name in columns} for record in records]
        return columns, rows

    def export_batch(
        self,
        records: Sequence[Mapping[str, Any]],
        spec: ExportSpec,
    ) -> str:
        columns, rows = self.project(records, spec)
        return serialize_csv(rows, columns)

    def get_template(self, entity: EntityKind | str) -> str:
        return get_template(entity)


def decode_payload(payload: Any) -> str:
    """
    Return ``payload`` as text, decoding UTF-8 bytes (BOM tolerated).

    Raises ``MalformedInputError`` for undecodable bytes or non-text objects.
    """

    if isinstance(payload, str):
        return payload.lstrip("\ufeff")
    if isinstance(payload, (bytes, bytearray)):
        try:
            return bytes(payload).decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise MalformedInputError("CSV must be UTF-8 encoded.") from exc
    raise MalformedInputError(f"Import payload must be text, got {type(payload).__name__}.")
