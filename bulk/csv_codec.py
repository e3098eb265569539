"""
bulk/csv_codec.py

Delimited-text parsing and serialization for bulk import/export.

The two directions are deliberately asymmetric:

- ``parse_csv`` splits every line on a bare comma. A quoted field holding a
  comma is split into several columns. Import files are expected to avoid
  embedded commas.
- ``serialize_csv`` writes through ``csv.writer`` with every field quoted,
  so its output is safe for any value.
"""

from __future__ import annotations

import csv
import io
import json
from datetime import date, datetime
from typing import Any, Mapping, Sequence

from bulk.types import Record

DELIMITER = ","
QUOTE = '"'
LINE_TERMINATOR = "\n"


def _unquote(value: str) -> str:
    cleaned = value.strip()
    if cleaned.startswith(QUOTE):
        cleaned = cleaned[1:]
    if cleaned.endswith(QUOTE):
        cleaned = cleaned[:-1]
    return cleaned


def parse_csv(text: str) -> list[Record]:
    """
    Parse delimited text into records keyed by header name.

    The first line is the header. Rows shorter than the header are padded
    with empty strings; surplus values are dropped. Returns an empty list
    when there is no data line after the header.
    """

    lines = text.strip().split("\n")
    if len(lines) < 2:
        return []

    headers = [_unquote(name) for name in lines[0].split(DELIMITER)]
    records: list[Record] = []
    for line in lines[1:]:
        values = [_unquote(value) for value in line.split(DELIMITER)]
        record: Record = {}
        for index, header in enumerate(headers):
            record[header] = values[index] if index < len(values) else ""
        records.append(record)
    return records


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def serialize_csv(
    records: Sequence[Mapping[str, Any]],
    columns: Sequence[str] | None = None,
) -> str:
    """
    Serialize records to fully quoted CSV text.

    The header is ``columns`` when given, else the keys of the first record.
    Values missing from a record are written as empty fields.
    """

    if not records:
        return ""

    headers = list(columns) if columns else list(records[0].keys())
    buf = io.StringIO()
    writer = csv.writer(
        buf,
        delimiter=DELIMITER,
        quotechar=QUOTE,
        quoting=csv.QUOTE_ALL,
        lineterminator=LINE_TERMINATOR,
    )
    writer.writerow(headers)
    for record in records:
        writer.writerow([_stringify(record.get(name)) for name in headers])
    return buf.getvalue().removesuffix(LINE_TERMINATOR)
