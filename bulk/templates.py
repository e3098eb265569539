"""
bulk/templates.py

Blank import templates, one header line per entity kind.
"""

from __future__ import annotations

from bulk.csv_codec import DELIMITER, QUOTE
from bulk.entities import EntityKind, EntitySchema, get_schema


def render_template(schema: EntitySchema) -> str:
    return DELIMITER.join(f"{QUOTE}{name}{QUOTE}" for name in schema.column_names) + "\n"


def get_template(entity: EntityKind | str) -> str:
    """
    Return the quoted header line (with trailing newline) for ``entity``.

    The columns are exactly the ones the row validator reads.
    """

    return render_template(get_schema(entity))
