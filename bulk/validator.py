"""
bulk/validator.py

Row-level validation for bulk imports.
"""

from __future__ import annotations

from datetime import date
from typing import Callable, Mapping

from bulk.entities import EntitySchema
from bulk.rules import RuleStage
from bulk.types import ImportOutcome, RowValidationError, RowValidationWarning


class RowValidator:
    """
    Validates and normalizes rows for one entity schema.

    Every check runs; a row may report several errors at once. Required
    presence is checked first, then format, semantic and soft rules. Rules
    only see non-empty values, so a blank required field yields exactly one
    error.
    """

    def __init__(
        self,
        schema: EntitySchema,
        *,
        clock: Callable[[], date] | None = None,
    ) -> None:
        self._schema = schema
        self._clock = clock or date.today

    @property
    def schema(self) -> EntitySchema:
        return self._schema

    def validate(self, row: Mapping[str, str], row_number: int) -> ImportOutcome:
        errors: list[RowValidationError] = []
        warnings: list[RowValidationWarning] = []
        today = self._clock()

        for field in self._schema.required_fields:
            if self._is_blank(row.get(field)):
                errors.append(
                    RowValidationError(
                        row_number=row_number,
                        field=field,
                        message=f"{field} is required",
                        value=row.get(field) or "",
                    )
                )

        for stage in RuleStage:
            for rule in self._schema.rules_for(stage):
                raw = row.get(rule.field)
                if self._is_blank(raw):
                    continue
                value = str(raw).strip()
                for message in rule.check(value, today=today):
                    if stage.blocking:
                        errors.append(
                            RowValidationError(
                                row_number=row_number,
                                field=rule.field,
                                message=message,
                                value=value,
                            )
                        )
                    else:
                        warnings.append(
                            RowValidationWarning(
                                row_number=row_number,
                                field=rule.field,
                                message=message,
                            )
                        )

        if errors:
            return ImportOutcome(
                row_number=row_number,
                accepted=False,
                errors=tuple(errors),
                warnings=tuple(warnings),
            )

        return ImportOutcome(
            row_number=row_number,
            accepted=True,
            normalized_record=self._schema.normalize(row),
            warnings=tuple(warnings),
        )

    @staticmethod
    def _is_blank(value: object) -> bool:
        return value is None or str(value).strip() == ""
