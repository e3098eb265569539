"""
bulk/entities.py

Closed set of bulk-transferable entity kinds and their schemas.

Each schema owns, in one place:

- ``columns``: the canonical import column order. The import template is
  rendered from it and the validator reads nothing else.
- ``rules``: format, semantic and soft checks, each bound to a column.
- ``export_columns``: the natural column set used when an export does not
  name its columns.

Adding an ``EntityKind`` member without registering a schema fails at import
time.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from bulk.errors import UnsupportedEntityError
from bulk.rules import (
    ChoiceRule,
    DecimalRule,
    FieldRule,
    MaxLengthRule,
    PastDateRule,
    PatternRule,
    PositiveAmountRule,
    RuleStage,
    parse_date,
    parse_decimal,
)


class EntityKind(str, Enum):
    MEMBERS = "members"
    APPLICATIONS = "applications"
    CLAIMS = "claims"
    TRANSACTIONS = "transactions"


class Normalizer(str, Enum):
    """
    How an accepted value is rewritten before it leaves the validator.
    """

    TEXT = "text"
    LOWER = "lower"
    UPPER = "upper"
    COMPACT = "compact"
    DATE = "date"
    DECIMAL = "decimal"

    def apply(self, value: str) -> Any:
        trimmed = value.strip()
        if self is Normalizer.LOWER:
            return trimmed.lower()
        if self is Normalizer.UPPER:
            return trimmed.upper()
        if self is Normalizer.COMPACT:
            return re.sub(r"\s", "", trimmed)
        if self is Normalizer.DATE:
            return parse_date(trimmed)
        if self is Normalizer.DECIMAL:
            return parse_decimal(trimmed)
        return trimmed


@dataclass(frozen=True)
class Column:
    name: str
    required: bool = False
    normalizer: Normalizer = Normalizer.TEXT
    max_length: int | None = None


@dataclass(frozen=True)
class EntitySchema:
    """
    Validation, template and export definition for one entity kind.
    """

    kind: EntityKind
    columns: tuple[Column, ...]
    rules: tuple[FieldRule, ...]
    export_columns: tuple[str, ...]

    def __post_init__(self) -> None:
        names = self.column_names
        if len(set(names)) != len(names):
            raise ValueError(f"{self.kind.value}: duplicate column names")
        unknown = sorted({rule.field for rule in self.rules} - set(names))
        if unknown:
            raise ValueError(
                f"{self.kind.value}: rules reference columns outside the template: {unknown}"
            )

    @property
    def column_names(self) -> tuple[str, ...]:
        return tuple(column.name for column in self.columns)

    @property
    def required_fields(self) -> tuple[str, ...]:
        return tuple(column.name for column in self.columns if column.required)

    @property
    def length_rules(self) -> tuple[FieldRule, ...]:
        """Blocking length checks derived from ``Column.max_length``."""
        return tuple(
            MaxLengthRule(
                field=column.name,
                stage=RuleStage.FORMAT,
                max_length=column.max_length,
                compact=column.normalizer is Normalizer.COMPACT,
            )
            for column in self.columns
            if column.max_length is not None
        )

    def referenced_fields(self) -> set[str]:
        """
        Every field some check reads: required presence, a rule, or a
        typed normalizer.
        """
        checked = {rule.field for rule in self.rules + self.length_rules}
        typed = {
            column.name for column in self.columns if column.normalizer is not Normalizer.TEXT
        }
        return set(self.required_fields) | checked | typed

    def rules_for(self, stage: RuleStage) -> tuple[FieldRule, ...]:
        return tuple(rule for rule in self.length_rules + self.rules if rule.stage is stage)

    def normalize(self, row: Mapping[str, str]) -> dict[str, Any]:
        """
        Build the accepted record. Blank optional columns become None.
        """

        normalized: dict[str, Any] = {}
        for column in self.columns:
            raw = (row.get(column.name) or "").strip()
            normalized[column.name] = column.normalizer.apply(raw) if raw else None
        return normalized


# ---------------------------------------------------------------------------
# Shared rule sets
# ---------------------------------------------------------------------------

EMAIL_PATTERN = r"[^\s@]+@[^\s@]+\.[^\s@]+"
# Zimbabwe mobile numbers and national ID numbers.
PHONE_PATTERN = r"\+263\d{9}"
NATIONAL_ID_PATTERN = r"\d{2}-\d{6,7}-[A-Z]-\d{2}"
MEMBERSHIP_NUMBER_PATTERN = r"PP-\d{4}-\d{6}"
# Cap for unbounded TEXT columns.
FREE_TEXT_MAX_LENGTH = 2000

CLAIM_TYPES = frozenset(
    {
        "MEDICAL_CONSULTATION",
        "PRESCRIPTION",
        "HOSPITALIZATION",
        "DENTAL",
        "OPTICAL",
        "MATERNITY",
        "CHRONIC",
        "OTHER",
    }
)
TRANSACTION_TYPES = frozenset({"PAYMENT", "REFUND", "ADJUSTMENT"})
PAYMENT_METHODS = frozenset(
    {"ECOCASH", "ONEMONEY", "INNBUCKS", "VISA", "MASTERCARD", "BANK_TRANSFER", "CASH"}
)

_PERSON_COLUMNS: tuple[Column, ...] = (
    Column("firstName", required=True, max_length=120),
    Column("surname", required=True, max_length=120),
    Column("email", required=True, normalizer=Normalizer.LOWER, max_length=255),
    Column("phone", required=True, normalizer=Normalizer.COMPACT, max_length=32),
    Column("idNumber", required=True, normalizer=Normalizer.UPPER, max_length=32),
    Column("dateOfBirth", required=True, normalizer=Normalizer.DATE),
    Column("address", max_length=500),
)

_PERSON_RULES: tuple[FieldRule, ...] = (
    PatternRule(
        field="email",
        stage=RuleStage.FORMAT,
        pattern=EMAIL_PATTERN,
        message="Invalid email format",
    ),
    PastDateRule(field="dateOfBirth", stage=RuleStage.SEMANTIC, label="Date of birth"),
    PatternRule(
        field="phone",
        stage=RuleStage.SOFT,
        pattern=PHONE_PATTERN,
        message="Phone number may not be in correct Zimbabwe format (+263XXXXXXXXX)",
        compact=True,
    ),
    PatternRule(
        field="idNumber",
        stage=RuleStage.SOFT,
        pattern=NATIONAL_ID_PATTERN,
        message="ID number may not be in correct format (XX-XXXXXX-X-XX)",
    ),
)

_MEMBERSHIP_NUMBER_RULE = PatternRule(
    field="membershipNumber",
    stage=RuleStage.SOFT,
    pattern=MEMBERSHIP_NUMBER_PATTERN,
    message="Membership number may not be in correct format (PP-YYYY-NNNNNN)",
)

_AMOUNT_RULES: tuple[FieldRule, ...] = (
    DecimalRule(field="amount", stage=RuleStage.FORMAT),
    PositiveAmountRule(field="amount", stage=RuleStage.SEMANTIC),
)


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

MEMBER_SCHEMA = EntitySchema(
    kind=EntityKind.MEMBERS,
    columns=_PERSON_COLUMNS
    + (Column("packageId", max_length=64), Column("notes", max_length=FREE_TEXT_MAX_LENGTH)),
    rules=_PERSON_RULES,
    export_columns=(
        "membershipNumber",
        "firstName",
        "surname",
        "email",
        "phone",
        "idNumber",
        "dateOfBirth",
        "address",
        "packageId",
        "status",
        "validFrom",
        "validUntil",
        "dependents",
    ),
)

APPLICATION_SCHEMA = EntitySchema(
    kind=EntityKind.APPLICATIONS,
    columns=_PERSON_COLUMNS
    + (Column("employerName", max_length=255), Column("packageId", max_length=64)),
    rules=_PERSON_RULES,
    export_columns=(
        "applicationNumber",
        "firstName",
        "surname",
        "email",
        "phone",
        "idNumber",
        "dateOfBirth",
        "address",
        "employerName",
        "packageId",
        "status",
        "submittedAt",
    ),
)

CLAIM_SCHEMA = EntitySchema(
    kind=EntityKind.CLAIMS,
    columns=(
        Column(
            "membershipNumber", required=True, normalizer=Normalizer.UPPER, max_length=20
        ),
        Column("type", required=True, normalizer=Normalizer.UPPER),
        Column("provider", required=True, max_length=255),
        Column("serviceDate", required=True, normalizer=Normalizer.DATE),
        Column("amount", required=True, normalizer=Normalizer.DECIMAL),
        Column("description", max_length=FREE_TEXT_MAX_LENGTH),
        Column("receiptNumber", max_length=64),
    ),
    rules=_AMOUNT_RULES
    + (
        ChoiceRule(field="type", stage=RuleStage.SEMANTIC, choices=CLAIM_TYPES),
        PastDateRule(field="serviceDate", stage=RuleStage.SEMANTIC, label="Service date"),
        _MEMBERSHIP_NUMBER_RULE,
    ),
    export_columns=(
        "claimNumber",
        "membershipNumber",
        "type",
        "provider",
        "serviceDate",
        "submissionDate",
        "amount",
        "approvedAmount",
        "status",
        "description",
        "receiptNumber",
    ),
)

TRANSACTION_SCHEMA = EntitySchema(
    kind=EntityKind.TRANSACTIONS,
    columns=(
        Column(
            "membershipNumber", required=True, normalizer=Normalizer.UPPER, max_length=20
        ),
        Column("type", required=True, normalizer=Normalizer.UPPER),
        Column("method", required=True, normalizer=Normalizer.UPPER, max_length=32),
        Column("amount", required=True, normalizer=Normalizer.DECIMAL),
        Column("currency", required=True, normalizer=Normalizer.UPPER),
        Column("reference", max_length=120),
        Column("date", required=True, normalizer=Normalizer.DATE),
    ),
    rules=_AMOUNT_RULES
    + (
        PatternRule(
            field="currency",
            stage=RuleStage.FORMAT,
            pattern=r"[A-Za-z]{3}",
            message="currency must be a 3-letter ISO code",
        ),
        ChoiceRule(field="type", stage=RuleStage.SEMANTIC, choices=TRANSACTION_TYPES),
        PastDateRule(field="date", stage=RuleStage.SEMANTIC, label="Transaction date"),
        _MEMBERSHIP_NUMBER_RULE,
        ChoiceRule(
            field="method",
            stage=RuleStage.SOFT,
            choices=PAYMENT_METHODS,
            message="Payment method is not one of the known channels",
        ),
    ),
    export_columns=(
        "transactionId",
        "membershipNumber",
        "type",
        "method",
        "amount",
        "currency",
        "status",
        "date",
        "reference",
    ),
)

ENTITY_SCHEMAS: dict[EntityKind, EntitySchema] = {
    schema.kind: schema
    for schema in (MEMBER_SCHEMA, APPLICATION_SCHEMA, CLAIM_SCHEMA, TRANSACTION_SCHEMA)
}

_unregistered = [kind.value for kind in EntityKind if kind not in ENTITY_SCHEMAS]
if _unregistered:
    raise RuntimeError(f"Entity kinds without a schema: {_unregistered}")


def resolve_kind(entity: EntityKind | str) -> EntityKind:
    """Map ``entity`` to its ``EntityKind`` or raise ``UnsupportedEntityError``."""
    if isinstance(entity, EntityKind):
        return entity
    try:
        return EntityKind(str(entity).strip().lower())
    except ValueError as exc:
        raise UnsupportedEntityError(entity, [kind.value for kind in EntityKind]) from exc


def get_schema(entity: EntityKind | str) -> EntitySchema:
    return ENTITY_SCHEMAS[resolve_kind(entity)]
