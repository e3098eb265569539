"""
bulk/rules.py

Field rule primitives used by entity schemas.

A rule inspects one non-empty, trimmed field value and returns the messages
it wants to report. Whether a message becomes a blocking error or a warning
is decided by the rule's stage, not by the rule itself.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum

DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y/%m/%d",
)

# Plain decimal notation only: no exponents, digit separators or NaN.
DECIMAL_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)", re.ASCII)


class RuleStage(int, Enum):
    """
    Evaluation stages, in the order they run.
    """

    FORMAT = 1
    SEMANTIC = 2
    SOFT = 3

    @property
    def blocking(self) -> bool:
        return self is not RuleStage.SOFT


def parse_date(raw: str) -> date | None:
    """Return the calendar date for ``raw`` or None when it does not parse."""
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue
    return None


def parse_decimal(raw: str) -> Decimal | None:
    """Return the Decimal for a plain decimal string or None."""
    if not DECIMAL_PATTERN.fullmatch(raw):
        return None
    try:
        return Decimal(raw)
    except InvalidOperation:
        return None


@dataclass(frozen=True)
class FieldRule(ABC):
    """
    Base class for a check bound to one field.
    """

    field: str
    stage: RuleStage

    @abstractmethod
    def check(self, value: str, *, today: date) -> list[str]:
        """
        Return zero or more messages for the trimmed, non-empty ``value``.
        """


@dataclass(frozen=True)
class PatternRule(FieldRule):
    """
    ``value`` must fully match ``pattern``.

    With ``compact`` set, whitespace is removed before matching, so
    ``+263 77 123 4567`` is checked as ``+263771234567``.
    """

    pattern: str = ""
    message: str = ""
    compact: bool = False

    def check(self, value: str, *, today: date) -> list[str]:
        candidate = re.sub(r"\s", "", value) if self.compact else value
        if re.fullmatch(self.pattern, candidate):
            return []
        return [self.message]


@dataclass(frozen=True)
class DecimalRule(FieldRule):
    """
    ``value`` must be a plain decimal that fits ``NUMERIC(max_digits, places)``.
    """

    max_digits: int = 12
    places: int = 2

    def check(self, value: str, *, today: date) -> list[str]:
        amount = parse_decimal(value)
        if amount is None:
            return [f"{self.field} must be a valid number"]

        messages: list[str] = []
        exponent = amount.normalize().as_tuple().exponent
        if isinstance(exponent, int) and -exponent > self.places:
            messages.append(f"{self.field} must have at most {self.places} decimal places")
        ceiling = Decimal(10) ** (self.max_digits - self.places)
        if abs(amount) >= ceiling:
            messages.append(f"{self.field} must be less than {ceiling:f}")
        return messages


@dataclass(frozen=True)
class MaxLengthRule(FieldRule):
    """
    ``value`` must fit a column of ``max_length`` characters.

    With ``compact`` set, whitespace is removed first, matching how the
    value is stored.
    """

    max_length: int = 0
    compact: bool = False

    def check(self, value: str, *, today: date) -> list[str]:
        candidate = re.sub(r"\s", "", value) if self.compact else value
        if len(candidate) > self.max_length:
            return [f"{self.field} must be at most {self.max_length} characters"]
        return []


@dataclass(frozen=True)
class PositiveAmountRule(FieldRule):
    """
    A numeric ``value`` must be greater than zero.

    Non-numeric values are left to :class:`DecimalRule`.
    """

    def check(self, value: str, *, today: date) -> list[str]:
        amount = parse_decimal(value)
        if amount is not None and amount <= 0:
            return [f"{self.field} must be greater than zero"]
        return []


@dataclass(frozen=True)
class PastDateRule(FieldRule):
    """
    ``value`` must be a real calendar date no later than today.
    """

    label: str = "Date"

    def check(self, value: str, *, today: date) -> list[str]:
        parsed = parse_date(value)
        if parsed is None:
            return ["Invalid date format. Use YYYY-MM-DD"]
        if parsed > today:
            return [f"{self.label} cannot be in the future"]
        return []


@dataclass(frozen=True)
class ChoiceRule(FieldRule):
    """
    ``value`` (case-insensitive) must be one of ``choices``.
    """

    choices: frozenset[str] = frozenset()
    message: str = ""

    def check(self, value: str, *, today: date) -> list[str]:
        if value.upper() in self.choices:
            return []
        if self.message:
            return [self.message]
        allowed = ", ".join(sorted(self.choices))
        return [f"Invalid {self.field}. Valid options: {allowed}"]
