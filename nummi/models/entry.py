"""
Core Data Models for nummi

These models define the records flowing through the system:
one ledger line becomes one Entry, one cached rate becomes one Currency.

Ledger line format:

    YYYY-MM-DD <amount><cur> <tag> <free text>

    2020-01-31 -12.50eur f groceries at the market

DESIGN DECISION: Models are frozen Pydantic v2 models. An Entry is
created once by parsing a line and never mutated afterwards.
"""

import re
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from nummi.models.money import format_decimal, parse_decimal, to_decimal


BASE_CURRENCY = "eur"

_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_CURRENCY_RE = re.compile(r"[A-Za-z]{3}")
_LINE_BREAKS = "\r\n"


# =============================================================================
# ERRORS
# =============================================================================

class LedgerError(Exception):
    """Base exception for everything that can go wrong reading a ledger."""
    pass


class ParseErrorKind(str, Enum):
    """Which part of a ledger line was malformed."""
    MISSING_DATE = "missing date"
    MISSING_AMOUNT = "missing amount"
    INVALID_AMOUNT = "invalid amount"
    MISSING_TAG = "missing tag"
    INVALID_TAG = "invalid tag"
    INVALID_DATE = "invalid date"
    INVALID_DECIMAL = "invalid decimal"
    INVALID_TEXT = "invalid text"


class EntryParseError(LedgerError):
    """
    A ledger line could not be parsed.

    Attributes:
        kind: Which field was wrong
        message: Human-readable description naming the offending value
        path: Ledger file, when known
        line_number: 1-based line number, when known
    """

    def __init__(
        self,
        kind: ParseErrorKind,
        message: str,
        path: Optional[str] = None,
        line_number: Optional[int] = None,
    ):
        self.kind = kind
        self.message = message
        self.path = path
        self.line_number = line_number
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        if self.line_number is None:
            return f"{self.path}: {self.message}"
        return f"{self.path}:{self.line_number}: {self.message}"

    def at(self, path: str, line_number: int) -> "EntryParseError":
        """Copy of this error located in a file."""
        return EntryParseError(self.kind, self.message, path, line_number)


# =============================================================================
# MODELS
# =============================================================================

class Currency(BaseModel):
    """
    A currency and its conversion rate: 1 unit = to_eur EUR.

    Currencies sort by code, then rate.
    """
    model_config = ConfigDict(frozen=True)

    code: str = Field(
        ...,
        pattern=r"^[a-z]{3}$",
        description="Three-letter lowercase currency code"
    )
    to_eur: Decimal = Field(
        ...,
        description="Conversion rate to EUR"
    )

    @field_validator('code', mode='before')
    @classmethod
    def lowercase_code(cls, v):
        return v.lower() if isinstance(v, str) else v

    @field_validator('to_eur', mode='before')
    @classmethod
    def exact_rate(cls, v):
        return to_decimal(v)

    def __lt__(self, other: "Currency") -> bool:
        if not isinstance(other, Currency):
            return NotImplemented
        return (self.code, self.to_eur) < (other.code, other.to_eur)

    def to_line(self) -> str:
        return f"{self.code} {self.to_eur:f}"

    @classmethod
    def base(cls) -> "Currency":
        """The base currency, always worth exactly 1 EUR."""
        return cls(code=BASE_CURRENCY, to_eur=Decimal(1))


class Entry(BaseModel):
    """
    One ledger record.

    The tag is a single caller-defined classification character.
    """
    model_config = ConfigDict(frozen=True)

    date: date
    value: Decimal = Field(
        ...,
        description="Signed amount; negative values are outflows"
    )
    currency: str = Field(
        ...,
        pattern=r"^[a-z]{3}$",
        description="Three-letter lowercase currency code"
    )
    tag: str = Field(
        ...,
        min_length=1,
        max_length=1,
    )
    text: str = Field(
        default="",
        description="Free-form description, may contain spaces"
    )

    @field_validator('value', mode='before')
    @classmethod
    def exact_value(cls, v):
        return to_decimal(v)

    @field_validator('currency', mode='before')
    @classmethod
    def lowercase_currency(cls, v):
        return v.lower() if isinstance(v, str) else v

    @field_validator('tag', 'text')
    @classmethod
    def single_line(cls, v: str) -> str:
        if "\n" in v or "\r" in v:
            raise ValueError("Entry fields cannot span lines")
        return v

    @classmethod
    def from_line(cls, line: str) -> "Entry":
        return parse(line)

    def to_line(self) -> str:
        return serialize(self)


# =============================================================================
# LINE CODEC
# =============================================================================

def parse(line: str) -> Entry:
    """
    Parse one ledger line.

    The first three single-space separated fields are the date, the
    amount with its currency suffix and the tag; everything after the
    third separator is the free text, verbatim.

    Raises:
        EntryParseError: On the first malformed field. Structural
            problems (missing/short fields) are reported before the
            date and the number are parsed.
    """
    line = line.rstrip("\r\n")
    fields = line.split(" ", 3)

    date_field = fields[0]
    if not date_field:
        raise EntryParseError(ParseErrorKind.MISSING_DATE, "missing date")

    if len(fields) < 2 or not fields[1]:
        raise EntryParseError(ParseErrorKind.MISSING_AMOUNT, "missing amount")
    amount_field = fields[1]
    number, currency = amount_field[:-3], amount_field[-3:]
    if not number or not _CURRENCY_RE.fullmatch(currency):
        raise EntryParseError(
            ParseErrorKind.INVALID_AMOUNT,
            f"invalid amount: {amount_field!r}",
        )

    if len(fields) < 3 or not fields[2]:
        raise EntryParseError(ParseErrorKind.MISSING_TAG, "missing tag")
    tag = fields[2]
    if len(tag) != 1 or tag in _LINE_BREAKS:
        raise EntryParseError(ParseErrorKind.INVALID_TAG, f"invalid tag: {tag!r}")

    if not _DATE_RE.fullmatch(date_field):
        raise EntryParseError(ParseErrorKind.INVALID_DATE, f"invalid date: {date_field!r}")
    try:
        entry_date = date.fromisoformat(date_field)
    except ValueError:
        raise EntryParseError(ParseErrorKind.INVALID_DATE, f"invalid date: {date_field!r}")

    try:
        value = parse_decimal(number)
    except ValueError:
        raise EntryParseError(ParseErrorKind.INVALID_DECIMAL, f"invalid decimal: {number!r}")

    text = fields[3] if len(fields) > 3 else ""
    if any(c in text for c in _LINE_BREAKS):
        raise EntryParseError(ParseErrorKind.INVALID_TEXT, f"invalid text: {text!r}")

    return Entry(
        date=entry_date,
        value=value,
        currency=currency.lower(),
        tag=tag,
        text=text,
    )


def serialize(entry: Entry) -> str:
    """Inverse of parse(); the amount always has two fractional digits."""
    return (
        f"{entry.date.isoformat()} "
        f"{format_decimal(entry.value, 2)}{entry.currency} "
        f"{entry.tag} {entry.text}"
    )
