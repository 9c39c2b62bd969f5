"""
Core Data Models for the Ledger Engine

These models define the schemas for all data flowing through the engine.
They are designed to:
1. Enforce type safety at runtime
2. Keep amounts exact (Decimal only, never float)
3. Be immutable, so an operation always returns a new value

DESIGN DECISION: Models are frozen pydantic models.
Appending or sorting produces a NEW Ledger rather than mutating one that
some other caller might still be holding.
"""

import datetime
import re
from decimal import Decimal, MAX_EMAX, MAX_PREC, MIN_EMIN, localcontext
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from mfinance.errors import InvalidPeriod


_PERIOD_PATTERN = re.compile(r"(\d{4})(?:-(\d{2}))?", re.ASCII)


def decimal_sum(amounts: Iterable[Decimal]) -> Decimal:
    """
    Sum decimals without any rounding.

    The default decimal context keeps 28 significant digits.
    Ledger amounts carry no precision limit, so addition runs in a
    context wide enough that no digit is ever dropped.
    """
    with localcontext() as ctx:
        ctx.prec = MAX_PREC
        ctx.Emax = MAX_EMAX
        ctx.Emin = MIN_EMIN
        total = Decimal(0)
        for amount in amounts:
            total += amount
    return total


# =============================================================================
# TRANSACTION & LEDGER
# =============================================================================

class Transaction(BaseModel):
    """A single dated amount. Positive is income, negative is spending."""
    model_config = ConfigDict(frozen=True)

    date: datetime.date = Field(
        ...,
        description="Calendar date of the entry"
    )
    amount: Decimal = Field(
        ...,
        description="Signed amount, exact decimal"
    )

    @field_validator('amount')
    @classmethod
    def validate_finite(cls, v: Decimal) -> Decimal:
        """Reject NaN and infinities."""
        if not v.is_finite():
            raise ValueError(f"Amount must be finite, got {v}")
        return v

    @property
    def day_month(self) -> str:
        """Label used by year-grouped views, e.g. 'January 1'."""
        return f"{self.date:%B} {self.date.day}"


class Ledger(BaseModel):
    """
    Ordered sequence of transactions backed by one CSV file.

    Order is the file order unless the ledger has been sorted.
    Entries sharing a date are legal and independent.
    """
    model_config = ConfigDict(frozen=True)

    transactions: tuple[Transaction, ...] = Field(
        default_factory=tuple,
        description="Entries in file order"
    )

    def __len__(self) -> int:
        return len(self.transactions)

    @property
    def total(self) -> Decimal:
        """Exact sum of all amounts."""
        return decimal_sum(t.amount for t in self.transactions)


# =============================================================================
# REPORTING MODELS
# =============================================================================

class PeriodFilter(BaseModel):
    """
    A calendar period used to select report entries.

    Either a whole year (month is None) or one month of a year.
    "No filter" is expressed as ``None`` wherever a PeriodFilter is accepted.

    Build through ``year_only``, ``year_month`` or ``parse``; they raise
    InvalidPeriod instead of a pydantic ValidationError.
    """
    model_config = ConfigDict(frozen=True)

    year: int = Field(..., ge=1, le=9999)
    month: Optional[int] = Field(default=None)

    @model_validator(mode='after')
    def validate_month(self) -> 'PeriodFilter':
        if self.month is not None and not 1 <= self.month <= 12:
            raise ValueError(f"Month must be between 1 and 12, got {self.month}")
        return self

    @classmethod
    def year_only(cls, year: int) -> 'PeriodFilter':
        if not 1 <= year <= 9999:
            raise InvalidPeriod(f"Year out of range: {year}")
        return cls(year=year)

    @classmethod
    def year_month(cls, year: int, month: int) -> 'PeriodFilter':
        if not 1 <= year <= 9999:
            raise InvalidPeriod(f"Year out of range: {year}")
        if not 1 <= month <= 12:
            raise InvalidPeriod(f"Month must be between 1 and 12, got {month}")
        return cls(year=year, month=month)

    @classmethod
    def parse(cls, text: str) -> 'PeriodFilter':
        """
        Parse a period as typed by a user.

        Accepted forms: '2024' (whole year) and '2024-09' (one month).
        """
        match = _PERIOD_PATTERN.fullmatch(text)
        if match is None:
            raise InvalidPeriod(
                f"Invalid period '{text}'. Use YYYY or YYYY-MM"
            )
        year = int(match.group(1))
        if match.group(2) is None:
            return cls.year_only(year)
        return cls.year_month(year, int(match.group(2)))

    def contains(self, day: datetime.date) -> bool:
        if day.year != self.year:
            return False
        return self.month is None or day.month == self.month

    @property
    def label(self) -> str:
        if self.month is None:
            return f"{self.year:04d}"
        return f"{self.year:04d}-{self.month:02d}"


class Report(BaseModel):
    """
    Result of filtering a ledger by period.

    Derived and ephemeral: recomputed on each request, never persisted.
    """
    model_config = ConfigDict(frozen=True)

    period: Optional[PeriodFilter] = None
    matched: tuple[Transaction, ...] = Field(default_factory=tuple)
    total: Decimal = Field(default=Decimal(0))

    @property
    def is_empty(self) -> bool:
        return not self.matched


class YearGroup(BaseModel):
    """Entries of one calendar year with their subtotal."""
    model_config = ConfigDict(frozen=True)

    year: int
    entries: tuple[Transaction, ...] = Field(default_factory=tuple)
    subtotal: Decimal = Field(default=Decimal(0))


class NewEntryInfo(BaseModel):
    """Ledger totals around one appended entry."""
    model_config = ConfigDict(frozen=True)

    total_before: Decimal
    total_after: Decimal

    @property
    def difference(self) -> Decimal:
        return decimal_sum((self.total_after, self.total_before.copy_negate()))
