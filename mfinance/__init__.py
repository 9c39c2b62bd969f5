"""
mfinance - personal finance ledger engine

Tracks dated amounts in semicolon-delimited CSV files ('date;amount'),
appends entries, sorts files chronologically and computes period reports
with locale-aware currency formatting.

DESIGN PRINCIPLES:
1. Amounts are exact decimals, never floats
2. Malformed input fails loudly, at the first bad line
3. The whole file is the unit of write
4. The engine only consumes resolved configuration
"""

import io
from typing import BinaryIO, Union

from mfinance.audit import configure_logging
from mfinance.errors import (
    EmptyInput,
    EntryNotFound,
    FormatError,
    InvalidPeriod,
    IoFailure,
    LedgerError,
    MalformedAmount,
    MalformedDate,
    MalformedHeader,
    MalformedRecord,
    MissingDelimiter,
    NoEntries,
)
from mfinance.formatting.currency import format_amount
from mfinance.ledger import store
from mfinance.ledger.sorting import sort as sort_ledger
from mfinance.ledger.store import append_entry
from mfinance.models import (
    CurrencyPosition,
    FormattingConfig,
    Ledger,
    PeriodFilter,
    Report,
    Transaction,
)
from mfinance.reports.engine import build_report

__version__ = "0.1.0"


def load_ledger(data: Union[bytes, BinaryIO]) -> Ledger:
    """Parse a ledger from raw bytes or a binary stream."""
    if isinstance(data, (bytes, bytearray)):
        data = io.BytesIO(data)
    return store.load(data)


def save_ledger(ledger: Ledger, writer: BinaryIO) -> None:
    """Write the complete ledger to a binary writer."""
    store.save(ledger, writer)


__all__ = [
    # Core API
    "append_entry",
    "build_report",
    "format_amount",
    "load_ledger",
    "save_ledger",
    "sort_ledger",
    "configure_logging",
    # Models
    "CurrencyPosition",
    "FormattingConfig",
    "Ledger",
    "PeriodFilter",
    "Report",
    "Transaction",
    # Errors
    "EmptyInput",
    "EntryNotFound",
    "FormatError",
    "InvalidPeriod",
    "IoFailure",
    "LedgerError",
    "MalformedAmount",
    "MalformedDate",
    "MalformedHeader",
    "MalformedRecord",
    "MissingDelimiter",
    "NoEntries",
]
