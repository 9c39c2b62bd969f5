"""
Record Codec

Parses and serializes single lines of the ledger CSV dialect:

    date;amount
    2024-09-11;700.00
    2024-09-12;-42.42

IMPORTANT: Parsing is strict. Whitespace around a field is an error,
not something to trim. Thousands separators never appear in stored data;
they belong to display formatting only.
"""

import datetime
import re
from decimal import Decimal, InvalidOperation

from mfinance.errors import (
    MalformedAmount,
    MalformedDate,
    MalformedHeader,
    MissingDelimiter,
)
from mfinance.models.ledger import Transaction


DELIMITER = ";"
HEADER = "date;amount"

_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)
_AMOUNT_PATTERN = re.compile(r"[+-]?\d+(?:\.\d+)?", re.ASCII)


def parse_header(text: str) -> None:
    """Accept only the literal header line."""
    if text != HEADER:
        raise MalformedHeader(
            f"Expected header '{HEADER}', got '{text}'",
            line=text,
            line_number=1,
        )


def parse_date(text: str) -> datetime.date:
    """Parse a strict YYYY-MM-DD calendar date."""
    if not _DATE_PATTERN.fullmatch(text):
        raise MalformedDate(f"Invalid date '{text}'. Use YYYY-MM-DD", line=text)
    try:
        return datetime.date(int(text[0:4]), int(text[5:7]), int(text[8:10]))
    except ValueError as e:
        raise MalformedDate(f"Invalid date '{text}': {e}", line=text) from e


def parse_amount(text: str) -> Decimal:
    """Parse a plain signed decimal using '.' as the decimal point."""
    if not _AMOUNT_PATTERN.fullmatch(text):
        raise MalformedAmount(
            f"Invalid amount '{text}'. Use a plain decimal number like -999.99",
            line=text,
        )
    try:
        return Decimal(text)
    except InvalidOperation as e:
        raise MalformedAmount(f"Invalid amount '{text}'", line=text) from e


def parse_line(text: str) -> Transaction:
    """
    Parse one data line into a Transaction.

    The line is split on the first ';'. Errors carry the line text;
    the caller annotates them with the line number.
    """
    date_text, delimiter, amount_text = text.partition(DELIMITER)
    if not delimiter:
        raise MissingDelimiter(
            f"Missing '{DELIMITER}' delimiter in '{text}'",
            line=text,
        )

    try:
        day = parse_date(date_text)
        amount = parse_amount(amount_text)
    except (MalformedDate, MalformedAmount) as e:
        e.line = text
        raise

    return Transaction(date=day, amount=amount)


def format_decimal(amount: Decimal) -> str:
    """Plain fixed-point text: no exponent, no grouping, digits as stored."""
    return format(amount, "f")


def serialize(transaction: Transaction) -> str:
    """Render the inverse of parse_line (without the line terminator)."""
    return (
        f"{transaction.date.isoformat()}{DELIMITER}"
        f"{format_decimal(transaction.amount)}"
    )
