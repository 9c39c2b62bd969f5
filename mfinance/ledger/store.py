"""
Ledger Store

Loads a Ledger from a byte stream and writes it back.

DESIGN DECISION: The whole file is the unit of write.
There is no append-on-disk. A new entry is added in memory and the
complete ledger is re-serialized over the backing stream.

Crash safety (temp file + rename) is NOT handled here. The store only
guarantees that bytes produced by ``save`` load back to an equal Ledger.
See mfinance.orchestrator for atomic file replacement.
"""

import datetime
from decimal import Decimal
from os import PathLike
from typing import BinaryIO, Union

import structlog
from pydantic import ValidationError

from mfinance.errors import (
    EmptyInput,
    EntryNotFound,
    IoFailure,
    MalformedAmount,
    MalformedDate,
    MalformedRecord,
)
from mfinance.ledger.codec import (
    HEADER,
    parse_amount,
    parse_date,
    parse_header,
    parse_line,
    serialize,
)
from mfinance.models.ledger import Ledger, Transaction


ENCODING = "utf-8"
LINE_TERMINATOR = "\n"

logger = structlog.get_logger(__name__)


def _decode(raw: bytes, line_number: int) -> str:
    # A UTF-8 byte order mark is tolerated on the header line only
    encoding = "utf-8-sig" if line_number == 1 else ENCODING
    try:
        return raw.decode(encoding)
    except UnicodeDecodeError as e:
        raise MalformedRecord(
            f"Line is not valid {ENCODING}: {e.reason}",
            line_number=line_number,
        ) from e


def load(stream: BinaryIO) -> Ledger:
    """
    Parse a complete ledger from a binary stream.

    Raises:
        EmptyInput: The stream holds no header
        MalformedHeader: The first line is not 'date;amount'
        MalformedRecord: A data line is invalid (subclass tells which field)
        IoFailure: Reading the stream failed
    """
    try:
        lines = stream.read().splitlines()
    except OSError as e:
        raise IoFailure("Failed to read ledger stream", e) from e

    if not any(lines):
        raise EmptyInput(f"Ledger is empty, expected a '{HEADER}' header")

    parse_header(_decode(lines[0], 1))

    transactions = []
    for line_number, raw in enumerate(lines[1:], start=2):
        if not raw:
            continue
        text = _decode(raw, line_number)
        try:
            transactions.append(parse_line(text))
        except MalformedRecord as e:
            e.at_line(line_number)
            raise

    logger.debug("ledger_loaded", entries=len(transactions))
    return Ledger(transactions=tuple(transactions))


def load_file(path: Union[str, PathLike]) -> Ledger:
    """Load a ledger file. The handle is released on every exit path."""
    try:
        with open(path, "rb") as stream:
            return load(stream)
    except OSError as e:
        raise IoFailure(f"Failed to open ledger file '{path}'", e) from e


def append(ledger: Ledger, transaction: Transaction) -> Ledger:
    """Return a new ledger with one entry added at the end."""
    return Ledger(transactions=ledger.transactions + (transaction,))


def append_entry(
    ledger: Ledger,
    date: Union[datetime.date, str],
    amount: Union[Decimal, str],
) -> Ledger:
    """
    Append an entry given as raw values.

    Strings go through the same strict parsing as file content,
    so a date typed by a user fails exactly like a bad line would.
    """
    if isinstance(date, str):
        date = parse_date(date)
    if isinstance(amount, str):
        amount = parse_amount(amount)
    try:
        transaction = Transaction(date=date, amount=amount)
    except ValidationError as e:
        field = e.errors()[0]["loc"][0]
        if field == "date":
            raise MalformedDate(f"Invalid date {date!r}") from e
        raise MalformedAmount(f"Invalid amount {amount!r}") from e
    return append(ledger, transaction)


def replace_entry(ledger: Ledger, old: Transaction, new: Transaction) -> Ledger:
    """
    Replace the first entry equal to ``old`` (same date and amount).

    Position is kept; the ledger is not re-sorted.
    """
    entries = list(ledger.transactions)
    try:
        index = entries.index(old)
    except ValueError:
        raise EntryNotFound(
            f"No entry {serialize(old)} in ledger"
        ) from None
    entries[index] = new
    return Ledger(transactions=tuple(entries))


def dumps(ledger: Ledger) -> bytes:
    """Serialize header plus one line per entry, each newline-terminated."""
    lines = [HEADER]
    lines.extend(serialize(t) for t in ledger.transactions)
    return (LINE_TERMINATOR.join(lines) + LINE_TERMINATOR).encode(ENCODING)


def save(ledger: Ledger, writer: BinaryIO) -> None:
    """Write the complete ledger to ``writer``. This is a full overwrite."""
    data = dumps(ledger)
    try:
        writer.write(data)
        writer.flush()
    except OSError as e:
        raise IoFailure("Failed to write ledger stream", e) from e
    logger.debug("ledger_saved", entries=len(ledger), bytes=len(data))
