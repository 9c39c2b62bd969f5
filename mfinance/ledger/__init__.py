"""
Ledger Package

Record Codec, Ledger Store and Sort Engine for the 'date;amount'
CSV dialect.
"""

from mfinance.ledger.codec import DELIMITER, HEADER, parse_header, parse_line, serialize
from mfinance.ledger.sorting import is_sorted, sort
from mfinance.ledger.store import (
    append,
    append_entry,
    dumps,
    load,
    load_file,
    replace_entry,
    save,
)

__all__ = [
    # Codec
    "DELIMITER",
    "HEADER",
    "parse_header",
    "parse_line",
    "serialize",
    # Store
    "append",
    "append_entry",
    "dumps",
    "load",
    "load_file",
    "replace_entry",
    "save",
    # Sorting
    "is_sorted",
    "sort",
]
