"""
Ledger Error Taxonomy

DESIGN DECISION: Every failure the ledger engine can produce has its own
exception class. The outer layers (CLI, TUI, server) decide how to present
them and which exit code to use. The engine only classifies.

The engine NEVER recovers from malformed input locally.
The first error encountered is raised and the operation stops.
"""

from typing import Optional


class LedgerError(Exception):
    """Base exception for all ledger operations."""
    pass


class MalformedRecord(LedgerError):
    """
    A line of the ledger file could not be parsed.

    Carries the 1-based line number (when known) and the raw line text.
    """

    def __init__(
        self,
        message: str,
        line: Optional[str] = None,
        line_number: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.line = line
        self.line_number = line_number

    def at_line(self, line_number: int) -> "MalformedRecord":
        """Return the same error annotated with its line number."""
        self.line_number = line_number
        return self

    def __str__(self) -> str:
        if self.line_number is None:
            return self.message
        return f"line {self.line_number}: {self.message}"


class MissingDelimiter(MalformedRecord):
    """No ';' field delimiter in a data line."""
    pass


class MalformedDate(MalformedRecord):
    """Date field is not a valid YYYY-MM-DD calendar date."""
    pass


class MalformedAmount(MalformedRecord):
    """Amount field is not a plain signed decimal."""
    pass


class MalformedHeader(MalformedRecord):
    """First line is not the literal 'date;amount' header."""
    pass


class EmptyInput(LedgerError):
    """The stream holds no header at all."""
    pass


class InvalidPeriod(LedgerError):
    """A report period could not be constructed."""
    pass


class FormatError(LedgerError):
    """The formatting configuration is internally inconsistent."""
    pass


class EntryNotFound(LedgerError):
    """The entry to edit does not exist in the ledger."""
    pass


class NoEntries(LedgerError):
    """A report that must show rows has nothing to show."""
    pass


class IoFailure(LedgerError):
    """
    Reading or writing the backing stream failed.

    The underlying transport error is kept as ``source``
    (and as ``__cause__`` when raised with ``from``).
    """

    def __init__(self, context: str, source: Optional[BaseException] = None):
        message = context if source is None else f"{context}: {source}"
        super().__init__(message)
        self.context = context
        self.source = source
