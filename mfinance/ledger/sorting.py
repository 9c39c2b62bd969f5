"""Sort Engine: chronological order, stable on equal dates."""

from mfinance.models.ledger import Ledger


def sort(ledger: Ledger) -> Ledger:
    """
    Return a new ledger ordered by date ascending.

    Python's sort is stable, so entries sharing a date keep their
    relative input order. Sorting twice gives the same result as once.
    """
    return Ledger(
        transactions=tuple(sorted(ledger.transactions, key=lambda t: t.date))
    )


def is_sorted(ledger: Ledger) -> bool:
    dates = [t.date for t in ledger.transactions]
    return all(a <= b for a, b in zip(dates, dates[1:]))
