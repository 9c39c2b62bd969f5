"""
Report Engine

DESIGN DECISION: Reports are DETERMINISTIC projections of a ledger.
Filtering selects entries by calendar containment and keeps the ledger's
own order. It never sorts; sorting is a separate, explicit operation.

Totals are exact Decimal sums. No float is involved at any step,
so 700.00 + 42.42 is exactly 742.42.
"""

from typing import Optional

import structlog

from mfinance.models.ledger import Ledger, PeriodFilter, Report, YearGroup, decimal_sum


logger = structlog.get_logger(__name__)


def build_report(ledger: Ledger, period: Optional[PeriodFilter] = None) -> Report:
    """
    Select the entries of ``period`` and total them.

    A period matching nothing gives an empty report with total 0,
    not an error.
    """
    if period is None:
        matched = ledger.transactions
    else:
        matched = tuple(t for t in ledger.transactions if period.contains(t.date))

    report = Report(
        period=period,
        matched=matched,
        total=decimal_sum(t.amount for t in matched),
    )
    logger.debug(
        "report_built",
        period=period.label if period else None,
        matched=len(matched),
    )
    return report


def group_by_year(ledger: Ledger) -> list[YearGroup]:
    """
    Split a ledger into calendar years, oldest first.

    Entries inside a year keep ledger order.
    """
    years: dict[int, list] = {}
    for transaction in ledger.transactions:
        years.setdefault(transaction.date.year, []).append(transaction)

    return [
        YearGroup(
            year=year,
            entries=tuple(entries),
            subtotal=decimal_sum(t.amount for t in entries),
        )
        for year, entries in sorted(years.items())
    ]
