"""
Plain-text rendering of reports for terminal output.

Amounts are shown with two decimal places; the stored digits are
untouched.
"""

from typing import Optional

from mfinance.errors import NoEntries
from mfinance.formatting.currency import format_amount
from mfinance.models.formatting import FormattingConfig
from mfinance.models.ledger import NewEntryInfo, Report


DISPLAY_PLACES = 2


def require_entries(report: Report) -> Report:
    """Raise NoEntries when a report has no rows to show."""
    if report.is_empty:
        if report.period is None:
            raise NoEntries("No entries")
        raise NoEntries(f"No entries for the given period: '{report.period.label}'")
    return report


def render_report(report: Report, config: Optional[FormattingConfig] = None) -> str:
    """
    One row per entry ('2024-09-11:' and its amount), then the total line.

    Labels and amounts are right-aligned in two columns.
    """
    rows = [
        (f"{t.date.isoformat()}:", format_amount(t.amount, config, DISPLAY_PLACES))
        for t in report.matched
    ]

    if report.period is None:
        total_label = "Total amount:"
    else:
        total_label = f"Total amount for {report.period.label}:"
    rows.append((total_label, format_amount(report.total, config, DISPLAY_PLACES)))

    label_width = max(len(label) for label, _ in rows)
    amount_width = max(len(amount) for _, amount in rows) + 1

    return "".join(
        f"{label:>{label_width}}{amount:>{amount_width}}\n"
        for label, amount in rows
    )


def render_new_entry(info: NewEntryInfo, config: Optional[FormattingConfig] = None) -> str:
    """Previous total, the change, and the new total, right-aligned."""
    lines = [
        format_amount(info.total_before, config, DISPLAY_PLACES),
        format_amount(info.difference, config, DISPLAY_PLACES),
        f"Total: {format_amount(info.total_after, config, DISPLAY_PLACES)}",
    ]
    width = max(len(line) for line in lines)
    return "".join(f"{line:>{width}}\n" for line in lines)
