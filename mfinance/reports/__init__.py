"""Report building and rendering package."""

from mfinance.reports.display import render_new_entry, render_report, require_entries
from mfinance.reports.engine import build_report, group_by_year

__all__ = [
    "build_report",
    "group_by_year",
    "render_new_entry",
    "render_report",
    "require_entries",
]
