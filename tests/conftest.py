"""Shared fixtures for mfinance tests."""

from datetime import date
from decimal import Decimal

import pytest

from mfinance.audit import AuditLogger
from mfinance.models import Ledger, Transaction


SAMPLE_CONTENT = (
    "date;amount\n"
    "2024-09-11;700\n"
    "2024-10-01;200\n"
    "2024-10-02;300.42\n"
    "2025-01-01;10\n"
)


def tx(day: str, amount: str) -> Transaction:
    """Shorthand: tx('2024-09-11', '700.00')."""
    return Transaction(date=date.fromisoformat(day), amount=Decimal(amount))


class RecordingAuditLogger(AuditLogger):
    """Audit logger that keeps events in memory instead of logging them."""

    def __init__(self):
        super().__init__()
        self.events = []

    def log(self, event) -> None:
        self.events.append(event)


@pytest.fixture
def scenario_ledger() -> Ledger:
    return Ledger(transactions=(
        tx("2024-09-11", "700.00"),
        tx("2024-09-12", "42.42"),
        tx("2024-10-01", "-200.00"),
        tx("2025-01-01", "10.00"),
    ))


@pytest.fixture
def sample_file(tmp_path):
    path = tmp_path / "finances.csv"
    path.write_text(SAMPLE_CONTENT, encoding="utf-8")
    return path


@pytest.fixture
def audit_logger() -> RecordingAuditLogger:
    return RecordingAuditLogger()
