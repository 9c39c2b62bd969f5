"""
Data Models Package

All pydantic models used by mfinance.
All data flowing through the ledger engine must conform to these schemas.
"""

from mfinance.models.ledger import (
    Ledger,
    NewEntryInfo,
    PeriodFilter,
    Report,
    Transaction,
    YearGroup,
    decimal_sum,
)
from mfinance.models.formatting import (
    CurrencyPosition,
    FormattingConfig,
)
from mfinance.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "Ledger",
    "NewEntryInfo",
    "PeriodFilter",
    "Report",
    "Transaction",
    "YearGroup",
    "decimal_sum",
    # Formatting models
    "CurrencyPosition",
    "FormattingConfig",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
