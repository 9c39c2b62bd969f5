"""
Audit Models for mfinance

Every action that reads or rewrites a ledger file is logged.
This provides:
1. Traceability of every change to a ledger file
2. Debugging information when a file fails to load
3. A record of what was reported and when

DESIGN DECISION: Audit events are structured values, not log strings.
The logger decides how to render them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Each ledger operation has its own event type.
    """
    # Reading
    LEDGER_LOADED = "ledger_loaded"
    LEDGER_LOAD_FAILED = "ledger_load_failed"

    # Changes
    ENTRY_APPENDED = "entry_appended"
    ENTRY_EDITED = "entry_edited"
    LEDGER_SORTED = "ledger_sorted"

    # Persistence
    LEDGER_SAVED = "ledger_saved"
    LEDGER_SAVE_FAILED = "ledger_save_failed"

    # Reporting
    REPORT_BUILT = "report_built"
    REPORT_FAILED = "report_failed"
    YEAR_SUMMARY_BUILT = "year_summary_built"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant ledger action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - which file is this about?
    ledger_path: Optional[str] = Field(
        default=None,
        description="Path of the ledger file the event relates to"
    )

    # Correlation - for tracking the events of one command
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID shared by all events of one operation"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "ledger_path": self.ledger_path,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.entry_appended(path, "2024-09-11", "700.00", cid)
        event = AuditEventBuilder.ledger_sorted(path, 12, False, cid)
    """

    @staticmethod
    def ledger_loaded(
        ledger_path: str,
        entries: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOADED,
            severity=AuditSeverity.DEBUG,
            ledger_path=ledger_path,
            correlation_id=correlation_id,
            description=f"Ledger loaded with {entries} entries",
            details={"entries": entries},
        )

    @staticmethod
    def ledger_load_failed(
        ledger_path: str,
        error_code: str,
        error_message: str,
        correlation_id: UUID,
        line_number: Optional[int] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            ledger_path=ledger_path,
            correlation_id=correlation_id,
            description=f"Ledger could not be loaded: {error_code}",
            details={"line_number": line_number} if line_number else {},
            error_code=error_code,
            error_message=error_message,
        )

    @staticmethod
    def entry_appended(
        ledger_path: str,
        date: str,
        amount: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_APPENDED,
            ledger_path=ledger_path,
            correlation_id=correlation_id,
            description=f"Entry appended for {date}",
            details={
                "date": date,
                "amount": amount,
            },
        )

    @staticmethod
    def entry_edited(
        ledger_path: str,
        old: str,
        new: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_EDITED,
            ledger_path=ledger_path,
            correlation_id=correlation_id,
            description="Entry edited",
            details={
                "old": old,
                "new": new,
            },
        )

    @staticmethod
    def ledger_sorted(
        ledger_path: str,
        entries: int,
        was_sorted: bool,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_SORTED,
            ledger_path=ledger_path,
            correlation_id=correlation_id,
            description=f"Ledger sorted ({entries} entries)",
            details={
                "entries": entries,
                "was_sorted": was_sorted,
            },
        )

    @staticmethod
    def ledger_saved(
        ledger_path: str,
        entries: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_SAVED,
            ledger_path=ledger_path,
            correlation_id=correlation_id,
            description=f"Ledger saved with {entries} entries",
            details={"entries": entries},
        )

    @staticmethod
    def ledger_save_failed(
        ledger_path: str,
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            ledger_path=ledger_path,
            correlation_id=correlation_id,
            description="Ledger could not be saved",
            error_code="IoFailure",
            error_message=error_message,
        )

    @staticmethod
    def report_built(
        ledger_path: str,
        period: Optional[str],
        matched: int,
        total: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_BUILT,
            ledger_path=ledger_path,
            correlation_id=correlation_id,
            description=f"Report built for {period or 'all entries'}: {matched} entries",
            details={
                "period": period,
                "matched": matched,
                "total": total,
            },
        )

    @staticmethod
    def report_failed(
        ledger_path: str,
        error_code: str,
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_FAILED,
            severity=AuditSeverity.WARNING,
            ledger_path=ledger_path,
            correlation_id=correlation_id,
            description=f"Report could not be built: {error_code}",
            error_code=error_code,
            error_message=error_message,
        )

    @staticmethod
    def year_summary_built(
        ledger_path: str,
        years: list[int],
        total: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.YEAR_SUMMARY_BUILT,
            ledger_path=ledger_path,
            correlation_id=correlation_id,
            description=f"Year summary built for {len(years)} years",
            details={
                "years": years,
                "total": total,
            },
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
        ledger_path: Optional[str] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            ledger_path=ledger_path,
            error_code=error_type,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
