"""
Audit Logger

DESIGN DECISION: Every action on a ledger file is logged.
This provides:
1. Traceability of every rewrite of a file
2. Debugging capability when a file does not load
3. Correlation of all events of one command

The audit logger:
- Is synchronous, like the ledger engine it observes
- Logs through structlog on top of stdlib logging
- Supports correlation IDs to trace related events
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from mfinance.config import AppSettings, get_settings
from mfinance.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


_PACKAGE_LOGGER = "mfinance"
_handler: Optional[logging.Handler] = None


def _processors(json_output: bool) -> list:
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_output:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))
    return processors


def _configure_structlog(json_output: bool = False) -> None:
    # Loggers are not cached so a later configure_logging() applies to
    # module-level loggers that were already used.
    structlog.configure(
        processors=_processors(json_output),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def configure_logging(settings: Optional[AppSettings] = None) -> None:
    """
    Configure structlog and the package's stdlib logger from settings.

    Called by the host application at startup, never on import.
    Safe to call more than once; the stream handler is attached only once.

    Raises:
        ValidationError: MFINANCE_* settings are invalid
    """
    global _handler
    settings = settings or get_settings()

    _configure_structlog(settings.log_json)

    package_logger = logging.getLogger(_PACKAGE_LOGGER)
    package_logger.setLevel(settings.log_level)
    if _handler is None:
        _handler = logging.StreamHandler(sys.stderr)
        _handler.setFormatter(logging.Formatter("%(message)s"))
        package_logger.addHandler(_handler)


# Route events through stdlib logging until the host configures output.
# No settings are read and no handler is attached here.
_configure_structlog()


class AuditLogger:
    """
    Central audit logging service.

    Events are rendered by structlog. Nothing is persisted besides the log.
    """

    def __init__(self, name: str = "mfinance.audit"):
        self._logger = structlog.get_logger(name)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event at the level matching its severity."""
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.CRITICAL:
            self._logger.critical("audit_event", **log_dict)
        elif event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def log_ledger_loaded(
        self,
        ledger_path: str,
        entries: int,
        correlation_id: UUID,
    ) -> None:
        """Log a successful load."""
        self.log(AuditEventBuilder.ledger_loaded(
            ledger_path=ledger_path,
            entries=entries,
            correlation_id=correlation_id,
        ))

    def log_load_failed(
        self,
        ledger_path: str,
        error: Exception,
        correlation_id: UUID,
    ) -> None:
        """Log a load failure with the error class as its code."""
        self.log(AuditEventBuilder.ledger_load_failed(
            ledger_path=ledger_path,
            error_code=type(error).__name__,
            error_message=str(error),
            correlation_id=correlation_id,
            line_number=getattr(error, "line_number", None),
        ))

    def log_entry_appended(
        self,
        ledger_path: str,
        date: str,
        amount: str,
        correlation_id: UUID,
    ) -> None:
        """Log a new entry."""
        self.log(AuditEventBuilder.entry_appended(
            ledger_path=ledger_path,
            date=date,
            amount=amount,
            correlation_id=correlation_id,
        ))

    def log_entry_edited(
        self,
        ledger_path: str,
        old: str,
        new: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.entry_edited(
            ledger_path=ledger_path,
            old=old,
            new=new,
            correlation_id=correlation_id,
        ))

    def log_ledger_sorted(
        self,
        ledger_path: str,
        entries: int,
        was_sorted: bool,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.ledger_sorted(
            ledger_path=ledger_path,
            entries=entries,
            was_sorted=was_sorted,
            correlation_id=correlation_id,
        ))

    def log_ledger_saved(
        self,
        ledger_path: str,
        entries: int,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.ledger_saved(
            ledger_path=ledger_path,
            entries=entries,
            correlation_id=correlation_id,
        ))

    def log_save_failed(
        self,
        ledger_path: str,
        error: Exception,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.ledger_save_failed(
            ledger_path=ledger_path,
            error_message=str(error),
            correlation_id=correlation_id,
        ))

    def log_report_built(
        self,
        ledger_path: str,
        period: Optional[str],
        matched: int,
        total: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.report_built(
            ledger_path=ledger_path,
            period=period,
            matched=matched,
            total=total,
            correlation_id=correlation_id,
        ))

    def log_report_failed(
        self,
        ledger_path: str,
        error: Exception,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.report_failed(
            ledger_path=ledger_path,
            error_code=type(error).__name__,
            error_message=str(error),
            correlation_id=correlation_id,
        ))

    def log_year_summary_built(
        self,
        ledger_path: str,
        years: list[int],
        total: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.year_summary_built(
            ledger_path=ledger_path,
            years=years,
            total=total,
            correlation_id=correlation_id,
        ))

    def log_error(
        self,
        error: Exception,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
        ledger_path: Optional[str] = None,
    ) -> None:
        """Log an unexpected error, one that is not a LedgerError."""
        self.log(AuditEventBuilder.system_error(
            error_type=type(error).__name__,
            error_message=str(error),
            details=details,
            correlation_id=correlation_id,
            ledger_path=ledger_path,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of one command (e.g. adding an entry).
    Pass it through all subsequent operations.
    """
    return uuid4()
