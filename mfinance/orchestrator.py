"""
Main Orchestrator for mfinance

This module ties the ledger engine to files on disk and defines the
end-to-end flows an outer layer (CLI, TUI, server) calls:
1. New entry (load → append → save → totals before/after)
2. Edit entry (load → replace → save)
3. Sort (load → sort → save)
4. Report (load → filter → total)
5. Year summary (load → group by year)

DESIGN DECISION: File replacement is atomic here, not in the engine.
The complete ledger is written to a temporary file in the same directory
and renamed over the original, so a crash mid-write leaves the old file.

Only one writer per file is supported. Hosts serving concurrent requests
must serialize access to a given path themselves.
Hosts call mfinance.configure_logging() once at startup to route the
audit events to stderr.
"""

import contextlib
import datetime
import os
import stat
import tempfile
from decimal import Decimal
from pathlib import Path
from typing import Optional, Union
from uuid import UUID

from mfinance.audit import AuditLogger, create_correlation_id
from mfinance.errors import InvalidPeriod, IoFailure, LedgerError
from mfinance.ledger import store
from mfinance.ledger.codec import format_decimal, serialize
from mfinance.ledger.sorting import is_sorted, sort
from mfinance.models.ledger import (
    Ledger,
    NewEntryInfo,
    PeriodFilter,
    Report,
    Transaction,
    YearGroup,
)
from mfinance.reports.engine import build_report, group_by_year


PathArg = Union[str, os.PathLike]

LEDGER_SUFFIX = ".csv"


def list_ledger_files(directory: PathArg) -> list[Path]:
    """All *.csv files directly inside ``directory``, sorted by name."""
    try:
        return sorted(
            path for path in Path(directory).iterdir()
            if path.is_file() and path.suffix == LEDGER_SUFFIX
        )
    except OSError as e:
        raise IoFailure(f"Failed to list directory '{directory}'", e) from e


class LedgerFiles:
    """
    Loads and atomically saves ledger files, auditing both.
    """

    def __init__(self, audit_logger: Optional[AuditLogger] = None):
        self._audit_logger = audit_logger or AuditLogger()

    def load(self, path: PathArg, correlation_id: UUID) -> Ledger:
        try:
            ledger = store.load_file(path)
        except LedgerError as e:
            self._audit_logger.log_load_failed(str(path), e, correlation_id)
            raise
        except Exception as e:
            self._audit_logger.log_error(e, correlation_id=correlation_id, ledger_path=str(path))
            raise
        self._audit_logger.log_ledger_loaded(str(path), len(ledger), correlation_id)
        return ledger

    def load_or_empty(self, path: PathArg, correlation_id: UUID) -> Ledger:
        """Like ``load``, but a file that does not exist yet is an empty ledger."""
        if not Path(path).exists():
            return Ledger()
        return self.load(path, correlation_id)

    def save(self, path: PathArg, ledger: Ledger, correlation_id: UUID) -> None:
        try:
            self._write_atomic(Path(path), ledger)
        except LedgerError as e:
            self._audit_logger.log_save_failed(str(path), e, correlation_id)
            raise
        except Exception as e:
            self._audit_logger.log_error(e, correlation_id=correlation_id, ledger_path=str(path))
            raise
        self._audit_logger.log_ledger_saved(str(path), len(ledger), correlation_id)

    @staticmethod
    def _write_atomic(path: Path, ledger: Ledger) -> None:
        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                "wb",
                dir=path.parent,
                prefix=f".{path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp_file:
                tmp_name = tmp_file.name
                store.save(ledger, tmp_file)
                os.fsync(tmp_file.fileno())
            if path.exists():
                os.chmod(tmp_name, stat.S_IMODE(path.stat().st_mode))
            os.replace(tmp_name, path)
        except Exception as e:
            if tmp_name is not None:
                with contextlib.suppress(FileNotFoundError):
                    os.unlink(tmp_name)
            if isinstance(e, OSError):
                raise IoFailure(f"Failed to write ledger file '{path}'", e) from e
            raise


class EntryFlow:
    """
    Adds and edits entries of one ledger file.

    Flow:
    1. Load the file (a missing file starts an empty ledger)
    2. Change the ledger in memory
    3. Rewrite the whole file atomically
    """

    def __init__(
        self,
        files: Optional[LedgerFiles] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._audit_logger = audit_logger or AuditLogger()
        self._files = files or LedgerFiles(self._audit_logger)

    def add(
        self,
        path: PathArg,
        amount: Union[Decimal, str],
        date: Union[datetime.date, str, None] = None,
        correlation_id: Optional[UUID] = None,
    ) -> NewEntryInfo:
        """
        Append one entry and return the totals around it.

        ``date`` defaults to today.
        """
        correlation_id = correlation_id or create_correlation_id()
        ledger = self._files.load_or_empty(path, correlation_id)

        updated = store.append_entry(ledger, date or datetime.date.today(), amount)
        self._files.save(path, updated, correlation_id)

        new_entry = updated.transactions[-1]
        self._audit_logger.log_entry_appended(
            ledger_path=str(path),
            date=new_entry.date.isoformat(),
            amount=format_decimal(new_entry.amount),
            correlation_id=correlation_id,
        )
        return NewEntryInfo(total_before=ledger.total, total_after=updated.total)

    def edit(
        self,
        path: PathArg,
        old: Transaction,
        new: Transaction,
        correlation_id: Optional[UUID] = None,
    ) -> Ledger:
        """Replace the first entry equal to ``old`` and save."""
        correlation_id = correlation_id or create_correlation_id()
        ledger = self._files.load(path, correlation_id)

        updated = store.replace_entry(ledger, old, new)
        self._files.save(path, updated, correlation_id)

        self._audit_logger.log_entry_edited(
            ledger_path=str(path),
            old=serialize(old),
            new=serialize(new),
            correlation_id=correlation_id,
        )
        return updated


class SortFlow:
    """Sorts a ledger file chronologically in place."""

    def __init__(
        self,
        files: Optional[LedgerFiles] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._audit_logger = audit_logger or AuditLogger()
        self._files = files or LedgerFiles(self._audit_logger)

    def run(self, path: PathArg, correlation_id: Optional[UUID] = None) -> Ledger:
        correlation_id = correlation_id or create_correlation_id()
        ledger = self._files.load(path, correlation_id)

        was_sorted = is_sorted(ledger)
        ordered = sort(ledger)
        self._files.save(path, ordered, correlation_id)

        self._audit_logger.log_ledger_sorted(
            ledger_path=str(path),
            entries=len(ordered),
            was_sorted=was_sorted,
            correlation_id=correlation_id,
        )
        return ordered


class ReportFlow:
    """
    Builds reports from ledger files.

    Reports never write to the file.
    """

    def __init__(
        self,
        files: Optional[LedgerFiles] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._audit_logger = audit_logger or AuditLogger()
        self._files = files or LedgerFiles(self._audit_logger)

    def run(
        self,
        path: PathArg,
        period: Union[PeriodFilter, str, None] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Report:
        """
        Report one file, optionally limited to a period.

        ``period`` may be given as text ('2024', '2024-09').
        """
        correlation_id = correlation_id or create_correlation_id()
        if isinstance(period, str):
            try:
                period = PeriodFilter.parse(period)
            except InvalidPeriod as e:
                self._audit_logger.log_report_failed(str(path), e, correlation_id)
                raise
        ledger = self._files.load(path, correlation_id)

        report = build_report(ledger, period)

        self._audit_logger.log_report_built(
            ledger_path=str(path),
            period=period.label if period else None,
            matched=len(report.matched),
            total=format_decimal(report.total),
            correlation_id=correlation_id,
        )
        return report

    def year_summary(
        self,
        path: PathArg,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[list[YearGroup], Decimal]:
        """Entries grouped by year with subtotals, plus the grand total."""
        correlation_id = correlation_id or create_correlation_id()
        ledger = self._files.load(path, correlation_id)

        groups = group_by_year(ledger)
        self._audit_logger.log_year_summary_built(
            ledger_path=str(path),
            years=[g.year for g in groups],
            total=format_decimal(ledger.total),
            correlation_id=correlation_id,
        )
        return groups, ledger.total


def create_app_components(
    audit_logger: Optional[AuditLogger] = None,
) -> tuple[EntryFlow, SortFlow, ReportFlow]:
    """
    Create all flows sharing one audit logger and file store.

    Returns:
        Tuple of (entry_flow, sort_flow, report_flow)
    """
    audit_logger = audit_logger or AuditLogger()
    files = LedgerFiles(audit_logger)
    return (
        EntryFlow(files, audit_logger),
        SortFlow(files, audit_logger),
        ReportFlow(files, audit_logger),
    )
