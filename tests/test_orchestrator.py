"""
Flow tests for the orchestrator.

These run against real files in a temporary directory.
"""

import datetime
import os
import stat

import pytest
from decimal import Decimal
from uuid import uuid4

from conftest import SAMPLE_CONTENT, tx
from mfinance.errors import InvalidPeriod, IoFailure, MalformedAmount, MalformedDate
from mfinance.ledger import store
from mfinance.models import AuditEventType, FormattingConfig
from mfinance.orchestrator import (
    EntryFlow,
    LedgerFiles,
    ReportFlow,
    SortFlow,
    create_app_components,
    list_ledger_files,
)
from mfinance.reports import render_new_entry


class TestEntryFlow:
    """Tests for adding and editing entries."""

    def test_add_creates_missing_file(self, tmp_path, audit_logger):
        path = tmp_path / "new.csv"
        info = EntryFlow(audit_logger=audit_logger).add(path, "-900", "2024-01-01")

        assert path.read_text(encoding="utf-8") == "date;amount\n2024-01-01;-900\n"
        assert info.total_before == Decimal(0)
        assert info.total_after == Decimal("-900")

    def test_add_appends_at_end(self, sample_file, audit_logger):
        info = EntryFlow(audit_logger=audit_logger).add(sample_file, "42.42", "2024-09-12")

        assert info.total_before == Decimal("1210.42")
        assert info.total_after == Decimal("1252.84")
        assert info.difference == Decimal("42.42")
        assert sample_file.read_text(encoding="utf-8") == SAMPLE_CONTENT + "2024-09-12;42.42\n"

        output = render_new_entry(info, FormattingConfig(thousands_separator=","))
        assert output.splitlines()[-1] == "Total: 1,252.84"

    def test_add_defaults_to_today(self, tmp_path, audit_logger):
        path = tmp_path / "today.csv"
        EntryFlow(audit_logger=audit_logger).add(path, Decimal("1"))
        line = path.read_text(encoding="utf-8").splitlines()[1]
        assert line == f"{datetime.date.today().isoformat()};1"

    def test_add_to_malformed_file_leaves_it_untouched(self, tmp_path, audit_logger):
        path = tmp_path / "broken.csv"
        content = "date;amount\n2024-02-30;5\n"
        path.write_text(content, encoding="utf-8")

        with pytest.raises(MalformedDate):
            EntryFlow(audit_logger=audit_logger).add(path, "1", "2024-01-01")
        assert path.read_text(encoding="utf-8") == content

    def test_add_rejects_bad_amount_without_writing(self, sample_file, audit_logger):
        with pytest.raises(MalformedAmount):
            EntryFlow(audit_logger=audit_logger).add(sample_file, "12,50", "2024-01-01")
        assert sample_file.read_text(encoding="utf-8") == SAMPLE_CONTENT

    def test_edit(self, sample_file, audit_logger):
        updated = EntryFlow(audit_logger=audit_logger).edit(
            sample_file, tx("2024-10-01", "200"), tx("2024-10-01", "250")
        )
        assert updated.total == Decimal("1260.42")
        assert "2024-10-01;250\n" in sample_file.read_text(encoding="utf-8")
        assert audit_logger.events[-1].event_type == AuditEventType.ENTRY_EDITED

    def test_add_very_long_amount(self, tmp_path, audit_logger):
        """Test that amounts of any length are written and audited."""
        path = tmp_path / "long.csv"
        amount = "1" * 600
        info = EntryFlow(audit_logger=audit_logger).add(path, amount, "2024-01-01")

        assert info.total_after == Decimal(amount)
        assert path.read_text(encoding="utf-8") == f"date;amount\n2024-01-01;{amount}\n"
        event = audit_logger.events[-1]
        assert event.event_type == AuditEventType.ENTRY_APPENDED
        assert event.details["amount"] == amount

    def test_edit_to_very_long_amount(self, sample_file, audit_logger):
        amount = "9" * 600 + ".5"
        EntryFlow(audit_logger=audit_logger).edit(
            sample_file, tx("2025-01-01", "10"), tx("2025-01-01", amount)
        )
        assert sample_file.read_text(encoding="utf-8").endswith(f"2025-01-01;{amount}\n")
        assert audit_logger.events[-1].event_type == AuditEventType.ENTRY_EDITED

    def test_add_non_finite_amount_is_malformed(self, sample_file, audit_logger):
        with pytest.raises(MalformedAmount):
            EntryFlow(audit_logger=audit_logger).add(sample_file, Decimal("NaN"), "2024-01-01")
        assert sample_file.read_text(encoding="utf-8") == SAMPLE_CONTENT


class TestSortFlow:
    """Tests for sorting a file in place."""

    def test_sort_file(self, tmp_path, audit_logger):
        path = tmp_path / "finances.csv"
        path.write_text(
            "date;amount\n2024-10-01;-200.00\n2024-09-11;700.00\n2024-09-12;42.42\n",
            encoding="utf-8",
        )
        SortFlow(audit_logger=audit_logger).run(path)

        assert path.read_text(encoding="utf-8") == (
            "date;amount\n2024-09-11;700.00\n2024-09-12;42.42\n2024-10-01;-200.00\n"
        )
        sorted_event = audit_logger.events[-1]
        assert sorted_event.event_type == AuditEventType.LEDGER_SORTED
        assert sorted_event.details == {"entries": 3, "was_sorted": False}

    def test_sort_missing_file(self, tmp_path, audit_logger):
        with pytest.raises(IoFailure):
            SortFlow(audit_logger=audit_logger).run(tmp_path / "missing.csv")
        assert audit_logger.events[-1].event_type == AuditEventType.LEDGER_LOAD_FAILED

    def test_sort_keeps_file_mode(self, sample_file, audit_logger):
        os.chmod(sample_file, 0o600)
        SortFlow(audit_logger=audit_logger).run(sample_file)
        assert stat.S_IMODE(sample_file.stat().st_mode) == 0o600


class TestReportFlow:
    """Tests for reports read from files."""

    @pytest.mark.parametrize("period,total", [
        ("2024", "1200.42"),
        ("2024-10", "500.42"),
        ("2025-01", "10"),
        (None, "1210.42"),
    ])
    def test_report_totals(self, sample_file, audit_logger, period, total):
        report = ReportFlow(audit_logger=audit_logger).run(sample_file, period)
        assert report.total == Decimal(total)

    def test_report_does_not_write(self, sample_file, audit_logger):
        before = sample_file.stat().st_mtime_ns
        ReportFlow(audit_logger=audit_logger).run(sample_file, "2024")
        assert sample_file.stat().st_mtime_ns == before
        assert sample_file.read_text(encoding="utf-8") == SAMPLE_CONTENT

    def test_invalid_period(self, sample_file, audit_logger):
        with pytest.raises(InvalidPeriod):
            ReportFlow(audit_logger=audit_logger).run(sample_file, "2024-13")

    def test_invalid_period_is_audited(self, sample_file, audit_logger):
        """Test that a bad period is logged under the flow correlation id."""
        correlation_id = uuid4()
        with pytest.raises(InvalidPeriod):
            ReportFlow(audit_logger=audit_logger).run(sample_file, "2024-13", correlation_id)

        assert [e.event_type for e in audit_logger.events] == [AuditEventType.REPORT_FAILED]
        event = audit_logger.events[0]
        assert event.correlation_id == correlation_id
        assert event.error_code == "InvalidPeriod"

    def test_report_event(self, sample_file, audit_logger):
        ReportFlow(audit_logger=audit_logger).run(sample_file, "2024-10")
        event = audit_logger.events[-1]
        assert event.event_type == AuditEventType.REPORT_BUILT
        assert event.details["period"] == "2024-10"
        assert event.details["matched"] == 2

    def test_year_summary(self, sample_file, audit_logger):
        groups, total = ReportFlow(audit_logger=audit_logger).year_summary(sample_file)
        assert [(g.year, g.subtotal) for g in groups] == [
            (2024, Decimal("1200.42")),
            (2025, Decimal("10")),
        ]
        assert total == Decimal("1210.42")

        event = audit_logger.events[-1]
        assert event.event_type == AuditEventType.YEAR_SUMMARY_BUILT
        assert event.details == {"years": [2024, 2025], "total": "1210.42"}
        assert len({e.correlation_id for e in audit_logger.events}) == 1


class TestLedgerFiles:
    """Tests for atomic saving and auditing."""

    def test_no_temp_files_left(self, sample_file, audit_logger):
        EntryFlow(audit_logger=audit_logger).add(sample_file, "1", "2024-01-01")
        assert sorted(p.name for p in sample_file.parent.iterdir()) == ["finances.csv"]

    def test_failed_replace_keeps_original(self, sample_file, audit_logger, monkeypatch):
        def fail_replace(src, dst):
            raise OSError("rename refused")

        monkeypatch.setattr(os, "replace", fail_replace)

        with pytest.raises(IoFailure) as exc_info:
            EntryFlow(audit_logger=audit_logger).add(sample_file, "1", "2024-01-01")

        assert isinstance(exc_info.value.source, OSError)
        assert sample_file.read_text(encoding="utf-8") == SAMPLE_CONTENT
        assert sorted(p.name for p in sample_file.parent.iterdir()) == ["finances.csv"]
        assert audit_logger.events[-1].event_type == AuditEventType.LEDGER_SAVE_FAILED

    def test_events_share_correlation_id(self, sample_file, audit_logger):
        EntryFlow(audit_logger=audit_logger).add(sample_file, "5", "2024-01-01")

        assert [e.event_type for e in audit_logger.events] == [
            AuditEventType.LEDGER_LOADED,
            AuditEventType.LEDGER_SAVED,
            AuditEventType.ENTRY_APPENDED,
        ]
        assert len({e.correlation_id for e in audit_logger.events}) == 1

    def test_load_failure_event(self, tmp_path, audit_logger):
        path = tmp_path / "broken.csv"
        path.write_text("date;amount\n2024-02-30;5\n", encoding="utf-8")

        with pytest.raises(MalformedDate):
            LedgerFiles(audit_logger).load(path, uuid4())

        event = audit_logger.events[-1]
        assert event.event_type == AuditEventType.LEDGER_LOAD_FAILED
        assert event.error_code == "MalformedDate"
        assert event.details["line_number"] == 2

    def test_unexpected_save_error_is_audited(self, sample_file, audit_logger, monkeypatch):
        """Test that non-ledger failures are logged as system errors and re-raised."""
        def broken_save(ledger, writer):
            raise RuntimeError("serializer bug")

        monkeypatch.setattr(store, "save", broken_save)

        with pytest.raises(RuntimeError):
            EntryFlow(audit_logger=audit_logger).add(sample_file, "1", "2024-01-01")

        assert sample_file.read_text(encoding="utf-8") == SAMPLE_CONTENT
        assert sorted(p.name for p in sample_file.parent.iterdir()) == ["finances.csv"]
        event = audit_logger.events[-1]
        assert event.event_type == AuditEventType.SYSTEM_ERROR
        assert event.error_code == "RuntimeError"
        assert event.ledger_path == str(sample_file)


class TestHelpers:
    """Tests for module-level helpers."""

    def test_list_ledger_files(self, tmp_path):
        for name in ("b.csv", "a.csv", "notes.txt"):
            (tmp_path / name).write_text("date;amount\n", encoding="utf-8")
        (tmp_path / "dir.csv").mkdir()

        assert [p.name for p in list_ledger_files(tmp_path)] == ["a.csv", "b.csv"]

    def test_list_missing_directory(self, tmp_path):
        with pytest.raises(IoFailure):
            list_ledger_files(tmp_path / "missing")

    def test_components_share_logger(self, sample_file, audit_logger):
        entry_flow, sort_flow, report_flow = create_app_components(audit_logger)
        entry_flow.add(sample_file, "1", "2024-01-01")
        sort_flow.run(sample_file)
        report = report_flow.run(sample_file, "2024-01")

        assert report.matched == (tx("2024-01-01", "1"),)
        assert AuditEventType.LEDGER_SORTED in {e.event_type for e in audit_logger.events}
