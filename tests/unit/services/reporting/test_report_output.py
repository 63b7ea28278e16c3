"""Unit tests for report formatters and writers."""

import json
from decimal import Decimal

import pytest
from rich.console import Console

from tradejournal.services.reporting.formatters import display_journal_report
from tradejournal.services.reporting.service import ReportingService
from tradejournal.services.reporting.writers import write_json_report


@pytest.fixture
def report(mixed_trades):
    return ReportingService().build_report(mixed_trades)


def _render(report) -> str:
    console = Console(record=True, width=140, color_system=None)
    display_journal_report(report, console)
    return console.export_text()


class TestDisplayJournalReport:
    """Test display_journal_report() output."""

    def test_renders_sections(self, report):
        output = _render(report)

        assert "Journal Summary" in output
        assert "Trade Statistics" in output
        assert "Consistency (all)" in output
        assert "Performance by Strategy" in output
        assert "Monthly Activity" in output
        assert "Badges (" in output
        assert "Streak Master" in output
        assert "$10,130.00" in output
        assert "Breakout" in output

    def test_infinite_profit_factor(self, trade_factory):
        report = ReportingService().build_report([trade_factory(1, "10")])

        assert "∞" in _render(report)

    def test_empty_journal_skips_pnl_tables(self):
        output = _render(ReportingService().build_report([]))

        assert "Journal Summary" in output
        assert "Trade Statistics" not in output
        assert "Drawdowns" not in output


class TestWriteJsonReport:
    def test_writes_full_report(self, report, tmp_path):
        path = write_json_report(report, tmp_path / "out" / "report.json")

        data = json.loads(path.read_text())
        assert data["metrics"]["total_trades"] == 4
        assert Decimal(data["metrics"]["total_pnl"]) == Decimal("130")
        assert [g["name"] for g in data["groups"]] == ["Breakout", "Reversal"]

    def test_infinite_profit_factor_serialized(self, trade_factory, tmp_path):
        report = ReportingService().build_report([trade_factory(1, "10")])

        data = json.loads(write_json_report(report, tmp_path / "r.json").read_text())

        assert data["metrics"]["profit_factor"] == "Infinity"
