"""Reporting service for journal analytics."""

from tradejournal.services.reporting.formatters import display_journal_report
from tradejournal.services.reporting.service import ReportingService
from tradejournal.services.reporting.writers import write_json_report

__all__ = [
    "ReportingService",
    "display_journal_report",
    "write_json_report",
]
