"""Journal report command."""

import sys
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Optional

import click
import yaml
from rich.console import Console

from tradejournal.libraries.performance.cache import MetricsCache
from tradejournal.libraries.performance.consistency import TimeWindow
from tradejournal.libraries.performance.grouping import GroupingKey, GroupSortKey
from tradejournal.services.journal.loader import load_trades
from tradejournal.services.reporting.formatters import display_journal_report
from tradejournal.services.reporting.service import ReportingService
from tradejournal.services.reporting.writers import write_json_report
from tradejournal.system import LoggerFactory
from tradejournal.system.config import reload_system_config

console = Console()


def _parse_month(value: str) -> tuple[int, int]:
    try:
        parsed = datetime.strptime(value, "%Y-%m")
    except ValueError as e:
        raise click.BadParameter(f"expected YYYY-MM, got '{value}'") from e
    return parsed.year, parsed.month


@click.command("report")
@click.option(
    "--file",
    "-f",
    "journal_file",
    type=click.Path(path_type=Path),
    required=True,
    help="Path to the journal JSON export",
)
@click.option(
    "--balance",
    "-b",
    type=str,
    help="Starting balance (overrides analytics.starting_balance)",
)
@click.option(
    "--group-by",
    "-g",
    type=click.Choice([k.value for k in GroupingKey], case_sensitive=False),
    help="Grouping dimension for the breakdown table",
)
@click.option(
    "--sort-by",
    type=click.Choice([k.value for k in GroupSortKey], case_sensitive=False),
    help="Ranking of the breakdown table (descending)",
)
@click.option(
    "--window",
    "-w",
    type=click.Choice([w.value for w in TimeWindow], case_sensitive=False),
    default=TimeWindow.ALL.value,
    show_default=True,
    help="Look-back window for consistency metrics",
)
@click.option(
    "--month",
    "-m",
    type=str,
    help="Report a single calendar month (YYYY-MM)",
)
@click.option(
    "--json-out",
    type=click.Path(path_type=Path),
    help="Also write the full report as JSON",
)
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(path_type=Path),
    help="System configuration file (YAML)",
)
@click.option(
    "--log-level",
    "-l",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Set logging level",
)
def report_command(
    journal_file: Path,
    balance: Optional[str],
    group_by: Optional[str],
    sort_by: Optional[str],
    window: str,
    month: Optional[str],
    json_out: Optional[Path],
    config_file: Optional[Path],
    log_level: Optional[str],
):
    """
    Analyze a journal export and print the performance report.

    \b
    Examples:
        # Full report with config defaults
        tradejournal report --file trades.json

        # Tag breakdown ranked by win rate, last 7 days
        tradejournal report -f trades.json -g tag --sort-by win_rate -w week

        # One month, saved as JSON
        tradejournal report -f trades.json -m 2025-01 --json-out out/jan.json
    """
    try:
        system_config = reload_system_config(config_file)

        if log_level:
            system_config.logging.level = log_level.upper()
        LoggerFactory.configure(system_config.logging.to_logger_config())

        starting_balance = Decimal(balance) if balance is not None else None
        month_value = _parse_month(month) if month else None

        trades = load_trades(journal_file)

        cache = None
        if system_config.cache.enabled:
            cache = MetricsCache(
                ttl_seconds=system_config.cache.ttl_seconds,
                max_entries=system_config.cache.max_entries,
            )
        service = ReportingService(system_config.analytics, cache)

        report = service.build_report(
            trades,
            window=TimeWindow(window.lower()),
            month=month_value,
            group_by=GroupingKey(group_by.lower()) if group_by else None,
            sort_by=GroupSortKey(sort_by.lower()) if sort_by else None,
            starting_balance=starting_balance,
        )

        console.rule(f"[bold blue]Trade Journal: {journal_file.name}[/bold blue]")
        display_journal_report(report, console)

        if json_out is not None:
            written = write_json_report(report, json_out)
            console.print(f"[cyan]JSON report:[/cyan] {written}")

    except (FileNotFoundError, ValueError, ArithmeticError, yaml.YAMLError) as e:
        console.print(f"[bold red]✗ Report failed:[/bold red] {e}")
        sys.exit(1)
