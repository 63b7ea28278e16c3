"""Rich console formatters for journal reports.

Renders a JournalReport as tables and panels. All rounding happens here;
the report itself keeps full Decimal precision.
"""

from decimal import Decimal

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from tradejournal.libraries.performance.models import (
    Badge,
    ConsistencyMetrics,
    DrawdownAnalysis,
    GroupPerformance,
    JournalReport,
    MonthSummary,
    PerformanceMetrics,
    RiskMetrics,
    RiskRewardBucket,
)


def _format_pct(value: Decimal, precision: int = 2) -> str:
    return f"{float(value):.{precision}f}%"


def _format_currency(value: Decimal, precision: int = 2) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(float(value)):,.{precision}f}"


def _format_ratio(value: Decimal, precision: int = 2) -> str:
    if value.is_infinite():
        return "∞"
    return f"{float(value):.{precision}f}"


def _get_color(value: Decimal) -> str:
    """Get color based on positive/negative value."""
    if value > 0:
        return "green"
    elif value < 0:
        return "red"
    return "white"


def _colored(text: str, color: str) -> str:
    return f"[{color}]{text}[/{color}]"


def _create_summary_table(metrics: PerformanceMetrics, starting_balance: Decimal) -> Table:
    table = Table(title="📊 Journal Summary", show_header=False, box=None, padding=(0, 2))

    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Total Trades", f"{metrics.total_trades:,}")
    table.add_row("Priced Trades", f"{metrics.priced_trades:,}")
    table.add_row("Checklist Only", f"{metrics.unpriced_trades:,}")
    table.add_row("", "")
    table.add_row("Starting Balance", _format_currency(starting_balance))
    table.add_row("Final Balance", _format_currency(metrics.final_balance))
    table.add_row("Total P&L", _colored(_format_currency(metrics.total_pnl), _get_color(metrics.total_pnl)))
    table.add_row("A+ Rate", _format_pct(metrics.a_plus_rate))
    table.add_row("Avg Checklist Score", _format_pct(metrics.average_score))

    return table


def _create_trade_stats_table(metrics: PerformanceMetrics) -> Table:
    table = Table(title="💼 Trade Statistics", show_header=False, box=None, padding=(0, 2))

    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Winning Trades", _colored(f"{metrics.winning_trades:,}", "green"))
    table.add_row("Losing Trades", _colored(f"{metrics.losing_trades:,}", "red"))
    table.add_row("Breakeven Trades", f"{metrics.breakeven_trades:,}")

    win_rate_color = (
        "green" if metrics.win_rate > Decimal("50") else "yellow" if metrics.win_rate > Decimal("40") else "red"
    )
    table.add_row("Win Rate", _colored(_format_pct(metrics.win_rate), win_rate_color))

    pf_color = (
        "green"
        if metrics.profit_factor > Decimal("2.0")
        else "yellow"
        if metrics.profit_factor > Decimal("1.0")
        else "red"
    )
    table.add_row("Profit Factor", _colored(_format_ratio(metrics.profit_factor), pf_color))
    table.add_row("Expectancy", _colored(_format_currency(metrics.expectancy), _get_color(metrics.expectancy)))

    table.add_row("", "")
    table.add_row("Avg Win", _colored(_format_currency(metrics.average_win), "green"))
    table.add_row("Avg Loss", _colored(_format_currency(metrics.average_loss), "red"))
    table.add_row("Largest Win", _colored(_format_currency(metrics.largest_win), "green"))
    table.add_row("Largest Loss", _colored(_format_currency(metrics.largest_loss), "red"))
    table.add_row("Max Consecutive Wins", f"{metrics.max_consecutive_wins:,}")
    table.add_row("Max Consecutive Losses", f"{metrics.max_consecutive_losses:,}")

    return table


def _create_risk_table(metrics: PerformanceMetrics, risk: RiskMetrics, drawdown: DrawdownAnalysis) -> Table:
    table = Table(title="⚠️  Risk", show_header=False, box=None, padding=(0, 2))

    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Max Drawdown", _colored(_format_currency(drawdown.max_drawdown), "red"))
    table.add_row("Max Drawdown %", _colored(_format_pct(drawdown.max_drawdown_percent), "red"))
    table.add_row("Current Drawdown", _format_pct(drawdown.current_drawdown))
    table.add_row("Avg Drawdown", _format_currency(drawdown.average_drawdown))
    table.add_row("", "")

    sharpe_color = (
        "green" if metrics.sharpe_ratio > Decimal("1.0") else "yellow" if metrics.sharpe_ratio > Decimal("0") else "red"
    )
    table.add_row("Sharpe (per trade)", _colored(_format_ratio(metrics.sharpe_ratio), sharpe_color))
    table.add_row("Calmar Ratio", _format_ratio(metrics.calmar_ratio))
    table.add_row("Recovery Factor", _format_ratio(metrics.recovery_factor))
    table.add_row("Avg Risk:Reward", f"{_format_ratio(metrics.average_risk_reward)}:1")

    if risk.trades_with_risk:
        table.add_row("Avg Risk Amount", _format_currency(risk.average_risk_amount))
        table.add_row("Max Risk Amount", _format_currency(risk.max_risk_amount))
        table.add_row("Return per $ Risked", _format_ratio(risk.risk_adjusted_return))

    return table


def _create_consistency_table(consistency: ConsistencyMetrics) -> Table:
    table = Table(
        title=f"🎯 Consistency ({consistency.window})",
        show_header=False,
        box=None,
        padding=(0, 2),
    )

    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Trades", f"{consistency.total_trades:,}")
    table.add_row("Current A+ Streak", f"{consistency.current_streak}")
    table.add_row("Longest A+ Streak", f"{consistency.longest_streak}")
    table.add_row("A+ Rate", _format_pct(consistency.a_plus_rate))
    table.add_row("Avg Score", _format_pct(consistency.average_score))
    table.add_row("Risk Discipline", f"{float(consistency.risk_discipline_score):.0f}/100")
    table.add_row("Trades / Week", f"{float(consistency.trades_per_week):.1f}")
    table.add_row("Level", f"{consistency.level} ({consistency.xp:,} XP)")

    return table


def _create_badge_table(badges: list[Badge]) -> Table | None:
    if not badges:
        return None

    unlocked = sum(1 for b in badges if b.unlocked)
    table = Table(title=f"🏅 Badges ({unlocked}/{len(badges)})", box=None, padding=(0, 1))

    table.add_column("Badge", style="cyan")
    table.add_column("Rarity")
    table.add_column("Progress", justify="right")
    table.add_column("Status", justify="center")

    for badge in badges:
        table.add_row(
            badge.name,
            badge.rarity,
            f"{float(badge.progress):g}/{float(badge.requirement):g}",
            "✅" if badge.unlocked else "🔒",
        )

    return table


def _create_group_table(groups: list[GroupPerformance]) -> Table | None:
    if not groups:
        return None

    table = Table(title=f"🧩 Performance by {groups[0].key.title()}", box=None, padding=(0, 1))

    table.add_column("Name", style="cyan")
    table.add_column("Trades", justify="right")
    table.add_column("Win Rate", justify="right")
    table.add_column("Total P&L", justify="right")
    table.add_column("Avg P&L", justify="right")
    table.add_column("A+ Rate", justify="right")
    table.add_column("Best", justify="right", style="green")
    table.add_column("Worst", justify="right", style="red")

    for group in groups:
        table.add_row(
            group.name,
            f"{group.total_trades:,}",
            _format_pct(group.win_rate),
            _colored(_format_currency(group.total_pnl), _get_color(group.total_pnl)),
            _format_currency(group.average_pnl),
            _format_pct(group.a_plus_rate),
            _format_currency(group.best_trade) if group.best_trade is not None else "—",
            _format_currency(group.worst_trade) if group.worst_trade is not None else "—",
        )

    return table


def _create_drawdown_table(drawdown: DrawdownAnalysis, max_rows: int = 5) -> Table | None:
    if not drawdown.periods:
        return None

    deepest = sorted(drawdown.periods, key=lambda p: p.drawdown, reverse=True)[:max_rows]

    table = Table(title=f"📉 Top {len(deepest)} Drawdowns", box=None, padding=(0, 1))

    table.add_column("Rank", justify="right", style="dim")
    table.add_column("Depth", justify="right", style="red")
    table.add_column("Depth %", justify="right", style="red")
    table.add_column("Start", style="cyan")
    table.add_column("Trough", style="cyan")
    table.add_column("Trades", justify="right")
    table.add_column("Status", justify="center")

    for rank, period in enumerate(deepest, 1):
        table.add_row(
            str(rank),
            _format_currency(period.drawdown),
            _format_pct(period.drawdown_percent),
            period.start.strftime("%Y-%m-%d"),
            period.trough.strftime("%Y-%m-%d"),
            str(period.trade_count),
            "✅" if period.recovered else "🔴",
        )

    return table


def _create_risk_reward_table(buckets: list[RiskRewardBucket]) -> Table | None:
    if not any(b.count for b in buckets):
        return None

    table = Table(title="⚖️  Risk:Reward Distribution", box=None, padding=(0, 1))
    table.add_column("Bucket", style="cyan")
    table.add_column("Trades", justify="right")

    for bucket in buckets:
        table.add_row(bucket.label, f"{bucket.count:,}")

    return table


def _create_month_table(months: list[MonthSummary]) -> Table | None:
    if not months:
        return None

    table = Table(title="📅 Monthly Activity", box=None, padding=(0, 1))

    table.add_column("Period", style="cyan")
    table.add_column("Trades", justify="right")
    table.add_column("Days", justify="right")
    table.add_column("Trades/Day", justify="right")
    table.add_column("A+ Rate", justify="right")
    table.add_column("P&L", justify="right")

    for month in months:
        table.add_row(
            month.period,
            f"{month.total_trades:,}",
            f"{month.trading_days}",
            f"{float(month.average_trades_per_day):.1f}",
            _format_pct(month.a_plus_rate),
            _colored(_format_currency(month.total_pnl), _get_color(month.total_pnl)),
        )

    return table


def display_journal_report(report: JournalReport, console: Console | None = None) -> None:
    """
    Display a journal report in Rich-formatted console output.

    Args:
        report: Report built by ReportingService
        console: Rich Console instance (creates new if None)
    """
    if console is None:
        console = Console()

    metrics = report.metrics

    console.print()
    console.print(_create_summary_table(metrics, report.starting_balance))
    console.print()

    if metrics.priced_trades > 0:
        console.print(_create_trade_stats_table(metrics))
        console.print()
        console.print(_create_risk_table(metrics, report.risk, report.drawdown))
        console.print()

    console.print(_create_consistency_table(report.consistency))
    console.print()

    optional_tables = (
        _create_badge_table(report.consistency.badges),
        _create_group_table(report.groups),
        _create_drawdown_table(report.drawdown),
        _create_risk_reward_table(report.risk_reward_distribution),
        _create_month_table(report.months),
    )
    for table in optional_tables:
        if table is not None:
            console.print(table)
            console.print()

    summary_text = Text()
    summary_text.append("🏁 Journal: ", style="bold")
    summary_text.append(
        f"{_format_currency(report.starting_balance)} → {_format_currency(metrics.final_balance)}",
        style="bold cyan",
    )
    summary_text.append(
        f" ({_format_currency(metrics.total_pnl)})",
        style=f"bold {_get_color(metrics.total_pnl)}",
    )

    console.print(Panel(summary_text, border_style="green" if metrics.total_pnl >= 0 else "red"))
    console.print()
