"""Calendar bucketing for heat-map reporting.

Buckets trades by UTC calendar day and rolls days up into months. Days
without trades are simply absent; filling gaps is left to the renderer.
"""

from datetime import date, timedelta, timezone
from decimal import Decimal
from typing import Sequence

from tradejournal.libraries.performance.consistency import calculate_aplus_rate, calculate_average_score
from tradejournal.libraries.performance.models import DayBucket, MonthSummary, Outcome, TradeRecord, sort_by_timestamp


def trade_date(trade: TradeRecord) -> date:
    """Calendar day of a trade in UTC."""
    return trade.timestamp.astimezone(timezone.utc).date()


def _period_key(day: date) -> str:
    return day.strftime("%Y-%m")


def _summarize_day(day: date, trades: Sequence[TradeRecord]) -> DayBucket:
    total = len(trades)
    wins = sum(1 for t in trades if t.outcome == Outcome.WIN)

    return DayBucket(
        date=day,
        total_trades=total,
        a_plus_count=sum(1 for t in trades if t.is_a_plus),
        a_plus_rate=calculate_aplus_rate(trades),
        total_pnl=sum((t.pnl for t in trades if t.pnl is not None), Decimal("0")),
        win_count=wins,
        win_rate=Decimal(wins) / Decimal(total) * Decimal("100") if total else Decimal("0"),
        average_score=calculate_average_score(trades),
        trade_ids=[t.id for t in trades],
    )


def bucket_by_day(
    trades: Sequence[TradeRecord],
    start: date | None = None,
    end: date | None = None,
) -> dict[date, DayBucket]:
    """
    Aggregate trades per calendar day.

    Args:
        trades: Journal trades in any order
        start: First day to include (inclusive), unbounded if None
        end: Last day to include (inclusive), unbounded if None

    Returns:
        Day buckets keyed by date, in ascending date order

    Note:
        A day's win rate is wins over all of that day's trades, priced or not.
    """
    days: dict[date, list[TradeRecord]] = {}
    for trade in sort_by_timestamp(trades):
        day = trade_date(trade)
        if start is not None and day < start:
            continue
        if end is not None and day > end:
            continue
        days.setdefault(day, []).append(trade)

    return {day: _summarize_day(day, days[day]) for day in sorted(days)}


def _summarize_month(year: int, month: int, days: list[DayBucket]) -> MonthSummary:
    total_trades = sum(d.total_trades for d in days)
    a_plus_count = sum(d.a_plus_count for d in days)
    trading_days = sum(1 for d in days if d.total_trades > 0)

    return MonthSummary(
        period=f"{year:04d}-{month:02d}",
        year=year,
        month=month,
        total_trades=total_trades,
        trading_days=trading_days,
        a_plus_count=a_plus_count,
        a_plus_rate=(
            Decimal(a_plus_count) / Decimal(total_trades) * Decimal("100") if total_trades else Decimal("0")
        ),
        total_pnl=sum((d.total_pnl for d in days), Decimal("0")),
        average_trades_per_day=(
            Decimal(total_trades) / Decimal(trading_days) if trading_days else Decimal("0")
        ),
        days=days,
    )


def summarize_month(trades: Sequence[TradeRecord], year: int, month: int) -> MonthSummary:
    """
    Month view: day buckets for ``year``/``month`` plus month totals.

    Raises:
        ValueError: If month is not in 1-12
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}")

    start = date(year, month, 1)
    next_month = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)

    days = list(bucket_by_day(trades, start=start, end=next_month - timedelta(days=1)).values())
    return _summarize_month(year, month, days)


def bucket_by_month(trades: Sequence[TradeRecord]) -> list[MonthSummary]:
    """Month summaries for every month with at least one trade, oldest first."""
    months: dict[str, list[DayBucket]] = {}
    for day, bucket in bucket_by_day(trades).items():
        months.setdefault(_period_key(day), []).append(bucket)

    return [_summarize_month(days[0].date.year, days[0].date.month, days) for days in months.values()]
