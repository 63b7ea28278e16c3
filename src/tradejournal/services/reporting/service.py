"""Reporting service implementation.

Runs the analytics pipeline over a trade collection and assembles a
JournalReport for console or JSON output.
"""

import time
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Hashable, Sequence, TypeVar

import structlog

from tradejournal.libraries.performance.calendar import bucket_by_month, summarize_month
from tradejournal.libraries.performance.cache import MetricsCache
from tradejournal.libraries.performance.consistency import TimeWindow, calculate_consistency
from tradejournal.libraries.performance.drawdown import analyze_drawdown
from tradejournal.libraries.performance.grouping import GroupingKey, GroupSortKey, aggregate_groups
from tradejournal.libraries.performance.metrics import (
    calculate_metrics,
    calculate_risk_metrics,
    risk_reward_distribution,
)
from tradejournal.libraries.performance.models import JournalReport, TradeRecord
from tradejournal.system.config import AnalyticsConfig

logger = structlog.get_logger()

T = TypeVar("T")


class ReportingService:
    """
    Builds journal reports from trades.

    Attributes:
        config: Analytics defaults (starting balance, grouping...)
        cache: Optional MetricsCache shared between builds

    Example:
        >>> service = ReportingService(AnalyticsConfig(), MetricsCache())
        >>> report = service.build_report(trades, window=TimeWindow.WEEK, as_of=now)
        >>> report.metrics.win_rate
    """

    def __init__(self, config: AnalyticsConfig | None = None, cache: MetricsCache | None = None) -> None:
        self.config = config or AnalyticsConfig()
        self.cache = cache

    def _compute(self, name: str, trades: Sequence[TradeRecord], compute: Callable[[], T], *params: Hashable) -> T:
        if self.cache is None:
            return compute()

        hits_before = self.cache.hits
        result = self.cache.get_or_compute(name, trades, compute, *params)
        if self.cache.hits > hits_before:
            logger.debug("reporting.cache_hit", section=name, trades=len(trades))
        return result

    def build_report(
        self,
        trades: Sequence[TradeRecord],
        window: TimeWindow = TimeWindow.ALL,
        as_of: datetime | None = None,
        month: tuple[int, int] | None = None,
        group_by: GroupingKey | None = None,
        sort_by: GroupSortKey | None = None,
        starting_balance: Decimal | None = None,
    ) -> JournalReport:
        """
        Run every analytics section over ``trades``.

        Args:
            trades: Journal trades in any order
            window: Look-back window for the consistency section
            as_of: Reference time for bounded windows (defaults to now, UTC)
            month: (year, month) to report a single month; all months if None
            group_by: Grouping dimension (config default if None)
            sort_by: Group ranking (config default if None)
            starting_balance: Account balance before the first trade
                (config default if None)

        Returns:
            JournalReport with all sections filled in
        """
        started = time.perf_counter()

        balance = starting_balance if starting_balance is not None else self.config.starting_balance
        key = group_by or GroupingKey(self.config.group_by)
        sort_key = sort_by or GroupSortKey(self.config.group_sort)
        if window is not TimeWindow.ALL and as_of is None:
            as_of = datetime.now(timezone.utc)

        metrics = self._compute(
            "metrics",
            trades,
            lambda: calculate_metrics(
                trades,
                balance,
                self.config.risk_free_rate,
                self.config.trading_days_per_year,
            ),
            balance,
            self.config.risk_free_rate,
            self.config.trading_days_per_year,
        )
        drawdown = self._compute("drawdown", trades, lambda: analyze_drawdown(trades, balance), balance)
        groups = self._compute(
            "groups",
            trades,
            lambda: aggregate_groups(trades, key, sort_key),
            key,
            sort_key,
        )

        if month is not None:
            months = [summarize_month(trades, *month)]
        else:
            months = bucket_by_month(trades)

        report = JournalReport(
            generated_at=datetime.now(timezone.utc),
            starting_balance=balance,
            metrics=metrics,
            drawdown=drawdown,
            consistency=calculate_consistency(trades, window, as_of),
            risk=calculate_risk_metrics(trades),
            risk_reward_distribution=risk_reward_distribution(trades),
            groups=groups,
            months=months,
        )

        logger.info(
            "reporting.report_built",
            trades=len(trades),
            priced=metrics.priced_trades,
            groups=len(groups),
            window=window.value,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return report
