"""Drawdown analysis over journal equity curves.

Finds the deepest decline from the running peak (absolute and percentage,
tracked independently), the drawdown still open at the last trade, and the
discrete drawdown periods between peaks.

A period starts at the first point below the running peak and ends at the
point where the balance makes a new high. Returning exactly to the old
peak keeps the period open. A period still open at the end of the data is
kept and bounded by the last point.
"""

from datetime import datetime
from decimal import Decimal
from typing import Sequence

from tradejournal.libraries.performance.equity import (
    DEFAULT_STARTING_BALANCE,
    build_equity_curve,
    calculate_drawdown_pct,
)
from tradejournal.libraries.performance.models import DrawdownAnalysis, DrawdownPeriod, EquityPoint, TradeRecord


class _DrawdownTracker:
    """
    Walks an equity curve once, tracking peak, trough and open period.

    Kept private: callers use analyze_equity_curve() which drives it over a
    complete curve.
    """

    def __init__(self, initial_balance: Decimal) -> None:
        self._peak = initial_balance
        self._max_drawdown = Decimal("0")
        self._max_drawdown_pct = Decimal("0")
        self._in_drawdown = False
        self._period_start: datetime | None = None
        self._trough_timestamp: datetime | None = None
        self._trough_balance = initial_balance
        self._period_drawdown = Decimal("0")
        self._period_drawdown_pct = Decimal("0")
        self._period_points = 0
        self._periods: list[DrawdownPeriod] = []

    def update(self, point: EquityPoint) -> None:
        balance = point.balance

        # New high: closes any open period
        if balance > self._peak:
            if self._in_drawdown:
                self._record_period(point.timestamp, recovered=True)
            self._peak = balance
            return

        # Back at the old peak: still inside the period, no deeper
        if balance == self._peak:
            if self._in_drawdown:
                self._period_points += 1
            return

        drawdown = self._peak - balance
        drawdown_pct = calculate_drawdown_pct(self._peak, balance)

        if not self._in_drawdown:
            self._in_drawdown = True
            self._period_start = point.timestamp
            self._trough_timestamp = point.timestamp
            self._trough_balance = balance
            self._period_drawdown = drawdown
            self._period_drawdown_pct = drawdown_pct
            self._period_points = 0

        self._period_points += 1

        if drawdown > self._period_drawdown:
            self._period_drawdown = drawdown
            self._trough_timestamp = point.timestamp
            self._trough_balance = balance
        if drawdown_pct > self._period_drawdown_pct:
            self._period_drawdown_pct = drawdown_pct

        if drawdown > self._max_drawdown:
            self._max_drawdown = drawdown
        if drawdown_pct > self._max_drawdown_pct:
            self._max_drawdown_pct = drawdown_pct

    def finalize(self, final_timestamp: datetime) -> None:
        """Close a drawdown still open at the last point."""
        if self._in_drawdown:
            self._record_period(final_timestamp, recovered=False)

    def _record_period(self, end: datetime, recovered: bool) -> None:
        assert self._period_start is not None and self._trough_timestamp is not None

        self._periods.append(
            DrawdownPeriod(
                period_id=len(self._periods),
                start=self._period_start,
                trough=self._trough_timestamp,
                end=end,
                peak_balance=self._peak,
                trough_balance=self._trough_balance,
                drawdown=self._period_drawdown,
                drawdown_percent=self._period_drawdown_pct,
                trade_count=self._period_points,
                recovered=recovered,
            )
        )
        self._in_drawdown = False
        self._period_start = None
        self._trough_timestamp = None

    @property
    def peak(self) -> Decimal:
        return self._peak

    @property
    def max_drawdown(self) -> Decimal:
        return self._max_drawdown

    @property
    def max_drawdown_pct(self) -> Decimal:
        return self._max_drawdown_pct

    @property
    def periods(self) -> list[DrawdownPeriod]:
        return self._periods.copy()


def analyze_equity_curve(curve: Sequence[EquityPoint]) -> DrawdownAnalysis:
    """
    Analyze drawdowns of an already-built equity curve.

    Args:
        curve: Equity points in trade order, seed point first

    Returns:
        DrawdownAnalysis; all zeros and no periods for an empty curve

    Example:
        >>> # 10000 -> 10100 -> 10050 -> 10250
        >>> analysis = analyze_equity_curve(curve)
        >>> analysis.max_drawdown
        Decimal('50')
        >>> analysis.periods[0].recovered
        True
    """
    if not curve:
        return DrawdownAnalysis()

    tracker = _DrawdownTracker(curve[0].balance)
    for point in curve:
        tracker.update(point)
    tracker.finalize(curve[-1].timestamp)

    periods = tracker.periods

    max_period: DrawdownPeriod | None = None
    for period in periods:
        if max_period is None or period.drawdown > max_period.drawdown:
            max_period = period

    if periods:
        average_drawdown = sum((p.drawdown for p in periods), Decimal("0")) / Decimal(len(periods))
    else:
        average_drawdown = Decimal("0")

    return DrawdownAnalysis(
        max_drawdown=tracker.max_drawdown,
        max_drawdown_percent=tracker.max_drawdown_pct,
        current_drawdown=calculate_drawdown_pct(tracker.peak, curve[-1].balance),
        average_drawdown=average_drawdown,
        periods=periods,
        max_drawdown_period=max_period,
        series=list(curve),
    )


def analyze_drawdown(
    trades: Sequence[TradeRecord],
    starting_balance: Decimal = DEFAULT_STARTING_BALANCE,
) -> DrawdownAnalysis:
    """
    Build the equity curve for ``trades`` and analyze its drawdowns.

    The starting-balance seed takes part in peak tracking, so a first losing
    trade already opens a drawdown period.
    """
    return analyze_equity_curve(build_equity_curve(trades, starting_balance))
