"""Performance analytics library for trade journals.

Turns an unordered collection of logged trades into derived statistics:

1. **Models** (`models.py`): Pydantic data structures
   - TradeRecord: One journal trade (checklist verdict plus optional P&L)
   - EquityPoint / DrawdownPeriod / DrawdownAnalysis: Balance history
   - PerformanceMetrics / RiskMetrics / ConsistencyMetrics: Aggregates
   - GroupPerformance / DayBucket / MonthSummary: Breakdowns

2. **Equity & drawdown** (`equity.py`, `drawdown.py`)
   - Running balance with peak-to-date, drawdown periods and recovery

3. **Metrics** (`metrics.py`): Pure calculation functions
   - Trade stats: win_rate, profit_factor, expectancy, largest win/loss
   - Risk-adjusted: Sharpe, Calmar, recovery factor

4. **Consistency** (`consistency.py`): A+ streaks, win/loss runs, risk
   discipline, experience level, badges, time windows

5. **Grouping & calendar** (`grouping.py`, `calendar.py`)
   - Per-strategy/tag breakdowns and day/month heat-map buckets

6. **Cache** (`cache.py`): Optional memoization for repeated refreshes

Usage:
    >>> from tradejournal.libraries.performance import calculate_metrics
    >>> metrics = calculate_metrics(trades, starting_balance=Decimal("10000"))
    >>> metrics.win_rate, metrics.profit_factor

Design Principles:
    - Decimal precision; rounding is left to display code
    - Inputs are never mutated; every result is rebuilt from scratch
    - Missing optional fields exclude a trade from the affected metric only
"""

from tradejournal.libraries.performance.cache import MetricsCache, trade_fingerprint
from tradejournal.libraries.performance.calendar import bucket_by_day, bucket_by_month, summarize_month
from tradejournal.libraries.performance.consistency import (
    TimeWindow,
    calculate_aplus_rate,
    calculate_aplus_streaks,
    calculate_average_score,
    calculate_badges,
    calculate_consecutive_runs,
    calculate_consistency,
    calculate_experience,
    calculate_risk_discipline_score,
    filter_by_window,
)
from tradejournal.libraries.performance.drawdown import analyze_drawdown, analyze_equity_curve
from tradejournal.libraries.performance.equity import build_equity_curve, calculate_returns
from tradejournal.libraries.performance.grouping import GroupingKey, GroupSortKey, aggregate_groups, group_trades
from tradejournal.libraries.performance.metrics import (
    annualize_sharpe_ratio,
    calculate_calmar_ratio,
    calculate_expectancy,
    calculate_metrics,
    calculate_profit_factor,
    calculate_recovery_factor,
    calculate_risk_metrics,
    calculate_sharpe_ratio,
    calculate_win_rate,
    risk_reward_distribution,
)
from tradejournal.libraries.performance.models import (
    Badge,
    ConsecutiveRuns,
    ConsistencyMetrics,
    DayBucket,
    DrawdownAnalysis,
    DrawdownPeriod,
    EquityPoint,
    GroupPerformance,
    JournalReport,
    MonthSummary,
    Outcome,
    PerformanceMetrics,
    RiskMetrics,
    RiskRewardBucket,
    TradeRecord,
    Verdict,
)

__all__ = [
    # Models
    "TradeRecord",
    "Verdict",
    "Outcome",
    "EquityPoint",
    "DrawdownPeriod",
    "DrawdownAnalysis",
    "ConsecutiveRuns",
    "Badge",
    "ConsistencyMetrics",
    "PerformanceMetrics",
    "RiskMetrics",
    "RiskRewardBucket",
    "GroupPerformance",
    "DayBucket",
    "MonthSummary",
    "JournalReport",
    # Equity & drawdown
    "build_equity_curve",
    "calculate_returns",
    "analyze_equity_curve",
    "analyze_drawdown",
    # Metrics (pure functions)
    "calculate_metrics",
    "calculate_win_rate",
    "calculate_profit_factor",
    "calculate_expectancy",
    "calculate_sharpe_ratio",
    "annualize_sharpe_ratio",
    "calculate_calmar_ratio",
    "calculate_recovery_factor",
    "calculate_risk_metrics",
    "risk_reward_distribution",
    # Consistency
    "TimeWindow",
    "filter_by_window",
    "calculate_aplus_streaks",
    "calculate_consecutive_runs",
    "calculate_aplus_rate",
    "calculate_average_score",
    "calculate_risk_discipline_score",
    "calculate_experience",
    "calculate_badges",
    "calculate_consistency",
    # Grouping & calendar
    "GroupingKey",
    "GroupSortKey",
    "group_trades",
    "aggregate_groups",
    "bucket_by_day",
    "bucket_by_month",
    "summarize_month",
    # Cache
    "MetricsCache",
    "trade_fingerprint",
]
