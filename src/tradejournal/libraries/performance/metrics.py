"""Performance metrics calculation functions.

Pure functions for calculating P&L statistics and risk-adjusted ratios from
journal trades. All functions are stateless and testable.

Philosophy:
- Pure functions: same inputs always produce same outputs
- No side effects: don't modify inputs or global state
- Defensive defaults: missing fields exclude a trade, empty input gives zeros
- Every ratio guards its denominator; only profit factor may be infinite

Usage:
    >>> from tradejournal.libraries.performance import metrics
    >>> from decimal import Decimal
    >>>
    >>> report = metrics.calculate_metrics(trades, starting_balance=Decimal("10000"))
    >>> report.profit_factor
    Decimal('6')
    >>>
    >>> # Sharpe ratio of the per-trade return series (not annualized)
    >>> sharpe = metrics.calculate_sharpe_ratio(
    ...     returns=[Decimal("0.01"), Decimal("-0.005"), Decimal("0.02")],
    ...     risk_free_rate=Decimal("0.02"),
    ... )
"""

from decimal import Decimal
from typing import Sequence

from tradejournal.libraries.performance.consistency import (
    calculate_aplus_rate,
    calculate_average_score,
    calculate_consecutive_runs,
)
from tradejournal.libraries.performance.drawdown import analyze_equity_curve
from tradejournal.libraries.performance.equity import DEFAULT_STARTING_BALANCE, build_equity_curve, calculate_returns
from tradejournal.libraries.performance.models import (
    Outcome,
    PerformanceMetrics,
    RiskMetrics,
    RiskRewardBucket,
    TradeRecord,
    priced_trades,
    sort_by_timestamp,
)

DEFAULT_RISK_FREE_RATE = Decimal("0.02")
TRADING_DAYS_PER_YEAR = 252

RISK_REWARD_BUCKETS: tuple[tuple[str, Decimal, Decimal], ...] = (
    ("0-1:1", Decimal("0"), Decimal("1")),
    ("1-2:1", Decimal("1"), Decimal("2")),
    ("2-3:1", Decimal("2"), Decimal("3")),
    ("3-5:1", Decimal("3"), Decimal("5")),
    ("5+:1", Decimal("5"), Decimal("Infinity")),
)


def _pnl(trade: TradeRecord) -> Decimal:
    return trade.pnl if trade.pnl is not None else Decimal("0")


def _mean(values: Sequence[Decimal]) -> Decimal:
    if not values:
        return Decimal("0")
    return sum(values, Decimal("0")) / Decimal(len(values))


def calculate_win_rate(trades: Sequence[TradeRecord]) -> Decimal:
    """
    Calculate win rate over priced trades.

    Args:
        trades: Journal trades; unpriced trades are ignored

    Returns:
        Win rate as percentage (0-100)

    Example:
        >>> calculate_win_rate([win_100, loss_50, win_200])
        Decimal('66.66666666666666666666666667')
    """
    priced = priced_trades(trades)
    if not priced:
        return Decimal("0")

    wins = sum(1 for t in priced if t.is_winner)
    return Decimal(wins) / Decimal(len(priced)) * Decimal("100")


def calculate_loss_rate(trades: Sequence[TradeRecord]) -> Decimal:
    """Loss rate over priced trades as percentage (0-100)."""
    priced = priced_trades(trades)
    if not priced:
        return Decimal("0")

    losses = sum(1 for t in priced if t.is_loser)
    return Decimal(losses) / Decimal(len(priced)) * Decimal("100")


def calculate_average_win(trades: Sequence[TradeRecord]) -> Decimal:
    """Mean P&L of winning trades, 0 without winners."""
    return _mean([_pnl(t) for t in priced_trades(trades) if t.is_winner])


def calculate_average_loss(trades: Sequence[TradeRecord]) -> Decimal:
    """Mean absolute P&L of losing trades (positive number), 0 without losers."""
    return _mean([abs(_pnl(t)) for t in priced_trades(trades) if t.is_loser])


def calculate_largest_win(trades: Sequence[TradeRecord]) -> Decimal:
    """Best winning P&L, 0 without winners."""
    wins = [_pnl(t) for t in priced_trades(trades) if t.is_winner]
    return max(wins) if wins else Decimal("0")


def calculate_largest_loss(trades: Sequence[TradeRecord]) -> Decimal:
    """Worst losing P&L (as negative number), 0 without losers."""
    losses = [_pnl(t) for t in priced_trades(trades) if t.is_loser]
    return min(losses) if losses else Decimal("0")


def calculate_profit_factor(trades: Sequence[TradeRecord]) -> Decimal:
    """
    Calculate profit factor (gross profit / gross loss).

    Args:
        trades: Journal trades; unpriced trades are ignored

    Returns:
        Profit factor; ``Decimal("Infinity")`` when there are wins but no
        losses, 0 when there are neither

    Example:
        >>> calculate_profit_factor([win_100, loss_50, win_200])
        Decimal('6')
    """
    priced = priced_trades(trades)
    gross_profit = sum((_pnl(t) for t in priced if t.is_winner), Decimal("0"))
    gross_loss = abs(sum((_pnl(t) for t in priced if t.is_loser), Decimal("0")))

    if gross_loss > Decimal("0"):
        return gross_profit / gross_loss
    if gross_profit > Decimal("0"):
        return Decimal("Infinity")
    return Decimal("0")


def calculate_expectancy(trades: Sequence[TradeRecord]) -> Decimal:
    """
    Calculate expectancy (average P&L per priced trade).

    Example:
        >>> calculate_expectancy([win_100, loss_50])
        Decimal('25')
    """
    return _mean([_pnl(t) for t in priced_trades(trades)])


def calculate_average_risk_reward(trades: Sequence[TradeRecord]) -> Decimal:
    """Mean planned risk:reward over trades where it is set and positive."""
    ratios = [t.risk_reward_ratio for t in trades if t.risk_reward_ratio is not None and t.risk_reward_ratio > 0]
    return _mean(ratios)


def calculate_sharpe_ratio(
    returns: Sequence[Decimal],
    risk_free_rate: Decimal = DEFAULT_RISK_FREE_RATE,
    periods_per_year: int = TRADING_DAYS_PER_YEAR,
) -> Decimal:
    """
    Calculate the per-trade Sharpe ratio.

    Sharpe = (mean(returns) - risk_free_rate / periods_per_year) / stddev(returns)

    Uses the population standard deviation. The result is NOT annualized;
    use annualize_sharpe_ratio() for a yearly figure.

    Args:
        returns: Per-trade return series (e.g. from calculate_returns)
        risk_free_rate: Annual risk-free rate as decimal (e.g., 0.02 for 2%)
        periods_per_year: Periods used to de-annualize the risk-free rate

    Returns:
        Sharpe ratio, 0 for an empty or zero-variance series
    """
    if not returns:
        return Decimal("0")

    count = Decimal(len(returns))
    mean_return = sum(returns, Decimal("0")) / count
    variance = sum(((r - mean_return) ** 2 for r in returns), Decimal("0")) / count
    std_dev = variance.sqrt()

    if std_dev == Decimal("0"):
        return Decimal("0")

    period_risk_free = risk_free_rate / Decimal(periods_per_year)
    return (mean_return - period_risk_free) / std_dev


def annualize_sharpe_ratio(sharpe_ratio: Decimal, periods_per_year: int = TRADING_DAYS_PER_YEAR) -> Decimal:
    """Scale a per-period Sharpe ratio by sqrt(periods_per_year)."""
    return sharpe_ratio * Decimal(periods_per_year).sqrt()


def calculate_calmar_ratio(total_pnl: Decimal, starting_balance: Decimal, max_drawdown_pct: Decimal) -> Decimal:
    """
    Calculate Calmar ratio (return % / max drawdown %).

    Args:
        total_pnl: Realized P&L over the period
        starting_balance: Account balance before the first trade
        max_drawdown_pct: Maximum drawdown as positive percentage

    Returns:
        Calmar ratio, 0 when there was no drawdown or no starting balance

    Example:
        >>> calculate_calmar_ratio(Decimal("2000"), Decimal("10000"), Decimal("10"))
        Decimal('2')
    """
    if max_drawdown_pct == Decimal("0") or starting_balance == Decimal("0"):
        return Decimal("0")

    return_pct = total_pnl / starting_balance * Decimal("100")
    return return_pct / max_drawdown_pct


def calculate_recovery_factor(total_pnl: Decimal, max_drawdown: Decimal) -> Decimal:
    """Net P&L per unit of maximum drawdown, 0 without a drawdown."""
    if max_drawdown <= Decimal("0"):
        return Decimal("0")
    return total_pnl / max_drawdown


def calculate_metrics(
    trades: Sequence[TradeRecord],
    starting_balance: Decimal = DEFAULT_STARTING_BALANCE,
    risk_free_rate: Decimal = DEFAULT_RISK_FREE_RATE,
    periods_per_year: int = TRADING_DAYS_PER_YEAR,
) -> PerformanceMetrics:
    """
    Calculate the full metrics record for a trade collection.

    Checklist aggregates (total trades, A+ rate, average score) use every
    trade. P&L metrics, the equity curve and the drawdown use priced trades
    only, ordered by timestamp.

    Args:
        trades: Journal trades in any order
        starting_balance: Account balance before the first trade
        risk_free_rate: Annual risk-free rate for the Sharpe ratio
        periods_per_year: Periods used to de-annualize the risk-free rate

    Returns:
        PerformanceMetrics; PerformanceMetrics.empty(starting_balance) for empty input
    """
    if not trades:
        return PerformanceMetrics.empty(starting_balance)

    priced = sort_by_timestamp(priced_trades(trades))
    total_pnl = sum((_pnl(t) for t in priced), Decimal("0"))

    curve = build_equity_curve(priced, starting_balance)
    drawdown = analyze_equity_curve(curve)
    runs = calculate_consecutive_runs(priced)

    return PerformanceMetrics(
        total_trades=len(trades),
        priced_trades=len(priced),
        unpriced_trades=len(trades) - len(priced),
        winning_trades=sum(1 for t in priced if t.is_winner),
        losing_trades=sum(1 for t in priced if t.is_loser),
        breakeven_trades=sum(1 for t in priced if t.resolved_outcome == Outcome.BREAKEVEN),
        win_rate=calculate_win_rate(priced),
        loss_rate=calculate_loss_rate(priced),
        total_pnl=total_pnl,
        final_balance=starting_balance + total_pnl,
        average_win=calculate_average_win(priced),
        average_loss=calculate_average_loss(priced),
        largest_win=calculate_largest_win(priced),
        largest_loss=calculate_largest_loss(priced),
        expectancy=calculate_expectancy(priced),
        profit_factor=calculate_profit_factor(priced),
        max_drawdown=drawdown.max_drawdown,
        max_drawdown_percent=drawdown.max_drawdown_percent,
        current_drawdown=drawdown.current_drawdown,
        consecutive_wins=runs.consecutive_wins,
        consecutive_losses=runs.consecutive_losses,
        max_consecutive_wins=runs.max_consecutive_wins,
        max_consecutive_losses=runs.max_consecutive_losses,
        average_risk_reward=calculate_average_risk_reward(priced),
        sharpe_ratio=calculate_sharpe_ratio(calculate_returns(curve), risk_free_rate, periods_per_year),
        calmar_ratio=calculate_calmar_ratio(total_pnl, starting_balance, drawdown.max_drawdown_percent),
        recovery_factor=calculate_recovery_factor(total_pnl, drawdown.max_drawdown),
        a_plus_rate=calculate_aplus_rate(trades),
        average_score=calculate_average_score(trades),
    )


def calculate_risk_metrics(trades: Sequence[TradeRecord]) -> RiskMetrics:
    """
    Capital-at-risk statistics over trades with both a risk amount and P&L.

    ``risk_adjusted_return`` is total P&L divided by total capital risked.
    """
    with_risk = [t for t in trades if t.risk_amount is not None and t.pnl is not None]
    if not with_risk:
        return RiskMetrics()

    risks = [t.risk_amount for t in with_risk if t.risk_amount is not None]
    total_risk = sum(risks, Decimal("0"))
    total_pnl = sum((_pnl(t) for t in with_risk), Decimal("0"))

    return RiskMetrics(
        trades_with_risk=len(with_risk),
        average_risk_amount=_mean(risks),
        max_risk_amount=max(risks),
        average_risk_reward=calculate_average_risk_reward(with_risk),
        risk_adjusted_return=total_pnl / total_risk if total_risk > 0 else Decimal("0"),
    )


def risk_reward_distribution(trades: Sequence[TradeRecord]) -> list[RiskRewardBucket]:
    """
    Count trades per planned risk:reward bucket.

    Buckets are half-open ``[lower, upper)``; trades without a positive
    ratio are not counted.
    """
    ratios = [t.risk_reward_ratio for t in trades if t.risk_reward_ratio is not None and t.risk_reward_ratio > 0]

    return [
        RiskRewardBucket(
            label=label,
            lower=lower,
            upper=upper,
            count=sum(1 for r in ratios if lower <= r < upper),
        )
        for label, lower, upper in RISK_REWARD_BUCKETS
    ]
