"""Streak and consistency calculations.

Measures checklist discipline rather than profit: A+ streaks, win/loss runs,
A+ rate, average checklist score and how evenly capital is risked.

All functions sort their input by timestamp themselves and never modify it.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Sequence

from tradejournal.libraries.performance.models import (
    Badge,
    ConsecutiveRuns,
    ConsistencyMetrics,
    Outcome,
    TradeRecord,
    sort_by_timestamp,
)

XP_PER_TRADE = 10
XP_A_PLUS_BONUS = 20
XP_WIN_BONUS = 15
XP_RISK_REWARD_BONUS = 10
XP_PER_LEVEL = 1000
RISK_REWARD_BONUS_THRESHOLD = Decimal("2")

STREAK_MASTER_STREAK = 5
CONSISTENCY_KING_MIN_TRADES = 20
CONSISTENCY_KING_APLUS_RATE = Decimal("80")
RISK_GUARDIAN_SCORE = Decimal("95")
PROFIT_LEGEND_WINS = 50
DIAMOND_HANDS_TRADES = 100


class TimeWindow(str, Enum):
    """Look-back windows for consistency tracking."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    ALL = "all"

    @property
    def lookback(self) -> timedelta | None:
        """Length of the window, None for all-time."""
        return {
            TimeWindow.DAY: timedelta(days=1),
            TimeWindow.WEEK: timedelta(days=7),
            TimeWindow.MONTH: timedelta(days=30),
            TimeWindow.ALL: None,
        }[self]

    @property
    def days_in_period(self) -> int:
        """Days used to express trade frequency as trades per week."""
        return {
            TimeWindow.DAY: 1,
            TimeWindow.WEEK: 7,
            TimeWindow.MONTH: 28,
            TimeWindow.ALL: 84,
        }[self]


def filter_by_window(
    trades: Sequence[TradeRecord],
    window: TimeWindow,
    as_of: datetime | None = None,
) -> list[TradeRecord]:
    """
    Keep trades inside ``window`` ending at ``as_of`` (both bounds inclusive).

    Args:
        trades: Journal trades
        window: Look-back window
        as_of: Reference time (naive values are UTC). Required for bounded
            windows so results do not depend on the wall clock.

    Raises:
        ValueError: If a bounded window is requested without ``as_of``
    """
    lookback = window.lookback
    if lookback is None:
        return list(trades)

    if as_of is None:
        raise ValueError(f"Window '{window.value}' requires an as_of reference time")
    if as_of.tzinfo is None:
        as_of = as_of.replace(tzinfo=timezone.utc)

    cutoff = as_of - lookback
    return [t for t in trades if cutoff <= t.timestamp <= as_of]


def calculate_aplus_streaks(trades: Sequence[TradeRecord]) -> tuple[int, int]:
    """
    Current and longest runs of consecutive A+ verdicts.

    The current streak counts back from the most recent trade and stops at
    the first non-A+ trade; the longest streak is the maximum over the whole
    history. These need separate scans.

    Returns:
        (current_streak, longest_streak)

    Example:
        >>> # chronological verdicts: A+, A+, Not A+, A+
        >>> calculate_aplus_streaks(trades)
        (1, 2)
    """
    ordered = sort_by_timestamp(trades)

    longest = 0
    run = 0
    for trade in ordered:
        if trade.is_a_plus:
            run += 1
            longest = max(longest, run)
        else:
            run = 0

    current = 0
    for trade in reversed(ordered):
        if not trade.is_a_plus:
            break
        current += 1

    return current, longest


def calculate_consecutive_runs(trades: Sequence[TradeRecord]) -> ConsecutiveRuns:
    """
    Longest and trailing win/loss runs by reported outcome.

    Breakeven or missing outcomes reset both counters.
    """
    max_wins = 0
    max_losses = 0
    wins = 0
    losses = 0

    for trade in sort_by_timestamp(trades):
        if trade.outcome == Outcome.WIN:
            wins += 1
            losses = 0
            max_wins = max(max_wins, wins)
        elif trade.outcome == Outcome.LOSS:
            losses += 1
            wins = 0
            max_losses = max(max_losses, losses)
        else:
            wins = 0
            losses = 0

    return ConsecutiveRuns(
        max_consecutive_wins=max_wins,
        max_consecutive_losses=max_losses,
        consecutive_wins=wins,
        consecutive_losses=losses,
    )


def calculate_aplus_rate(trades: Sequence[TradeRecord]) -> Decimal:
    """Percentage of trades with an A+ verdict (priced or not)."""
    if not trades:
        return Decimal("0")
    a_plus = sum(1 for t in trades if t.is_a_plus)
    return Decimal(a_plus) / Decimal(len(trades)) * Decimal("100")


def calculate_average_score(trades: Sequence[TradeRecord]) -> Decimal:
    """Mean checklist score as a percentage of the achievable score."""
    if not trades:
        return Decimal("0")
    total = sum((t.score_pct for t in trades), Decimal("0"))
    return total / Decimal(len(trades))


def calculate_risk_discipline_score(trades: Sequence[TradeRecord]) -> Decimal:
    """
    Score how evenly capital is risked, 0-100.

    ``100 - variance(risk) / mean(risk) * 100`` over trades with a positive
    risk amount, clamped to [0, 100]. With no risk data the score is 100.
    """
    risks = [t.risk_amount for t in trades if t.risk_amount is not None and t.risk_amount > 0]
    if not risks:
        return Decimal("100")

    count = Decimal(len(risks))
    mean = sum(risks, Decimal("0")) / count
    variance = sum(((r - mean) ** 2 for r in risks), Decimal("0")) / count

    score = Decimal("100") - (variance / mean) * Decimal("100")
    return min(Decimal("100"), max(Decimal("0"), score))


def calculate_trades_per_week(trade_count: int, window: TimeWindow) -> Decimal:
    """Trade frequency for the window expressed per week."""
    return Decimal(trade_count) * Decimal("7") / Decimal(window.days_in_period)


def calculate_experience(trades: Sequence[TradeRecord]) -> tuple[int, int]:
    """
    Experience points and level earned by a journal.

    Every trade earns a base amount, with bonuses for A+ setups, reported
    wins and a planned risk:reward of at least 2.

    Returns:
        (xp, level)
    """
    xp = 0
    for trade in trades:
        xp += XP_PER_TRADE
        if trade.is_a_plus:
            xp += XP_A_PLUS_BONUS
        if trade.outcome == Outcome.WIN:
            xp += XP_WIN_BONUS
        if trade.risk_reward_ratio is not None and trade.risk_reward_ratio >= RISK_REWARD_BONUS_THRESHOLD:
            xp += XP_RISK_REWARD_BONUS

    return xp, xp // XP_PER_LEVEL + 1


def calculate_badges(trades: Sequence[TradeRecord], consistency: ConsistencyMetrics) -> list[Badge]:
    """
    Achievement badges for a journal.

    Trade and win counts come from the full collection; streak, A+ rate and
    risk discipline thresholds are checked against ``consistency``, so they
    follow its window. ``progress`` is capped at ``requirement``.

    Args:
        trades: The full journal
        consistency: Metrics computed for the current window

    Returns:
        All six badges in a fixed order, locked ones included
    """
    total = len(trades)
    a_plus = [t for t in sort_by_timestamp(trades) if t.is_a_plus]
    wins = sum(1 for t in trades if t.outcome == Outcome.WIN)
    longest = Decimal(consistency.longest_streak)
    enough_trades = total >= CONSISTENCY_KING_MIN_TRADES

    return [
        Badge(
            id="first-aplus",
            name="First A+",
            description="Complete your first A+ setup",
            rarity="common",
            unlocked=bool(a_plus),
            progress=Decimal(min(len(a_plus), 1)),
            requirement=Decimal("1"),
            unlocked_at=a_plus[0].timestamp if a_plus else None,
        ),
        Badge(
            id="streak-master",
            name="Streak Master",
            description=f"Achieve {STREAK_MASTER_STREAK} consecutive A+ setups",
            rarity="rare",
            unlocked=consistency.longest_streak >= STREAK_MASTER_STREAK,
            progress=min(longest, Decimal(STREAK_MASTER_STREAK)),
            requirement=Decimal(STREAK_MASTER_STREAK),
        ),
        Badge(
            id="consistency-king",
            name="Consistency King",
            description=f"Maintain {CONSISTENCY_KING_APLUS_RATE}% A+ rate over {CONSISTENCY_KING_MIN_TRADES} trades",
            rarity="epic",
            unlocked=enough_trades and consistency.a_plus_rate >= CONSISTENCY_KING_APLUS_RATE,
            progress=min(consistency.a_plus_rate, CONSISTENCY_KING_APLUS_RATE) if enough_trades else Decimal("0"),
            requirement=CONSISTENCY_KING_APLUS_RATE,
        ),
        Badge(
            id="risk-guardian",
            name="Risk Guardian",
            description="Perfect risk discipline score",
            rarity="rare",
            unlocked=consistency.risk_discipline_score >= RISK_GUARDIAN_SCORE,
            progress=min(consistency.risk_discipline_score, RISK_GUARDIAN_SCORE),
            requirement=RISK_GUARDIAN_SCORE,
        ),
        Badge(
            id="profit-legend",
            name="Profit Legend",
            description=f"Win {PROFIT_LEGEND_WINS} trades",
            rarity="legendary",
            unlocked=wins >= PROFIT_LEGEND_WINS,
            progress=Decimal(min(wins, PROFIT_LEGEND_WINS)),
            requirement=Decimal(PROFIT_LEGEND_WINS),
        ),
        Badge(
            id="diamond-hands",
            name="Diamond Hands",
            description=f"Complete {DIAMOND_HANDS_TRADES} total trades",
            rarity="epic",
            unlocked=total >= DIAMOND_HANDS_TRADES,
            progress=Decimal(min(total, DIAMOND_HANDS_TRADES)),
            requirement=Decimal(DIAMOND_HANDS_TRADES),
        ),
    ]


def calculate_consistency(
    trades: Sequence[TradeRecord],
    window: TimeWindow = TimeWindow.ALL,
    as_of: datetime | None = None,
) -> ConsistencyMetrics:
    """
    Consistency metrics for the trades inside ``window``.

    Streaks, rates and risk discipline use the windowed trades. Experience
    and level are lifetime figures over the full collection. Badges are
    attached via calculate_badges().
    """
    windowed = filter_by_window(trades, window, as_of)

    current_streak, longest_streak = calculate_aplus_streaks(windowed)
    runs = calculate_consecutive_runs(windowed)
    xp, level = calculate_experience(trades)

    metrics = ConsistencyMetrics(
        window=window.value,
        total_trades=len(windowed),
        current_streak=current_streak,
        longest_streak=longest_streak,
        a_plus_rate=calculate_aplus_rate(windowed),
        average_score=calculate_average_score(windowed),
        risk_discipline_score=calculate_risk_discipline_score(windowed),
        max_consecutive_wins=runs.max_consecutive_wins,
        max_consecutive_losses=runs.max_consecutive_losses,
        trades_per_week=calculate_trades_per_week(len(windowed), window),
        xp=xp,
        level=level,
    )
    return metrics.model_copy(update={"badges": calculate_badges(trades, metrics)})
