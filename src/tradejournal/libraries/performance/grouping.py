"""Strategy and tag aggregation.

Groups trades by a categorical key and recomputes win rate, P&L, checklist
score and A+ rate per group, with an equity curve for each group.

Grouping by a multi-valued key (``TAG``, ``LABEL``) is a fan-out: a trade
tagged ``["scalp", "news"]`` counts fully in both groups.
"""

from decimal import Decimal
from enum import Enum
from typing import Sequence

from tradejournal.libraries.performance.consistency import calculate_aplus_rate, calculate_average_score
from tradejournal.libraries.performance.equity import build_equity_curve
from tradejournal.libraries.performance.metrics import calculate_win_rate
from tradejournal.libraries.performance.models import GroupPerformance, TradeRecord, priced_trades


class GroupingKey(str, Enum):
    """Dimension used to partition trades."""

    STRATEGY = "strategy"
    PAIR = "pair"
    SESSION = "session"
    SETUP = "setup"
    TAG = "tag"
    LABEL = "label"  # tags, pair, session and setup together

    def extract(self, trade: TradeRecord) -> tuple[str, ...]:
        """
        Group names ``trade`` belongs to under this key.

        Empty when the trade has no value for the key.
        """
        if self is GroupingKey.STRATEGY:
            values: tuple[str | None, ...] = (trade.strategy_name,)
        elif self is GroupingKey.PAIR:
            values = (trade.pair,)
        elif self is GroupingKey.SESSION:
            values = (trade.session,)
        elif self is GroupingKey.SETUP:
            values = (trade.setup,)
        elif self is GroupingKey.TAG:
            values = trade.tags
        else:
            values = (*trade.tags, trade.pair, trade.session, trade.setup)

        # De-duplicate while keeping first-seen order
        return tuple(dict.fromkeys(v for v in values if v))


class GroupSortKey(str, Enum):
    """Ordering applied to aggregated groups (always descending)."""

    WIN_RATE = "win_rate"
    TOTAL_PNL = "total_pnl"
    TRADE_COUNT = "trade_count"

    def value_of(self, group: GroupPerformance) -> Decimal:
        if self is GroupSortKey.WIN_RATE:
            return group.win_rate
        if self is GroupSortKey.TOTAL_PNL:
            return group.total_pnl
        return Decimal(group.total_trades)


def group_trades(trades: Sequence[TradeRecord], key: GroupingKey) -> dict[str, list[TradeRecord]]:
    """
    Assign trades to groups under ``key``.

    Returns:
        Mapping of group name to its trades, in first-seen order
    """
    groups: dict[str, list[TradeRecord]] = {}
    for trade in trades:
        for name in key.extract(trade):
            groups.setdefault(name, []).append(trade)
    return groups


def summarize_group(
    name: str,
    trades: Sequence[TradeRecord],
    key: GroupingKey,
    starting_balance: Decimal = Decimal("0"),
) -> GroupPerformance:
    """
    Calculate metrics for a single group.

    Args:
        name: Group name
        trades: Every trade in the group
        key: Grouping dimension the group came from
        starting_balance: Seed of the group's equity curve (0 gives a
            cumulative P&L curve)
    """
    priced = priced_trades(trades)
    pnls = [t.pnl for t in priced if t.pnl is not None]
    total_pnl = sum(pnls, Decimal("0"))

    return GroupPerformance(
        key=key.value,
        name=name,
        total_trades=len(trades),
        priced_trades=len(priced),
        winning_trades=sum(1 for t in priced if t.is_winner),
        losing_trades=sum(1 for t in priced if t.is_loser),
        win_rate=calculate_win_rate(priced),
        total_pnl=total_pnl,
        average_pnl=total_pnl / Decimal(len(priced)) if priced else Decimal("0"),
        average_score=calculate_average_score(trades),
        a_plus_rate=calculate_aplus_rate(trades),
        best_trade=max(pnls) if pnls else None,
        worst_trade=min(pnls) if pnls else None,
        equity_curve=build_equity_curve(priced, starting_balance),
    )


def aggregate_groups(
    trades: Sequence[TradeRecord],
    key: GroupingKey = GroupingKey.STRATEGY,
    sort_by: GroupSortKey = GroupSortKey.TOTAL_PNL,
    starting_balance: Decimal = Decimal("0"),
) -> list[GroupPerformance]:
    """
    Aggregate trades per group and rank the groups.

    Args:
        trades: Journal trades in any order
        key: Grouping dimension
        sort_by: Ranking metric, descending; ties are ordered by group name
        starting_balance: Seed of every group's equity curve

    Returns:
        One GroupPerformance per group

    Example:
        >>> groups = aggregate_groups(trades, GroupingKey.TAG, GroupSortKey.WIN_RATE)
        >>> [(g.name, g.total_trades) for g in groups]
        [('scalp', 3), ('news', 1)]
    """
    summaries = [
        summarize_group(name, group, key, starting_balance) for name, group in group_trades(trades, key).items()
    ]
    summaries.sort(key=lambda g: g.name)
    summaries.sort(key=sort_by.value_of, reverse=True)
    return summaries
