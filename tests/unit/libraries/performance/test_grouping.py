"""Tests for strategy and tag aggregation."""

from decimal import Decimal

import pytest

from tradejournal.libraries.performance.grouping import (
    GroupingKey,
    GroupSortKey,
    aggregate_groups,
    group_trades,
    summarize_group,
)


class TestGroupingKey:
    """Test GroupingKey.extract()."""

    def test_strategy(self, trade_factory):
        assert GroupingKey.STRATEGY.extract(trade_factory(1, strategy="Range")) == ("Range",)

    def test_missing_value_gives_no_group(self, trade_factory):
        assert GroupingKey.SESSION.extract(trade_factory(1)) == ()

    def test_tags_fan_out(self, trade_factory):
        trade = trade_factory(1, tags=("scalp", "news"))

        assert GroupingKey.TAG.extract(trade) == ("scalp", "news")

    def test_label_combines_and_deduplicates(self, trade_factory):
        trade = trade_factory(1, tags=("EURUSD", "scalp"), pair="EURUSD", session="London")

        assert GroupingKey.LABEL.extract(trade) == ("EURUSD", "scalp", "London")


class TestGroupTrades:
    def test_group_by_strategy(self, mixed_trades):
        groups = group_trades(mixed_trades, GroupingKey.STRATEGY)

        assert {name: [t.id for t in trades] for name, trades in groups.items()} == {
            "Reversal": [4, 2],
            "Breakout": [1, 3],
        }

    def test_multi_tag_trade_counts_in_each_group(self, mixed_trades):
        groups = group_trades(mixed_trades, GroupingKey.TAG)

        assert sorted(t.id for t in groups["scalp"]) == [1, 2, 3]
        assert sorted(t.id for t in groups["news"]) == [1, 4]
        assert sum(len(g) for g in groups.values()) == 5


class TestSummarizeGroup:
    def test_summary(self, mixed_trades):
        breakout = [t for t in mixed_trades if t.strategy_name == "Breakout"]

        group = summarize_group("Breakout", breakout, GroupingKey.STRATEGY)

        assert group.key == "strategy"
        assert group.total_trades == 2
        assert group.priced_trades == 1
        assert group.winning_trades == 1
        assert group.win_rate == Decimal("100")
        assert group.total_pnl == Decimal("150")
        assert group.average_pnl == Decimal("150")
        assert group.a_plus_rate == Decimal("50")
        assert group.best_trade == Decimal("150")
        assert group.worst_trade == Decimal("150")

    def test_equity_curve_starts_at_zero(self, mixed_trades):
        reversal = [t for t in mixed_trades if t.strategy_name == "Reversal"]

        group = summarize_group("Reversal", reversal, GroupingKey.STRATEGY)

        assert [p.balance for p in group.equity_curve] == [Decimal("0"), Decimal("60"), Decimal("-20")]

    def test_group_without_priced_trades(self, trade_factory):
        group = summarize_group("idle", [trade_factory(1, None)], GroupingKey.TAG)

        assert group.total_trades == 1
        assert group.total_pnl == Decimal("0")
        assert group.average_pnl == Decimal("0")
        assert group.best_trade is None
        assert group.worst_trade is None
        assert group.equity_curve == []


class TestAggregateGroups:
    """Test aggregate_groups() ranking."""

    def test_sorted_by_total_pnl(self, mixed_trades):
        groups = aggregate_groups(mixed_trades)

        assert [(g.name, g.total_pnl) for g in groups] == [
            ("Breakout", Decimal("150")),
            ("Reversal", Decimal("-20")),
        ]

    def test_sorted_by_win_rate(self, mixed_trades):
        groups = aggregate_groups(mixed_trades, GroupingKey.TAG, GroupSortKey.WIN_RATE)

        assert [(g.name, g.win_rate) for g in groups] == [("scalp", Decimal("100")), ("news", Decimal("50"))]

    def test_sorted_by_trade_count(self, trade_factory):
        trades = [trade_factory(1, "500", strategy="Alpha")] + [
            trade_factory(i, "1", strategy="Zeta") for i in range(2, 5)
        ]

        by_count = aggregate_groups(trades, sort_by=GroupSortKey.TRADE_COUNT)
        by_pnl = aggregate_groups(trades, sort_by=GroupSortKey.TOTAL_PNL)

        assert [(g.name, g.total_trades) for g in by_count] == [("Zeta", 3), ("Alpha", 1)]
        assert [g.name for g in by_pnl] == ["Alpha", "Zeta"]

    def test_ties_ordered_by_name(self, trade_factory):
        trades = [trade_factory(1, "10", strategy="Zeta"), trade_factory(2, "10", strategy="Alpha")]

        groups = aggregate_groups(trades, sort_by=GroupSortKey.TRADE_COUNT)

        assert [g.name for g in groups] == ["Alpha", "Zeta"]

    def test_starting_balance_seeds_curves(self, mixed_trades):
        groups = aggregate_groups(mixed_trades, starting_balance=Decimal("1000"))

        assert all(g.equity_curve[0].balance == Decimal("1000") for g in groups)

    @pytest.mark.parametrize("key", list(GroupingKey))
    def test_empty_input(self, key):
        assert aggregate_groups([], key) == []
