"""Tests for drawdown analysis."""

from decimal import Decimal

from tradejournal.libraries.performance.drawdown import analyze_drawdown, analyze_equity_curve
from tradejournal.libraries.performance.equity import build_equity_curve


class TestAnalyzeDrawdown:
    """Test analyze_drawdown() over trade collections."""

    def test_recovered_drawdown(self, basic_trades):
        analysis = analyze_drawdown(basic_trades, Decimal("10000"))

        assert analysis.max_drawdown == Decimal("50")
        assert analysis.max_drawdown_percent == Decimal("50") / Decimal("10100") * Decimal("100")
        assert analysis.current_drawdown == Decimal("0")
        assert len(analysis.periods) == 1

        period = analysis.periods[0]
        assert period.recovered is True
        assert period.start == basic_trades[1].timestamp
        assert period.trough == basic_trades[1].timestamp
        assert period.end == basic_trades[2].timestamp
        assert period.peak_balance == Decimal("10100")
        assert period.trough_balance == Decimal("10050")
        assert period.trade_count == 1

    def test_open_period_at_end_is_kept(self, trade_factory):
        trades = [trade_factory(1, "100"), trade_factory(2, "-300"), trade_factory(3, "50")]

        analysis = analyze_drawdown(trades, Decimal("10000"))

        assert len(analysis.periods) == 1
        period = analysis.periods[0]
        assert period.recovered is False
        assert period.end == trades[2].timestamp
        assert period.trough == trades[1].timestamp
        assert period.drawdown == Decimal("300")
        assert period.trade_count == 2
        assert analysis.current_drawdown == Decimal("250") / Decimal("10100") * Decimal("100")

    def test_returning_to_old_peak_keeps_period_open(self, trade_factory):
        # 10100 -> 10050 -> 10100 -> 10070 -> 10170
        pnls = ["100", "-50", "50", "-30", "100"]
        trades = [trade_factory(i, pnl) for i, pnl in enumerate(pnls, start=1)]

        analysis = analyze_drawdown(trades, Decimal("10000"))

        assert len(analysis.periods) == 1
        period = analysis.periods[0]
        assert period.drawdown == Decimal("50")
        assert period.trough == trades[1].timestamp
        assert period.end == trades[4].timestamp
        assert period.trade_count == 3
        assert period.recovered is True
        assert analysis.average_drawdown == Decimal("50")

    def test_ending_at_old_peak_is_not_recovered(self, trade_factory):
        trades = [trade_factory(1, "100"), trade_factory(2, "-100"), trade_factory(3, "100")]

        analysis = analyze_drawdown(trades, Decimal("10000"))

        assert analysis.periods[0].recovered is False
        assert analysis.periods[0].end == trades[2].timestamp
        assert analysis.current_drawdown == Decimal("0")

    def test_first_losing_trade_opens_period(self, trade_factory):
        trades = [trade_factory(1, "-50")]

        analysis = analyze_drawdown(trades, Decimal("1000"))

        assert analysis.max_drawdown == Decimal("50")
        assert analysis.max_drawdown_percent == Decimal("5")
        assert analysis.periods[0].peak_balance == Decimal("1000")

    def test_multiple_periods(self, trade_factory):
        pnls = ["-100", "150", "-200", "300", "-50"]
        trades = [trade_factory(i, pnl) for i, pnl in enumerate(pnls, start=1)]

        analysis = analyze_drawdown(trades, Decimal("1000"))

        assert [p.drawdown for p in analysis.periods] == [Decimal("100"), Decimal("200"), Decimal("50")]
        assert [p.recovered for p in analysis.periods] == [True, True, False]
        assert [p.period_id for p in analysis.periods] == [0, 1, 2]
        assert analysis.max_drawdown == Decimal("200")
        assert analysis.max_drawdown_period == analysis.periods[1]
        assert analysis.average_drawdown == Decimal("350") / Decimal("3")

    def test_amount_and_percent_tracked_independently(self, trade_factory):
        # 100 -> 50 is 50% / $50; later 1000 -> 900 is 10% / $100
        pnls = ["-50", "950", "-100"]
        trades = [trade_factory(i, pnl) for i, pnl in enumerate(pnls, start=1)]

        analysis = analyze_drawdown(trades, Decimal("100"))

        assert analysis.max_drawdown == Decimal("100")
        assert analysis.max_drawdown_percent == Decimal("50")

    def test_no_drawdown(self, trade_factory):
        trades = [trade_factory(1, "10"), trade_factory(2, "20")]

        analysis = analyze_drawdown(trades)

        assert analysis.max_drawdown == Decimal("0")
        assert analysis.periods == []
        assert analysis.max_drawdown_period is None

    def test_series_matches_equity_curve(self, basic_trades):
        analysis = analyze_drawdown(basic_trades, Decimal("10000"))

        assert analysis.series == build_equity_curve(basic_trades, Decimal("10000"))


class TestAnalyzeEquityCurve:
    def test_empty_curve(self):
        analysis = analyze_equity_curve([])

        assert analysis.max_drawdown == Decimal("0")
        assert analysis.max_drawdown_percent == Decimal("0")
        assert analysis.current_drawdown == Decimal("0")
        assert analysis.periods == []
        assert analysis.series == []

    def test_deterministic(self, mixed_trades):
        curve = build_equity_curve(mixed_trades)

        assert analyze_equity_curve(curve) == analyze_equity_curve(curve)
