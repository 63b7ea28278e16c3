"""Tests for calendar bucketing."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from tradejournal.libraries.performance.calendar import bucket_by_day, bucket_by_month, summarize_month, trade_date
from tradejournal.libraries.performance.models import TradeRecord


def _trade(trade_id: int, ts: datetime, pnl: str | None = None, verdict: str = "A+", outcome: str | None = None):
    return TradeRecord(
        id=trade_id,
        strategy_name="Breakout",
        score=8,
        possible=10,
        verdict=verdict,
        timestamp=ts,
        pnl=Decimal(pnl) if pnl is not None else None,
        outcome=outcome,
    )


@pytest.fixture
def january_trades():
    return [
        _trade(1, datetime(2025, 1, 6, 9, tzinfo=timezone.utc), "100", outcome="win"),
        _trade(2, datetime(2025, 1, 6, 15, tzinfo=timezone.utc), "-40", verdict="Not A+", outcome="loss"),
        _trade(3, datetime(2025, 1, 6, 16, tzinfo=timezone.utc)),
        _trade(4, datetime(2025, 1, 9, 10, tzinfo=timezone.utc), "25", outcome="win"),
        _trade(5, datetime(2025, 2, 3, 10, tzinfo=timezone.utc), "-10", outcome="loss"),
    ]


class TestBucketByDay:
    """Test bucket_by_day()."""

    def test_day_aggregates(self, january_trades):
        days = bucket_by_day(january_trades)

        monday = days[date(2025, 1, 6)]
        assert monday.total_trades == 3
        assert monday.a_plus_count == 2
        assert monday.total_pnl == Decimal("60")
        assert monday.win_count == 1
        # Wins over all of the day's trades, priced or not
        assert monday.win_rate == Decimal("1") / Decimal("3") * Decimal("100")
        assert monday.trade_ids == [1, 2, 3]

    def test_empty_days_absent(self, january_trades):
        days = bucket_by_day(january_trades)

        assert list(days) == [date(2025, 1, 6), date(2025, 1, 9), date(2025, 2, 3)]

    def test_bounds_are_inclusive(self, january_trades):
        days = bucket_by_day(january_trades, start=date(2025, 1, 6), end=date(2025, 1, 9))

        assert list(days) == [date(2025, 1, 6), date(2025, 1, 9)]

    def test_day_is_utc(self):
        eastern = timezone(timedelta(hours=-5))
        trade = _trade(1, datetime(2025, 1, 6, 21, tzinfo=eastern))

        assert trade_date(trade) == date(2025, 1, 7)

    def test_empty(self):
        assert bucket_by_day([]) == {}


class TestMonths:
    """Test summarize_month() and bucket_by_month()."""

    def test_summarize_month(self, january_trades):
        month = summarize_month(january_trades, 2025, 1)

        assert month.period == "2025-01"
        assert month.total_trades == 4
        assert month.trading_days == 2
        assert month.a_plus_count == 3
        assert month.a_plus_rate == Decimal("75")
        assert month.total_pnl == Decimal("85")
        assert month.average_trades_per_day == Decimal("2")
        assert [d.date for d in month.days] == [date(2025, 1, 6), date(2025, 1, 9)]

    def test_december_bounds(self):
        trades = [
            _trade(1, datetime(2024, 12, 31, 23, tzinfo=timezone.utc)),
            _trade(2, datetime(2025, 1, 1, 0, tzinfo=timezone.utc)),
        ]

        assert summarize_month(trades, 2024, 12).total_trades == 1

    def test_empty_month(self, january_trades):
        month = summarize_month(january_trades, 2025, 3)

        assert month.total_trades == 0
        assert month.days == []
        assert month.average_trades_per_day == Decimal("0")

    def test_invalid_month(self, january_trades):
        with pytest.raises(ValueError, match="Invalid month"):
            summarize_month(january_trades, 2025, 13)

    def test_bucket_by_month(self, january_trades):
        months = bucket_by_month(january_trades)

        assert [(m.period, m.total_trades) for m in months] == [("2025-01", 4), ("2025-02", 1)]
