"""Root conftest - shared trade factories for all tests."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

import pytest

from tradejournal.libraries.performance.models import TradeRecord

BASE_TIME = datetime(2025, 1, 6, 9, 30, tzinfo=timezone.utc)


def make_trade(
    trade_id: int,
    pnl: str | None = None,
    *,
    hours: int | None = None,
    verdict: str = "A+",
    outcome: str | None = "auto",
    strategy: str = "Breakout",
    score: int = 8,
    possible: int = 10,
    **extra: Any,
) -> TradeRecord:
    """
    Build a TradeRecord with sensible defaults.

    ``outcome="auto"`` derives win/loss/breakeven from the P&L sign (and
    leaves it unset for unpriced trades). Trades are spaced one hour apart
    by id unless ``hours`` is given.
    """
    if outcome == "auto":
        if pnl is None:
            outcome = None
        elif Decimal(pnl) > 0:
            outcome = "win"
        elif Decimal(pnl) < 0:
            outcome = "loss"
        else:
            outcome = "breakeven"

    offset = hours if hours is not None else trade_id
    return TradeRecord(
        id=trade_id,
        strategy_name=strategy,
        score=score,
        possible=possible,
        verdict=verdict,
        timestamp=BASE_TIME + timedelta(hours=offset),
        pnl=Decimal(pnl) if pnl is not None else None,
        outcome=outcome,
        **extra,
    )


@pytest.fixture
def trade_factory():
    """Fixture exposing make_trade."""
    return make_trade


@pytest.fixture
def basic_trades() -> list[TradeRecord]:
    """+100, -50, +200 in chronological order."""
    return [
        make_trade(1, "100"),
        make_trade(2, "-50"),
        make_trade(3, "200"),
    ]


@pytest.fixture
def mixed_trades() -> list[TradeRecord]:
    """Two strategies, tags, one unpriced trade; deliberately out of order."""
    risk = Decimal("100")
    return [
        make_trade(
            4,
            "-80",
            strategy="Reversal",
            verdict="Not A+",
            tags=("news",),
            pair="EURUSD",
            risk_amount=risk,
            risk_reward_ratio=Decimal("1.5"),
        ),
        make_trade(
            1,
            "150",
            tags=("scalp", "news"),
            pair="EURUSD",
            risk_amount=risk,
            risk_reward_ratio=Decimal("2"),
        ),
        make_trade(3, None, verdict="Not A+", tags=("scalp",)),
        make_trade(
            2,
            "60",
            strategy="Reversal",
            tags=("scalp",),
            pair="GBPUSD",
            risk_amount=risk,
            risk_reward_ratio=Decimal("3"),
        ),
    ]


@pytest.fixture
def journal_records() -> list[dict[str, Any]]:
    """Raw journal export records with camelCase keys."""
    return [
        {
            "id": 1,
            "strategyName": "Breakout",
            "score": 9,
            "possible": 10,
            "verdict": "A+",
            "timestamp": "2025-01-06T10:30:00Z",
            "pnl": 100,
            "outcome": "win",
            "riskAmount": 50,
            "riskRewardRatio": 2,
            "tags": ["scalp"],
        },
        {
            "id": 2,
            "strategyName": "Breakout",
            "score": 6,
            "possible": 10,
            "verdict": "Not A+",
            "timestamp": "2025-01-06T11:30:00Z",
            "pnl": -50,
            "outcome": "loss",
        },
        {
            "id": 3,
            "strategyName": "Reversal",
            "score": 10,
            "possible": 10,
            "verdict": "A+",
            "timestamp": "2025-01-07T09:00:00Z",
        },
    ]
