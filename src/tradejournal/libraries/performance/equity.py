"""Equity curve construction.

Folds priced trades, in timestamp order, into a running-balance series that
tracks the peak-to-date and the percentage drawdown below it. The curve is
always rebuilt from scratch; nothing is updated incrementally.

Usage:
    >>> from tradejournal.libraries.performance.equity import build_equity_curve
    >>> curve = build_equity_curve(trades, starting_balance=Decimal("10000"))
    >>> curve[-1].balance
    Decimal('10250')
"""

from datetime import timezone
from decimal import Decimal
from typing import Sequence

from tradejournal.libraries.performance.models import EquityPoint, TradeRecord, priced_trades, sort_by_timestamp

DEFAULT_STARTING_BALANCE = Decimal("10000")


def calculate_drawdown_pct(peak: Decimal, balance: Decimal) -> Decimal:
    """
    Percentage of ``balance`` below ``peak``.

    Zero at or above the peak and whenever the peak is not positive.
    """
    if peak <= Decimal("0") or balance >= peak:
        return Decimal("0")
    return (peak - balance) / peak * Decimal("100")


def build_equity_curve(
    trades: Sequence[TradeRecord],
    starting_balance: Decimal = DEFAULT_STARTING_BALANCE,
) -> list[EquityPoint]:
    """
    Build the running-balance curve for the priced trades in ``trades``.

    Unpriced trades are ignored and the input does not need to be sorted.
    Point 0 is a synthetic seed at ``starting_balance`` stamped with the
    first trade's timestamp; point N is the balance after the N-th trade.

    Args:
        trades: Journal trades in any order
        starting_balance: Account balance before the first trade

    Returns:
        Equity points, or an empty list when no trade carries a P&L

    Example:
        >>> curve = build_equity_curve([win_100, loss_50], Decimal("10000"))
        >>> [p.balance for p in curve]
        [Decimal('10000'), Decimal('10100'), Decimal('10050')]
    """
    ordered = sort_by_timestamp(priced_trades(trades))
    if not ordered:
        return []

    first = ordered[0].timestamp
    curve = [
        EquityPoint(
            date=first.astimezone(timezone.utc).date(),
            timestamp=first,
            balance=starting_balance,
            peak=starting_balance,
            drawdown=Decimal("0"),
            drawdown_amount=Decimal("0"),
            trade_number=0,
            pnl=Decimal("0"),
        )
    ]

    running_balance = starting_balance
    peak = starting_balance

    for number, trade in enumerate(ordered, start=1):
        pnl = trade.pnl if trade.pnl is not None else Decimal("0")
        running_balance += pnl
        if running_balance > peak:
            peak = running_balance

        curve.append(
            EquityPoint(
                date=trade.timestamp.astimezone(timezone.utc).date(),
                timestamp=trade.timestamp,
                balance=running_balance,
                peak=peak,
                drawdown=calculate_drawdown_pct(peak, running_balance),
                drawdown_amount=peak - running_balance,
                trade_number=number,
                pnl=pnl,
            )
        )

    return curve


def calculate_returns(curve: Sequence[EquityPoint]) -> list[Decimal]:
    """
    Per-trade return series from an equity curve.

    Return i is ``(balance[i] - balance[i-1]) / balance[i-1]``; steps starting
    from a non-positive balance are skipped.
    """
    returns: list[Decimal] = []
    for previous, current in zip(curve, curve[1:]):
        if previous.balance > Decimal("0"):
            returns.append((current.balance - previous.balance) / previous.balance)
    return returns
