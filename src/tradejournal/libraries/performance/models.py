"""Performance analytics data models.

Pydantic models for journal trades and every derived analytics result.
Trade records accept the journal's camelCase keys (``strategyName``,
``riskAmount``...) as well as the snake_case field names.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Iterable

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Ratios that may legitimately be infinite (profit factor with no losses)
UnboundedDecimal = Annotated[Decimal, Field(allow_inf_nan=True)]


class Verdict(str, Enum):
    """Checklist verdict recorded when the trade was saved."""

    A_PLUS = "A+"
    NOT_A_PLUS = "Not A+"


class Outcome(str, Enum):
    """Post-trade result reported by the trader."""

    WIN = "win"
    LOSS = "loss"
    BREAKEVEN = "breakeven"


class TradeRecord(BaseModel):
    """
    One logged journal trade.

    Created when a checklist is completed; ``pnl``, ``outcome`` and the risk
    fields are filled in later by a post-trade update. Records are immutable,
    an edit produces a replacement record with the same ``id``.

    Analytics never require the optional fields: a record lacking what a
    metric needs is skipped by that metric only.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    strategy_name: str = Field(alias="strategyName")
    score: int = Field(ge=0)
    possible: int = Field(ge=0)
    verdict: Verdict
    timestamp: datetime
    pnl: Decimal | None = None
    outcome: Outcome | None = None
    risk_amount: Decimal | None = Field(default=None, alias="riskAmount", ge=0)
    risk_reward_ratio: Decimal | None = Field(default=None, alias="riskRewardRatio", ge=0)
    tags: tuple[str, ...] = ()
    pair: str | None = None
    session: str | None = None
    setup: str | None = None
    notes: str | None = None

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        """Naive timestamps are journal-local UTC."""
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _check_consistency(self) -> "TradeRecord":
        if self.score > self.possible:
            raise ValueError(f"score ({self.score}) cannot exceed possible ({self.possible})")

        if self.pnl is not None and self.outcome is not None:
            if self.outcome == Outcome.WIN and self.pnl <= 0:
                raise ValueError(f"Trade {self.id} marked as win but pnl is {self.pnl}")
            if self.outcome == Outcome.LOSS and self.pnl >= 0:
                raise ValueError(f"Trade {self.id} marked as loss but pnl is {self.pnl}")

        return self

    @property
    def is_priced(self) -> bool:
        """Trade has a realized P&L."""
        return self.pnl is not None

    @property
    def is_a_plus(self) -> bool:
        return self.verdict == Verdict.A_PLUS

    @property
    def score_pct(self) -> Decimal:
        """Checklist score as percentage of the achievable score."""
        if self.possible == 0:
            return Decimal("0")
        return Decimal(self.score) / Decimal(self.possible) * Decimal("100")

    @property
    def resolved_outcome(self) -> Outcome | None:
        """Reported outcome, or the one implied by the P&L sign."""
        if self.outcome is not None:
            return self.outcome
        if self.pnl is None:
            return None
        if self.pnl > 0:
            return Outcome.WIN
        if self.pnl < 0:
            return Outcome.LOSS
        return Outcome.BREAKEVEN

    @property
    def is_winner(self) -> bool:
        return self.resolved_outcome == Outcome.WIN

    @property
    def is_loser(self) -> bool:
        return self.resolved_outcome == Outcome.LOSS


def sort_by_timestamp(trades: Iterable[TradeRecord]) -> list[TradeRecord]:
    """Return a new list ordered by timestamp (stable for equal timestamps)."""
    return sorted(trades, key=lambda t: t.timestamp)


def priced_trades(trades: Iterable[TradeRecord]) -> list[TradeRecord]:
    """Trades carrying a realized P&L, in input order."""
    return [t for t in trades if t.pnl is not None]


class EquityPoint(BaseModel):
    """
    Single point on the equity curve.

    Point 0 is the synthetic starting-balance seed; every later point is the
    balance after trade ``trade_number``.
    """

    date: date
    timestamp: datetime
    balance: Decimal
    peak: Decimal
    drawdown: Decimal  # Percentage below peak
    drawdown_amount: Decimal
    trade_number: int
    pnl: Decimal

    @property
    def underwater(self) -> bool:
        return self.balance < self.peak


class DrawdownPeriod(BaseModel):
    """
    Record of a drawdown period (first dip below peak to recovery).

    An unrecovered period ends at the last available point.
    """

    period_id: int
    start: datetime  # First point below the peak
    trough: datetime
    end: datetime  # Recovery point, or last point if not recovered
    peak_balance: Decimal
    trough_balance: Decimal
    drawdown: Decimal  # Deepest peak-minus-balance in currency
    drawdown_percent: Decimal
    trade_count: int  # Points spent below the peak
    recovered: bool


class DrawdownAnalysis(BaseModel):
    """Drawdown summary derived from an equity curve."""

    max_drawdown: Decimal = Decimal("0")
    max_drawdown_percent: Decimal = Decimal("0")
    current_drawdown: Decimal = Decimal("0")  # Percentage from all-time peak
    average_drawdown: Decimal = Decimal("0")
    periods: list[DrawdownPeriod] = Field(default_factory=list)
    max_drawdown_period: DrawdownPeriod | None = None
    series: list[EquityPoint] = Field(default_factory=list)


class ConsecutiveRuns(BaseModel):
    """Win/loss run lengths; ``consecutive_*`` are the runs still open at the end."""

    max_consecutive_wins: int = 0
    max_consecutive_losses: int = 0
    consecutive_wins: int = 0
    consecutive_losses: int = 0


class Badge(BaseModel):
    """Achievement earned from checklist and trading milestones."""

    id: str
    name: str
    description: str
    rarity: str = Field(description="common, rare, epic or legendary")
    unlocked: bool
    progress: Decimal
    requirement: Decimal
    unlocked_at: datetime | None = None


class ConsistencyMetrics(BaseModel):
    """Checklist-discipline metrics over a time window."""

    window: str
    total_trades: int
    current_streak: int
    longest_streak: int
    a_plus_rate: Decimal
    average_score: Decimal
    risk_discipline_score: Decimal
    max_consecutive_wins: int
    max_consecutive_losses: int
    trades_per_week: Decimal
    xp: int
    level: int
    badges: list[Badge] = Field(default_factory=list)


class PerformanceMetrics(BaseModel):
    """
    Flat aggregate of P&L and ratio metrics for a trade collection.

    ``total_trades`` counts every trade (checklist-only included); the
    P&L-derived fields only see priced trades.
    """

    total_trades: int
    priced_trades: int
    unpriced_trades: int
    winning_trades: int
    losing_trades: int
    breakeven_trades: int
    win_rate: Decimal
    loss_rate: Decimal
    total_pnl: Decimal
    final_balance: Decimal
    average_win: Decimal
    average_loss: Decimal
    largest_win: Decimal
    largest_loss: Decimal
    expectancy: Decimal
    profit_factor: UnboundedDecimal
    max_drawdown: Decimal
    max_drawdown_percent: Decimal
    current_drawdown: Decimal
    consecutive_wins: int
    consecutive_losses: int
    max_consecutive_wins: int
    max_consecutive_losses: int
    average_risk_reward: Decimal
    sharpe_ratio: Decimal
    calmar_ratio: Decimal
    recovery_factor: Decimal
    a_plus_rate: Decimal
    average_score: Decimal

    @classmethod
    def empty(cls, starting_balance: Decimal = Decimal("0")) -> "PerformanceMetrics":
        """
        Neutral metrics for a collection with nothing to measure.

        ``final_balance`` equals ``starting_balance``, 0 when none is given.
        """
        zero = Decimal("0")
        return cls(
            total_trades=0,
            priced_trades=0,
            unpriced_trades=0,
            winning_trades=0,
            losing_trades=0,
            breakeven_trades=0,
            win_rate=zero,
            loss_rate=zero,
            total_pnl=zero,
            final_balance=starting_balance,
            average_win=zero,
            average_loss=zero,
            largest_win=zero,
            largest_loss=zero,
            expectancy=zero,
            profit_factor=zero,
            max_drawdown=zero,
            max_drawdown_percent=zero,
            current_drawdown=zero,
            consecutive_wins=0,
            consecutive_losses=0,
            max_consecutive_wins=0,
            max_consecutive_losses=0,
            average_risk_reward=zero,
            sharpe_ratio=zero,
            calmar_ratio=zero,
            recovery_factor=zero,
            a_plus_rate=zero,
            average_score=zero,
        )


class RiskMetrics(BaseModel):
    """Capital-at-risk statistics over trades with both risk and P&L."""

    trades_with_risk: int = 0
    average_risk_amount: Decimal = Decimal("0")
    max_risk_amount: Decimal = Decimal("0")
    average_risk_reward: Decimal = Decimal("0")
    risk_adjusted_return: Decimal = Decimal("0")  # Total P&L per unit of capital risked


class RiskRewardBucket(BaseModel):
    """Count of trades whose planned risk:reward falls in [lower, upper)."""

    label: str
    lower: Decimal
    upper: UnboundedDecimal
    count: int


class GroupPerformance(BaseModel):
    """
    Metrics for one strategy/tag group.

    A group with no priced trades still reports its trade count; P&L fields
    are zero and best/worst trade are None.
    """

    key: str  # Grouping dimension, e.g. "strategy" or "tag"
    name: str
    total_trades: int
    priced_trades: int
    winning_trades: int
    losing_trades: int
    win_rate: Decimal
    total_pnl: Decimal
    average_pnl: Decimal
    average_score: Decimal
    a_plus_rate: Decimal
    best_trade: Decimal | None = None
    worst_trade: Decimal | None = None
    equity_curve: list[EquityPoint] = Field(default_factory=list)


class DayBucket(BaseModel):
    """Aggregates for a single calendar day (UTC)."""

    date: date
    total_trades: int
    a_plus_count: int
    a_plus_rate: Decimal
    total_pnl: Decimal
    win_count: int
    win_rate: Decimal
    average_score: Decimal
    trade_ids: list[int] = Field(default_factory=list)


class MonthSummary(BaseModel):
    """Month-level roll-up of day buckets. Days without trades are absent."""

    period: str  # "2025-01"
    year: int
    month: int
    total_trades: int
    trading_days: int
    a_plus_count: int
    a_plus_rate: Decimal
    total_pnl: Decimal
    average_trades_per_day: Decimal
    days: list[DayBucket] = Field(default_factory=list)


class JournalReport(BaseModel):
    """
    Complete analytics report for a journal.

    Produced by ReportingService and consumed by console/JSON output.
    """

    generated_at: datetime
    starting_balance: Decimal
    metrics: PerformanceMetrics
    drawdown: DrawdownAnalysis
    consistency: ConsistencyMetrics
    risk: RiskMetrics
    risk_reward_distribution: list[RiskRewardBucket] = Field(default_factory=list)
    groups: list[GroupPerformance] = Field(default_factory=list)
    months: list[MonthSummary] = Field(default_factory=list)
