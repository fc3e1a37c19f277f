"""
Core data models for the scoring and backtest engine.

This module defines immutable dataclasses for the entities exchanged between
the indicator library, the composite scorer, the stock analyzer, the
backtest simulator and the trade advisor: candles, indicator readings, risk
plans, backtest trades and the full analysis result.

All dataclasses are frozen. A result is built fresh on every call and never
mutated afterwards, so results can be shared across threads.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from datetime import date

from .enums import (
    Divergence,
    ExitReason,
    PositionStatus,
    Recommendation,
    TradeAction,
    TrendDirection,
)


@dataclass(frozen=True)
class Candle:
    """
    One daily OHLCV bar.

    Attributes:
        date: Trading day of the bar. Histories are ascending and unique
            by date.
        open: Opening price.
        high: Highest traded price.
        low: Lowest traded price.
        close: Closing price.
        volume: Traded volume (non-negative).
        vwap: Optional volume-weighted average price reported by the source.

    Examples:
        >>> from datetime import date
        >>> candle = Candle(
        ...     date=date(2025, 1, 2),
        ...     open=100.0,
        ...     high=102.5,
        ...     low=99.5,
        ...     close=101.0,
        ...     volume=1_250_000,
        ... )
        >>> candle.close
        101.0
    """

    date: date
    open: float
    high: float
    low: float
    close: float
    volume: float
    vwap: float | None = None


@dataclass(frozen=True)
class IndicatorScore:
    """
    One line of the per-indicator score breakdown.

    Attributes:
        name: Display name of the factor.
        score: Sub-score in [0, 10].
        weight: Weight in [0, 1]; weights of one analysis sum to 1.0.
        value: Human-readable reading (e.g. "12.3%", "BULLISH").
        description: Short interpretation of the reading.
        bullish: True when the reading supports a long bias.
        criteria: What the factor measures.
    """

    name: str
    score: float
    weight: float
    value: str
    description: str
    bullish: bool
    criteria: str


@dataclass(frozen=True)
class BollingerBands:
    """Bollinger envelope: SMA plus/minus a multiple of the standard deviation."""

    upper: float
    middle: float
    lower: float


@dataclass(frozen=True)
class KeltnerChannels:
    """Keltner envelope: EMA plus/minus a multiple of the ATR."""

    upper: float
    middle: float
    lower: float


@dataclass(frozen=True)
class MACDResult:
    """Latest MACD line, signal line and histogram values."""

    macd_line: float
    signal_line: float
    histogram: float


@dataclass(frozen=True)
class ADXResult:
    """Directional movement readings (ADX, +DI, -DI)."""

    adx: float
    plus_di: float
    minus_di: float


@dataclass(frozen=True)
class TechnicalSnapshot:
    """
    Full set of indicator values at one point in time.

    Attributes:
        rsi: Latest 14-period Wilder RSI.
        sma150: SMA150 used for trend classification (official value when
            one was supplied).
        vwma: 20-period volume-weighted moving average.
        macd: Latest MACD readings.
        adx: Directional movement readings (display only).
        bollinger: 20-period, 2-sigma Bollinger bands.
        keltner: 20-period, 1.5x ATR Keltner channels.
        squeeze_on: True when the Bollinger bands sit inside the Keltner
            channels.
        rsi_divergence: Detected divergence or None.
        relative_strength: Stock vs benchmark 126-bar performance ratio.
        sar: Latest parabolic SAR (display only).
        atr: 14-period average true range.
        volume_avg20: 20-bar average volume.
        last_volume: Volume of the latest bar.
        support_level: Price minus 2.5 ATR.
        resistance_level: Price plus 5 ATR.
        is_cup_handle: True when a cup-and-handle base was detected.
        weekly_trend: Weekly close relative to its 20-week SMA.
    """

    rsi: float
    sma150: float
    vwma: float
    macd: MACDResult
    adx: ADXResult
    bollinger: BollingerBands
    keltner: KeltnerChannels
    squeeze_on: bool
    rsi_divergence: Divergence | None
    relative_strength: float
    sar: float
    atr: float
    volume_avg20: float
    last_volume: float
    support_level: float
    resistance_level: float
    is_cup_handle: bool
    weekly_trend: TrendDirection


@dataclass(frozen=True)
class RiskPlan:
    """
    Entry, stop and target levels derived from the Bollinger middle and ATR.

    Attributes:
        stop_loss: Entry minus the stop multiple of ATR.
        take_profit: Entry plus the target multiple of ATR.
        entry_price: Bollinger middle band (20-period SMA pivot).
        risk_reward_ratio: Reward per unit of risk.
        thesis: Free-text rationale for the current setup.
        entry_source: Provenance of the entry level.
        stop_source: Provenance of the stop level.
        target_source: Provenance of the target level.
    """

    stop_loss: float
    take_profit: float
    entry_price: float
    risk_reward_ratio: float
    thesis: str
    entry_source: str
    stop_source: str
    target_source: str


@dataclass(frozen=True)
class ScoreHistoryItem:
    """Composite score of a history truncated at `date`."""

    date: date
    score: float


@dataclass(frozen=True)
class BacktestTrade:
    """
    One simulated long trade.

    Attributes:
        entry_date: Bar on which the trade was opened (at the close).
        entry_price: Fill price at entry.
        exit_date: Bar on which the trade was closed, if closed.
        exit_price: Fill price at exit, if closed.
        pnl_percent: Return of the trade in percent.
        reason: Exit trigger.
        type: Trade direction; the simulator is long-only.
    """

    entry_date: date
    entry_price: float
    exit_date: date | None
    exit_price: float | None
    pnl_percent: float
    reason: ExitReason
    type: str = "Long"


@dataclass(frozen=True)
class EquityPoint:
    """
    One bar of the backtest equity curve.

    Attributes:
        date: Bar date.
        equity: Strategy equity, marked to market while a trade is open.
        buy_hold_equity: Equity of a buy-and-hold position opened on the
            first window bar.
        is_entry: True on the bar a trade was opened.
        is_prime: True while the open trade was a prime entry.
        entry_reason: Classification of the bar ("ELITE PRIME",
            "TREND ENTRY") or None.
        score: Composite score computed from bars up to this one only.
    """

    date: date
    equity: float
    buy_hold_equity: float
    is_entry: bool
    is_prime: bool
    entry_reason: str | None
    score: float


@dataclass(frozen=True)
class BacktestResult:
    """
    Outcome of the single-position point-in-time backtest.

    Attributes:
        total_trades: Number of closed trades.
        win_rate: Percentage of closed trades that gained (0 without trades).
        total_return: Strategy return in percent.
        actual_return: Buy-and-hold return over the same window in percent.
        alpha_return: total_return minus actual_return.
        max_drawdown: Largest peak-to-trough decline of the strategy equity
            curve in percent (0 or negative).
        drawdown_avoided: Strategy max drawdown minus buy-and-hold max
            drawdown, in percentage points. Both are 0 or negative, so the
            value is positive when the strategy suffered less.
        trades: Closed trades in chronological order.
        equity_curve: One point per window bar.
        current_status: Long when a trade is still open at window end.
    """

    total_trades: int
    win_rate: float
    total_return: float
    actual_return: float
    alpha_return: float
    max_drawdown: float
    drawdown_avoided: float
    trades: Sequence[BacktestTrade] = field(default_factory=tuple)
    equity_curve: Sequence[EquityPoint] = field(default_factory=tuple)
    current_status: PositionStatus = PositionStatus.CASH


@dataclass(frozen=True)
class AnalysisResult:
    """
    Full analysis record for one ticker.

    Attributes:
        ticker: Analyzed symbol.
        current_price: Latest close.
        change_percent: Change of the latest close vs the previous close.
        market_cap: Pass-through display value (0 when unknown).
        total_score: Composite score, one decimal.
        recommendation: Tier derived from total_score.
        indicators: Per-indicator score breakdown.
        technical: Indicator snapshot.
        risk: Entry/stop/target plan.
        history: Candles the analysis was computed from.
        score_history: Trailing composite scores (up to 7 points).
        is_prime_setup: Strictest high-conviction classification.
        is_trend_entry: Trend-following classification, exclusive with prime.
        backtest: Point-in-time backtest over the history.
        analysis_timestamp: Creation time in epoch milliseconds.
        company_name: Optional profile data attached by the caller.
        sector: Optional profile data attached by the caller.
    """

    ticker: str
    current_price: float
    change_percent: float
    market_cap: float
    total_score: float
    recommendation: Recommendation
    indicators: Sequence[IndicatorScore]
    technical: TechnicalSnapshot
    risk: RiskPlan
    history: Sequence[Candle]
    score_history: Sequence[ScoreHistoryItem]
    is_prime_setup: bool
    is_trend_entry: bool
    backtest: BacktestResult | None
    analysis_timestamp: int
    company_name: str | None = None
    sector: str | None = None

    def with_profile(
        self, company_name: str | None = None, sector: str | None = None
    ) -> "AnalysisResult":
        """Return a copy carrying company profile data."""
        return replace(self, company_name=company_name, sector=sector)


@dataclass(frozen=True)
class Position:
    """
    A user-held position, supplied from outside the engine.

    Examples:
        >>> position = Position(ticker="NVDA", avg_entry_price=100.0, quantity=10)
        >>> position.avg_entry_price
        100.0
    """

    ticker: str
    avg_entry_price: float
    quantity: float
    entry_date: date | None = None
    notes: str | None = None


@dataclass(frozen=True)
class TradeAdvice:
    """Action suggested for an existing position, with refreshed levels."""

    action: TradeAction
    reason: str
    suggested_stop: float
    suggested_target: float
    pnl_percentage: float
