"""
Composite 0-10 technical score.

The scorer reduces the indicator readings of a history to one weighted score.
It is used for the live analysis and, through the backtest, for every
historical bar. It only looks backward from the last bar of the history it
receives: the benchmark is cut to bars dated on or before that bar, so
scoring history[:t + 1] never sees data after bar t.

Each factor maps its reading to a discrete sub-score through a fixed rule.
The rules are kept as an ordered table so they can be audited and tested
in isolation. ADX and Parabolic SAR currently contribute fixed placeholder
sub-scores; changing them alters every historical score.
"""

import logging
from bisect import bisect_right
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from ..config.parameters import EngineParameters
from ..indicators.basic import (
    average_volume,
    bollinger,
    macd,
    rsi_series,
    sma,
    vwma,
)
from ..indicators.patterns import detect_cup_handle
from ..indicators.pivots import detect_rsi_divergence
from ..indicators.weekly import weekly_trend
from ..models.core import BollingerBands, Candle, MACDResult
from ..models.enums import Divergence, TrendDirection


logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 5.0
ADX_PLACEHOLDER_SCORE = 7.0
SAR_PLACEHOLDER_SCORE = 8.0

DEFAULT_PARAMETERS = EngineParameters()


@dataclass(frozen=True)
class FactorReadings:
    """
    Raw indicator readings feeding the composite score.

    Attributes:
        price: Last close.
        sma150: Trend SMA (official value when supplied).
        rsi: Latest RSI.
        macd: Latest MACD readings.
        vwma: Volume-weighted moving average.
        bollinger: Bollinger bands of the last bar.
        rsi_divergence: Detected RSI divergence or None.
        relative_strength: Stock vs benchmark performance ratio.
        weekly_trend: Weekly trend classification.
        volume_avg: Average volume over the relative-volume window.
        last_volume: Volume of the last bar.
        rvol: last_volume / volume_avg.
        is_cup_handle: True when a cup-and-handle base was detected.
    """

    price: float
    sma150: float
    rsi: float
    macd: MACDResult
    vwma: float
    bollinger: BollingerBands
    rsi_divergence: Divergence | None
    relative_strength: float
    weekly_trend: TrendDirection
    volume_avg: float
    last_volume: float
    rvol: float
    is_cup_handle: bool


@dataclass(frozen=True)
class Factor:
    """A named, weighted scoring rule."""

    key: str
    weight: float
    rule: Callable[[FactorReadings], float]


def _tiered(value: float, tiers: tuple[tuple[float, float], ...], default: float) -> float:
    """Return the score of the first tier whose threshold `value` exceeds."""
    for threshold, score in tiers:
        if value > threshold:
            return score
    return default


def _bollinger_rule(r: FactorReadings) -> float:
    if r.price > r.bollinger.upper:
        return 10.0
    if r.price > r.bollinger.middle:
        return 7.0
    return 3.0


def _divergence_rule(r: FactorReadings) -> float:
    if r.rsi_divergence is Divergence.BULLISH:
        return 10.0
    if r.rsi_divergence is Divergence.BEARISH:
        return 2.0
    return 5.0


# Order matters: the weighted sum is accumulated in this order.
FACTORS: tuple[Factor, ...] = (
    Factor("relative_strength", 0.15,
           lambda r: _tiered(r.relative_strength, ((1.05, 10.0), (1.0, 7.0)), 3.0)),
    Factor("pattern", 0.15, lambda r: 10.0 if r.is_cup_handle else 5.0),
    Factor("sma150", 0.10, lambda r: 10.0 if r.price > r.sma150 else 2.0),
    Factor("weekly_trend", 0.10,
           lambda r: 10.0 if r.weekly_trend is TrendDirection.BULLISH else 2.0),
    Factor("rvol", 0.10, lambda r: _tiered(r.rvol, ((1.5, 10.0), (1.0, 7.0)), 3.0)),
    Factor("bollinger", 0.10, _bollinger_rule),
    Factor("rsi", 0.05, lambda r: _tiered(r.rsi, ((60.0, 10.0), (45.0, 6.0)), 2.0)),
    Factor("macd", 0.05, lambda r: 10.0 if r.macd.histogram > 0 else 2.0),
    Factor("vwma", 0.05, lambda r: 10.0 if r.price > r.vwma else 3.0),
    Factor("adx", 0.05, lambda r: ADX_PLACEHOLDER_SCORE),
    Factor("sar", 0.05, lambda r: SAR_PLACEHOLDER_SCORE),
    Factor("rsi_divergence", 0.05, _divergence_rule),
)

FACTOR_WEIGHTS: dict[str, float] = {factor.key: factor.weight for factor in FACTORS}


def round_half_up(value: float, digits: int = 1) -> float:
    """
    Round to `digits` decimals with ties going away from zero.

    Examples:
        >>> round_half_up(6.25)
        6.3
        >>> round_half_up(6.24)
        6.2
    """
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def align_benchmark(
    benchmark: Sequence[Candle] | None, as_of: date
) -> Sequence[Candle] | None:
    """Cut a benchmark history to the bars dated on or before `as_of`."""
    if not benchmark:
        return benchmark
    cut = bisect_right(benchmark, as_of, key=lambda candle: candle.date)
    return benchmark[:cut]


def relative_strength(
    history: Sequence[Candle],
    benchmark: Sequence[Candle] | None,
    lookback: int = 126,
    min_benchmark_bars: int = 100,
) -> float:
    """
    Calculate the stock vs benchmark performance ratio.

    ratio = (1 + stock return) / (1 + benchmark return), each return taken
    from the close `lookback` bars back (or the first bar) to the last close.

    Args:
        history: Stock candles in ascending date order.
        benchmark: Benchmark candles already aligned to the same end date.
        lookback: Return horizon in bars (default: 126).
        min_benchmark_bars: The benchmark needs more bars than this.

    Returns:
        The ratio, or the neutral 1.0 when the benchmark is missing or short.
    """
    if not history or not benchmark or len(benchmark) <= min_benchmark_bars:
        return 1.0

    def _performance(candles: Sequence[Candle]) -> float:
        base = candles[max(0, len(candles) - lookback)].close
        return (candles[-1].close - base) / base

    return (1 + _performance(history)) / (1 + _performance(benchmark))


def compute_readings(
    history: Sequence[Candle],
    benchmark: Sequence[Candle] | None = None,
    official_sma150: float | None = None,
    params: EngineParameters | None = None,
) -> FactorReadings:
    """
    Compute every factor reading for the last bar of `history`.

    Args:
        history: Candles in ascending date order (non-empty).
        benchmark: Optional benchmark history; bars after the last stock bar
            are ignored.
        official_sma150: Externally sourced SMA150 that replaces the local
            one when truthy.
        params: Engine parameters (defaults when None).

    Returns:
        FactorReadings for the last bar.
    """
    p = params or DEFAULT_PARAMETERS
    price = history[-1].close
    rsi_values = rsi_series(history, p.rsi_period)
    volume_avg = average_volume(history, p.volume_avg_period)
    last_volume = history[-1].volume

    aligned = align_benchmark(benchmark, history[-1].date)

    return FactorReadings(
        price=price,
        sma150=official_sma150 or sma(history, p.trend_sma_period),
        rsi=float(rsi_values[-1]),
        macd=macd(history),
        vwma=vwma(history, p.vwma_period),
        bollinger=bollinger(history, p.bollinger_period, p.bollinger_std),
        rsi_divergence=detect_rsi_divergence(history, rsi_values),
        relative_strength=relative_strength(
            history, aligned, p.rs_lookback, p.min_benchmark_bars
        ),
        weekly_trend=weekly_trend(history),
        volume_avg=volume_avg,
        last_volume=last_volume,
        rvol=last_volume / (volume_avg or 1),
        is_cup_handle=detect_cup_handle(history) is not None,
    )


def factor_scores(readings: FactorReadings) -> dict[str, float]:
    """Map each factor key to its sub-score for the given readings."""
    return {factor.key: factor.rule(readings) for factor in FACTORS}


def weighted_score(readings: FactorReadings) -> float:
    """Weighted sum of the factor sub-scores, rounded to one decimal."""
    total = 0.0
    for factor in FACTORS:
        total += factor.rule(readings) * factor.weight
    return round_half_up(total, 1)


def composite_score(
    history: Sequence[Candle],
    benchmark: Sequence[Candle] | None = None,
    official_sma150: float | None = None,
    params: EngineParameters | None = None,
) -> float:
    """
    Compute the composite 0-10 score for the last bar of `history`.

    Args:
        history: Candles in ascending date order.
        benchmark: Optional benchmark history for relative strength.
        official_sma150: Optional externally sourced SMA150.
        params: Engine parameters (defaults when None).

    Returns:
        Score rounded to one decimal; the neutral 5.0 when fewer than
        `min_score_bars` candles are available.

    Examples:
        >>> composite_score([])
        5.0
    """
    p = params or DEFAULT_PARAMETERS
    if len(history) < p.min_score_bars:
        return NEUTRAL_SCORE
    return weighted_score(compute_readings(history, benchmark, official_sma150, p))
