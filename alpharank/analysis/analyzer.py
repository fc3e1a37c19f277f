"""
Stock analyzer.

Produces the full analysis record of one ticker from its daily history:
indicator snapshot, composite score and tier, setup classification, risk
plan, indicator breakdown, trailing score history and a point-in-time
backtest.
"""

import logging
import time
from collections.abc import Sequence

from ..backtest.simulator import run_backtest
from ..config.parameters import EngineParameters
from ..indicators.basic import adx, atr, is_squeeze, keltner, parabolic_sar
from ..models.core import AnalysisResult, Candle, ScoreHistoryItem, TechnicalSnapshot
from ..models.enums import Recommendation, TrendDirection
from ..scoring.composite import (
    DEFAULT_PARAMETERS,
    NEUTRAL_SCORE,
    FactorReadings,
    composite_score,
    compute_readings,
    weighted_score,
)
from .breakdown import build_breakdown
from .risk import build_risk_plan, build_thesis


logger = logging.getLogger(__name__)


def classify_recommendation(
    score: float, params: EngineParameters | None = None
) -> Recommendation:
    """
    Map a composite score to its recommendation tier.

    Examples:
        >>> classify_recommendation(8.5)
        <Recommendation.STRONG_BUY: 'Strong Buy'>
        >>> classify_recommendation(4.4)
        <Recommendation.SELL: 'Sell'>
    """
    p = params or DEFAULT_PARAMETERS
    if score >= p.strong_buy_score:
        return Recommendation.STRONG_BUY
    if score >= p.buy_score:
        return Recommendation.BUY
    if score >= p.hold_score:
        return Recommendation.HOLD
    return Recommendation.SELL


def is_prime_setup(score: float, readings: FactorReadings, params: EngineParameters) -> bool:
    """High score, price at the pivot, weekly uptrend, volume and outperformance."""
    pivot = readings.bollinger.middle
    distance = abs(readings.price - pivot) / (pivot or 1)
    return (
        score >= params.prime_score
        and distance <= params.pivot_tolerance
        and readings.weekly_trend is TrendDirection.BULLISH
        and readings.rvol >= params.prime_min_rvol
        and readings.relative_strength > 1.0
    )


def is_trend_entry(readings: FactorReadings, prime: bool, params: EngineParameters) -> bool:
    """Trend-following entry; never true together with a prime setup."""
    return (
        readings.price > readings.sma150
        and readings.weekly_trend is TrendDirection.BULLISH
        and readings.rsi > params.trend_min_rsi
        and readings.rvol > params.trend_min_rvol
        and not prime
    )


def score_history(
    history: Sequence[Candle],
    benchmark: Sequence[Candle] | None = None,
    official_sma150: float | None = None,
    params: EngineParameters | None = None,
) -> list[ScoreHistoryItem]:
    """
    Composite scores of the last bars, oldest first.

    Point i scores history[:len - offset] with offset running from
    `score_history_points - 1` down to 0. A point is skipped unless more
    than offset + `min_score_bars` candles exist.
    """
    p = params or DEFAULT_PARAMETERS
    points = p.score_history_points
    items = []
    for offset in range(points - 1, -1, -1):
        if len(history) <= offset + p.min_score_bars:
            continue
        window = history[: len(history) - offset]
        items.append(
            ScoreHistoryItem(
                date=window[-1].date,
                score=composite_score(window, benchmark, official_sma150, p),
            )
        )
    return items


def analyze_stock(
    ticker: str,
    history: Sequence[Candle],
    official_sma150: float | None = None,
    market_cap: float | None = None,
    benchmark: Sequence[Candle] | None = None,
    params: EngineParameters | None = None,
) -> AnalysisResult:
    """
    Analyze one ticker.

    Args:
        ticker: Symbol, passed through to the result.
        history: Daily candles in ascending date order.
        official_sma150: Optional externally sourced SMA150; used for the
            live score and score history, never by the backtest.
        market_cap: Optional display value (0 when omitted).
        benchmark: Optional benchmark history for relative strength.
        params: Engine parameters (defaults when None).

    Returns:
        AnalysisResult for the last bar of `history`.

    Raises:
        ValueError: If `history` is empty.
    """
    if not history:
        raise ValueError(f"Cannot analyze {ticker}: history is empty")

    p = params or DEFAULT_PARAMETERS
    price = history[-1].close
    previous = history[-2].close if len(history) > 1 else price
    change_percent = (price - previous) / previous * 100 if previous else 0.0

    readings = compute_readings(history, benchmark, official_sma150, p)
    if len(history) >= p.min_score_bars:
        total_score = weighted_score(readings)
    else:
        total_score = NEUTRAL_SCORE

    atr_value = atr(history, p.atr_period)
    channels = keltner(history, p.keltner_period, p.keltner_multiplier)
    squeeze_on = is_squeeze(readings.bollinger, channels)
    adx_reading = adx(history)
    sar = parabolic_sar(history)

    technical = TechnicalSnapshot(
        rsi=readings.rsi,
        sma150=readings.sma150,
        vwma=readings.vwma,
        macd=readings.macd,
        adx=adx_reading,
        bollinger=readings.bollinger,
        keltner=channels,
        squeeze_on=squeeze_on,
        rsi_divergence=readings.rsi_divergence,
        relative_strength=readings.relative_strength,
        sar=sar,
        atr=atr_value,
        volume_avg20=readings.volume_avg,
        last_volume=readings.last_volume,
        support_level=price - p.risk_stop_atr_mult * atr_value,
        resistance_level=price + p.risk_target_atr_mult * atr_value,
        is_cup_handle=readings.is_cup_handle,
        weekly_trend=readings.weekly_trend,
    )

    prime = is_prime_setup(total_score, readings, p)
    trend = is_trend_entry(readings, prime, p)
    thesis = build_thesis(total_score, readings, squeeze_on, p)

    result = AnalysisResult(
        ticker=ticker,
        current_price=price,
        change_percent=change_percent,
        market_cap=market_cap or 0,
        total_score=total_score,
        recommendation=classify_recommendation(total_score, p),
        indicators=build_breakdown(readings, adx_reading, sar),
        technical=technical,
        risk=build_risk_plan(readings.bollinger.middle, atr_value, thesis, p),
        history=history,
        score_history=score_history(history, benchmark, official_sma150, p),
        is_prime_setup=prime,
        is_trend_entry=trend,
        backtest=run_backtest(history, benchmark, p),
        analysis_timestamp=int(time.time() * 1000),
    )

    logger.debug(
        "Analyzed %s: score %.1f (%s), prime=%s trend=%s",
        ticker,
        total_score,
        result.recommendation.value,
        prime,
        trend,
    )
    return result
