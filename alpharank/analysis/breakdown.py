"""
Per-indicator score breakdown.

Builds the twelve display lines of an analysis from the same readings and
sub-scores that produce the composite score, so the breakdown always agrees
with the total.
"""

from ..models.core import ADXResult, IndicatorScore
from ..models.enums import Divergence, TrendDirection
from ..scoring.composite import FACTOR_WEIGHTS, FactorReadings, factor_scores


ADX_STRONG_TREND = 25.0


def build_breakdown(
    readings: FactorReadings, adx_reading: ADXResult, sar: float
) -> list[IndicatorScore]:
    """
    Build the indicator breakdown for one analysis.

    ADX and SAR values are displayed from the computed indicators while
    their sub-scores stay the fixed values used by the composite.

    Args:
        readings: Factor readings of the analyzed bar.
        adx_reading: Directional movement readings for display.
        sar: Parabolic SAR for display.

    Returns:
        Twelve IndicatorScore entries whose weights sum to 1.0.
    """
    r = readings
    scores = factor_scores(r)
    w = FACTOR_WEIGHTS
    weekly_bullish = r.weekly_trend is TrendDirection.BULLISH
    divergence = r.rsi_divergence.value if r.rsi_divergence else None

    return [
        IndicatorScore(
            name="RS vs Market",
            score=scores["relative_strength"],
            weight=w["relative_strength"],
            value=f"{(r.relative_strength - 1) * 100:.1f}%",
            description="Outperforming Market" if r.relative_strength > 1 else "Lagging Benchmark",
            bullish=r.relative_strength > 1,
            criteria="Relative Strength context.",
        ),
        IndicatorScore(
            name="Structure & Patterns",
            score=scores["pattern"],
            weight=w["pattern"],
            value="Cup & Handle" if r.is_cup_handle else "Neutral",
            description="Bullish Accumulation" if r.is_cup_handle else "Range-bound structure",
            bullish=r.is_cup_handle,
            criteria="Pattern recognition logic.",
        ),
        IndicatorScore(
            name="SMA 150 Trend",
            score=scores["sma150"],
            weight=w["sma150"],
            value=f"{r.sma150:.2f}",
            description="Structural Uptrend" if r.price > r.sma150 else "Structural Downtrend",
            bullish=r.price > r.sma150,
            criteria="Primary trend filter.",
        ),
        IndicatorScore(
            name="Weekly MTA Alignment",
            score=scores["weekly_trend"],
            weight=w["weekly_trend"],
            value=r.weekly_trend.value,
            description="Timeframes Synced" if weekly_bullish else "Trend Conflict",
            bullish=weekly_bullish,
            criteria="Multi-timeframe confirmation.",
        ),
        IndicatorScore(
            name="Institutional Vol (RVOL)",
            score=scores["rvol"],
            weight=w["rvol"],
            value=f"{r.rvol:.2f}x",
            description="Active Accumulation" if r.rvol > 1.2 else "Normal Participation",
            bullish=r.rvol > 1.1,
            criteria="Relative volume flow.",
        ),
        IndicatorScore(
            name="Bollinger Deviation",
            score=scores["bollinger"],
            weight=w["bollinger"],
            value="Extended" if r.price > r.bollinger.upper else "Normal",
            description="Volatility Spike" if r.price > r.bollinger.upper else "Within Range",
            bullish=r.price > r.bollinger.middle,
            criteria="Mean reversion analysis.",
        ),
        IndicatorScore(
            name="RSI Momentum",
            score=scores["rsi"],
            weight=w["rsi"],
            value=f"{r.rsi:.1f}",
            description="Bullish Velocity" if r.rsi > 50 else "Bearish Pressure",
            bullish=r.rsi > 50,
            criteria="Velocity indicator.",
        ),
        IndicatorScore(
            name="MACD Signal",
            score=scores["macd"],
            weight=w["macd"],
            value="Positive" if r.macd.histogram > 0 else "Negative",
            description="Momentum Expanding" if r.macd.histogram > 0 else "Momentum Contracting",
            bullish=r.macd.histogram > 0,
            criteria="Exponential MA cross.",
        ),
        IndicatorScore(
            name="RSI Divergence",
            score=scores["rsi_divergence"],
            weight=w["rsi_divergence"],
            value=divergence or "None",
            description=f"{divergence} Divergence Detected" if divergence else "Trend Synchronized",
            bullish=r.rsi_divergence is not Divergence.BEARISH,
            criteria="Leading signal detection.",
        ),
        IndicatorScore(
            name="VWMA Support",
            score=scores["vwma"],
            weight=w["vwma"],
            value=f"{r.vwma:.2f}",
            description="Above Value" if r.price > r.vwma else "Below Value",
            bullish=r.price > r.vwma,
            criteria="Volume weighted support.",
        ),
        IndicatorScore(
            name="ADX Trend Strength",
            score=scores["adx"],
            weight=w["adx"],
            value=f"{adx_reading.adx:.1f}",
            description="Strong Trend" if adx_reading.adx > ADX_STRONG_TREND else "Weak/Choppy",
            bullish=bool(adx_reading.plus_di > adx_reading.minus_di),
            criteria="ADX > 25 indicates strong trend; +DI > -DI is bullish.",
        ),
        IndicatorScore(
            name="Parabolic SAR",
            score=scores["sar"],
            weight=w["sar"],
            value=f"{sar:.2f}",
            description="Uptrend (Dots Below)" if r.price > sar else "Downtrend",
            bullish=r.price > sar,
            criteria="Price above SAR dots indicates uptrend.",
        ),
    ]
