"""Technical indicator library."""

from alpharank.indicators.basic import (
    adx,
    atr,
    average_volume,
    bollinger,
    ema_series,
    is_squeeze,
    keltner,
    macd,
    parabolic_sar,
    rsi_series,
    sma,
    true_range,
    vwma,
)
from alpharank.indicators.patterns import CupHandle, detect_cup_handle
from alpharank.indicators.pivots import Pivot, PivotSet, detect_rsi_divergence, find_pivots
from alpharank.indicators.weekly import aggregate_to_weekly, weekly_trend

__all__ = [
    "CupHandle",
    "Pivot",
    "PivotSet",
    "adx",
    "aggregate_to_weekly",
    "atr",
    "average_volume",
    "bollinger",
    "detect_cup_handle",
    "detect_rsi_divergence",
    "ema_series",
    "find_pivots",
    "is_squeeze",
    "keltner",
    "macd",
    "parabolic_sar",
    "rsi_series",
    "sma",
    "true_range",
    "vwma",
]
