"""
Weekly aggregation and multi-timeframe trend classification.

Daily candles are grouped into Monday-start calendar weeks so the scorer can
confirm the daily picture against the weekly trend.
"""

from collections.abc import Sequence

import pandas as pd

from ..models.core import Candle
from ..models.enums import TrendDirection
from .basic import candle_field, sma


# Weeks end on Sunday, so each period starts on a Monday.
WEEK_FREQUENCY = "W-SUN"

WEEKLY_AGGREGATIONS = {
    "open": ("open", "first"),
    "high": ("high", "max"),
    "low": ("low", "min"),
    "close": ("close", "last"),
    "volume": ("volume", "sum"),
}


def aggregate_to_weekly(history: Sequence[Candle]) -> list[Candle]:
    """
    Group daily candles into weekly candles.

    Each weekly candle is dated on the Monday of its week and carries the
    first bar's open, the extreme high and low of the week, the last bar's
    close and the summed volume. A trailing partial week is included.

    Args:
        history: Daily candles in ascending date order.

    Returns:
        Weekly candles in ascending date order.

    Examples:
        >>> from datetime import date
        >>> days = [
        ...     Candle(date(2025, 1, 6), 10, 12, 9, 11, 100),   # Monday
        ...     Candle(date(2025, 1, 8), 11, 13, 10, 12, 100),  # Wednesday
        ...     Candle(date(2025, 1, 13), 12, 14, 11, 13, 50),  # next Monday
        ... ]
        >>> [(w.date.isoformat(), w.high, w.close, w.volume) for w in aggregate_to_weekly(days)]
        [('2025-01-06', 13.0, 12.0, 200.0), ('2025-01-13', 14.0, 13.0, 50.0)]
    """
    if not history:
        return []

    daily = pd.DataFrame(
        {field: candle_field(history, field) for field in WEEKLY_AGGREGATIONS},
        index=pd.to_datetime([candle.date for candle in history]),
    )
    weeks = daily.groupby(daily.index.to_period(WEEK_FREQUENCY), sort=True).agg(
        **WEEKLY_AGGREGATIONS
    )

    return [
        Candle(
            date=period.start_time.date(),
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
            volume=float(row.volume),
        )
        for period, row in zip(weeks.index, weeks.itertuples(index=False))
    ]


def weekly_trend(history: Sequence[Candle], period: int = 20) -> TrendDirection:
    """
    Classify the weekly trend of a daily history.

    The trend is BULLISH when the latest weekly close is above the SMA of
    the last `period` weekly closes. With fewer than `period` weeks the SMA
    is 0, so any positive close reads as BULLISH.

    Args:
        history: Daily candles in ascending date order.
        period: Weekly SMA period (default: 20).

    Returns:
        TrendDirection.BULLISH or TrendDirection.BEARISH.
    """
    weeks = aggregate_to_weekly(history)
    if weeks and weeks[-1].close > sma(weeks, period):
        return TrendDirection.BULLISH
    return TrendDirection.BEARISH
