"""
Pivot detection and RSI divergence.

Pivots are strict local extremes: a bar is a pivot high when no bar within
`lookback` bars on either side has an equal or higher high (and symmetric
for lows). Only interior bars are scanned, so the first and last `lookback`
bars never qualify.
"""

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view
from numpy.typing import NDArray

from ..models.core import Candle
from ..models.enums import Divergence
from .basic import candle_field


MIN_DIVERGENCE_BARS = 30
DIVERGENCE_LOOKBACK = 5


@dataclass(frozen=True)
class Pivot:
    """A local extreme at `index` in the history."""

    index: int
    price: float


@dataclass(frozen=True)
class PivotSet:
    """Pivot highs and lows in ascending index order."""

    highs: tuple[Pivot, ...]
    lows: tuple[Pivot, ...]


def _strict_extremes(
    values: NDArray[np.float64], lookback: int, find_max: bool
) -> NDArray[np.int64]:
    window = 2 * lookback + 1
    if len(values) < window:
        return np.array([], dtype=np.int64)

    views = sliding_window_view(values, window)
    centers = views[:, lookback]
    neighbours = np.delete(views, lookback, axis=1)
    if find_max:
        mask = centers > neighbours.max(axis=1)
    else:
        mask = centers < neighbours.min(axis=1)
    return np.flatnonzero(mask) + lookback


def find_pivots(history: Sequence[Candle], lookback: int = 10) -> PivotSet:
    """
    Find strict pivot highs and lows.

    Args:
        history: Candles in ascending date order.
        lookback: Bars on each side that must be strictly lower (highs) or
            strictly higher (lows) than the pivot bar.

    Returns:
        PivotSet with highs priced at the bar high and lows at the bar low.

    Raises:
        ValueError: If lookback < 1.
    """
    if lookback < 1:
        raise ValueError(f"Lookback must be >= 1, got {lookback}")

    highs = candle_field(history, "high")
    lows = candle_field(history, "low")

    high_idx = _strict_extremes(highs, lookback, find_max=True)
    low_idx = _strict_extremes(lows, lookback, find_max=False)

    return PivotSet(
        highs=tuple(Pivot(int(i), float(highs[i])) for i in high_idx),
        lows=tuple(Pivot(int(i), float(lows[i])) for i in low_idx),
    )


def detect_rsi_divergence(
    history: Sequence[Candle], rsi_values: Sequence[float]
) -> Divergence | None:
    """
    Detect divergence between price and RSI at the two latest pivots.

    Bullish divergence: the latest pivot low is lower than the previous one
    while RSI at the latest pivot is higher. Bearish divergence: the latest
    pivot high is higher while RSI is lower. The bullish check runs first.

    Args:
        history: Candles in ascending date order.
        rsi_values: RSI series aligned with `history`.

    Returns:
        Divergence.BULLISH, Divergence.BEARISH, or None when fewer than
        30 bars or fewer than two pivots are available, or no divergence
        condition holds.
    """
    if len(history) < MIN_DIVERGENCE_BARS:
        return None

    pivots = find_pivots(history, DIVERGENCE_LOOKBACK)

    if len(pivots.lows) >= 2:
        first, second = pivots.lows[-2:]
        if second.price < first.price and rsi_values[second.index] > rsi_values[first.index]:
            return Divergence.BULLISH

    if len(pivots.highs) >= 2:
        first, second = pivots.highs[-2:]
        if second.price > first.price and rsi_values[second.index] < rsi_values[first.index]:
            return Divergence.BEARISH

    return None
