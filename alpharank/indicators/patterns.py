"""
Chart pattern recognition.

Currently detects the cup-and-handle base. The search accepts the first
structurally valid combination of rims and bottom, iterating right-rim
candidates from the highest price downward; it does not look for the best
geometric fit, and scores depend on that exact acceptance order.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from ..models.core import Candle
from .basic import candle_field
from .pivots import Pivot, find_pivots


logger = logging.getLogger(__name__)

MIN_PATTERN_BARS = 150
PIVOT_LOOKBACK = 8
RIGHT_RIM_WINDOW = 60
MIN_CUP_WIDTH = 35
MAX_CUP_AGE = 300
RIM_SIMILARITY = 0.20
MIN_CUP_DEPTH = 0.10
MAX_CUP_DEPTH = 0.50
HANDLE_RETRACEMENT = 0.5


@dataclass(frozen=True)
class CupHandle:
    """
    A detected cup-and-handle base.

    Attributes:
        left_rim: Pivot high opening the cup.
        bottom: Lowest pivot low between the rims.
        right_rim: Pivot high closing the cup.
        depth: (right rim - bottom) / right rim.
    """

    left_rim: Pivot
    bottom: Pivot
    right_rim: Pivot
    depth: float


def detect_cup_handle(history: Sequence[Candle]) -> CupHandle | None:
    """
    Search the history for a cup-and-handle base.

    Right rims are pivot highs within the last 60 bars, tried from the
    highest price down. Left rims are pivot highs more than 35 bars before
    the right rim, within the last 300 bars and within 20% of the right rim
    price. The cup bottom is the lowest pivot low between the rims. A
    combination is valid when the cup depth is 10-50% of the right rim and
    no low from the right rim onward (the handle) reaches the 50%
    retracement of the cup.

    Args:
        history: Candles in ascending date order.

    Returns:
        The first valid CupHandle, or None (always None below 150 bars).
    """
    n = len(history)
    if n < MIN_PATTERN_BARS:
        return None

    pivots = find_pivots(history, PIVOT_LOOKBACK)
    lows = candle_field(history, "low")

    right_rims = sorted(
        (p for p in pivots.highs if p.index > n - RIGHT_RIM_WINDOW),
        key=lambda p: p.price,
        reverse=True,
    )

    for right_rim in right_rims:
        handle_low = float(np.min(lows[right_rim.index:]))
        left_rims = [
            p
            for p in pivots.highs
            if p.index < right_rim.index - MIN_CUP_WIDTH
            and p.index > n - MAX_CUP_AGE
            and abs(p.price - right_rim.price) / right_rim.price < RIM_SIMILARITY
        ]
        for left_rim in left_rims:
            between = [
                p for p in pivots.lows if left_rim.index < p.index < right_rim.index
            ]
            if not between:
                continue
            bottom = min(between, key=lambda p: p.price)

            depth = (right_rim.price - bottom.price) / right_rim.price
            midpoint = bottom.price + (right_rim.price - bottom.price) * HANDLE_RETRACEMENT
            if MIN_CUP_DEPTH <= depth <= MAX_CUP_DEPTH and handle_low > midpoint:
                logger.debug(
                    "Cup-and-handle: left=%d bottom=%d right=%d depth=%.3f",
                    left_rim.index,
                    bottom.index,
                    right_rim.index,
                    depth,
                )
                return CupHandle(left_rim, bottom, right_rim, depth)

    return None
