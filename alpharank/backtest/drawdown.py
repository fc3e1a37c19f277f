"""
Drawdown computation for backtest equity curves.

Drawdowns are expressed in percent of the running peak, so every value is
zero or negative. Empty curves yield a zero drawdown.
"""

import logging
from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray


logger = logging.getLogger(__name__)


def compute_drawdown_curve(equity: Sequence[float]) -> NDArray[np.float64]:
    """
    Compute the percentage drawdown at every point of an equity curve.

    The drawdown at each point is the distance of the equity below its
    running maximum (peak), divided by that peak. All values are <= 0.

    Args:
        equity: Equity values in chronological order (positive).

    Returns:
        NumPy array of drawdowns in percent, same length as `equity`.

    Examples:
        >>> compute_drawdown_curve([100.0, 120.0, 90.0, 130.0]).tolist()
        [0.0, 0.0, -25.0, 0.0]
    """
    values = np.asarray(equity, dtype=np.float64)
    if values.size == 0:
        return np.array([], dtype=np.float64)

    running_max = np.maximum.accumulate(values)
    with np.errstate(divide="ignore", invalid="ignore"):
        drawdown = np.where(running_max > 0, (values - running_max) / running_max, 0.0)
    return drawdown * 100.0


def max_drawdown(equity: Sequence[float]) -> float:
    """
    Largest peak-to-trough decline of an equity curve in percent.

    Args:
        equity: Equity values in chronological order.

    Returns:
        The most negative drawdown (0.0 for an empty or rising curve).

    Examples:
        >>> max_drawdown([100.0, 120.0, 90.0, 130.0])
        -25.0
    """
    curve = compute_drawdown_curve(equity)
    if curve.size == 0:
        return 0.0
    worst = float(np.min(curve))
    logger.debug("Max drawdown over %d points: %.2f%%", curve.size, worst)
    return worst
