"""
Enumerations for the scoring and backtest engine.

All enumerations inherit from str so that values serialize directly to
JSON and compare equal to their plain string form.
"""

from enum import Enum


class Recommendation(str, Enum):
    """
    Recommendation tier derived from the composite score.

    Examples:
        >>> Recommendation.STRONG_BUY.value
        'Strong Buy'
        >>> Recommendation.HOLD == "Hold"
        True
    """

    STRONG_BUY = "Strong Buy"
    BUY = "Buy"
    HOLD = "Hold"
    SELL = "Sell"


class TrendDirection(str, Enum):
    """Weekly trend classification."""

    BULLISH = "BULLISH"
    BEARISH = "BEARISH"


class Divergence(str, Enum):
    """Direction of an RSI/price divergence."""

    BULLISH = "BULLISH"
    BEARISH = "BEARISH"


class ExitReason(str, Enum):
    """
    Reason a simulated trade was closed.

    Attributes:
        TARGET: Bar high reached the take-profit level.
        STOP: Bar low reached the stop level.
        SIGNAL: Composite score fell below the exit threshold.
        OPEN: Trade still open at the end of the window.
    """

    TARGET = "Target"
    STOP = "Stop"
    SIGNAL = "Signal"
    OPEN = "Open"


class PositionStatus(str, Enum):
    """Backtest state at the end of the simulation window."""

    LONG = "Long"
    CASH = "Cash"


class TradeAction(str, Enum):
    """Discrete action suggested for an existing position."""

    HOLD = "HOLD"
    BUY_MORE = "BUY MORE"
    SELL_TRIM = "SELL/TRIM"
    CUT_LOSS = "CUT LOSS"
    TAKE_PROFIT = "TAKE PROFIT"


class OutputFormat(str, Enum):
    """
    CLI output format.

    Examples:
        >>> OutputFormat.JSON.value
        'json'
    """

    TEXT = "text"
    JSON = "json"
