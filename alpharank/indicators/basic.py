"""
Basic technical indicators over daily candle histories.

This module implements the moving averages, oscillators and volatility
envelopes used by the composite scorer. Inputs are sequences of Candle
objects in ascending date order; computation is vectorized with numpy where
the recurrence allows it.

Every indicator degrades to a neutral value on insufficient data instead of
raising, so callers always get a usable reading:
- SMA / VWMA / ATR: 0.0
- RSI during warm-up: 50.0
- MACD with fewer than 26 bars: all zeros
- ADX with fewer than 2 x period bars: 20 / 20 / 20

Indicators:
- SMA, VWMA, EMA: trend identification
- RSI, MACD: momentum
- ATR, Bollinger Bands, Keltner Channels: volatility
- ADX, Parabolic SAR: trend strength and reversal (display only)
"""

from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray

from ..models.core import (
    ADXResult,
    BollingerBands,
    Candle,
    KeltnerChannels,
    MACDResult,
)


def candle_field(history: Sequence[Candle], name: str) -> NDArray[np.float64]:
    """
    Extract one OHLCV field of a history as a float array.

    Args:
        history: Candles in ascending date order.
        name: Attribute name ("open", "high", "low", "close", "volume").

    Returns:
        Array with one value per candle.

    Examples:
        >>> from datetime import date
        >>> bars = [Candle(date(2025, 1, 2), 1.0, 2.0, 0.5, 1.5, 10)]
        >>> candle_field(bars, "close").tolist()
        [1.5]
    """
    return np.fromiter(
        (getattr(candle, name) for candle in history),
        dtype=np.float64,
        count=len(history),
    )


def _check_period(period: int) -> None:
    if period < 1:
        raise ValueError(f"Period must be >= 1, got {period}")


def sma(history: Sequence[Candle], period: int) -> float:
    """
    Calculate the simple moving average of the last `period` closes.

    Args:
        history: Candles in ascending date order.
        period: Number of closes to average.

    Returns:
        Arithmetic mean of the window, or 0.0 when fewer than `period`
        candles are available.

    Raises:
        ValueError: If period < 1.
    """
    _check_period(period)
    if len(history) < period:
        return 0.0
    return float(np.mean(candle_field(history[-period:], "close")))


def average_volume(history: Sequence[Candle], period: int) -> float:
    """Mean volume of the last `period` bars, 0.0 when too short."""
    _check_period(period)
    if len(history) < period:
        return 0.0
    return float(np.mean(candle_field(history[-period:], "volume")))


def vwma(history: Sequence[Candle], period: int) -> float:
    """
    Calculate the volume-weighted moving average of close.

    VWMA = sum(close * volume) / sum(volume) over the last `period` bars.
    On daily charts it acts as a VWAP proxy.

    Args:
        history: Candles in ascending date order.
        period: Window length.

    Returns:
        VWMA value, or 0.0 when the window is short or carries no volume.
    """
    _check_period(period)
    if len(history) < period:
        return 0.0
    window = history[-period:]
    closes = candle_field(window, "close")
    volumes = candle_field(window, "volume")
    total_volume = float(np.sum(volumes))
    if total_volume == 0:
        return 0.0
    return float(np.sum(closes * volumes)) / total_volume


def ema_series(history: Sequence[Candle], period: int) -> NDArray[np.float64]:
    """
    Calculate an exponential moving average of close for every bar.

    The series is seeded with the first close and follows
    ema[i] = close[i] * k + ema[i-1] * (1 - k) with k = 2 / (period + 1).
    No warm-up padding is applied.

    Args:
        history: Candles in ascending date order.
        period: EMA period.

    Returns:
        Array with one EMA value per candle (empty for empty input).

    Examples:
        >>> from datetime import date, timedelta
        >>> bars = [
        ...     Candle(date(2025, 1, 1) + timedelta(days=i), c, c, c, c, 1)
        ...     for i, c in enumerate([10.0, 12.0, 14.0])
        ... ]
        >>> ema_series(bars, period=3).tolist()
        [10.0, 11.0, 12.5]
    """
    _check_period(period)
    closes = candle_field(history, "close")
    return _ema_of(closes, period)


def _ema_of(values: NDArray[np.float64], period: int) -> NDArray[np.float64]:
    k = 2.0 / (period + 1)
    result = np.empty_like(values)
    if len(values) == 0:
        return result
    result[0] = values[0]
    for i in range(1, len(values)):
        result[i] = values[i] * k + result[i - 1] * (1 - k)
    return result


def rsi_series(history: Sequence[Candle], period: int = 14) -> NDArray[np.float64]:
    """
    Calculate Wilder's Relative Strength Index for every bar.

    Average gain and loss are seeded with the simple mean of the first
    `period` close-to-close changes and then smoothed recursively:
    avg = (avg * (period - 1) + value) / period.

    Warm-up bars (indices 0..period) hold the neutral value 50 so the series
    always has one entry per candle.

    Args:
        history: Candles in ascending date order.
        period: RSI period (default: 14).

    Returns:
        Array of RSI values in [0, 100]. RSI is 100 whenever the smoothed
        loss is zero.
    """
    _check_period(period)
    n = len(history)
    rsi_values = np.full(n, 50.0, dtype=np.float64)
    if n <= period:
        return rsi_values

    deltas = np.diff(candle_field(history, "close"))
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas < 0, -deltas, 0.0)

    avg_gain = float(np.mean(gains[:period]))
    avg_loss = float(np.mean(losses[:period]))

    for i in range(period + 1, n):
        avg_gain = (avg_gain * (period - 1) + gains[i - 1]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i - 1]) / period
        if avg_loss == 0:
            rsi_values[i] = 100.0
        else:
            rsi_values[i] = 100.0 - 100.0 / (1.0 + avg_gain / avg_loss)

    return rsi_values


def macd(
    history: Sequence[Candle],
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> MACDResult:
    """
    Calculate the latest MACD line, signal line and histogram.

    The MACD line is EMA(fast) - EMA(slow) of close; the signal line is an
    EMA(signal) of the MACD line seeded at its first value.

    Args:
        history: Candles in ascending date order.
        fast: Fast EMA period (default: 12).
        slow: Slow EMA period (default: 26).
        signal: Signal EMA period (default: 9).

    Returns:
        MACDResult for the last bar; all zeros with fewer than `slow` bars.
    """
    if len(history) < slow:
        return MACDResult(macd_line=0.0, signal_line=0.0, histogram=0.0)

    line = ema_series(history, fast) - ema_series(history, slow)
    signal_line = _ema_of(line, signal)

    current_line = float(line[-1])
    current_signal = float(signal_line[-1])
    return MACDResult(
        macd_line=current_line,
        signal_line=current_signal,
        histogram=current_line - current_signal,
    )


def true_range(history: Sequence[Candle]) -> NDArray[np.float64]:
    """
    Calculate true range for every bar after the first.

    True Range is the maximum of:
    - Current high minus current low
    - Absolute value of current high minus previous close
    - Absolute value of current low minus previous close

    Returns:
        Array of length len(history) - 1 (empty for fewer than 2 bars).
    """
    if len(history) < 2:
        return np.array([], dtype=np.float64)
    high = candle_field(history, "high")[1:]
    low = candle_field(history, "low")[1:]
    prev_close = candle_field(history, "close")[:-1]
    return np.maximum.reduce(
        [high - low, np.abs(high - prev_close), np.abs(low - prev_close)]
    )


def atr(history: Sequence[Candle], period: int = 14) -> float:
    """
    Calculate the Average True Range as the mean of the last `period` true ranges.

    Args:
        history: Candles in ascending date order.
        period: Number of true ranges to average (default: 14).

    Returns:
        ATR value, or 0.0 with fewer than period + 1 bars.
    """
    _check_period(period)
    if len(history) < period + 1:
        return 0.0
    return float(np.mean(true_range(history)[-period:]))


def bollinger(
    history: Sequence[Candle], period: int = 20, num_std: float = 2.0
) -> BollingerBands:
    """
    Calculate Bollinger Bands from the SMA and population standard deviation.

    Args:
        history: Candles in ascending date order.
        period: SMA and deviation window (default: 20).
        num_std: Band width in standard deviations (default: 2.0).

    Returns:
        BollingerBands for the last bar.
    """
    middle = sma(history, period)
    window = candle_field(history[-period:], "close")
    variance = float(np.sum((window - middle) ** 2)) / period
    deviation = float(np.sqrt(variance))
    return BollingerBands(
        upper=middle + deviation * num_std,
        middle=middle,
        lower=middle - deviation * num_std,
    )


def keltner(
    history: Sequence[Candle], period: int = 20, multiplier: float = 1.5
) -> KeltnerChannels:
    """
    Calculate Keltner Channels: EMA(period) plus/minus multiplier x ATR(period).

    Args:
        history: Candles in ascending date order.
        period: EMA and ATR period (default: 20).
        multiplier: Channel width in ATRs (default: 1.5).

    Returns:
        KeltnerChannels for the last bar.
    """
    ema_values = ema_series(history, period)
    middle = float(ema_values[-1]) if len(ema_values) else 0.0
    width = multiplier * atr(history, period)
    return KeltnerChannels(upper=middle + width, middle=middle, lower=middle - width)


def is_squeeze(bands: BollingerBands, channels: KeltnerChannels) -> bool:
    """True when the Bollinger Bands lie strictly inside the Keltner Channels."""
    return bands.upper < channels.upper and bands.lower > channels.lower


def _wilder_smoothing(values: NDArray[np.float64], period: int) -> float:
    if len(values) < period:
        return 0.0
    smoothed = float(np.mean(values[:period]))
    for value in values[period:]:
        smoothed = (smoothed * (period - 1) + value) / period
    return float(smoothed)


def adx(history: Sequence[Candle], period: int = 14) -> ADXResult:
    """
    Calculate directional movement readings (+DI, -DI and DX as ADX).

    True range and directional movement are Wilder-smoothed over `period`.
    The value is shown in the indicator breakdown only; the composite score
    keeps a fixed ADX sub-score.

    Args:
        history: Candles in ascending date order.
        period: Smoothing period (default: 14).

    Returns:
        ADXResult; 20 / 20 / 20 with fewer than 2 x period bars.
    """
    if len(history) < period * 2:
        return ADXResult(adx=20.0, plus_di=20.0, minus_di=20.0)

    high = candle_field(history, "high")
    low = candle_field(history, "low")
    up_move = high[1:] - high[:-1]
    down_move = low[:-1] - low[1:]
    plus_dm = np.where((up_move > down_move) & (up_move > 0), up_move, 0.0)
    minus_dm = np.where((down_move > up_move) & (down_move > 0), down_move, 0.0)

    smoothed_tr = _wilder_smoothing(true_range(history), period)
    if smoothed_tr == 0:
        return ADXResult(adx=0.0, plus_di=0.0, minus_di=0.0)

    plus_di = _wilder_smoothing(plus_dm, period) / smoothed_tr * 100
    minus_di = _wilder_smoothing(minus_dm, period) / smoothed_tr * 100
    di_sum = plus_di + minus_di
    dx = abs(plus_di - minus_di) / di_sum * 100 if di_sum else 0.0
    return ADXResult(adx=float(dx), plus_di=float(plus_di), minus_di=float(minus_di))


def parabolic_sar(
    history: Sequence[Candle], step: float = 0.02, max_step: float = 0.2
) -> float:
    """
    Calculate the latest Parabolic SAR value.

    Starts in a rising state from the first bar's low, accelerating by
    `step` on every new extreme up to `max_step` and flipping when price
    crosses the SAR.

    Args:
        history: Candles in ascending date order.
        step: Acceleration factor increment (default: 0.02).
        max_step: Maximum acceleration factor (default: 0.2).

    Returns:
        SAR of the last bar; the last close with fewer than 2 bars
        (0.0 for an empty history).
    """
    if not history:
        return 0.0
    if len(history) < 2:
        return history[-1].close

    rising = True
    sar = history[0].low
    extreme = history[0].high
    factor = step

    for candle in history[1:]:
        sar = sar + factor * (extreme - sar)
        if rising:
            if candle.high > extreme:
                extreme = candle.high
                factor = min(factor + step, max_step)
            if candle.low < sar:
                rising = False
                sar = extreme
                extreme = candle.low
                factor = step
        else:
            if candle.low < extreme:
                extreme = candle.low
                factor = min(factor + step, max_step)
            if candle.high > sar:
                rising = True
                sar = extreme
                extreme = candle.high
                factor = step

    return sar
