"""
Pytest configuration and global fixtures.

This module provides shared candle histories used across the test suite:
a steady uptrend and its prime-setup variant, a flat zero-volume history,
bullish and bearish RSI divergences, a cup-and-handle base and a seeded
random walk.
"""

import random

import numpy as np
import pandas as pd
import pytest

from alpharank.models.core import Candle
from tests.fixtures.candles import START_DATE, make_candles, piecewise


SEED = 42


def _apply_global_seed():
    """Apply global deterministic seed for tests."""
    random.seed(SEED)
    np.random.seed(SEED)


_apply_global_seed()


@pytest.fixture()
def uptrend_history():
    """
    300 bars rising 0.5 per bar from 100 with a 2-point daily range.

    Constant volume keeps relative volume at 1.0; ATR is exactly 2.
    """
    closes = [100.0 + 0.5 * i for i in range(300)]
    return make_candles(closes, spread=1.0, open_offset=0.25)


@pytest.fixture()
def prime_history():
    """
    The uptrend fixture with a doubled volume on its last bar.

    RVOL is 2 / 1.05 and the close sits 1.94% above the Bollinger middle.
    """
    closes = [100.0 + 0.5 * i for i in range(300)]
    volumes = [1_000_000.0] * 299 + [2_000_000.0]
    return make_candles(closes, spread=1.0, volumes=volumes, open_offset=0.25)


@pytest.fixture()
def flat_history():
    """20 identical bars with no range and no volume."""
    return make_candles([50.0] * 20, spread=0.0, volumes=[0.0] * 20)


@pytest.fixture()
def divergence_history():
    """
    55 bars whose second pivot low undercuts the first while RSI holds higher.

    Lows sit at index 24 (86.4) and index 44 (85.4).
    """
    closes = [100.0 + 0.1 * i for i in range(20)]
    for step in (-3.0,) * 5 + (1.0,) * 10 + (-1.1,) * 10 + (1.0,) * 10:
        closes.append(closes[-1] + step)
    return make_candles(closes, spread=0.5)


@pytest.fixture()
def bearish_divergence_history():
    """
    55 bars whose second pivot high tops the first while RSI fades.

    Mirror image of `divergence_history`: highs sit at index 24 and index 44.
    """
    closes = [100.0 - 0.1 * i for i in range(20)]
    for step in (3.0,) * 5 + (-1.0,) * 10 + (1.1,) * 10 + (-1.0,) * 10:
        closes.append(closes[-1] + step)
    return make_candles(closes, spread=0.5)


@pytest.fixture()
def cup_history():
    """160 bars: rally to 100, 25% cup, recovery to 99 and a shallow handle."""
    closes = piecewise([(0, 80.0), (60, 100.0), (90, 75.0), (130, 99.0), (140, 95.0), (159, 96.0)])
    return make_candles(closes, spread=0.5)


@pytest.fixture()
def broken_cup_history():
    """Same cup whose handle retraces below the middle of the cup."""
    closes = piecewise([(0, 80.0), (60, 100.0), (90, 75.0), (130, 99.0), (145, 80.0), (159, 82.0)])
    return make_candles(closes, spread=0.5)


@pytest.fixture()
def random_walk_history():
    """300 bars of a seeded geometric random walk with varying volume."""
    rng = np.random.default_rng(SEED)
    returns = rng.normal(0.0005, 0.015, 300)
    closes = 100.0 * np.exp(np.cumsum(returns))
    volumes = rng.integers(500_000, 2_000_000, 300)
    dates = pd.bdate_range(START_DATE, periods=300).date
    candles = []
    for day, close, volume, noise in zip(dates, closes, volumes, rng.uniform(0.002, 0.02, 300)):
        close = float(close)
        candles.append(
            Candle(
                date=day,
                open=close * (1 - noise / 2),
                high=close * (1 + noise),
                low=close * (1 - noise),
                close=close,
                volume=float(volume),
            )
        )
    return candles


@pytest.fixture()
def benchmark_history():
    """300 bars of a benchmark rising more slowly than the uptrend fixture."""
    closes = [400.0 + 0.2 * i for i in range(300)]
    return make_candles(closes, spread=1.0)
