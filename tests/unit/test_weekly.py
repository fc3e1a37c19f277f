"""
Unit tests for weekly aggregation and weekly trend classification.
"""

from datetime import date

import pytest

from alpharank.indicators.weekly import aggregate_to_weekly, weekly_trend
from alpharank.models.core import Candle
from alpharank.models.enums import TrendDirection
from tests.fixtures.candles import make_candles


pytestmark = pytest.mark.unit


class TestAggregateToWeekly:
    """Test suite for daily to weekly aggregation."""

    def test_groups_by_monday(self):
        """Test daily bars are grouped into Monday-start weeks."""
        days = [
            Candle(date(2025, 1, 6), 10, 12, 9, 11, 100),
            Candle(date(2025, 1, 8), 11, 13, 10, 12, 100),
            Candle(date(2025, 1, 10), 12, 12.5, 8, 10, 50),
            Candle(date(2025, 1, 13), 12, 14, 11, 13, 50),
        ]
        weeks = aggregate_to_weekly(days)

        assert [w.date for w in weeks] == [date(2025, 1, 6), date(2025, 1, 13)]
        first = weeks[0]
        assert (first.open, first.high, first.low, first.close, first.volume) == (10, 13, 8, 10, 250)

    def test_week_starting_midweek_is_dated_on_monday(self):
        """Test a week starting midweek is still dated on Monday."""
        weeks = aggregate_to_weekly([Candle(date(2025, 1, 9), 1, 2, 0.5, 1.5, 10)])
        assert weeks[0].date == date(2025, 1, 6)

    def test_trailing_partial_week_is_kept(self):
        """Test a final week holding only Monday and Tuesday is still emitted."""
        days = [
            Candle(date(2025, 1, 9), 10, 11, 9, 10.5, 100),
            Candle(date(2025, 1, 10), 10.5, 12, 10, 11.5, 100),
            Candle(date(2025, 1, 13), 11.5, 12.5, 11, 12, 40),
            Candle(date(2025, 1, 14), 12, 13, 11.5, 12.5, 60),
        ]
        weeks = aggregate_to_weekly(days)

        assert [w.date for w in weeks] == [date(2025, 1, 6), date(2025, 1, 13)]
        last = weeks[-1]
        assert (last.open, last.high, last.low, last.close, last.volume) == (11.5, 13.0, 11.0, 12.5, 100.0)
        assert all(type(w.close) is float and type(w.date) is date for w in weeks)

    def test_empty_history(self):
        """Test an empty history has no weeks."""
        assert aggregate_to_weekly([]) == []

    def test_business_days_give_one_week_per_five_bars(self, uptrend_history):
        """Test 300 business days make 60 weeks."""
        assert len(aggregate_to_weekly(uptrend_history)) == 60


class TestWeeklyTrend:
    """Test suite for weekly trend classification."""

    def test_uptrend_is_bullish(self, uptrend_history):
        """Test the uptrend closes above its 20-week SMA."""
        assert weekly_trend(uptrend_history) is TrendDirection.BULLISH

    def test_downtrend_is_bearish(self):
        """Test the downtrend closes below its 20-week SMA."""
        history = make_candles([300.0 - 0.5 * i for i in range(200)])
        assert weekly_trend(history) is TrendDirection.BEARISH

    def test_short_history_compares_against_zero_sma(self):
        """Test fewer than 20 weeks read bullish."""
        assert weekly_trend(make_candles([10.0] * 10)) is TrendDirection.BULLISH

    def test_empty_history_is_bearish(self):
        """Test an empty history reads bearish."""
        assert weekly_trend([]) is TrendDirection.BEARISH
