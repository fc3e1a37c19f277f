"""
Unit tests for the point-in-time backtest simulator.

Scenarios use the uptrend fixture, whose composite score is 6.7 on every
window bar and whose ATR is exactly 2, so trend entries can be switched on
through `trend_entry_score`.
"""

from dataclasses import replace

import pytest

from alpharank.backtest.simulator import run_backtest
from alpharank.config.parameters import EngineParameters
from alpharank.models.enums import ExitReason, PositionStatus
from alpharank.scoring.composite import composite_score
from tests.fixtures.candles import make_candles


pytestmark = pytest.mark.unit


@pytest.fixture()
def trend_parameters():
    """Parameters that let the 6.7 uptrend score open trend entries."""
    return EngineParameters(trend_entry_score=6.0)


@pytest.fixture()
def stop_history(uptrend_history):
    """Uptrend cut at bar 152, whose close gaps down through the stop."""
    history = uptrend_history[:152] + make_candles([165.0], open_offset=0.25)
    history[-1] = replace(history[-1], date=uptrend_history[152].date)
    return history


class TestWindow:
    """Test suite for the evaluation window."""

    def test_short_history_is_empty(self, uptrend_history):
        """Test 150 bars leave no bar to evaluate after warm-up."""
        result = run_backtest(uptrend_history[:150])

        assert result.total_trades == 0
        assert result.win_rate == 0.0
        assert result.trades == ()
        assert result.equity_curve == ()
        assert result.current_status is PositionStatus.CASH

    def test_window_starts_after_warmup(self, uptrend_history):
        """Test the curve begins on bar 150."""
        result = run_backtest(uptrend_history)

        assert len(result.equity_curve) == 150
        assert result.equity_curve[0].date == uptrend_history[150].date

    def test_window_covers_last_year(self):
        """Test long histories are cut to the last 252 bars."""
        history = make_candles([100.0 + 0.1 * i for i in range(500)])
        result = run_backtest(history)

        assert len(result.equity_curve) == 252
        assert result.equity_curve[0].date == history[248].date


class TestBuyAndHold:
    """Test suite for runs without entries."""

    def test_no_entries_below_trend_threshold(self, uptrend_history):
        """Test a flat strategy curve against the buy-and-hold comparison."""
        result = run_backtest(uptrend_history)
        buy_hold = (249.5 - 175.0) / 175.0 * 100

        assert result.total_trades == 0
        assert result.total_return == 0.0
        assert result.actual_return == pytest.approx(buy_hold)
        assert result.alpha_return == pytest.approx(-buy_hold)
        assert result.max_drawdown == 0.0
        assert result.drawdown_avoided == 0.0
        assert result.current_status is PositionStatus.CASH
        assert all(point.equity == 10000.0 for point in result.equity_curve)
        assert result.equity_curve[-1].buy_hold_equity == pytest.approx(14257.14, abs=0.01)


class TestExits:
    """Test suite for entries and exit triggers."""

    def test_take_profit_scenario(self, uptrend_history, trend_parameters):
        """Test repeated trend entries each closed at the 4.5 ATR target."""
        result = run_backtest(uptrend_history, params=trend_parameters)

        # Entries every 17 bars, each reaching its +9 target 16 bars later
        assert result.total_trades == 8
        assert all(trade.reason is ExitReason.TARGET for trade in result.trades)
        assert all(
            trade.exit_price == pytest.approx(trade.entry_price + 9.0) for trade in result.trades
        )
        assert result.win_rate == 100.0
        assert result.current_status is PositionStatus.LONG

        first = result.trades[0]
        assert first.entry_date == uptrend_history[150].date
        assert first.exit_date == uptrend_history[166].date

        growth = 1.0
        for trade in result.trades:
            growth *= trade.exit_price / trade.entry_price
        assert result.total_return == pytest.approx((growth - 1) * 100)

    def test_entry_points_marked_on_curve(self, uptrend_history, trend_parameters):
        """Test every trend entry is flagged on the curve."""
        curve = run_backtest(uptrend_history, params=trend_parameters).equity_curve

        entries = [point for point in curve if point.is_entry]
        assert len(entries) == 9
        assert entries[0].date == uptrend_history[150].date
        assert all(point.entry_reason == "TREND ENTRY" for point in curve)
        assert not any(point.is_prime for point in curve)

    def test_stop_exit(self, stop_history, trend_parameters):
        """Test a close through the stop exits at the stop price."""
        result = run_backtest(stop_history, params=trend_parameters)

        assert result.total_trades == 1
        trade = result.trades[0]
        assert trade.reason is ExitReason.STOP
        assert trade.exit_price == pytest.approx(175.0 - 4.4)
        assert trade.pnl_percent == pytest.approx((170.6 / 175.0 - 1) * 100)
        assert result.win_rate == 0.0
        assert result.current_status is PositionStatus.CASH
        assert result.max_drawdown < 0
        assert result.drawdown_avoided > 0

    def test_stop_has_priority_over_target(self, uptrend_history, trend_parameters):
        """Test a bar spanning both levels exits at the stop."""
        history = list(uptrend_history[:153])
        history[151] = replace(history[151], high=190.0, low=160.0)

        trade = run_backtest(history, params=trend_parameters).trades[0]

        assert trade.reason is ExitReason.STOP
        assert trade.exit_date == history[151].date

    def test_signal_exit_at_close(self, uptrend_history):
        """Test a score below the exit threshold closes at the bar close."""
        params = EngineParameters(trend_entry_score=6.0, exit_score=6.9)
        result = run_backtest(uptrend_history[:160], params=params)

        assert result.total_trades == 5
        for trade in result.trades:
            assert trade.reason is ExitReason.SIGNAL
            assert trade.exit_price == pytest.approx(trade.entry_price + 0.5)
        assert result.win_rate == 100.0

    def test_no_exit_on_entry_bar(self, uptrend_history, trend_parameters):
        """Test exits are only checked from the bar after entry."""
        history = list(uptrend_history[:152])
        # Entry bar itself trades through the would-be stop
        history[150] = replace(history[150], low=150.0)

        result = run_backtest(history, params=trend_parameters)

        assert result.total_trades == 0
        assert result.current_status is PositionStatus.LONG


class TestPrimeEntries:
    """Test suite for prime entries at the Bollinger pivot."""

    @pytest.fixture()
    def spike_history(self):
        """Uptrend with a doubled volume on bar 290, 1.98% above the pivot."""
        closes = [100.0 + 0.5 * i for i in range(300)]
        volumes = [1_000_000.0] * 300
        volumes[290] = 2_000_000.0
        return make_candles(closes, spread=1.0, volumes=volumes, open_offset=0.25)

    def test_prime_entry(self, spike_history, benchmark_history):
        """Test a score of 8+ near the pivot opens an ELITE PRIME trade."""
        # Trend entries need 8.0 too, so only the spike bar can qualify
        params = EngineParameters(trend_entry_score=8.0)

        result = run_backtest(spike_history, benchmark_history, params)
        curve = result.equity_curve
        entry = curve[290 - 150]

        assert [point.date for point in curve if point.is_entry] == [spike_history[290].date]
        assert entry.score >= 8.0
        assert entry.is_prime is True
        assert entry.entry_reason == "ELITE PRIME"
        assert all(point.is_prime for point in curve[141:])
        assert all(point.entry_reason is None for point in curve[141:])
        assert result.total_trades == 0
        assert result.current_status is PositionStatus.LONG

    def test_spike_far_from_pivot_is_trend_entry(self, benchmark_history):
        """Test the same spike 2.4% above the pivot enters as a trend trade."""
        closes = [100.0 + 0.5 * i for i in range(300)]
        volumes = [1_000_000.0] * 300
        volumes[200] = 2_000_000.0
        history = make_candles(closes, spread=1.0, volumes=volumes, open_offset=0.25)

        result = run_backtest(history, benchmark_history, EngineParameters(trend_entry_score=8.0))

        entry = result.equity_curve[200 - 150]
        assert entry.score >= 8.0
        assert entry.is_entry is True
        assert entry.is_prime is False
        assert entry.entry_reason == "TREND ENTRY"


class TestPointInTime:
    """Test suite for look-ahead freedom and curve properties."""

    def test_truncated_history_gives_same_prefix(self, random_walk_history):
        """Test later bars never change earlier curve points or trades."""
        full = run_backtest(random_walk_history)
        truncated = run_backtest(random_walk_history[:250])

        assert full.equity_curve[:100] == truncated.equity_curve
        cutoff = random_walk_history[250].date
        assert [t for t in full.trades if t.exit_date < cutoff] == list(truncated.trades)

    def test_curve_scores_use_bars_up_to_each_point(self, random_walk_history):
        """Test each curve score equals the score of the truncated history."""
        curve = run_backtest(random_walk_history).equity_curve

        for k in (0, 75, 149):
            assert curve[k].score == composite_score(random_walk_history[: 150 + k + 1])

    def test_equity_stays_positive(self, random_walk_history):
        """Test strategy and buy-and-hold equity stay above zero."""
        params = EngineParameters(trend_entry_score=5.0, exit_score=3.0)
        result = run_backtest(random_walk_history, params=params)

        assert all(point.equity > 0 for point in result.equity_curve)
        assert all(point.buy_hold_equity > 0 for point in result.equity_curve)
        assert 0.0 <= result.win_rate <= 100.0

    def test_drawdown_independent_of_curve_rounding(self, stop_history, trend_parameters):
        """Test max drawdown does not depend on the starting equity."""
        # With 1.0 of starting equity the cent-rounded curve reads -3.0%
        small = EngineParameters(trend_entry_score=6.0, initial_equity=1.0)

        reference = run_backtest(stop_history, params=trend_parameters)
        scaled = run_backtest(stop_history, params=small)

        expected = (170.6 / 175.5 - 1) * 100
        assert reference.max_drawdown == pytest.approx(expected)
        assert scaled.max_drawdown == pytest.approx(expected)
        assert scaled.drawdown_avoided == pytest.approx(reference.drawdown_avoided)

    def test_deterministic(self, random_walk_history):
        """Test repeated runs are identical."""
        assert run_backtest(random_walk_history) == run_backtest(random_walk_history)

