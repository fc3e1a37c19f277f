"""
Point-in-time single-position backtest.

The simulator replays the last year of bars (at most `backtest_lookback`)
after a warm-up of `backtest_warmup` bars. On every bar it re-scores the
history truncated at that bar, so no decision can use later data. It holds
at most one long position, sized with the entire strategy equity, and
compares the result with buying and holding over the same window.

State machine:
    FLAT --(prime or trend entry)--> LONG --(stop | target | signal)--> FLAT

Exit triggers are evaluated in priority order Stop, Target, Signal and never
on the entry bar. Slippage and commissions are not modeled.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date

from ..config.parameters import EngineParameters
from ..indicators.basic import atr, bollinger
from ..models.core import BacktestResult, BacktestTrade, Candle, EquityPoint
from ..models.enums import ExitReason, PositionStatus
from ..scoring.composite import DEFAULT_PARAMETERS, composite_score
from .drawdown import max_drawdown


logger = logging.getLogger(__name__)

PRIME_ENTRY_LABEL = "ELITE PRIME"
TREND_ENTRY_LABEL = "TREND ENTRY"


@dataclass(frozen=True)
class _OpenTrade:
    entry_date: date
    entry_price: float
    stop_price: float
    target_price: float
    is_prime: bool


def _empty_result() -> BacktestResult:
    return BacktestResult(
        total_trades=0,
        win_rate=0.0,
        total_return=0.0,
        actual_return=0.0,
        alpha_return=0.0,
        max_drawdown=0.0,
        drawdown_avoided=0.0,
        trades=(),
        equity_curve=(),
        current_status=PositionStatus.CASH,
    )


def _exit_for(
    trade: _OpenTrade, candle: Candle, score: float, exit_score: float
) -> tuple[ExitReason, float] | None:
    """Return the first exit trigger hit on this bar and its fill price."""
    if candle.low <= trade.stop_price:
        return ExitReason.STOP, trade.stop_price
    if candle.high >= trade.target_price:
        return ExitReason.TARGET, trade.target_price
    if score < exit_score:
        return ExitReason.SIGNAL, candle.close
    return None


def run_backtest(
    history: Sequence[Candle],
    benchmark: Sequence[Candle] | None = None,
    params: EngineParameters | None = None,
) -> BacktestResult:
    """
    Simulate the scoring strategy over the most recent bars of `history`.

    Args:
        history: Candles in ascending date order.
        benchmark: Optional benchmark history for relative strength; it is
            cut to each evaluated bar's date before scoring.
        params: Engine parameters (defaults when None).

    Returns:
        BacktestResult with trade log, equity curve and return comparison.
        Histories no longer than the warm-up produce an empty result with
        zero trades and status Cash.
    """
    p = params or DEFAULT_PARAMETERS
    n = len(history)
    if n <= p.backtest_warmup:
        logger.debug(
            "Skipping backtest: %d bars available, warm-up needs more than %d",
            n,
            p.backtest_warmup,
        )
        return _empty_result()

    start = max(p.backtest_warmup, n - p.backtest_lookback)
    initial_equity = p.initial_equity
    first_close = history[start].close

    equity = initial_equity
    wins = 0
    trades: list[BacktestTrade] = []
    curve: list[EquityPoint] = []
    strategy_curve: list[float] = []
    buy_hold_curve: list[float] = []
    open_trade: _OpenTrade | None = None

    for i in range(start, n):
        candle = history[i]
        window = history[: i + 1]

        # Official SMA is never used here: it is not point-in-time.
        score = composite_score(window, benchmark, None, p)
        middle = bollinger(window, p.bollinger_period, p.bollinger_std).middle
        atr_value = atr(window, p.atr_period)

        distance = abs(candle.close - middle) / (middle or 1)
        is_prime = score >= p.prime_score and distance <= p.pivot_tolerance
        is_trend = score >= p.trend_entry_score and candle.close > middle and not is_prime

        buy_hold_equity = candle.close / first_close * initial_equity

        if open_trade is None:
            if is_prime or is_trend:
                open_trade = _OpenTrade(
                    entry_date=candle.date,
                    entry_price=candle.close,
                    stop_price=candle.close - p.trade_stop_atr_mult * atr_value,
                    target_price=candle.close + p.trade_target_atr_mult * atr_value,
                    is_prime=is_prime,
                )
                logger.debug(
                    "Entry %s at %.2f (%s, score %.1f)",
                    candle.date,
                    candle.close,
                    PRIME_ENTRY_LABEL if is_prime else TREND_ENTRY_LABEL,
                    score,
                )
        else:
            exit_hit = _exit_for(open_trade, candle, score, p.exit_score)
            if exit_hit is not None:
                reason, exit_price = exit_hit
                factor = exit_price / open_trade.entry_price
                equity *= factor
                if factor > 1:
                    wins += 1
                trades.append(
                    BacktestTrade(
                        entry_date=open_trade.entry_date,
                        entry_price=open_trade.entry_price,
                        exit_date=candle.date,
                        exit_price=exit_price,
                        pnl_percent=(factor - 1) * 100,
                        reason=reason,
                    )
                )
                logger.debug(
                    "Exit %s at %.2f (%s, %.2f%%)",
                    candle.date,
                    exit_price,
                    reason.value,
                    (factor - 1) * 100,
                )
                open_trade = None

        if open_trade is not None:
            marked_equity = equity * (candle.close / open_trade.entry_price)
        else:
            marked_equity = equity

        if is_prime:
            entry_reason = PRIME_ENTRY_LABEL
        elif is_trend:
            entry_reason = TREND_ENTRY_LABEL
        else:
            entry_reason = None

        curve.append(
            EquityPoint(
                date=candle.date,
                equity=round(marked_equity, 2),
                buy_hold_equity=round(buy_hold_equity, 2),
                is_entry=open_trade is not None and open_trade.entry_date == candle.date,
                is_prime=open_trade is not None and open_trade.is_prime,
                entry_reason=entry_reason,
                score=score,
            )
        )
        strategy_curve.append(marked_equity)
        buy_hold_curve.append(buy_hold_equity)

    strategy_return = (equity - initial_equity) / initial_equity * 100
    buy_hold_return = (history[-1].close - first_close) / first_close * 100
    strategy_drawdown = max_drawdown(strategy_curve)
    buy_hold_drawdown = max_drawdown(buy_hold_curve)

    result = BacktestResult(
        total_trades=len(trades),
        win_rate=wins / len(trades) * 100 if trades else 0.0,
        total_return=strategy_return,
        actual_return=buy_hold_return,
        alpha_return=strategy_return - buy_hold_return,
        max_drawdown=strategy_drawdown,
        drawdown_avoided=strategy_drawdown - buy_hold_drawdown,
        trades=tuple(trades),
        equity_curve=tuple(curve),
        current_status=PositionStatus.LONG if open_trade is not None else PositionStatus.CASH,
    )

    logger.debug(
        "Backtest complete: %d bars, %d trades, return %.2f%% vs buy-hold %.2f%%",
        len(curve),
        result.total_trades,
        result.total_return,
        result.actual_return,
    )
    return result
