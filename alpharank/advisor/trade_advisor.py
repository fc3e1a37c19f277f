"""
Position advice.

Evaluates an ordered table of rules against the analysis of a ticker and the
user's position. The first matching rule decides the action; HOLD applies
when none matches. Suggested stop and target are refreshed from the current
price and ATR on every call.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from ..config.parameters import EngineParameters
from ..models.core import AnalysisResult, Position, TradeAdvice
from ..models.enums import TradeAction, TrendDirection
from ..scoring.composite import DEFAULT_PARAMETERS, round_half_up


logger = logging.getLogger(__name__)

FALLBACK_ATR_FRACTION = 0.03
DEFAULT_REASON = "Technical indicators suggest maintaining current exposure."
MISSING_ENTRY_REASON = "Enter position details for advice."


@dataclass(frozen=True)
class AdviceContext:
    """Inputs the advice rules are evaluated against."""

    score: float
    pnl: float
    rsi: float
    weekly_trend: TrendDirection


@dataclass(frozen=True)
class AdviceRule:
    """A predicate with the action and reason it produces."""

    applies: Callable[[AdviceContext], bool]
    action: TradeAction
    reason: str


ADVICE_RULES: tuple[AdviceRule, ...] = (
    AdviceRule(
        lambda c: c.score >= 8.5 and -3 < c.pnl < 10 and c.weekly_trend is TrendDirection.BULLISH,
        TradeAction.BUY_MORE,
        "Exceptional scoring with strong multi-timeframe alignment. High conviction zone.",
    ),
    AdviceRule(
        lambda c: c.rsi > 75 and c.pnl > 15 and c.score < 8,
        TradeAction.TAKE_PROFIT,
        "RSI exhaustion detected at extreme levels. Suggest locking in Alpha returns.",
    ),
    AdviceRule(
        lambda c: c.score < 4.0 and c.pnl < 0,
        TradeAction.CUT_LOSS,
        "Technical breakdown below 4.0 threshold while in deficit. Preserving capital.",
    ),
    AdviceRule(
        lambda c: c.pnl > 25,
        TradeAction.TAKE_PROFIT,
        "Significant parabolic gains reached. Mean reversion risk is increasing.",
    ),
    AdviceRule(
        lambda c: c.score < 3.5,
        TradeAction.CUT_LOSS,
        "Structural trend failure. Exit recommended to avoid major drawdown.",
    ),
)


def generate_trade_advice(
    result: AnalysisResult,
    position: Position,
    params: EngineParameters | None = None,
) -> TradeAdvice:
    """
    Suggest an action for an existing position.

    Args:
        result: Analysis of the position's ticker.
        position: The held position.
        params: Engine parameters supplying the stop and target multiples.

    Returns:
        TradeAdvice; a neutral HOLD with zero levels when the position has
        no positive average entry price.

    Examples:
        >>> advice = generate_trade_advice(result, Position("NVDA", 0.0, 10))
        >>> advice.reason
        'Enter position details for advice.'
    """
    p = params or DEFAULT_PARAMETERS
    entry = position.avg_entry_price
    if entry <= 0:
        return TradeAdvice(
            action=TradeAction.HOLD,
            reason=MISSING_ENTRY_REASON,
            suggested_stop=0.0,
            suggested_target=0.0,
            pnl_percentage=0.0,
        )

    price = result.current_price
    pnl = round_half_up((price - entry) / entry * 100, 2)
    atr_value = result.technical.atr or price * FALLBACK_ATR_FRACTION
    context = AdviceContext(
        score=result.total_score,
        pnl=pnl,
        rsi=result.technical.rsi,
        weekly_trend=result.technical.weekly_trend,
    )

    action, reason = TradeAction.HOLD, DEFAULT_REASON
    for rule in ADVICE_RULES:
        if rule.applies(context):
            action, reason = rule.action, rule.reason
            break

    logger.debug("Advice for %s at %.2f%% P&L: %s", position.ticker, pnl, action.value)
    return TradeAdvice(
        action=action,
        reason=reason,
        suggested_stop=round_half_up(price - p.trade_stop_atr_mult * atr_value, 2),
        suggested_target=round_half_up(price + p.trade_target_atr_mult * atr_value, 2),
        pnl_percentage=pnl,
    )
