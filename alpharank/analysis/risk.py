"""
Risk plan and setup thesis.

The plan anchors its entry on the Bollinger middle band (the 20-bar SMA
pivot) and places the stop and target at fixed ATR multiples around it.
"""

from ..config.parameters import EngineParameters
from ..models.core import RiskPlan
from ..models.enums import Divergence, TrendDirection
from ..scoring.composite import FactorReadings


ENTRY_SOURCE = "SMA 20 Mean Reversion Pivot"


def _multiple_label(multiple: float) -> str:
    return f"{multiple:g}x ATR"


def build_thesis(
    score: float, readings: FactorReadings, squeeze_on: bool, params: EngineParameters
) -> str:
    """
    Describe the current setup in one or two sentences.

    The tone follows the recommendation tier of `score`; a bullish RSI
    divergence and an active squeeze add a closing remark.

    Examples:
        A Strong Buy tier with 12% relative outperformance reads
        "Exceptional setup. High conviction entry supported by massive
        Relative Strength (12.0%), and multi-timeframe alignment."
    """
    bonus = ""
    if readings.rsi_divergence is Divergence.BULLISH:
        bonus += " A Bullish RSI Divergence suggests a trend reversal is underway."
    if squeeze_on:
        bonus += (
            " Market is currently in a Squeeze, indicating a high-probability"
            " explosive move is coming."
        )

    rs = readings.relative_strength
    if score >= params.strong_buy_score:
        pattern = "a Bullish Pattern, " if readings.is_cup_handle else ""
        text = (
            f"Exceptional setup. High conviction entry supported by {pattern}massive "
            f"Relative Strength ({(rs - 1) * 100:.1f}%), and multi-timeframe alignment."
        )
    elif score >= params.buy_score:
        text = (
            "Constructive trend. Price is exhibiting positive momentum and "
            "outperforming the benchmark."
        )
    elif score >= params.hold_score:
        if readings.weekly_trend is TrendDirection.BEARISH:
            conflict = "Weekly trend conflict"
        elif rs < 1:
            conflict = "Market underperformance"
        else:
            conflict = "Momentum consolidation"
        text = f"Neutral bias. {conflict} suggests patience."
    else:
        text = (
            "Structural decay. Technical score is breaking down alongside "
            "decaying Relative Strength."
        )
    return text + bonus


def build_risk_plan(
    pivot: float, atr_value: float, thesis: str, params: EngineParameters
) -> RiskPlan:
    """
    Build the entry, stop and target levels around the pivot.

    Args:
        pivot: Bollinger middle band used as entry.
        atr_value: Average true range of the analyzed bar.
        thesis: Setup description.
        params: Engine parameters supplying the ATR multiples.

    Returns:
        RiskPlan with stop = pivot - stop multiple x ATR and target =
        pivot + target multiple x ATR.
    """
    return RiskPlan(
        stop_loss=pivot - params.risk_stop_atr_mult * atr_value,
        take_profit=pivot + params.risk_target_atr_mult * atr_value,
        entry_price=pivot,
        risk_reward_ratio=params.risk_reward_ratio,
        thesis=thesis,
        entry_source=ENTRY_SOURCE,
        stop_source=_multiple_label(params.risk_stop_atr_mult),
        target_source=_multiple_label(params.risk_target_atr_mult),
    )
