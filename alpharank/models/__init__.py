"""Data models and entities."""

from alpharank.models.core import (
    ADXResult,
    AnalysisResult,
    BacktestResult,
    BacktestTrade,
    BollingerBands,
    Candle,
    EquityPoint,
    IndicatorScore,
    KeltnerChannels,
    MACDResult,
    Position,
    RiskPlan,
    ScoreHistoryItem,
    TechnicalSnapshot,
    TradeAdvice,
)
from alpharank.models.enums import (
    Divergence,
    ExitReason,
    OutputFormat,
    PositionStatus,
    Recommendation,
    TradeAction,
    TrendDirection,
)
from alpharank.models.exceptions import DataIntegrityError, HistoryNotFoundError

__all__ = [
    "ADXResult",
    "AnalysisResult",
    "BacktestResult",
    "BacktestTrade",
    "BollingerBands",
    "Candle",
    "DataIntegrityError",
    "Divergence",
    "EquityPoint",
    "ExitReason",
    "HistoryNotFoundError",
    "IndicatorScore",
    "KeltnerChannels",
    "MACDResult",
    "OutputFormat",
    "Position",
    "PositionStatus",
    "Recommendation",
    "RiskPlan",
    "ScoreHistoryItem",
    "TechnicalSnapshot",
    "TradeAction",
    "TradeAdvice",
    "TrendDirection",
]
