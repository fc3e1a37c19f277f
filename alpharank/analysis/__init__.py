"""Single-ticker analysis: snapshot, score, setups, risk plan and history."""

from alpharank.analysis.analyzer import (
    analyze_stock,
    classify_recommendation,
    is_prime_setup,
    is_trend_entry,
    score_history,
)
from alpharank.analysis.breakdown import build_breakdown
from alpharank.analysis.risk import build_risk_plan, build_thesis

__all__ = [
    "analyze_stock",
    "build_breakdown",
    "build_risk_plan",
    "build_thesis",
    "classify_recommendation",
    "is_prime_setup",
    "is_trend_entry",
    "score_history",
]
