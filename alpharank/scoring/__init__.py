"""Composite technical scoring."""

from alpharank.scoring.composite import (
    FACTORS,
    FACTOR_WEIGHTS,
    NEUTRAL_SCORE,
    FactorReadings,
    align_benchmark,
    composite_score,
    compute_readings,
    factor_scores,
    relative_strength,
    weighted_score,
)

__all__ = [
    "FACTORS",
    "FACTOR_WEIGHTS",
    "NEUTRAL_SCORE",
    "FactorReadings",
    "align_benchmark",
    "composite_score",
    "compute_readings",
    "factor_scores",
    "relative_strength",
    "weighted_score",
]
