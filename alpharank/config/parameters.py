"""
Engine parameter configuration using Pydantic.

This module provides type-safe parameter validation and loading for the
indicator library, composite scorer, stock analyzer, backtest simulator and
trade advisor. Defaults reproduce the production scoring model exactly;
overrides are intended for research runs.
"""

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EngineParameters(BaseModel):
    """
    Configuration parameters for the scoring and backtest engine.

    Attributes:
        rsi_period: Wilder RSI period (default: 14).
        atr_period: Average True Range period (default: 14).
        vwma_period: Volume-weighted moving average period (default: 20).
        volume_avg_period: Window for relative volume (default: 20).
        bollinger_period: Bollinger band period (default: 20).
        bollinger_std: Bollinger band width in standard deviations (default: 2.0).
        keltner_period: Keltner channel period (default: 20).
        keltner_multiplier: Keltner channel width in ATRs (default: 1.5).
        trend_sma_period: Primary trend SMA period (default: 150).
        rs_lookback: Bars used for relative strength returns (default: 126).
        min_benchmark_bars: Benchmark must have more bars than this for
            relative strength to be computed (default: 100).
        min_score_bars: Bars required before the composite score leaves its
            neutral value (default: 50).
        strong_buy_score: Score at or above which the tier is Strong Buy (default: 8.5).
        buy_score: Score at or above which the tier is Buy (default: 6.5).
        hold_score: Score at or above which the tier is Hold (default: 4.5).
        prime_score: Minimum score for a prime setup (default: 8.0).
        trend_entry_score: Minimum score for a backtest trend entry (default: 7.0).
        exit_score: Backtest exits on signal below this score (default: 4.5).
        pivot_tolerance: Maximum distance from the Bollinger middle, as a
            fraction, for a prime setup (default: 0.02).
        prime_min_rvol: Minimum relative volume for a prime setup (default: 1.2).
        trend_min_rsi: RSI a trend entry must exceed (default: 55.0).
        trend_min_rvol: Relative volume a trend entry must exceed (default: 1.2).
        risk_stop_atr_mult: Risk plan stop distance in ATRs (default: 2.5).
        risk_target_atr_mult: Risk plan target distance in ATRs (default: 5.0).
        trade_stop_atr_mult: Backtest and advisor stop distance in ATRs (default: 2.2).
        trade_target_atr_mult: Backtest and advisor target distance in ATRs (default: 4.5).
        backtest_lookback: Maximum bars in the backtest window (default: 252).
        backtest_warmup: Bars required before the first evaluated bar (default: 150).
        initial_equity: Starting equity of the simulation (default: 10000.0).
        score_history_points: Points in the trailing score history (default: 7).
    """

    model_config = ConfigDict(frozen=True)

    # Indicator periods
    rsi_period: int = Field(default=14, gt=1, le=100)
    atr_period: int = Field(default=14, gt=0, le=100)
    vwma_period: int = Field(default=20, gt=0, le=200)
    volume_avg_period: int = Field(default=20, gt=0, le=200)
    bollinger_period: int = Field(default=20, gt=1, le=200)
    bollinger_std: float = Field(default=2.0, gt=0.0, le=5.0)
    keltner_period: int = Field(default=20, gt=0, le=200)
    keltner_multiplier: float = Field(default=1.5, gt=0.0, le=5.0)
    trend_sma_period: int = Field(default=150, gt=0, le=500)

    # Relative strength
    rs_lookback: int = Field(default=126, gt=0, le=500)
    min_benchmark_bars: int = Field(default=100, ge=0, le=1000)

    # Score tiers
    min_score_bars: int = Field(default=50, gt=0, le=1000)
    strong_buy_score: float = Field(default=8.5, ge=0.0, le=10.0)
    buy_score: float = Field(default=6.5, ge=0.0, le=10.0)
    hold_score: float = Field(default=4.5, ge=0.0, le=10.0)

    # Setup classification
    prime_score: float = Field(default=8.0, ge=0.0, le=10.0)
    trend_entry_score: float = Field(default=7.0, ge=0.0, le=10.0)
    exit_score: float = Field(default=4.5, ge=0.0, le=10.0)
    pivot_tolerance: float = Field(default=0.02, gt=0.0, le=0.5)
    prime_min_rvol: float = Field(default=1.2, ge=0.0, le=10.0)
    trend_min_rsi: float = Field(default=55.0, ge=0.0, le=100.0)
    trend_min_rvol: float = Field(default=1.2, ge=0.0, le=10.0)

    # Risk management
    risk_stop_atr_mult: float = Field(default=2.5, gt=0.0, le=20.0)
    risk_target_atr_mult: float = Field(default=5.0, gt=0.0, le=40.0)
    trade_stop_atr_mult: float = Field(default=2.2, gt=0.0, le=20.0)
    trade_target_atr_mult: float = Field(default=4.5, gt=0.0, le=40.0)

    # Backtest window
    backtest_lookback: int = Field(default=252, gt=0, le=5000)
    backtest_warmup: int = Field(default=150, gt=0, le=5000)
    initial_equity: float = Field(default=10000.0, gt=0.0)
    score_history_points: int = Field(default=7, ge=0, le=60)

    @field_validator("buy_score")
    @classmethod
    def buy_must_not_exceed_strong_buy(cls, v, info):
        """Validate that the Buy tier starts at or below the Strong Buy tier."""
        if "strong_buy_score" in info.data and v > info.data["strong_buy_score"]:
            raise ValueError("buy_score must not exceed strong_buy_score")
        return v

    @field_validator("hold_score")
    @classmethod
    def hold_must_not_exceed_buy(cls, v, info):
        """Validate that the Hold tier starts at or below the Buy tier."""
        if "buy_score" in info.data and v > info.data["buy_score"]:
            raise ValueError("hold_score must not exceed buy_score")
        return v

    @field_validator("trend_entry_score")
    @classmethod
    def trend_must_not_exceed_prime(cls, v, info):
        """Validate that trend entries do not require more than prime setups."""
        if "prime_score" in info.data and v > info.data["prime_score"]:
            raise ValueError("trend_entry_score must not exceed prime_score")
        return v

    @field_validator("risk_target_atr_mult")
    @classmethod
    def risk_target_must_exceed_stop(cls, v, info):
        """Validate that the risk plan target is further away than its stop."""
        if "risk_stop_atr_mult" in info.data and v <= info.data["risk_stop_atr_mult"]:
            raise ValueError("risk_target_atr_mult must be greater than risk_stop_atr_mult")
        return v

    @field_validator("trade_target_atr_mult")
    @classmethod
    def trade_target_must_exceed_stop(cls, v, info):
        """Validate that the trade target is further away than the trade stop."""
        if "trade_stop_atr_mult" in info.data and v <= info.data["trade_stop_atr_mult"]:
            raise ValueError("trade_target_atr_mult must be greater than trade_stop_atr_mult")
        return v

    @property
    def risk_reward_ratio(self) -> float:
        """Reward per unit of risk of the analyzer's risk plan."""
        return self.risk_target_atr_mult / self.risk_stop_atr_mult


def load_parameters(config_dict: dict | None = None) -> EngineParameters:
    """
    Load and validate engine parameters from a configuration dictionary.

    Args:
        config_dict: Optional dictionary of parameter overrides. If None,
            default values are used.

    Returns:
        Validated EngineParameters instance.

    Raises:
        ValidationError: If any parameter values are invalid.

    Examples:
        >>> params = load_parameters()  # Use defaults
        >>> params.rsi_period
        14

        >>> custom_params = load_parameters({"trend_entry_score": 6.0})
        >>> custom_params.trend_entry_score
        6.0
    """
    if config_dict is None:
        config_dict = {}
    return EngineParameters(**config_dict)


def load_parameters_file(path: Path) -> EngineParameters:
    """
    Load and validate engine parameters from a JSON file.

    Args:
        path: JSON file holding a flat object of parameter overrides.

    Returns:
        Validated EngineParameters instance.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file does not hold a JSON object.
        ValidationError: If any parameter values are invalid.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    config = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(config, dict):
        raise ValueError(f"Config file must contain a JSON object: {path}")
    return load_parameters(config)
