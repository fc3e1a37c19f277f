"""
Unit tests for engine parameter validation and loading.
"""

import json

import pytest
from pydantic import ValidationError

from alpharank.config.parameters import EngineParameters, load_parameters, load_parameters_file


pytestmark = pytest.mark.unit


class TestEngineParameters:
    """Test suite for EngineParameters."""

    def test_defaults(self):
        """Test default parameter values."""
        params = EngineParameters()

        assert params.rsi_period == 14
        assert params.trend_sma_period == 150
        assert params.prime_score == 8.0
        assert params.trend_entry_score == 7.0
        assert params.trade_stop_atr_mult == 2.2
        assert params.trade_target_atr_mult == 4.5
        assert params.backtest_lookback == 252
        assert params.backtest_warmup == 150
        assert params.initial_equity == 10000.0
        assert params.risk_reward_ratio == pytest.approx(2.0)

    def test_frozen(self):
        """Test parameters cannot be mutated."""
        params = EngineParameters()
        with pytest.raises(ValidationError):
            params.rsi_period = 10

    @pytest.mark.parametrize(
        "overrides",
        [
            {"trend_entry_score": 9.0},
            {"trade_stop_atr_mult": 3.0, "trade_target_atr_mult": 2.0},
            {"risk_stop_atr_mult": 5.0, "risk_target_atr_mult": 5.0},
            {"buy_score": 9.0},
            {"hold_score": 7.0},
            {"rsi_period": 0},
            {"initial_equity": -1.0},
        ],
    )
    def test_invalid_overrides(self, overrides):
        """Test out-of-range and inconsistent overrides are rejected."""
        with pytest.raises(ValidationError):
            EngineParameters(**overrides)


class TestLoadParameters:
    """Test suite for parameter loading helpers."""

    def test_load_defaults(self):
        """Test loading without overrides."""
        assert load_parameters() == EngineParameters()

    def test_load_overrides(self):
        """Test loading from a dictionary."""
        assert load_parameters({"trend_entry_score": 6.0}).trend_entry_score == 6.0

    def test_load_file(self, tmp_path):
        """Test loading from a JSON file."""
        path = tmp_path / "engine.json"
        path.write_text(json.dumps({"exit_score": 4.0}), encoding="utf-8")

        assert load_parameters_file(path).exit_score == 4.0

    def test_missing_file(self, tmp_path):
        """Test a missing config file."""
        with pytest.raises(FileNotFoundError):
            load_parameters_file(tmp_path / "missing.json")

    def test_file_must_hold_object(self, tmp_path):
        """Test a JSON array is rejected."""
        path = tmp_path / "engine.json"
        path.write_text("[1, 2]", encoding="utf-8")

        with pytest.raises(ValueError, match="JSON object"):
            load_parameters_file(path)
