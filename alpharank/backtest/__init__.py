"""Point-in-time backtest simulation."""

from alpharank.backtest.drawdown import compute_drawdown_curve, max_drawdown
from alpharank.backtest.simulator import run_backtest

__all__ = ["compute_drawdown_curve", "max_drawdown", "run_backtest"]
