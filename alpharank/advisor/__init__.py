"""Advice for existing positions."""

from alpharank.advisor.trade_advisor import ADVICE_RULES, generate_trade_advice

__all__ = ["ADVICE_RULES", "generate_trade_advice"]
