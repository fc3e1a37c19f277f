"""Candle loading, history providers and output formatting."""
