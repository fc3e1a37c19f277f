"""Market scanning across many tickers."""

from alpharank.scanner.scanner import ScanReport, scan_market

__all__ = ["ScanReport", "scan_market"]
