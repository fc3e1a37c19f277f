"""Multi-ticker market scanner.

Analyzes a list of tickers against one shared benchmark history. Each ticker
is processed in isolation: a ticker whose history is missing or malformed is
recorded as a failure and the scan continues with the remaining tickers.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from ..analysis.analyzer import analyze_stock
from ..config.parameters import EngineParameters
from ..data_io.provider import HistoryProvider
from ..models.core import AnalysisResult, Candle
from ..models.exceptions import DataIntegrityError, HistoryNotFoundError


logger = logging.getLogger(__name__)

DEFAULT_BENCHMARK = "SPY"
ISOLATED_ERRORS = (HistoryNotFoundError, DataIntegrityError, FileNotFoundError)


@dataclass(frozen=True)
class ScanReport:
    """Outcome of a market scan.

    Attributes:
        results: Analyses sorted by score descending, ticker ascending on ties.
        failures: Ticker to error message for tickers that could not be loaded.
        skipped: Tickers with an empty history.
        benchmark_ticker: Benchmark used for relative strength.
        benchmark_loaded: False when relative strength fell back to neutral.
    """

    results: list[AnalysisResult] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)
    skipped: list[str] = field(default_factory=list)
    benchmark_ticker: str = DEFAULT_BENCHMARK
    benchmark_loaded: bool = False

    @property
    def prime_setups(self) -> list[AnalysisResult]:
        """Results classified as prime setups."""
        return [result for result in self.results if result.is_prime_setup]

    @property
    def trend_entries(self) -> list[AnalysisResult]:
        """Results classified as trend entries."""
        return [result for result in self.results if result.is_trend_entry]


def _load_benchmark(provider: HistoryProvider, ticker: str) -> list[Candle] | None:
    try:
        benchmark = provider.fetch_history(ticker)
    except ISOLATED_ERRORS as exc:
        logger.warning(
            "Benchmark %s unavailable, relative strength will be neutral: %s", ticker, exc
        )
        return None
    if not benchmark:
        logger.warning("Benchmark %s has no bars, relative strength will be neutral", ticker)
        return None
    return benchmark


def scan_market(
    tickers: Iterable[str],
    provider: HistoryProvider,
    benchmark_ticker: str = DEFAULT_BENCHMARK,
    params: EngineParameters | None = None,
    min_score: float | None = None,
) -> ScanReport:
    """Analyze every ticker and rank the results.

    Args:
        tickers: Symbols to analyze; duplicates are scanned once.
        provider: Source of candle histories.
        benchmark_ticker: Symbol of the benchmark history (default: SPY).
        params: Engine parameters (defaults when None).
        min_score: Drop results scoring below this value when set.

    Returns:
        ScanReport with ranked results and isolated failures.
    """
    symbols = list(dict.fromkeys(ticker.upper() for ticker in tickers))
    logger.info("Starting scan of %d tickers against %s", len(symbols), benchmark_ticker)

    benchmark = _load_benchmark(provider, benchmark_ticker)
    results: list[AnalysisResult] = []
    failures: dict[str, str] = {}
    skipped: list[str] = []

    for ticker in symbols:
        try:
            history = provider.fetch_history(ticker)
        except ISOLATED_ERRORS as exc:
            logger.warning("Scan failed for %s: %s", ticker, exc)
            failures[ticker] = str(exc)
            continue

        if not history:
            logger.info("Skipping %s: empty history", ticker)
            skipped.append(ticker)
            continue

        result = analyze_stock(ticker, history, benchmark=benchmark, params=params)
        if min_score is not None and result.total_score < min_score:
            logger.debug("Filtered %s: score %.1f below %.1f", ticker, result.total_score, min_score)
            continue
        results.append(result)

    results.sort(key=lambda result: (-result.total_score, result.ticker))
    logger.info(
        "Scan complete: %d ranked, %d failed, %d skipped",
        len(results),
        len(failures),
        len(skipped),
    )
    return ScanReport(
        results=results,
        failures=failures,
        skipped=skipped,
        benchmark_ticker=benchmark_ticker,
        benchmark_loaded=benchmark is not None,
    )
