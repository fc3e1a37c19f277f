"""
Integration tests for the market scanner.
"""

import pytest

from alpharank.data_io.provider import CsvHistoryProvider, InMemoryHistoryProvider
from alpharank.models.exceptions import DataIntegrityError
from alpharank.scanner.scanner import scan_market
from tests.fixtures.candles import make_candles, write_candles_csv


pytestmark = pytest.mark.integration


class _BrokenProvider(InMemoryHistoryProvider):
    """Raises a validation error for one ticker."""

    def fetch_history(self, ticker):
        if ticker == "BROKEN":
            raise DataIntegrityError("Invalid OHLC relationship", context={"ticker": ticker})
        return super().fetch_history(ticker)


@pytest.fixture()
def provider(uptrend_history, random_walk_history, benchmark_history):
    downtrend = make_candles([300.0 - 0.5 * i for i in range(300)])
    return _BrokenProvider(
        {
            "UP": uptrend_history,
            "DOWN": downtrend,
            "RW": random_walk_history[:200],
            "EMPTY": [],
            "SPY": benchmark_history,
        }
    )


class TestScanMarket:
    """Test suite for scan_market."""

    def test_ranks_by_score(self, provider):
        """Test results are ordered by score with tickers upper-cased."""
        report = scan_market(["down", "UP", "RW"], provider)

        scores = [result.total_score for result in report.results]
        assert scores == sorted(scores, reverse=True)
        tickers = [result.ticker for result in report.results]
        assert set(tickers) == {"UP", "DOWN", "RW"}
        assert tickers.index("UP") < tickers.index("DOWN")
        assert report.benchmark_loaded is True

    def test_isolates_failures(self, provider):
        """Test provider errors are collected and empty histories skipped."""
        report = scan_market(["UP", "NOPE", "BROKEN", "EMPTY"], provider)

        assert [result.ticker for result in report.results] == ["UP"]
        assert set(report.failures) == {"NOPE", "BROKEN"}
        assert "No price history" in report.failures["NOPE"]
        assert report.skipped == ["EMPTY"]

    def test_min_score_filter(self, provider):
        """Test results below the minimum score are dropped."""
        report = scan_market(["UP", "DOWN"], provider, min_score=6.0)
        assert [result.ticker for result in report.results] == ["UP"]

    def test_missing_benchmark_is_neutral(self, provider):
        """Test an unknown benchmark leaves relative strength at 1.0."""
        report = scan_market(["UP"], provider, benchmark_ticker="QQQ")

        assert report.benchmark_loaded is False
        assert report.results[0].technical.relative_strength == 1.0
        assert report.results[0].total_score == 6.7

    def test_benchmark_feeds_relative_strength(self, provider):
        """Test the loaded benchmark drives relative strength."""
        result = scan_market(["UP"], provider).results[0]
        assert result.technical.relative_strength > 1.05

    def test_duplicates_scanned_once(self, provider):
        """Test tickers differing only in case are analyzed once."""
        report = scan_market(["UP", "up"], provider)
        assert len(report.results) == 1

    def test_classification_views(self, provider):
        """Test prime and trend views are filtered and disjoint."""
        report = scan_market(["UP", "DOWN", "RW"], provider)

        assert all(result.is_prime_setup for result in report.prime_setups)
        assert all(result.is_trend_entry for result in report.trend_entries)
        assert not set(r.ticker for r in report.prime_setups) & set(
            r.ticker for r in report.trend_entries
        )


class TestScanCsvFiles:
    """Test suite for scans reading candle files from disk."""

    @pytest.fixture()
    def csv_dir(self, tmp_path, uptrend_history, benchmark_history):
        write_candles_csv(tmp_path / "GOOD.csv", uptrend_history)
        write_candles_csv(tmp_path / "SPY.csv", benchmark_history)
        (tmp_path / "BAD.csv").write_text("", encoding="utf-8")
        write_candles_csv(tmp_path / "GAP.csv", uptrend_history[:60])
        lines = (tmp_path / "GAP.csv").read_text(encoding="utf-8").splitlines()
        lines[-1] = "," + lines[-1].split(",", 1)[1]
        (tmp_path / "GAP.csv").write_text("\n".join(lines) + "\n", encoding="utf-8")
        return tmp_path

    def test_bad_files_are_isolated(self, csv_dir):
        """Test an empty file and a blank date fail their ticker only."""
        report = scan_market(["GOOD", "BAD", "GAP"], CsvHistoryProvider(csv_dir))

        assert [result.ticker for result in report.results] == ["GOOD"]
        assert set(report.failures) == {"BAD", "GAP"}
        assert "Unreadable CSV file" in report.failures["BAD"]
        assert "Missing or invalid date" in report.failures["GAP"]
        assert report.benchmark_loaded is True
