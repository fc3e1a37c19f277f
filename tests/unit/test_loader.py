"""
Unit tests for CSV candle loading and validation.
"""

import textwrap
from datetime import date

import pandas as pd
import pytest

from alpharank.data_io.loader import candles_from_frame, load_candles_csv
from alpharank.data_io.provider import CsvHistoryProvider, HistoryProvider, InMemoryHistoryProvider
from alpharank.models.exceptions import DataIntegrityError, HistoryNotFoundError
from tests.fixtures.candles import make_candles


pytestmark = pytest.mark.unit


def _write(tmp_path, body, name="AAA.csv"):
    path = tmp_path / name
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


class TestLoadCandlesCsv:
    """Test suite for load_candles_csv."""

    def test_sorts_and_keeps_last_duplicate(self, tmp_path):
        """Test bars are sorted by date and the last duplicate wins."""
        path = _write(
            tmp_path,
            """
            date,open,high,low,close,volume
            2025-01-03,11,12,10,11.5,200
            2025-01-02,10,11,9,10.5,100
            2025-01-03,11,13,10,12.5,300
            """,
        )

        candles = load_candles_csv(path)

        assert [c.date for c in candles] == [date(2025, 1, 2), date(2025, 1, 3)]
        assert candles[1].close == 12.5
        assert candles[1].volume == 300.0
        assert candles[0].vwap is None

    def test_case_insensitive_columns_and_timestamp_alias(self, tmp_path):
        """Test capitalised headers, the timestamp alias and vwap are accepted."""
        path = _write(
            tmp_path,
            """
            Timestamp,Open,High,Low,Close,Volume,VWAP
            2025-01-02,10,11,9,10.5,100,10.2
            """,
        )

        candle = load_candles_csv(path)[0]

        assert candle.date == date(2025, 1, 2)
        assert candle.vwap == 10.2

    def test_missing_column(self, tmp_path):
        """Test a missing volume column is reported with the file name."""
        path = _write(
            tmp_path,
            """
            date,open,high,low,close
            2025-01-02,10,11,9,10.5
            """,
        )

        with pytest.raises(DataIntegrityError, match="Missing required columns") as exc_info:
            load_candles_csv(path)
        assert exc_info.value.context["missing"] == "volume"
        assert exc_info.value.context["file"] == str(path)

    def test_high_below_low(self, tmp_path):
        """Test an inverted bar fails OHLC validation."""
        path = _write(
            tmp_path,
            """
            date,open,high,low,close,volume
            2025-01-02,10,9,11,10,100
            """,
        )

        with pytest.raises(DataIntegrityError, match="Invalid OHLC relationship"):
            load_candles_csv(path)

    def test_non_positive_price(self, tmp_path):
        """Test a zero price fails validation."""
        path = _write(
            tmp_path,
            """
            date,open,high,low,close,volume
            2025-01-02,0,11,9,10,100
            """,
        )

        with pytest.raises(DataIntegrityError, match="Non-positive"):
            load_candles_csv(path)

    def test_negative_volume(self, tmp_path):
        """Test a negative volume fails validation."""
        path = _write(
            tmp_path,
            """
            date,open,high,low,close,volume
            2025-01-02,10,11,9,10,-5
            """,
        )

        with pytest.raises(DataIntegrityError, match="volume"):
            load_candles_csv(path)

    def test_missing_file(self, tmp_path):
        """Test a missing path raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_candles_csv(tmp_path / "missing.csv")

    def test_blank_date(self, tmp_path):
        """Test a row with an empty date cell is rejected."""
        path = _write(
            tmp_path,
            """
            date,open,high,low,close,volume
            2025-01-02,10,11,9,10.5,100
            ,11,12,10,11.5,200
            """,
        )

        with pytest.raises(DataIntegrityError, match="Missing or invalid date") as exc_info:
            load_candles_csv(path)
        assert exc_info.value.context["row"] == 1
        assert exc_info.value.context["file"] == str(path)

    def test_empty_file(self, tmp_path):
        """Test a zero-byte file is reported as unreadable."""
        path = tmp_path / "EMPTY.csv"
        path.write_text("", encoding="utf-8")

        with pytest.raises(DataIntegrityError, match="Unreadable CSV file") as exc_info:
            load_candles_csv(path)
        assert exc_info.value.context["file"] == str(path)

    def test_binary_file(self, tmp_path):
        """Test a non-UTF-8 file is reported as unreadable."""
        path = tmp_path / "BIN.csv"
        path.write_bytes(b"date,open\n\xff\xfe\xfa,1\n")

        with pytest.raises(DataIntegrityError, match="Unreadable CSV file"):
            load_candles_csv(path)


class TestCandlesFromFrame:
    """Test suite for candles_from_frame."""

    def test_converts_frame(self):
        """Test a datetime-typed frame converts to float candles."""
        frame = pd.DataFrame(
            {
                "date": pd.to_datetime(["2025-01-02", "2025-01-03"]),
                "open": [10.0, 11.0],
                "high": [11.0, 12.0],
                "low": [9.0, 10.0],
                "close": [10.5, 11.5],
                "volume": [100, 200],
            }
        )

        candles = candles_from_frame(frame)

        assert len(candles) == 2
        assert isinstance(candles[0].close, float)
        assert candles[1].date == date(2025, 1, 3)

    def test_unparseable_dates(self):
        """Test a non-date string is rejected."""
        frame = pd.DataFrame(
            {"date": ["not a date"], "open": [1], "high": [1], "low": [1], "close": [1], "volume": [1]}
        )

        with pytest.raises(DataIntegrityError, match="date"):
            candles_from_frame(frame)


class TestProviders:
    """Test suite for history providers."""

    def test_csv_provider_resolves_case(self, tmp_path):
        """Test an upper-case ticker finds a lower-case file."""
        _write(
            tmp_path,
            """
            date,open,high,low,close,volume
            2025-01-02,10,11,9,10.5,100
            """,
            name="spy.csv",
        )
        provider = CsvHistoryProvider(tmp_path)

        assert isinstance(provider, HistoryProvider)
        assert len(provider.fetch_history("SPY")) == 1

    def test_csv_provider_missing_ticker(self, tmp_path):
        """Test an unknown ticker lists the searched paths."""
        with pytest.raises(HistoryNotFoundError) as exc_info:
            CsvHistoryProvider(tmp_path).fetch_history("NOPE")

        assert exc_info.value.ticker == "NOPE"
        assert "NOPE.csv" in str(exc_info.value)

    def test_in_memory_provider(self):
        """Test lookups are case-insensitive and unknown tickers raise."""
        candles = make_candles([1.0, 2.0])
        provider = InMemoryHistoryProvider({"abc": candles})

        assert provider.fetch_history("ABC") == candles
        with pytest.raises(HistoryNotFoundError):
            provider.fetch_history("XYZ")
