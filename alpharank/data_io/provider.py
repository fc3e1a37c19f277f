"""History providers.

A provider returns the daily candles of a ticker. The analysis core never
talks to a provider; callers such as the scanner and the CLI fetch the
history first and pass plain candle lists in.
"""

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from ..models.core import Candle
from ..models.exceptions import HistoryNotFoundError
from .loader import load_candles_csv


logger = logging.getLogger(__name__)


@runtime_checkable
class HistoryProvider(Protocol):
    """Source of daily candle histories keyed by ticker."""

    def fetch_history(self, ticker: str) -> list[Candle]:
        """Return the candles of `ticker` in ascending date order.

        Raises:
            HistoryNotFoundError: If the provider has no data for the ticker.
        """
        ...


class CsvHistoryProvider:
    """Reads `<TICKER>.csv` (or `<ticker>.csv`) files from a directory."""

    def __init__(self, data_dir: str | Path):
        self.data_dir = Path(data_dir)

    def _candidates(self, ticker: str) -> list[Path]:
        names = dict.fromkeys([f"{ticker}.csv", f"{ticker.upper()}.csv", f"{ticker.lower()}.csv"])
        return [self.data_dir / name for name in names]

    def fetch_history(self, ticker: str) -> list[Candle]:
        candidates = self._candidates(ticker)
        for path in candidates:
            if path.is_file():
                logger.debug("Loading %s history from %s", ticker, path)
                return load_candles_csv(path)
        raise HistoryNotFoundError(ticker, [str(path) for path in candidates])


class InMemoryHistoryProvider:
    """Serves histories held in a mapping, mainly for tests and notebooks."""

    def __init__(self, histories: Mapping[str, Sequence[Candle]]):
        self._histories = {ticker.upper(): list(candles) for ticker, candles in histories.items()}

    def fetch_history(self, ticker: str) -> list[Candle]:
        try:
            return list(self._histories[ticker.upper()])
        except KeyError:
            raise HistoryNotFoundError(ticker) from None
