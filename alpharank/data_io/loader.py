"""CSV candle loading and validation.

Reads daily OHLCV data with pandas, normalizes column names, orders bars
chronologically, removes duplicate dates and validates every bar before
converting the frame to Candle records.

Pipeline stages:
1. Read -> Load raw CSV data
2. Normalize -> Lowercase column names, map `timestamp` to `date`
3. Sort -> Chronological ordering by date
4. Deduplicate -> Remove duplicate dates (keep-last)
5. Validate -> Dates present, prices positive and finite, OHLC consistent, volume >= 0
6. Convert -> list[Candle]
"""

import logging
from pathlib import Path

import numpy as np
import pandas as pd

from ..models.core import Candle
from ..models.exceptions import DataIntegrityError


logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["date", "open", "high", "low", "close", "volume"]
PRICE_COLUMNS = ["open", "high", "low", "close"]
COLUMN_ALIASES = {"timestamp": "date"}


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    renamed = {column: str(column).strip().lower() for column in df.columns}
    df = df.rename(columns=renamed)
    aliases = {
        alias: target
        for alias, target in COLUMN_ALIASES.items()
        if alias in df.columns and target not in df.columns
    }
    return df.rename(columns=aliases)


def _validate_required_columns(df: pd.DataFrame) -> None:
    missing_columns = set(REQUIRED_COLUMNS) - set(df.columns)
    if missing_columns:
        raise DataIntegrityError(
            "Missing required columns",
            context={"missing": ", ".join(sorted(missing_columns))},
        )


def _first_bad_row(df: pd.DataFrame, mask: pd.Series) -> dict:
    row = df.loc[mask].iloc[0]
    return {"date": row["date"].date().isoformat(), **{c: row[c] for c in PRICE_COLUMNS}}


def _validate_values(df: pd.DataFrame) -> None:
    prices = df[PRICE_COLUMNS].to_numpy(dtype=np.float64)
    bad_price = ~(np.isfinite(prices) & (prices > 0)).all(axis=1)
    if bad_price.any():
        raise DataIntegrityError(
            "Non-positive or non-finite price",
            context=_first_bad_row(df, pd.Series(bad_price, index=df.index)),
        )

    inconsistent = (
        (df["high"] < df["low"])
        | (df["high"] < df[["open", "close"]].max(axis=1))
        | (df["low"] > df[["open", "close"]].min(axis=1))
    )
    if inconsistent.any():
        raise DataIntegrityError("Invalid OHLC relationship", context=_first_bad_row(df, inconsistent))

    volume = df["volume"].to_numpy(dtype=np.float64)
    bad_volume = ~np.isfinite(volume) | (volume < 0)
    if bad_volume.any():
        row = df.loc[pd.Series(bad_volume, index=df.index)].iloc[0]
        raise DataIntegrityError(
            "Negative or missing volume",
            context={"date": row["date"].date().isoformat(), "volume": row["volume"]},
        )


def candles_from_frame(df: pd.DataFrame) -> list[Candle]:
    """Validate an in-memory OHLCV DataFrame and convert it to candles.

    Args:
        df: DataFrame with date, open, high, low, close, volume columns and
            an optional vwap column (case-insensitive).

    Returns:
        list[Candle]: Candles in ascending date order, unique by date.

    Raises:
        DataIntegrityError: If columns are missing, dates are missing or unparseable
            or any bar fails validation.

    Examples:
        >>> frame = pd.DataFrame({
        ...     "Date": ["2025-01-03", "2025-01-02"],
        ...     "Open": [101.0, 100.0], "High": [102.0, 101.0],
        ...     "Low": [100.0, 99.0], "Close": [101.5, 100.5],
        ...     "Volume": [1000, 1200],
        ... })
        >>> [c.date.isoformat() for c in candles_from_frame(frame)]
        ['2025-01-02', '2025-01-03']
    """
    df = _normalize_columns(df)
    _validate_required_columns(df)

    df = df.copy()
    try:
        df["date"] = pd.to_datetime(df["date"])
    except (ValueError, TypeError) as exc:
        raise DataIntegrityError("Unparseable date column", context={"error": str(exc)}) from exc
    missing_dates = df["date"].isna().to_numpy()
    if missing_dates.any():
        raise DataIntegrityError(
            "Missing or invalid date",
            context={"row": int(np.flatnonzero(missing_dates)[0]), "count": int(missing_dates.sum())},
        )
    if df["date"].dt.tz is not None:
        df["date"] = df["date"].dt.tz_localize(None)
    df["date"] = df["date"].dt.normalize()

    numeric_columns = [*PRICE_COLUMNS, "volume"] + (["vwap"] if "vwap" in df.columns else [])
    for column in numeric_columns:
        df[column] = pd.to_numeric(df[column], errors="coerce")

    rows_before = len(df)
    df = df.sort_values("date", kind="stable")
    df = df.drop_duplicates(subset="date", keep="last").reset_index(drop=True)
    duplicates_removed = rows_before - len(df)
    if duplicates_removed:
        logger.debug("Removed %d duplicate dates", duplicates_removed)

    _validate_values(df)

    has_vwap = "vwap" in df.columns
    candles = [
        Candle(
            date=row.date.date(),
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
            volume=float(row.volume),
            vwap=float(row.vwap) if has_vwap and pd.notna(row.vwap) else None,
        )
        for row in df.itertuples(index=False)
    ]
    logger.debug("Converted %d rows to candles", len(candles))
    return candles


def load_candles_csv(path: str | Path) -> list[Candle]:
    """Load and validate daily candles from a CSV file.

    Args:
        path: CSV file with a header row.

    Returns:
        list[Candle]: Candles in ascending date order, unique by date.

    Raises:
        FileNotFoundError: If the file does not exist.
        DataIntegrityError: If the file cannot be parsed or the data fails
            validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Candle file not found: {path}")

    try:
        df = pd.read_csv(path)
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise DataIntegrityError(
            "Unreadable CSV file", context={"file": str(path), "error": str(exc)}
        ) from exc
    logger.debug("Read %d rows from %s", len(df), path)
    try:
        return candles_from_frame(df)
    except DataIntegrityError as exc:
        exc.context.setdefault("file", str(path))
        raise
