"""`alpharank analyze`: full analysis of one ticker."""

import argparse
import logging
import sys

from ..analysis.analyzer import analyze_stock
from ..data_io.formatters import format_analysis_json, format_analysis_text
from ..data_io.provider import CsvHistoryProvider
from ..models.enums import OutputFormat
from ..models.exceptions import DataIntegrityError, HistoryNotFoundError
from .common import EXIT_DATA_ERROR, EXIT_OK, add_common_arguments, output_format, prepare


logger = logging.getLogger(__name__)


def configure_analyze_parser(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("ticker", type=str, help="Symbol to analyze")

    parser.add_argument(
        "--benchmark",
        type=str,
        default="SPY",
        help="Benchmark symbol for relative strength (default: SPY)",
    )

    parser.add_argument(
        "--official-sma",
        type=float,
        default=None,
        help="Externally sourced SMA150 to use instead of the computed one",
    )

    parser.add_argument(
        "--market-cap",
        type=float,
        default=None,
        help="Market capitalization to show in the report",
    )

    parser.add_argument(
        "--include-history",
        action="store_true",
        help="Include candles and the equity curve in JSON output",
    )

    add_common_arguments(parser)


def run_analyze_command(args: argparse.Namespace) -> int:
    params = prepare(args)
    if params is None:
        return EXIT_DATA_ERROR

    provider = CsvHistoryProvider(args.data_dir)
    ticker = args.ticker.upper()
    try:
        history = provider.fetch_history(ticker)
    except (HistoryNotFoundError, DataIntegrityError, FileNotFoundError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_DATA_ERROR
    if not history:
        print(f"Error: No candles for {ticker}", file=sys.stderr)
        return EXIT_DATA_ERROR

    try:
        benchmark = provider.fetch_history(args.benchmark)
    except (HistoryNotFoundError, DataIntegrityError) as exc:
        logger.warning("Benchmark unavailable, relative strength will be neutral: %s", exc)
        benchmark = None

    result = analyze_stock(
        ticker,
        history,
        official_sma150=args.official_sma,
        market_cap=args.market_cap,
        benchmark=benchmark,
        params=params,
    )

    if output_format(args) == OutputFormat.JSON:
        print(format_analysis_json(result, include_history=args.include_history))
    else:
        print(format_analysis_text(result))
    return EXIT_OK
