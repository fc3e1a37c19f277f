"""`alpharank scan`: rank many tickers by composite score."""

import argparse
import logging
from dataclasses import replace

from ..data_io.formatters import format_scan_json, format_scan_text
from ..data_io.provider import CsvHistoryProvider
from ..models.enums import OutputFormat
from ..scanner.scanner import scan_market
from .common import EXIT_DATA_ERROR, EXIT_OK, add_common_arguments, output_format, prepare


logger = logging.getLogger(__name__)


def configure_scan_parser(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("tickers", type=str, nargs="+", help="Symbols to scan")

    parser.add_argument(
        "--benchmark",
        type=str,
        default="SPY",
        help="Benchmark symbol for relative strength (default: SPY)",
    )

    parser.add_argument(
        "--min-score",
        type=float,
        default=None,
        help="Only report tickers scoring at least this value",
    )

    parser.add_argument(
        "--only",
        type=str,
        choices=["all", "prime", "trend"],
        default="all",
        help="Restrict the ranking to prime setups or trend entries",
    )

    add_common_arguments(parser)


def run_scan_command(args: argparse.Namespace) -> int:
    params = prepare(args)
    if params is None:
        return EXIT_DATA_ERROR

    report = scan_market(
        args.tickers,
        CsvHistoryProvider(args.data_dir),
        benchmark_ticker=args.benchmark,
        params=params,
        min_score=args.min_score,
    )
    if args.only == "prime":
        report = replace(report, results=report.prime_setups)
    elif args.only == "trend":
        report = replace(report, results=report.trend_entries)

    if output_format(args) == OutputFormat.JSON:
        print(format_scan_json(report))
    else:
        print(format_scan_text(report))

    if not report.results and report.failures and not report.skipped:
        logger.error("No ticker could be loaded")
        return EXIT_DATA_ERROR
    return EXIT_OK
