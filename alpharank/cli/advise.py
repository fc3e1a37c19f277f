"""`alpharank advise`: action for an existing position."""

import argparse
import sys

from ..advisor.trade_advisor import generate_trade_advice
from ..analysis.analyzer import analyze_stock
from ..data_io.formatters import format_advice_json, format_advice_text
from ..data_io.provider import CsvHistoryProvider
from ..models.core import Position
from ..models.enums import OutputFormat
from ..models.exceptions import DataIntegrityError, HistoryNotFoundError
from .common import EXIT_DATA_ERROR, EXIT_OK, add_common_arguments, output_format, prepare


def configure_advise_parser(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("ticker", type=str, help="Symbol of the held position")

    parser.add_argument(
        "--entry",
        type=float,
        required=True,
        help="Average entry price of the position",
    )

    parser.add_argument(
        "--quantity",
        type=float,
        default=0.0,
        help="Number of shares held",
    )

    add_common_arguments(parser)


def run_advise_command(args: argparse.Namespace) -> int:
    params = prepare(args)
    if params is None:
        return EXIT_DATA_ERROR

    ticker = args.ticker.upper()
    try:
        history = CsvHistoryProvider(args.data_dir).fetch_history(ticker)
    except (HistoryNotFoundError, DataIntegrityError, FileNotFoundError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_DATA_ERROR
    if not history:
        print(f"Error: No candles for {ticker}", file=sys.stderr)
        return EXIT_DATA_ERROR

    position = Position(ticker=ticker, avg_entry_price=args.entry, quantity=args.quantity)
    result = analyze_stock(ticker, history, params=params)
    advice = generate_trade_advice(result, position, params)

    if output_format(args) == OutputFormat.JSON:
        print(format_advice_json(position, advice))
    else:
        print(format_advice_text(position, advice))
    return EXIT_OK
