import argparse
import sys
from typing import Optional

from .advise import configure_advise_parser, run_advise_command
from .analyze import configure_analyze_parser, run_analyze_command
from .scan import configure_scan_parser, run_scan_command


def main(args: Optional[list[str]] = None) -> int:
    """
    Main entry point for the 'alpharank' CLI.
    """
    parser = argparse.ArgumentParser(
        description="AlphaRank: technical scoring, setup detection and backtesting for stocks"
    )
    subparsers = parser.add_subparsers(dest="command", required=True, help="Subcommands")

    # -------------------------------------------------------------------------
    # Subcommand: analyze
    # -------------------------------------------------------------------------
    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze one ticker",
        description="Score one ticker, classify its setup and backtest the scoring strategy.",
    )
    configure_analyze_parser(analyze_parser)

    # -------------------------------------------------------------------------
    # Subcommand: scan
    # -------------------------------------------------------------------------
    scan_parser = subparsers.add_parser(
        "scan",
        help="Rank many tickers",
        description="Analyze a list of tickers against one benchmark and rank them by score.",
    )
    configure_scan_parser(scan_parser)

    # -------------------------------------------------------------------------
    # Subcommand: advise
    # -------------------------------------------------------------------------
    advise_parser = subparsers.add_parser(
        "advise",
        help="Advise on an existing position",
        description="Suggest an action and refreshed stop/target for a held position.",
    )
    configure_advise_parser(advise_parser)

    # -------------------------------------------------------------------------
    # Parse & Execute
    # -------------------------------------------------------------------------
    parsed_args = parser.parse_args(args)

    if parsed_args.command == "analyze":
        return run_analyze_command(parsed_args)
    if parsed_args.command == "scan":
        return run_scan_command(parsed_args)
    if parsed_args.command == "advise":
        return run_advise_command(parsed_args)

    return 0


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
