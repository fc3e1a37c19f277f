"""Arguments and helpers shared by the CLI subcommands."""

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from ..config.parameters import EngineParameters, load_parameters, load_parameters_file
from ..models.enums import OutputFormat
from .logging_setup import setup_logging


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_DATA_ERROR = 1


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Add the data, config, output and logging options to a subcommand."""
    parser.add_argument(
        "--data-dir",
        type=Path,
        required=True,
        help="Directory holding one <TICKER>.csv file per symbol",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON file with engine parameter overrides",
    )

    parser.add_argument(
        "--output-format",
        type=str,
        choices=[fmt.value for fmt in OutputFormat],
        default=OutputFormat.TEXT.value,
        help="Output format: text (human-readable) or json (machine-readable)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Optional log file path",
    )

    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Write the log file as JSON lines",
    )


def prepare(args: argparse.Namespace) -> EngineParameters | None:
    """
    Configure logging and load engine parameters for a command.

    Returns:
        The parameters, or None after reporting an invalid config file.
    """
    setup_logging(level=args.log_level, log_file=args.log_file, use_json=args.log_json)
    if args.config is None:
        return load_parameters()
    try:
        return load_parameters_file(args.config)
    except (FileNotFoundError, ValueError, ValidationError) as exc:
        print(f"Error: Invalid config {args.config}: {exc}", file=sys.stderr)
        return None


def output_format(args: argparse.Namespace) -> OutputFormat:
    return OutputFormat(args.output_format)
