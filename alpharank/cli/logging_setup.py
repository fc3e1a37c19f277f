"""
Logging configuration for the alpharank commands.

Console output goes to stderr so that reports printed on stdout stay
machine-readable. Interactive terminals get a Rich handler; pipes and CI
get plain `[time] LEVEL - logger - message` lines. A log file, when
requested, receives either the same text lines or one JSON object per
record.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler


CONSOLE_FORMAT = "[%(asctime)s] %(levelname)s - %(name)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class JSONFormatter(logging.Formatter):
    """
    Render each record as a single JSON object.

    Keys: timestamp (UTC, ISO 8601 with a trailing Z), level, logger,
    message, and exception when the record carries exc_info.
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload = {
            "timestamp": created.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def _console_handler() -> logging.Handler:
    if sys.stderr.isatty():
        handler: logging.Handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s", datefmt=DATE_FORMAT))
        return handler

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _file_handler(log_file: Path, use_json: bool) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    if use_json:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    use_json: bool = False,
) -> None:
    """
    Configure the root logger for an alpharank command.

    Existing root handlers are replaced, so repeated calls do not duplicate
    output. Unknown level names fall back to INFO.

    Args:
        level: Logging level name ("DEBUG", "INFO", "WARNING", "ERROR").
        log_file: Optional log file; parent directories are created.
        use_json: Write the log file as JSON lines (default False).

    Examples:
        >>> from pathlib import Path
        >>> setup_logging(level="DEBUG", log_file=Path("logs/scan.log"))
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handlers = [_console_handler()]
    if log_file:
        handlers.append(_file_handler(Path(log_file), use_json))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(numeric_level)
    for handler in handlers:
        handler.setLevel(numeric_level)
        root_logger.addHandler(handler)

    root_logger.debug(
        "Logging configured: level=%s, file=%s, json=%s", level, log_file, use_json
    )
