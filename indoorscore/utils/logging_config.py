"""
Logging setup for the indoorscore command line.

Library modules only create loggers with ``logging.getLogger(__name__)``;
handlers are installed by the application (the CLI callback) through
setup_logging(). Analysis code attaches its context as ``extra``:

    logger.warning("Union failed", extra={"building_id": "way/1", "level": 0})

Both formatters render the building_id, level and feature_id extras.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ..core.config import Settings, settings

CONTEXT_KEYS = ("building_id", "level", "feature_id")


def record_context(record: logging.LogRecord) -> dict:
    """Context extras present on a record, in CONTEXT_KEYS order."""
    return {key: getattr(record, key) for key in CONTEXT_KEYS if hasattr(record, key)}


class ConsoleFormatter(logging.Formatter):
    """One line per record, context appended in brackets, colored on a tty."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True):
        self.use_colors = use_colors and sys.stderr.isatty()
        super().__init__(
            fmt="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = record_context(record)
        if context:
            line += " [" + ", ".join(f"{k}={v}" for k, v in context.items()) + "]"
        if self.use_colors:
            return f"{self.COLORS.get(record.levelname, '')}{line}{self.RESET}"
        return line


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for log files."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "severity": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **record_context(record),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(
    level: Optional[str] = None,
    log_to_file: bool = False,
    log_file: Optional[str] = None,
    config: Optional[Settings] = None,
) -> None:
    """
    Install the console handler (and optionally a file handler) on the root logger.

    Args:
        level: Log level name, case-insensitive. Defaults to config.log_level.
        log_to_file: Also write JSON lines to a file
        log_file: File path, default <config.log_dir>/indoorscore_YYYYMMDD.log
        config: Settings to read defaults from
    """
    config = config or settings
    numeric = getattr(logging, (level or config.log_level).upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(numeric)
    root.handlers.clear()

    # stderr keeps --json output on stdout parseable
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(ConsoleFormatter())
    console.setLevel(numeric)
    root.addHandler(console)

    if log_to_file:
        if log_file is None:
            log_dir = Path(config.log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)
            path = log_dir / f"indoorscore_{datetime.now().strftime('%Y%m%d')}.log"
        else:
            path = Path(log_file)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(JsonFormatter())
        file_handler.setLevel(logging.DEBUG)
        root.addHandler(file_handler)

    logging.getLogger("shapely").setLevel(logging.WARNING)
