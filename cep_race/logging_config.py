"""
Logging setup for the CLI and the Streamlit page.

Modules log through ``logging.getLogger(__name__)``; only the entry points
call :func:`configure_logging`. Output goes to stderr so stdout carries just
the lookup result.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

_EXTRA_FIELDS = ("source", "endpoint", "duration_ms", "status_code", "error")


class JSONFormatter(logging.Formatter):
    """Format log records as JSON for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        for attr in _EXTRA_FIELDS:
            if hasattr(record, attr):
                log_data[attr] = getattr(record, attr)
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data)


class ConsoleFormatter(logging.Formatter):
    """Human-readable format for console output."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = True) -> None:
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now().strftime("%H:%M:%S")
        level = f"{record.levelname:8}"
        if self.use_color:
            level = f"{self.COLORS.get(record.levelname, self.RESET)}{level}{self.RESET}"

        extras = [f"{attr}={getattr(record, attr)}" for attr in _EXTRA_FIELDS if hasattr(record, attr)]
        extra_str = f" [{', '.join(extras)}]" if extras else ""
        line = f"{timestamp} {level} [{record.name}] {record.getMessage()}{extra_str}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(*, debug: bool = False, json_format: bool = False) -> logging.Logger:
    """Attach one stderr handler to the ``cep_race`` logger (idempotent)."""
    logger = logging.getLogger("cep_race")
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        logger.addHandler(handler)
    for handler in logger.handlers:
        if isinstance(handler, logging.StreamHandler):
            handler.setStream(sys.stderr)
        handler.setFormatter(JSONFormatter() if json_format else ConsoleFormatter(use_color=sys.stderr.isatty()))
    return logger
