"""
LPG Core Logging and Monitoring - Console and Structured Logging

This module provides the log formatters and the logging setup used by
the command line interface, plus a timing helper for build steps.
"""

from __future__ import annotations
import sys
import json
import time
import logging
from typing import Optional, Iterator
from datetime import datetime
from contextlib import contextmanager


class StructuredFormatter(logging.Formatter):
    """One JSON object per record; build extras become top-level keys"""

    EXTRA_FIELDS = ("language", "duration_ms")

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in self.EXTRA_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                log_data[key] = value

        if record.exc_info and record.exc_info[0] is not None:
            log_data["error"] = f"{record.exc_info[0].__name__}: {record.exc_info[1]}"
            log_data["traceback"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """Human-readable lines, tagged with the language being built"""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        level = f"{record.levelname:8}"
        if self.use_colors:
            level = f"{self.LEVEL_COLORS.get(record.levelname, '')}{level}{self.RESET}"

        language = getattr(record, "language", None)
        prefix = f"[{language}] " if language else ""
        message = f"{timestamp} {level} {record.name.split('.')[-1]}: {prefix}{record.getMessage()}"

        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


def setup_logging(
    verbose: bool = False,
    debug: bool = False,
    json_logs: bool = False,
    stream=None
) -> logging.Handler:
    """Install a single handler on the root logger"""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter() if json_logs else ConsoleFormatter())

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    # urllib3 logs every connection at DEBUG
    logging.getLogger("urllib3").setLevel(max(level, logging.INFO))
    return handler


@contextmanager
def timed(logger: logging.Logger, operation: str, language: Optional[str] = None) -> Iterator[None]:
    """Log how long a block took"""
    start = time.perf_counter()
    try:
        yield
    finally:
        duration_ms = (time.perf_counter() - start) * 1000
        extra = {"duration_ms": round(duration_ms, 2)}
        if language:
            extra["language"] = language
        logger.info(f"{operation} took {duration_ms:.0f} ms", extra=extra)
