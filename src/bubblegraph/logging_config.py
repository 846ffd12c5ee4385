"""Logging setup for BubbleGraph.

Environment variables:
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL. Default: INFO
- LOG_FORMAT: 'text' or 'json'. Default: text
- LOG_FILE: Optional path; when set, records are also written to a rotating file

Records emitted while a layout is being driven (inside ``layout_context``)
carry a ``layout`` field, so interleaved output from the bubble and knowledge
layouts stays attributable.

Usage:
    from bubblegraph.logging_config import configure_logging
    configure_logging()  # Call once at application startup
"""

from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any, ClassVar

PACKAGE = "bubblegraph"

LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 3

# Everything a bare LogRecord carries; anything else came in through `extra=`
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
    "taskName",
}
_SOURCE_LEVELS = frozenset({logging.DEBUG, logging.ERROR, logging.CRITICAL})

_current_layout: ContextVar[str | None] = ContextVar("bubblegraph_layout", default=None)


@contextmanager
def layout_context(name: str) -> Iterator[None]:
    """Tag records logged inside the block with ``layout=name``."""
    token = _current_layout.set(name)
    try:
        yield
    finally:
        _current_layout.reset(token)


class LayoutContextFilter(logging.Filter):
    """Copies the active layout name onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        layout = _current_layout.get()
        if layout is not None and not hasattr(record, "layout"):
            record.layout = layout
        return True


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _STANDARD_ATTRS}


class JSONFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger, message, extras."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.levelno in _SOURCE_LEVELS:
            entry["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        extra = _extra_fields(record)
        if extra:
            entry["extra"] = extra
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Console formatter.

    Format: ``HH:MM:SS.mmm LEVEL [module] message key=value (file:line)``.
    The package prefix is dropped from logger names; file:line is appended
    for DEBUG and ERROR records.
    """

    COLORS: ClassVar[dict[int, str]] = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[1;31m",
    }
    RESET: ClassVar[str] = "\033[0m"

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()

    def _level(self, record: logging.LogRecord) -> str:
        padded = f"{record.levelname:8s}"
        if not self.use_colors:
            return padded
        return f"{self.COLORS.get(record.levelno, '')}{padded}{self.RESET}"

    def format(self, record: logging.LogRecord) -> str:
        clock = datetime.fromtimestamp(record.created, UTC).strftime("%H:%M:%S.%f")[:-3]
        name = record.name.removeprefix(f"{PACKAGE}.")
        line = f"{clock} {self._level(record)} [{name}] {record.getMessage()}"

        extra = _extra_fields(record)
        if extra:
            line += " " + " ".join(f"{k}={v}" for k, v in sorted(extra.items()))
        if record.levelno in _SOURCE_LEVELS:
            line += f" ({record.filename}:{record.lineno})"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def get_log_level() -> int:
    """Level named by LOG_LEVEL, INFO when unset or unknown."""
    name = os.environ.get("LOG_LEVEL", "INFO").strip().upper()
    level = logging.getLevelNamesMapping().get(name)
    return level if level is not None and level > logging.NOTSET else logging.INFO


def get_log_format() -> str:
    """'json' when LOG_FORMAT says so, otherwise 'text'."""
    return "json" if os.environ.get("LOG_FORMAT", "text").strip().lower() == "json" else "text"


def _file_handler(path: str, format_type: str) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS, encoding="utf-8"
    )
    # no ANSI escapes in files
    handler.setFormatter(JSONFormatter() if format_type == "json" else TextFormatter(False))
    return handler


def configure_logging(
    level: int | None = None,
    format_type: str | None = None,
    use_colors: bool = True,
    log_file: str | None = None,
) -> None:
    """Install handlers on the package logger and uvicorn's access log.

    Safe to call again; previous handlers are replaced.

    Args:
        level: Log level. Defaults to LOG_LEVEL.
        format_type: 'text' or 'json'. Defaults to LOG_FORMAT.
        use_colors: Colorize text output when stderr is a terminal.
        log_file: Rotating log file path. Defaults to LOG_FILE.
    """
    level = get_log_level() if level is None else level
    format_type = get_log_format() if format_type is None else format_type
    log_file = log_file or os.environ.get("LOG_FILE") or None

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(
        JSONFormatter() if format_type == "json" else TextFormatter(use_colors=use_colors)
    )
    handlers: list[logging.Handler] = [console]
    if log_file:
        handlers.append(_file_handler(log_file, format_type))
    for handler in handlers:
        handler.addFilter(LayoutContextFilter())

    package_logger = logging.getLogger(PACKAGE)
    access_logger = logging.getLogger("uvicorn.access")
    for logger, targets in ((package_logger, handlers), (access_logger, [console])):
        for old in list(logger.handlers):
            logger.removeHandler(old)
        for handler in targets:
            logger.addHandler(handler)
        logger.setLevel(level)
        logger.propagate = False

    package_logger.debug(
        "Logging configured: level=%s, format=%s, file=%s",
        logging.getLevelName(level),
        format_type,
        log_file or "-",
    )


def get_logger(name: str) -> logging.Logger:
    """Logger under the bubblegraph namespace."""
    if not name.startswith(PACKAGE):
        name = f"{PACKAGE}.{name}"
    return logging.getLogger(name)
