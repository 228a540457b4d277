"""
Logging configuration for the cloudgen CLI.

``main.py`` calls ``setup_logging`` once; every module logs through
``logging.getLogger(__name__)``.

Console level: CLI flag, then CLOUDGEN_LOG_LEVEL, then WARNING.
CLOUDGEN_LOG_FILE adds a file log at CLOUDGEN_LOG_FILE_LEVEL (default:
the console level).

The router, the scoped store and the plugin aggregator log one line per
template, entry or plugin. They are held at INFO unless the console runs
at DEBUG, so a verbose run (or a DEBUG file log of one) shows the
per-module apply progress without every placement decision.
"""

from __future__ import annotations

import logging
import sys

_FMT_MINIMAL = "%(message)s"

_FMT_VERBOSE = "%(asctime)s %(short_name)s: %(message)s"
_DATEFMT_VERBOSE = "%H:%M:%S"

_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(short_name)s:%(lineno)d: %(message)s"
_DATEFMT_DEBUG = "%H:%M:%S"

_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d: %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

PLACEMENT_LOGGERS = (
    "cloudgen.core.generator.router",
    "cloudgen.core.generator.store",
    "cloudgen.core.generator.plugins",
)


class _ShortNameFormatter(logging.Formatter):
    """Adds ``short_name``: the logger name without the package prefix."""

    def format(self, record: logging.LogRecord) -> str:
        record.short_name = record.name.removeprefix("cloudgen.core.").removeprefix("cloudgen.")
        return super().format(record)


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure logging for one CLI invocation.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a log file.
        log_file_level: Level of the file log; defaults to ``level``.
    """
    console_level = _parse_level(level)

    if console_level <= logging.DEBUG:
        fmt, datefmt = _FMT_DEBUG, _DATEFMT_DEBUG
    elif console_level <= logging.INFO:
        fmt, datefmt = _FMT_VERBOSE, _DATEFMT_VERBOSE
    else:
        fmt, datefmt = _FMT_MINIMAL, None

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(_ShortNameFormatter(fmt, datefmt=datefmt))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)

    root_level = console_level
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        root_level = min(root_level, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)

    root.setLevel(root_level)

    placement_level = logging.NOTSET if console_level <= logging.DEBUG else logging.INFO
    for name in PLACEMENT_LOGGERS:
        logging.getLogger(name).setLevel(placement_level)


def _parse_level(level: str | None) -> int:
    """Level name to its numeric value; unknown names mean WARNING."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
