"""
Logging configuration — one setup shared by every CLI entry point.

Every module that does ``logger = logging.getLogger(__name__)`` inherits
this config. Levels are resolved in precedence order:

    --debug / --verbose / --quiet  >  RESTBASE_LOG_LEVEL  >  WARNING

A log file is added when RESTBASE_LOG_FILE is set; its level comes from
RESTBASE_LOG_FILE_LEVEL and defaults to the console level.
"""

from __future__ import annotations

import logging
import os
import sys

ENV_LEVEL = "RESTBASE_LOG_LEVEL"
ENV_FILE = "RESTBASE_LOG_FILE"
ENV_FILE_LEVEL = "RESTBASE_LOG_FILE_LEVEL"

# Console formats by verbosity
_FMT_QUIET = "%(message)s"
_FMT_INFO = "%(asctime)s [%(name)s] %(message)s"
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(threadName)s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_CONSOLE = "%H:%M:%S"

_FMT_FILE = "%(asctime)s %(levelname)-5s %(threadName)s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"


def resolve_level(debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """Pick the console level from CLI flags, falling back to the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get(ENV_LEVEL, "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure the root logger for the whole process.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path of a log file (always full detail).
        log_file_level: Level for the log file; defaults to ``level``.
    """
    numeric_level = _parse_level(level)

    if numeric_level <= logging.DEBUG:
        fmt, datefmt = _FMT_DEBUG, _DATEFMT_CONSOLE
    elif numeric_level <= logging.INFO:
        fmt, datefmt = _FMT_INFO, _DATEFMT_CONSOLE
    else:
        fmt, datefmt = _FMT_QUIET, None

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    effective_level = numeric_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)

    root.setLevel(effective_level)
    logging.raiseExceptions = False


def setup_logging_from_env(
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
) -> None:
    """``setup_logging`` with flags plus the RESTBASE_* environment."""
    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(ENV_FILE),
        log_file_level=os.environ.get(ENV_FILE_LEVEL),
    )


def _parse_level(level: str | None) -> int:
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
