"""
Logging configuration — one setup call per process.

Every module does ``logger = logging.getLogger(__name__)`` and inherits
what is configured here. Level precedence:

    --debug / --verbose / --quiet  >  PROTOPKG_LOG_LEVEL  >  WARNING

A log file is written when PROTOPKG_LOG_FILE is set; its level comes
from PROTOPKG_LOG_FILE_LEVEL and defaults to the console level.
"""

from __future__ import annotations

import logging
import os
import sys

ENV_LEVEL = "PROTOPKG_LOG_LEVEL"
ENV_FILE = "PROTOPKG_LOG_FILE"
ENV_FILE_LEVEL = "PROTOPKG_LOG_FILE_LEVEL"

# Console: bare messages at WARNING and above, more context below.
_CONSOLE_FORMATS: dict[int, tuple[str, str | None]] = {
    logging.DEBUG: ("%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s", "%H:%M:%S"),
    logging.INFO: ("%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
    logging.WARNING: ("%(message)s", None),
}

_FILE_FORMAT = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def level_from_flags(debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """Pick a level name from CLI flags, falling back to the environment."""
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
    """Configure the root logger.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a log file.
        log_file_level: Optional separate level for the log file.
    """
    console_level = _parse_level(level)

    root = logging.getLogger()
    root.handlers.clear()

    fmt, datefmt = _console_format(console_level)
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    root.addHandler(console)

    effective = console_level
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        effective = min(effective, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
        root.addHandler(fh)

    root.setLevel(effective)

    # Handler errors are swallowed, not printed
    logging.raiseExceptions = False


def _console_format(level: int) -> tuple[str, str | None]:
    if level <= logging.DEBUG:
        return _CONSOLE_FORMATS[logging.DEBUG]
    if level <= logging.INFO:
        return _CONSOLE_FORMATS[logging.INFO]
    return _CONSOLE_FORMATS[logging.WARNING]


def _parse_level(level: str | None) -> int:
    """Convert a level name to its numeric constant (WARNING if unknown)."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
