"""
Logging for the blink CLI.

Every module logs through ``logging.getLogger(__name__)``, so all of
Blink's records flow through the ``blink`` logger. ``configure_logging``
is called once by main.py and attaches handlers to that logger only;
loggers outside the package keep Python's defaults.

Console verbosity, first match wins:

    --debug           DEBUG    12:00:00 DEBUG blink.core.services.extract:140 message
    --verbose         INFO     [Blink] 12:00:00 message
    --quiet           ERROR    [Blink] message
    BLINK_LOG_LEVEL   any level name
    (default)         WARNING  [Blink] message

``BLINK_LOG_FILE`` appends every run to a log file as well, at DEBUG
unless ``BLINK_LOG_FILE_LEVEL`` names another level. Install and
uninstall runs are bracketed by ``=====`` lines there, so a file shared
by many runs stays readable.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path

PACKAGE_LOGGER = "blink"

_FMT_CONSOLE = "[Blink] %(message)s"
_FMT_CONSOLE_TIMED = "[Blink] %(asctime)s %(message)s"
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d %(message)s"
_FMT_FILE = "%(asctime)s pid=%(process)d %(levelname)-5s %(name)s %(message)s"

_DATEFMT_TIME = "%H:%M:%S"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class LoggingSetup:
    """What ``configure_logging`` applied."""

    level: str
    log_file: Path | None = None
    file_level: str | None = None


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    debug: bool = False,
    log_file: str | Path | None = None,
) -> LoggingSetup:
    """Set up the ``blink`` logger for this invocation.

    Safe to call more than once; handlers from an earlier call are
    closed and replaced.

    Args:
        verbose: ``--verbose`` flag.
        quiet: ``--quiet`` flag.
        debug: ``--debug`` flag. Beats the other two.
        log_file: Log file path. Defaults to ``$BLINK_LOG_FILE``.

    Returns:
        The resolved console level and file settings.
    """
    level = _resolve_level(verbose=verbose, quiet=quiet, debug=debug)
    console_level = _parse_level(level)

    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(_console_formatter(console_level))
    logger.addHandler(console)
    effective = console_level

    path = log_file or os.environ.get("BLINK_LOG_FILE")
    file_path: Path | None = None
    file_level_name: str | None = None
    if path:
        file_path = Path(path)
        file_level_name = (os.environ.get("BLINK_LOG_FILE_LEVEL") or "DEBUG").upper()
        file_level = _parse_level(file_level_name)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        fh = logging.FileHandler(file_path, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        logger.addHandler(fh)
        effective = min(effective, file_level)

    logger.setLevel(effective)
    return LoggingSetup(level=level, log_file=file_path, file_level=file_level_name)


def _resolve_level(*, verbose: bool, quiet: bool, debug: bool) -> str:
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return (os.environ.get("BLINK_LOG_LEVEL") or "WARNING").upper()


def _console_formatter(level: int) -> logging.Formatter:
    if level <= logging.DEBUG:
        return logging.Formatter(_FMT_DEBUG, datefmt=_DATEFMT_TIME)
    if level <= logging.INFO:
        return logging.Formatter(_FMT_CONSOLE_TIMED, datefmt=_DATEFMT_TIME)
    return logging.Formatter(_FMT_CONSOLE)


def _parse_level(level: str | None) -> int:
    """Level name to its numeric value; unknown names mean WARNING."""
    if not level:
        return logging.WARNING
    numeric = logging.getLevelName(level.upper())
    return numeric if isinstance(numeric, int) else logging.WARNING
