"""Logging setup for the REST client."""

import logging
import sys
from pathlib import Path
from typing import Optional

from exactrest.utils.config import debug_enabled, log_file as configured_log_file

LOGGER_NAME = "exactrest"

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logger(
    name: str = LOGGER_NAME,
    level: Optional[int] = None,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Attach handlers to the package logger once and return it.

    Args:
        name: Logger name.
        level: Logging level. None means DEBUG when EXACT_DEBUG is on (request
            and response dumps are logged at DEBUG), INFO otherwise.
        log_file: Extra file to log to. None falls back to EXACT_LOG_FILE;
            stderr is always used.

    Returns:
        Configured logger. Later calls return it unchanged.
    """
    log = logging.getLogger(name)
    if log.handlers:
        return log

    if level is None:
        level = logging.DEBUG if debug_enabled() else logging.INFO
    log.setLevel(level)
    fmt = logging.Formatter(_FORMAT, datefmt=_DATEFMT)

    stream = logging.StreamHandler(sys.stderr)
    stream.setFormatter(fmt)
    log.addHandler(stream)

    path = log_file or configured_log_file()
    if path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(path, encoding="utf-8")
        fh.setFormatter(fmt)
        log.addHandler(fh)

    return log


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Return the package logger. Handlers are only attached by setup_logger."""
    return logging.getLogger(name)
