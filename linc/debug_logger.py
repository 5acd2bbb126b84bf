# SPDX-License-Identifier: MIT
"""Debug log setup for linc.

The terminal belongs to the TUI, so log records go to
``<state dir>/debug.log`` instead of stderr. Verbosity comes from the
LINC_DEBUG env var:

    unset / 0  -> WARNING
    1          -> INFO
    2          -> DEBUG
    or a level name such as "debug"
"""
import logging
import os
from typing import Optional

from linc.paths import PathResolver

LOGGER_NAME = "linc"
DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}
_NUMERIC_LEVELS = {"0": logging.WARNING, "1": logging.INFO, "2": logging.DEBUG}

_handler: Optional[logging.Handler] = None


def _resolve_level(value: Optional[str]) -> int:
    """Map a LINC_DEBUG value to a logging level (WARNING when unknown)."""
    if not value:
        return logging.WARNING
    value = value.strip()
    if value in _NUMERIC_LEVELS:
        return _NUMERIC_LEVELS[value]
    return LEVELS.get(value.upper(), logging.WARNING)


def get_logger() -> logging.Logger:
    """Return the package logger, attaching the file handler on first use."""
    global _handler
    logger = logging.getLogger(LOGGER_NAME)
    if _handler is not None:
        return logger

    level = _resolve_level(os.environ.get("LINC_DEBUG"))
    logger.setLevel(level)
    logger.propagate = False

    log_dir = PathResolver.state_dir()
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_dir / "debug.log", encoding="utf-8")
    except OSError:
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
    logger.addHandler(handler)
    _handler = handler
    return logger


def reset_logger() -> None:
    """Detach and close the file handler so the next get_logger() re-reads env."""
    global _handler
    if _handler is None:
        return
    logger = logging.getLogger(LOGGER_NAME)
    logger.removeHandler(_handler)
    _handler.close()
    _handler = None
