"""
Logging configuration for vidlogd.

Only warnings reach stderr unless debug mode is on. Mutations are
recorded in a per-data-dir operations log either way.
"""

import logging
import sys
import warnings
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOGGER_NAME = "vidlogd"
OPS_LOG_MAX_BYTES = 1_000_000
OPS_LOG_BACKUPS = 3

# HTTP stack used by the metadata lookup; chatty at INFO
_LIBRARY_LOGGERS = ("httpx", "httpcore")


def configure_quiet_mode(quiet: bool = True):
    """
    Keep stderr limited to warnings and errors.

    Args:
        quiet: If False, vidlogd's own INFO messages are let through too.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if not quiet:
        logger.setLevel(logging.INFO)
        return

    warnings.filterwarnings("ignore")
    for name in _LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if logger.level == logging.NOTSET:
        logger.setLevel(logging.WARNING)


def enable_debug_mode():
    """Send everything from DEBUG up to stderr, request lines included."""
    warnings.filterwarnings("default")

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    has_stderr = any(
        isinstance(h, logging.StreamHandler) and h.stream == sys.stderr
        for h in root.handlers
    )
    if not has_stderr:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        ))
        root.addHandler(handler)

    for name in (LOGGER_NAME, *_LIBRARY_LOGGERS):
        logging.getLogger(name).setLevel(logging.DEBUG)


def configure_ops_log(log_path) -> RotatingFileHandler:
    """Attach a rotating operations log to the vidlogd logger.

    The file rotates at 1MB and keeps 3 backups. The returned handler
    should be passed to close_ops_log when the data dir changes.
    """
    log_path = Path(log_path)
    handler = RotatingFileHandler(
        str(log_path),
        maxBytes=OPS_LOG_MAX_BYTES,
        backupCount=OPS_LOG_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(logging.INFO)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))

    logger = logging.getLogger(LOGGER_NAME)
    logger.addHandler(handler)
    # Quiet mode sets WARNING; the file still wants INFO
    if logger.level == logging.NOTSET or logger.level > logging.INFO:
        logger.setLevel(logging.INFO)
    return handler


def close_ops_log(handler: Optional[logging.Handler]) -> None:
    """Detach and close a handler from configure_ops_log. None is a no-op."""
    if handler is None:
        return
    logging.getLogger(LOGGER_NAME).removeHandler(handler)
    handler.close()
