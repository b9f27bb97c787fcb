"""Logging setup for the plugin.

stdout carries the CodeGeneratorResponse, so all log output goes to stderr.
"""

import logging
import sys
from typing import Optional

_LOG = logging.getLogger(__name__)
_STDERR_HANDLER = logging.StreamHandler(sys.stderr)

# Values accepted by the log_level plugin parameter.
LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def install(level: int = logging.INFO) -> None:
    """Configures the package logger to write to stderr."""
    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s %(message)s", "%Y%m%d %H:%M:%S"
    )
    _STDERR_HANDLER.setFormatter(formatter)

    logger = logging.getLogger("protogen_sol")
    logger.setLevel(level)
    if _STDERR_HANDLER not in logger.handlers:
        logger.addHandler(_STDERR_HANDLER)


def set_level(name: Optional[str]) -> None:
    """Set the package log level from a log_level parameter value.

    Unknown names are ignored with a warning.
    """
    if not name:
        return
    level = LOG_LEVELS.get(name.lower())
    if level is None:
        _LOG.warning("Ignoring unknown log_level %r", name)
        return
    logging.getLogger("protogen_sol").setLevel(level)
