"""Logging setup for services built on faultline.

Failure diagnostics (stack traces and cause chains) are written to these
handlers only; translated responses never carry them.
"""

from __future__ import annotations

import logging
import sys

from faultline.core.config import FaultSettings

PACKAGE_LOGGER = "faultline"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_HANDLER_NAME = "faultline-stdout"


def configure_logging(settings: FaultSettings) -> logging.Logger:
    """Route ``faultline.*`` records to stdout at ``settings.log_level``.

    Calling again replaces the stdout handler instead of adding a second one.
    """
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"FAULTLINE_LOG_LEVEL must be a logging level name, got {settings.log_level!r}")

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger = logging.getLogger(PACKAGE_LOGGER)
    for existing in [h for h in logger.handlers if h.get_name() == _HANDLER_NAME]:
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger
