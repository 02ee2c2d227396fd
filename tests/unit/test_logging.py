"""Unit tests for logging setup."""

from __future__ import annotations

import logging

import pytest

from faultline.core.config import FaultSettings
from faultline.core.logging import configure_logging


def _stdout_handlers(logger: logging.Logger) -> list[logging.Handler]:
    return [handler for handler in logger.handlers if handler.get_name() == "faultline-stdout"]


def test_configures_package_logger_from_settings() -> None:
    logger = configure_logging(FaultSettings(expose_details=True, log_level="warning"))

    assert logger.name == "faultline"
    assert logger.level == logging.WARNING
    assert len(_stdout_handlers(logger)) == 1
    assert logging.getLogger("faultline.core.translation").getEffectiveLevel() == logging.WARNING


def test_repeated_setup_does_not_duplicate_handlers() -> None:
    configure_logging(FaultSettings(expose_details=True, log_level="INFO"))
    logger = configure_logging(FaultSettings(expose_details=True, log_level="DEBUG"))

    assert len(_stdout_handlers(logger)) == 1
    assert logger.level == logging.DEBUG


def test_unknown_level_is_rejected() -> None:
    with pytest.raises(ValueError):
        configure_logging(FaultSettings(expose_details=True, log_level="CHATTY"))
