from __future__ import annotations

import logging

import pytest

from bloodlink.utils.logger import configure_logging, get_logger


@pytest.fixture
def restore_root_level():
    root = logging.getLogger()
    original = root.level
    yield root
    root.setLevel(original)


def test_explicit_level_applies_after_initialization(restore_root_level) -> None:
    get_logger(__name__)

    assert configure_logging("debug") == logging.DEBUG
    assert restore_root_level.level == logging.DEBUG

    assert configure_logging("WARNING") == logging.WARNING
    assert get_logger("bloodlink.test").getEffectiveLevel() == logging.WARNING


def test_unknown_level_falls_back_to_info(restore_root_level) -> None:
    get_logger(__name__)
    assert configure_logging("chatty") == logging.INFO


def test_http_client_loggers_stay_quiet() -> None:
    get_logger(__name__)
    assert logging.getLogger("urllib3").level >= logging.WARNING
