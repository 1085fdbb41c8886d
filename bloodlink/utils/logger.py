"""Process-wide logging setup for the matching engine and its API."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from bloodlink.utils.config import get_settings


_LOGGER_INITIALIZED = False

# webhook delivery goes through requests/urllib3, which log every connection
_QUIET_LOGGERS = ("urllib3",)


def configure_logging(level: Optional[str] = None) -> int:
    """Install the root handler once and return the effective level.

    Module loggers are created at import time, before the app factory has
    its settings, so an explicit ``level`` passed later is applied to the
    already-installed root logger instead of being ignored.
    """

    global _LOGGER_INITIALIZED
    resolved_level = logging.getLevelName((level or get_settings().log_level).upper())
    if not isinstance(resolved_level, int):
        resolved_level = logging.INFO

    root = logging.getLogger()
    if not _LOGGER_INITIALIZED:
        logging.basicConfig(
            level=resolved_level,
            format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            stream=sys.stdout,
        )
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(max(resolved_level, logging.WARNING))
        _LOGGER_INITIALIZED = True
    elif level is not None:
        root.setLevel(resolved_level)
    return root.getEffectiveLevel()


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)
