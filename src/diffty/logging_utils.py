"""Logging configuration utilities for diffty."""

import logging
import os
from typing import Optional

_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_DEFAULT_LEVEL = "INFO"


def resolve_level(level: Optional[str] = None) -> str:
    """Pick the log level from the argument, then ``LOG_LEVEL``, then INFO."""
    candidate = (level or os.getenv("LOG_LEVEL") or _DEFAULT_LEVEL).upper()
    # getLevelName maps known names to ints and anything else to "Level <name>"
    if not isinstance(logging.getLevelName(candidate), int):
        return _DEFAULT_LEVEL
    return candidate


def configure_logging(level: Optional[str] = None) -> None:
    """Configure application-wide logging once; later calls are no-ops."""
    if logging.getLogger().handlers:
        return

    logging.basicConfig(level=resolve_level(level), format=_LOG_FORMAT)
    logging.getLogger(__name__).debug("Logging configured")
