"""Application-wide settings and environment loading."""

import logging
import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

load_dotenv()
logger.debug("Environment variables loaded from .env if present")

DEFAULT_GIT_TIMEOUT = 30


@lru_cache(maxsize=1)
def get_storage_root() -> Path:
    """Return the directory that holds review ledgers and the repository registry."""
    configured = os.getenv("DIFFTY_HOME")
    if configured:
        root = Path(configured).expanduser()
        logger.debug("Storage root taken from environment", extra={"root": str(root)})
        return root

    root = Path.home() / ".diffty"
    logger.debug("Storage root defaulted", extra={"root": str(root)})
    return root


@lru_cache(maxsize=1)
def get_git_timeout() -> int:
    """Return the timeout in seconds applied to each git invocation."""
    raw = os.getenv("DIFFTY_GIT_TIMEOUT")
    if not raw:
        return DEFAULT_GIT_TIMEOUT
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer DIFFTY_GIT_TIMEOUT", extra={"value": raw})
        return DEFAULT_GIT_TIMEOUT
