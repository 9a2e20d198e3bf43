"""Dependency providers for the diffty API."""

import logging
from functools import lru_cache

from ..config import ReviewConfig
from ..store import JSONLedgerStore
from .services import ReviewService

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_config() -> ReviewConfig:
    """Return the process configuration, read from the environment once."""
    config = ReviewConfig.from_env()
    logger.info("Configuration loaded", extra=config.to_dict())
    return config


def get_review_service() -> ReviewService:
    """Build a request-scoped review service over the configured store."""
    config = get_config()
    return ReviewService(JSONLedgerStore(config.storage_root), config)
