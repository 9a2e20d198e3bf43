"""Health endpoint for diffty API."""

import logging
import shutil
from typing import Optional

from fastapi import APIRouter, Depends

from ...errors import StorageFaultError
from .. import __version__
from ..dependencies import get_review_service
from ..models import HealthResponse
from ..services import ReviewService

router = APIRouter(tags=["meta"])

logger = logging.getLogger(__name__)


@router.get("/health", response_model=HealthResponse)
def health_check(service: ReviewService = Depends(get_review_service)) -> HealthResponse:
    """Report whether ledgers can be stored and the registry can be read."""
    repositories: Optional[int]
    try:
        repositories = len(service.list_repositories())
    except StorageFaultError as exc:
        logger.warning("Repository registry unreadable", extra=exc.details)
        repositories = None

    writable = service.store.is_writable()
    git_available = shutil.which("git") is not None
    healthy = writable and git_available and repositories is not None

    return HealthResponse(
        status="healthy" if healthy else "degraded",
        version=__version__,
        storage_root=str(service.config.storage_root),
        storage_writable=writable,
        repositories=repositories,
        git_available=git_available,
    )
