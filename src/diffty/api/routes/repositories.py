"""Repository registration routes for diffty API."""

import logging

from fastapi import APIRouter, Depends

from ..dependencies import get_review_service
from ..models import AddRepositoryRequest, RepositoriesResponse
from ..services import ReviewService

router = APIRouter(tags=["repositories"])

logger = logging.getLogger(__name__)


@router.get("/repositories", response_model=RepositoriesResponse)
def list_repositories(
    service: ReviewService = Depends(get_review_service),
) -> RepositoriesResponse:
    """List registered repositories."""
    return RepositoriesResponse(repositories=service.list_repositories())


@router.post("/repositories", response_model=RepositoriesResponse)
def add_repository(
    request: AddRepositoryRequest,
    service: ReviewService = Depends(get_review_service),
) -> RepositoriesResponse:
    """Register a repository; registering it again is a no-op."""
    path = service.add_repository(request.path)
    logger.info("Repository add requested", extra={"repository": path})
    return RepositoriesResponse(repositories=service.list_repositories())
