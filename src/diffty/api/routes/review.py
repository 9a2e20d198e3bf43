"""Review routes for diffty API."""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from ..dependencies import get_review_service
from ..models import (
    CompareResponse,
    ResolveRequest,
    ResolveResponse,
    ReviewStateRequest,
    ReviewStateResponse,
)
from ..services import ReviewService

router = APIRouter(tags=["review"])

logger = logging.getLogger(__name__)


@router.get("/compare", response_model=CompareResponse)
def compare(
    repo: str = Query(..., min_length=1),
    source: Optional[str] = None,
    target: Optional[str] = None,
    service: ReviewService = Depends(get_review_service),
) -> CompareResponse:
    """List branches with a default source/target selection."""
    view = service.compare(repo, source, target)
    return CompareResponse(
        repository=view.repository,
        name=view.name,
        branches=view.branches,
        source=view.source,
        target=view.target,
    )


@router.post("/compare", response_model=ResolveResponse)
def resolve(
    request: ResolveRequest,
    service: ReviewService = Depends(get_review_service),
) -> ResolveResponse:
    """Pin a branch pair to the commits it currently points at."""
    source_commit, target_commit = service.resolve(request.repo, request.source, request.target)
    return ResolveResponse(
        repo=request.repo,
        source=request.source,
        target=request.target,
        source_commit=source_commit,
        target_commit=target_commit,
    )


@router.get("/review")
def review(
    repo: str = Query(..., min_length=1),
    source: str = Query(..., min_length=1),
    target: str = Query(..., min_length=1),
    file: Optional[str] = None,
    service: ReviewService = Depends(get_review_service),
) -> Dict[str, Any]:
    """Ordered file list with review status, plus the selected file's diff."""
    logger.info(
        "Received review request",
        extra={"repository": repo, "source": source, "target": target, "file": file},
    )
    return service.review(repo, source, target, file).to_dict()


@router.post("/review-state", response_model=ReviewStateResponse)
def record_review_state(
    request: ReviewStateRequest,
    service: ReviewService = Depends(get_review_service),
) -> ReviewStateResponse:
    """Record a whole-file decision for the pinned commit pair."""
    status, show = service.record(
        request.repo,
        request.source,
        request.target,
        request.source_commit,
        request.target_commit,
        request.file,
        request.status,
        request.next,
    )
    return ReviewStateResponse(file=request.file, status=status.value, show=show)
