"""API route registration for diffty."""

from fastapi import APIRouter

from . import meta, repositories, review

router = APIRouter()
router.include_router(meta.router)
router.include_router(repositories.router)
router.include_router(review.router)

__all__ = ["router"]
