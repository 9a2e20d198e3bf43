"""Service layer for the diffty API."""

from .review import CompareView, ReviewService, ReviewView

__all__ = ["CompareView", "ReviewService", "ReviewView"]
