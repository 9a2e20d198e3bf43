"""Pydantic models for diffty API requests and responses."""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ..models import Decision


def _strip_required(value: str, name: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError(f"{name} cannot be empty")
    return value


class AddRepositoryRequest(BaseModel):
    """Request model for registering a repository."""

    path: str = Field(
        ...,
        description="Filesystem path of a git working tree",
        examples=["/home/user/src/project"],
    )

    @field_validator("path")
    @classmethod
    def path_must_not_be_empty(cls, v):
        return _strip_required(v, "path")


class RepositoriesResponse(BaseModel):
    """Registered repositories."""

    repositories: List[str] = Field(default_factory=list)


class CompareResponse(BaseModel):
    """Branches available for comparison and the pre-selected pair."""

    repository: str
    name: str
    branches: List[str]
    source: Optional[str] = None
    target: Optional[str] = None


class ResolveRequest(BaseModel):
    """Request model for pinning a branch pair to commits."""

    repo: str = Field(..., description="Registered repository path")
    source: str = Field(..., description="Branch being merged from", examples=["feature"])
    target: str = Field(..., description="Branch being merged into", examples=["main"])

    @field_validator("repo", "source", "target")
    @classmethod
    def must_not_be_empty(cls, v, info):
        return _strip_required(v, info.field_name)


class ResolveResponse(BaseModel):
    """Commit pair a comparison is pinned to."""

    repo: str
    source: str
    target: str
    source_commit: str
    target_commit: str


class ReviewStateRequest(BaseModel):
    """Request model for recording a whole-file decision."""

    repo: str
    source: str
    target: str
    source_commit: str = Field(
        ...,
        description="Commit the source branch pointed at when the page was built",
        examples=["d7a39abec5a282b9955afdd1649a5f1bafae35f7"],
    )
    target_commit: str = Field(
        ...,
        description="Commit the target branch pointed at when the page was built",
        examples=["ba7765dd48c0ba51f4fd12cde48fd100aecdb743"],
    )
    file: str = Field(..., description="Path of the reviewed file")
    status: Decision = Field(..., description="approved, rejected or skipped")
    next: Optional[str] = Field(None, description="File to show after recording")

    @field_validator("repo", "source", "target", "source_commit", "target_commit", "file")
    @classmethod
    def must_not_be_empty(cls, v, info):
        return _strip_required(v, info.field_name)


class ReviewStateResponse(BaseModel):
    """Outcome of recording a decision."""

    file: str
    status: str
    show: str


class HealthResponse(BaseModel):
    """Whether this instance can read the registry and persist ledgers."""

    status: str = Field(..., examples=["healthy", "degraded"])
    version: str = Field(..., examples=["0.3.0"])
    storage_root: str = Field(..., examples=["/home/user/.diffty"])
    storage_writable: bool
    repositories: Optional[int] = Field(
        None, description="Registered repositories; null when the registry is unreadable"
    )
    git_available: bool
