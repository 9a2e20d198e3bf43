"""Review data model for diffty."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

ALL_LINES = "all"

_RANGE_TOKEN_PATTERN = re.compile(r"^(?:all|\d+|\d+-\d+)$")


class Decision(str, Enum):
    """A reviewer's verdict on a file or a line range."""

    APPROVED = "approved"
    REJECTED = "rejected"
    SKIPPED = "skipped"


class FileStatus(str, Enum):
    """Display status of a changed file, derived from its decisions."""

    UNREVIEWED = "unreviewed"
    APPROVED = "approved"
    REJECTED = "rejected"
    SKIPPED = "skipped"
    MIXED = "mixed"


# Lower sorts first. Mixed files sit between rejected and approved ones.
STATUS_PRIORITY: Dict[FileStatus, int] = {
    FileStatus.UNREVIEWED: 0,
    FileStatus.SKIPPED: 1,
    FileStatus.REJECTED: 2,
    FileStatus.MIXED: 3,
    FileStatus.APPROVED: 4,
}


def is_range_token(token: str) -> bool:
    """Return True for ``all``, a line number, or an inclusive ``start-end`` range."""
    if not _RANGE_TOKEN_PATTERN.match(token):
        return False
    if "-" in token:
        start, end = token.split("-", 1)
        return int(start) <= int(end)
    return True


@dataclass
class FileReview:
    """Decisions recorded for one file, keyed by range token."""

    repository: str
    path: str
    ranges: Dict[str, Decision] = field(default_factory=dict)

    def decisions(self) -> List[Decision]:
        """Distinct decisions across all ranges, in first-seen order."""
        seen: List[Decision] = []
        for decision in self.ranges.values():
            if decision not in seen:
                seen.append(decision)
        return seen


@dataclass
class ReviewLedger:
    """Review decisions for one repository and commit pair.

    ``source_commit`` and ``target_commit`` are the identity of the ledger;
    the branch names are kept for display only.
    """

    repository: str
    source_branch: str
    target_branch: str
    source_commit: str
    target_commit: str
    file_reviews: List[FileReview] = field(default_factory=list)

    @property
    def is_pinned(self) -> bool:
        return bool(self.source_commit) and bool(self.target_commit)

    def find(self, repository: str, path: str) -> Optional[FileReview]:
        """Return the review for ``(repository, path)`` if one was recorded."""
        for review in self.file_reviews:
            if review.path == path and review.repository == repository:
                return review
        return None


@dataclass(frozen=True)
class ChangedFile:
    """A file in the current diff with its derived review status."""

    path: str
    status: FileStatus

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.path, "status": self.status.value}
