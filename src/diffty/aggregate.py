"""Review status aggregation for diffty."""

import logging
from typing import Iterable, List, Optional, Tuple

from .models import STATUS_PRIORITY, ChangedFile, FileReview, FileStatus, ReviewLedger

logger = logging.getLogger(__name__)


def file_status(review: Optional[FileReview]) -> FileStatus:
    """Derive a file's display status from its recorded decisions.

    No review, or a review with no ranges, is ``unreviewed``. A single
    distinct decision is reported as-is; more than one is ``mixed``.
    """
    if review is None:
        return FileStatus.UNREVIEWED

    decisions = review.decisions()
    if not decisions:
        return FileStatus.UNREVIEWED
    if len(decisions) > 1:
        return FileStatus.MIXED
    return FileStatus(decisions[0].value)


def _sort_key(changed: ChangedFile) -> Tuple[int, str]:
    return (STATUS_PRIORITY[changed.status], changed.path)


def aggregate(paths: Iterable[str], ledger: ReviewLedger) -> List[ChangedFile]:
    """Annotate diff paths with their status and order them for review.

    Unreviewed files come first, then skipped, rejected, mixed and approved;
    ties are broken by path.
    """
    files = [
        ChangedFile(path=path, status=file_status(ledger.find(ledger.repository, path)))
        for path in paths
    ]
    files.sort(key=_sort_key)

    logger.debug(
        "Aggregated review status",
        extra={
            "files": len(files),
            "unreviewed": sum(1 for f in files if f.status is FileStatus.UNREVIEWED),
        },
    )
    return files
