"""Ledger document serialization for diffty."""

import json
import logging
from typing import Any, Dict, List

from .errors import IntegrityFaultError, StorageFaultError
from .models import Decision, FileReview, ReviewLedger, is_range_token

logger = logging.getLogger(__name__)


class LedgerSerializer:
    """Converts ledgers to and from their persisted JSON document.

    Document layout::

        {
          "reviewed_files": [{"repo": ..., "path": ..., "lines": {token: decision}}],
          "source_branch": ..., "target_branch": ...,
          "source_commit": ..., "target_commit": ...
        }

    The repository is not part of the document; it comes from the storage key.
    """

    def to_document(self, ledger: ReviewLedger) -> Dict[str, Any]:
        """Serialize a ledger into the persisted dictionary layout."""
        reviewed_files = [self._serialize_review(review) for review in ledger.file_reviews]
        return {
            "reviewed_files": reviewed_files,
            "source_branch": ledger.source_branch,
            "target_branch": ledger.target_branch,
            "source_commit": ledger.source_commit,
            "target_commit": ledger.target_commit,
        }

    def _serialize_review(self, review: FileReview) -> Dict[str, Any]:
        lines = {token: Decision(decision).value for token, decision in sorted(review.ranges.items())}
        return {
            "repo": review.repository,
            "path": review.path,
            "lines": lines,
        }

    def from_document(
        self, document: Any, repository: str, location: str
    ) -> ReviewLedger:
        """Rebuild a ledger from a decoded document.

        Raises StorageFaultError when the structure is wrong and
        IntegrityFaultError when a decision or range token is unknown.
        """
        if not isinstance(document, dict):
            raise StorageFaultError(location, "ledger document is not a JSON object")

        raw_files = document.get("reviewed_files") or []
        if not isinstance(raw_files, list):
            raise StorageFaultError(location, "reviewed_files is not a list")

        reviews: List[FileReview] = []
        for raw in raw_files:
            if not isinstance(raw, dict):
                raise StorageFaultError(location, "reviewed_files entry is not an object")
            reviews.append(self._deserialize_review(raw, location))

        ledger = ReviewLedger(
            repository=repository,
            source_branch=str(document.get("source_branch") or ""),
            target_branch=str(document.get("target_branch") or ""),
            source_commit=str(document.get("source_commit") or ""),
            target_commit=str(document.get("target_commit") or ""),
            file_reviews=reviews,
        )
        logger.debug(
            "Ledger decoded",
            extra={"location": location, "reviews": len(reviews)},
        )
        return ledger

    def _deserialize_review(self, raw: Dict[str, Any], location: str) -> FileReview:
        lines = raw.get("lines") or {}
        if not isinstance(lines, dict):
            raise StorageFaultError(location, "lines is not an object")

        ranges = {}
        for token, value in lines.items():
            if not is_range_token(token):
                raise IntegrityFaultError(location, "range token", token)
            try:
                ranges[token] = Decision(value)
            except ValueError as exc:
                raise IntegrityFaultError(location, "decision", value) from exc

        return FileReview(
            repository=str(raw.get("repo", "")),
            path=str(raw.get("path", "")),
            ranges=ranges,
        )

    def to_json_string(self, data: Any) -> str:
        """Convert data to an indented JSON string."""
        return json.dumps(data, indent=2, ensure_ascii=False)

    def from_json_string(self, text: str, location: str) -> Any:
        """Decode JSON text, reporting malformed content as a storage fault."""
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise StorageFaultError(location, f"invalid JSON: {exc.msg}") from exc
