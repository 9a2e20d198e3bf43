"""Recording review decisions into a ledger."""

import logging
from typing import Union

from .errors import ValidationError
from .models import ALL_LINES, Decision, FileReview, ReviewLedger

logger = logging.getLogger(__name__)


def parse_decision(value: Union[Decision, str]) -> Decision:
    """Coerce a decision literal, rejecting anything outside the closed set."""
    if isinstance(value, Decision):
        return value
    try:
        return Decision(value)
    except ValueError as exc:
        raise ValidationError(
            f"invalid decision {value!r}",
            allowed=[decision.value for decision in Decision],
        ) from exc


def record_decision(
    ledger: ReviewLedger,
    repository: str,
    path: str,
    decision: Union[Decision, str],
) -> ReviewLedger:
    """Set the whole-file decision for ``path``, replacing any earlier one.

    Only the ``all`` range token is written. Other tokens already present on
    the file are left untouched. Returns the same ledger, mutated in place.
    """
    decision = parse_decision(decision)

    review = ledger.find(repository, path)
    if review is None:
        ledger.file_reviews.append(
            FileReview(repository=repository, path=path, ranges={ALL_LINES: decision})
        )
        logger.debug(
            "Added file review",
            extra={"path": path, "decision": decision.value},
        )
    else:
        review.ranges[ALL_LINES] = decision
        logger.debug(
            "Updated file review",
            extra={"path": path, "decision": decision.value},
        )

    return ledger
