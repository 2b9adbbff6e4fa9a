"""ReviewStatus state machine for the document review workflow.

State flow:
    PENDING_REVIEW → UNDER_REVIEW | APPROVED | REJECTED
                     | NEEDS_REPLACEMENT | NEEDS_ADDITIONAL_INFO

Every non-initial state is terminal here. Reopening a document is an
administrative reset handled outside this module.
"""

from enum import Enum
from typing import Dict, FrozenSet, List

from .errors import InvalidTransitionError


class ReviewStatus(str, Enum):
    """Review status of a student document."""
    PENDING_REVIEW = "PENDING_REVIEW"                # Initial state after ingestion
    UNDER_REVIEW = "UNDER_REVIEW"                    # Reviewer picked it up
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"                            # Requires reason
    NEEDS_REPLACEMENT = "NEEDS_REPLACEMENT"          # Requires reason
    NEEDS_ADDITIONAL_INFO = "NEEDS_ADDITIONAL_INFO"  # Requires reason


INITIAL_STATUS = ReviewStatus.PENDING_REVIEW

# State transition rules
ALLOWED_TRANSITIONS: Dict[ReviewStatus, List[ReviewStatus]] = {
    ReviewStatus.PENDING_REVIEW: [
        ReviewStatus.UNDER_REVIEW,
        ReviewStatus.APPROVED,
        ReviewStatus.REJECTED,
        ReviewStatus.NEEDS_REPLACEMENT,
        ReviewStatus.NEEDS_ADDITIONAL_INFO,
    ],
    ReviewStatus.UNDER_REVIEW: [],
    ReviewStatus.APPROVED: [],
    ReviewStatus.REJECTED: [],
    ReviewStatus.NEEDS_REPLACEMENT: [],
    ReviewStatus.NEEDS_ADDITIONAL_INFO: [],
}

# Statuses that can only be entered with a user-visible reason
REASON_REQUIRED_STATUSES: FrozenSet[ReviewStatus] = frozenset({
    ReviewStatus.REJECTED,
    ReviewStatus.NEEDS_REPLACEMENT,
    ReviewStatus.NEEDS_ADDITIONAL_INFO,
})


def requires_reason(status: ReviewStatus) -> bool:
    """Check whether entering a status requires a reason.

    Example:
        >>> requires_reason(ReviewStatus.REJECTED)
        True
        >>> requires_reason(ReviewStatus.APPROVED)
        False
    """
    return status in REASON_REQUIRED_STATUSES


def can_transition(from_status: ReviewStatus, to_status: ReviewStatus) -> bool:
    """Validate if a status change is allowed.

    Self-transitions are not part of the graph; the review service treats
    them as idempotent no-ops before consulting this function.

    Example:
        >>> can_transition(ReviewStatus.PENDING_REVIEW, ReviewStatus.REJECTED)
        True
        >>> can_transition(ReviewStatus.APPROVED, ReviewStatus.REJECTED)
        False
    """
    return to_status in ALLOWED_TRANSITIONS.get(from_status, [])


def get_allowed_transitions(from_status: ReviewStatus) -> List[ReviewStatus]:
    """Get list of allowed target statuses from the current status."""
    return list(ALLOWED_TRANSITIONS.get(from_status, []))


def is_terminal(status: ReviewStatus) -> bool:
    return not ALLOWED_TRANSITIONS.get(status)


def validate_transition(from_status: ReviewStatus, to_status: ReviewStatus) -> None:
    """Validate that a status change is allowed.

    Raises:
        InvalidTransitionError: If the transition is not in the graph
    """
    if not can_transition(from_status, to_status):
        raise InvalidTransitionError(
            from_status.value,
            to_status.value,
            [s.value for s in get_allowed_transitions(from_status)],
        )
