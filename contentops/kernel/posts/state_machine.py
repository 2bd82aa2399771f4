"""
Post status lifecycle.

    pending -> {approved, rejected, scheduled} -> posted

Scheduled posts can still be reviewed, approved posts can be given a date,
and a rejected post returns to pending or scheduled when it is revised.
"""

from typing import Dict, FrozenSet, Optional

from contentops.kernel.errors import Conflict, InvalidFormat
from contentops.kernel.models.post import PostStatus

_TRANSITIONS: Dict[PostStatus, FrozenSet[PostStatus]] = {
    PostStatus.PENDING: frozenset({PostStatus.APPROVED, PostStatus.REJECTED, PostStatus.SCHEDULED}),
    PostStatus.SCHEDULED: frozenset({PostStatus.APPROVED, PostStatus.REJECTED, PostStatus.POSTED}),
    PostStatus.APPROVED: frozenset({PostStatus.SCHEDULED, PostStatus.POSTED}),
    PostStatus.REJECTED: frozenset({PostStatus.PENDING, PostStatus.SCHEDULED, PostStatus.POSTED}),
    PostStatus.POSTED: frozenset(),
}

# Statuses a reviewer may set through the status endpoint
REVIEW_STATUSES: FrozenSet[PostStatus] = frozenset(
    {PostStatus.APPROVED, PostStatus.REJECTED, PostStatus.POSTED}
)


def can_transition(from_status: str, to_status: str) -> bool:
    """True if from_status -> to_status is allowed. Staying put is always allowed."""
    if from_status == to_status:
        return True
    return PostStatus(to_status) in _TRANSITIONS[PostStatus(from_status)]


def check_transition(from_status: str, to_status: str, feedback: Optional[str] = None) -> PostStatus:
    """
    Validate a status change.

    Raises:
        InvalidFormat: Rejecting without feedback
        Conflict: The lifecycle does not allow the move
    """
    target = PostStatus(to_status)
    if target == PostStatus.REJECTED and not (feedback and feedback.strip()):
        raise InvalidFormat("Feedback is required when rejecting a post")
    if not can_transition(from_status, target):
        raise Conflict(
            f"Invalid status transition: {PostStatus(from_status).value} -> {target.value}",
            {"from": PostStatus(from_status).value, "to": target.value},
        )
    return target


def resolve_update_status(
    requested: Optional[str],
    scheduled_date_given: bool,
) -> Optional[str]:
    """
    Status implied by an edit.

    Setting a scheduled date forces "scheduled" unless the same update
    explicitly sets "rejected".
    """
    if scheduled_date_given and requested != PostStatus.REJECTED.value:
        return PostStatus.SCHEDULED.value
    return requested
