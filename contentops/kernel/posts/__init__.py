"""
Post Workflow - authoring, review and the status lifecycle.
"""

from contentops.kernel.posts.post_service import PostService
from contentops.kernel.posts.state_machine import (
    REVIEW_STATUSES,
    can_transition,
    check_transition,
    resolve_update_status,
)

__all__ = [
    "PostService",
    "REVIEW_STATUSES",
    "can_transition",
    "check_transition",
    "resolve_update_status",
]
