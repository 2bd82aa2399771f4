"""
Append-only activity log.

Rows are inserted by ActivityLogger and never updated or deleted.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict

from sqlalchemy import DateTime, ForeignKey, Index, JSON, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from contentops.kernel.models.base import Base, generate_uuid, utcnow


class ActivityAction(str, Enum):
    """Action labels recorded by the core."""

    # Identity
    USER_REGISTERED = "Registered User"
    USER_LOGGED_IN = "Logged In"
    WELCOME_EMAIL_SENT = "Sent Welcome Email"
    PASSWORD_RESET_REQUESTED = "Requested Password Reset"
    PASSWORD_RESET = "Reset Password"

    # Assignments
    ASSIGNMENTS_REPLACED = "Assigned Admins to Founder"
    ASSIGNMENT_DELETED = "Deleted Admin-Founder Assignment"

    # Metrics
    METRICS_UPLOADED = "Uploaded Metrics"
    METRICS_DELETED = "Deleted Metrics"

    # Reports
    REPORT_UPLOADED = "Uploaded Report"
    REPORT_DELETED = "Deleted Report"

    # Posts
    POST_CREATED = "Created Post"
    POST_UPDATED = "Updated Post"
    POST_DELETED = "Deleted Post"
    POST_APPROVED = "Post Approved"
    POST_REJECTED = "Post Rejected"
    POST_POSTED = "Post Posted"
    POST_FEEDBACK_ADDED = "Added Feedback to Post"
    POST_IMAGES_UPDATED = "Updated Post Images"


class ActivityLog(Base):
    """One recorded action by an actor."""

    __tablename__ = "activity_logs"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    role: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    action: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    meta: Mapped[Dict[str, Any]] = mapped_column(
        JSON,
        default=dict,
        nullable=False,
    )
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    __table_args__ = (
        Index("ix_activity_logs_user_timestamp", "user_id", "timestamp"),
        Index("ix_activity_logs_action_timestamp", "action", "timestamp"),
        Index("ix_activity_logs_timestamp", "timestamp"),
    )

    def __repr__(self) -> str:
        return f"<ActivityLog {self.action} by={self.user_id}>"
