"""
Post model and status lifecycle.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, Index, JSON, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from contentops.kernel.models.base import Base, TimestampMixin, generate_uuid


class PostStatus(str, Enum):
    """
    pending -> {approved, rejected, scheduled} -> posted
    """
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SCHEDULED = "scheduled"
    POSTED = "posted"


class Post(Base, TimestampMixin):
    """A piece of content an admin prepares for a founder."""

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    founder_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    admin_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id"),
        nullable=False,
    )
    caption: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    # URLs returned by the object storage collaborator
    images: Mapped[List[str]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )
    status: Mapped[PostStatus] = mapped_column(
        String(50),
        default=PostStatus.PENDING,
        nullable=False,
    )
    feedback: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    scheduled_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    __table_args__ = (
        Index("ix_posts_founder_status", "founder_id", "status"),
        Index("ix_posts_admin_status", "admin_id", "status"),
        Index("ix_posts_status_scheduled", "status", "scheduled_date"),
    )

    def __repr__(self) -> str:
        return f"<Post {self.id} founder={self.founder_id} status={self.status}>"
