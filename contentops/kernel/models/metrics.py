"""
Monthly founder metrics.
"""

import uuid
from typing import Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from contentops.kernel.models.base import Base, TimestampMixin, generate_uuid


class FounderMetrics(Base, TimestampMixin):
    """
    Absolute counters for one founder in one calendar month.

    Re-uploading the same (founder_id, month) overwrites the counters in
    place; there is no version history.
    """

    __tablename__ = "founder_metrics"

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
    uploaded_by: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id"),
        nullable=False,
    )
    month: Mapped[str] = mapped_column(
        String(7),
        nullable=False,
    )
    total_posts: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    total_impressions: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    total_comment_outreach: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    __table_args__ = (
        UniqueConstraint("founder_id", "month", name="uq_founder_metrics_founder_month"),
        CheckConstraint("total_posts >= 0", name="ck_founder_metrics_posts_nonneg"),
        CheckConstraint("total_impressions >= 0", name="ck_founder_metrics_impressions_nonneg"),
        CheckConstraint("total_comment_outreach >= 0", name="ck_founder_metrics_outreach_nonneg"),
        Index("ix_founder_metrics_uploaded_by", "uploaded_by"),
        Index("ix_founder_metrics_month", "month"),
    )

    def __repr__(self) -> str:
        return f"<FounderMetrics founder={self.founder_id} month={self.month}>"


# Newest-first history per founder
Index(
    "ix_founder_metrics_founder_created",
    FounderMetrics.founder_id,
    FounderMetrics.created_at.desc(),
)
