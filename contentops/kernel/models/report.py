"""
Monthly founder reports.
"""

import uuid

from sqlalchemy import ForeignKey, Index, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from contentops.kernel.models.base import Base, TimestampMixin, generate_uuid
from contentops.kernel.models.user import User


class FounderReport(Base, TimestampMixin):
    """
    One PDF report for a founder and calendar month.

    The file itself lives in object storage; only its URL is kept here.
    """

    __tablename__ = "founder_reports"

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
    url: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    founder: Mapped[User] = relationship(User, foreign_keys=[founder_id], lazy="selectin")
    uploader: Mapped[User] = relationship(User, foreign_keys=[uploaded_by], lazy="selectin")

    __table_args__ = (
        UniqueConstraint("founder_id", "month", name="uq_founder_reports_founder_month"),
        Index("ix_founder_reports_uploaded_by", "uploaded_by"),
    )

    @property
    def founder_name(self) -> str:
        return self.founder.name

    @property
    def uploader_name(self) -> str:
        return self.uploader.name

    @property
    def uploader_email(self) -> str:
        return self.uploader.email

    def __repr__(self) -> str:
        return f"<FounderReport founder={self.founder_id} month={self.month}>"


Index(
    "ix_founder_reports_founder_created",
    FounderReport.founder_id,
    FounderReport.created_at.desc(),
)
