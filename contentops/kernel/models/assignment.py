"""
Assignment edges between admins and founders.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from contentops.kernel.models.base import Base, generate_uuid, utcnow


class Assignment(Base):
    """
    One admin-founder management relationship.

    Owned exclusively by AssignmentStore. The unique (founder_id, admin_id)
    index backs the is_assigned lookup; admin_id has its own index for the
    reverse traversal.
    """

    __tablename__ = "assignments"

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
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    assigned_by: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id"),
        nullable=False,
    )
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("founder_id", "admin_id", name="uq_assignments_founder_admin"),
        Index("ix_assignments_founder", "founder_id"),
        Index("ix_assignments_admin", "admin_id"),
    )

    def __repr__(self) -> str:
        return f"<Assignment admin={self.admin_id} founder={self.founder_id}>"
