"""
Declarative base and shared column helpers.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    # Native UUID on PostgreSQL, CHAR(32) on SQLite
    type_annotation_map = {uuid.UUID: Uuid()}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_uuid() -> uuid.UUID:
    return uuid.uuid4()


def _timestamp_column(**kwargs) -> Mapped[datetime]:
    return mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        **kwargs,
    )


class TimestampMixin:
    """created_at is set once; updated_at moves on every ORM update."""

    created_at: Mapped[datetime] = _timestamp_column()
    updated_at: Mapped[datetime] = _timestamp_column(onupdate=utcnow)
