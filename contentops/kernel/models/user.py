"""
User model for identity management.

A user's profile is a tagged variant selected by role:
founders own a FounderProfile, admins own an AdminProfile,
super-admins own none.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from contentops.kernel.models.base import Base, TimestampMixin, generate_uuid


class UserRole(str, Enum):
    """User roles in the system. Immutable once a user is created."""
    SUPER_ADMIN = "super-admin"
    ADMIN = "admin"
    FOUNDER = "founder"


class User(Base, TimestampMixin):
    """User account model."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    role: Mapped[UserRole] = mapped_column(
        String(50),
        default=UserRole.FOUNDER,
        nullable=False,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    verified_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # sha256 of the emailed reset token; the raw token is never stored
    reset_token_hash: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        index=True,
    )
    reset_token_expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Profiles are loaded eagerly; async sessions cannot lazy-load on access
    founder_profile: Mapped[Optional["FounderProfile"]] = relationship(
        "FounderProfile",
        back_populates="user",
        uselist=False,
        lazy="selectin",
        cascade="all, delete-orphan",
    )
    admin_profile: Mapped[Optional["AdminProfile"]] = relationship(
        "AdminProfile",
        back_populates="user",
        uselist=False,
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    @property
    def profile(self) -> Optional[Union["FounderProfile", "AdminProfile"]]:
        """The role-selected profile variant."""
        if self.role == UserRole.FOUNDER:
            return self.founder_profile
        if self.role == UserRole.ADMIN:
            return self.admin_profile
        return None

    def __repr__(self) -> str:
        return f"<User {self.email} role={self.role}>"


class FounderProfile(Base, TimestampMixin):
    """Founder profile: the company whose content is managed."""

    __tablename__ = "founder_profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    company_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    industry: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        index=True,
    )
    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    user: Mapped["User"] = relationship("User", back_populates="founder_profile")

    @property
    def kind(self) -> str:
        return UserRole.FOUNDER.value


class AdminProfile(Base, TimestampMixin):
    """Admin profile."""

    __tablename__ = "admin_profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    bio: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    user: Mapped["User"] = relationship("User", back_populates="admin_profile")

    @property
    def kind(self) -> str:
        return UserRole.ADMIN.value
