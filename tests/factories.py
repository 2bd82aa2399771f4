"""
Test data builders shared by the integration and system tests.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from contentops.kernel.identity.jwt import JWTManager
from contentops.kernel.identity.password import hash_password
from contentops.kernel.models import (
    AdminProfile,
    Assignment,
    FounderMetrics,
    FounderProfile,
    User,
    UserRole,
)

PASSWORD = "Password123"

# Fixed clock for analytics tests: mid-month so trailing windows are stable
NOW = datetime(2026, 10, 15, 12, 0, tzinfo=timezone.utc)


async def make_user(
    session: AsyncSession,
    role: UserRole,
    name: str,
    company_name: Optional[str] = None,
    industry: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> User:
    """Insert a committed user with its role-selected profile."""
    user = User(
        id=uuid.uuid4(),
        email=f"{name.lower().replace(' ', '.')}@example.com",
        password_hash=hash_password(PASSWORD),
        name=name,
        role=role.value,
        is_active=True,
    )
    if created_at is not None:
        user.created_at = created_at
    if role == UserRole.FOUNDER:
        user.founder_profile = FounderProfile(
            company_name=company_name or f"{name} Inc",
            industry=industry,
        )
    elif role == UserRole.ADMIN:
        user.admin_profile = AdminProfile(bio=None)
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def assign(session: AsyncSession, admin: User, founder: User, by: User) -> Assignment:
    edge = Assignment(founder_id=founder.id, admin_id=admin.id, assigned_by=by.id)
    session.add(edge)
    await session.commit()
    return edge


async def add_metrics(
    session: AsyncSession,
    founder: User,
    uploader: User,
    month: str,
    posts: int = 0,
    impressions: int = 0,
    outreach: int = 0,
    created_at: Optional[datetime] = None,
) -> FounderMetrics:
    record = FounderMetrics(
        founder_id=founder.id,
        uploaded_by=uploader.id,
        month=month,
        total_posts=posts,
        total_impressions=impressions,
        total_comment_outreach=outreach,
        created_at=created_at or NOW,
        updated_at=created_at or NOW,
    )
    session.add(record)
    await session.commit()
    return record


def auth_headers(user: User) -> dict:
    """Bearer headers signed with the application's settings."""
    token = JWTManager().create_access_token(
        user_id=user.id,
        email=user.email,
        role=UserRole(user.role).value,
    )
    return {"Authorization": f"Bearer {token.access_token}"}
