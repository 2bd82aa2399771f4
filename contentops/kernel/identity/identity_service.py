"""
Identity service for user management operations.
"""

import hashlib
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from contentops.config import get_settings
from contentops.kernel.errors import Conflict, InvalidFormat, NotFound
from contentops.kernel.events.activity_logger import ActivityLogger
from contentops.kernel.identity.jwt import IssuedToken, JWTManager
from contentops.kernel.identity.password import hash_password, verify_password
from contentops.kernel.models.activity_log import ActivityAction
from contentops.kernel.models.post import Post, PostStatus
from contentops.kernel.models.user import AdminProfile, FounderProfile, User, UserRole
from contentops.logging_config import get_logger

logger = get_logger(__name__)


class IdentityService:
    """
    Service for user identity operations.

    Handles registration of founders and admins (by a super-admin),
    password authentication and reset, profile lookups and the founder
    roster. Roles are fixed at creation; there is no role-change operation.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.jwt_manager = JWTManager()
        self.activity = ActivityLogger(session)

    async def _create_user(
        self,
        email: str,
        password: str,
        name: str,
        role: UserRole,
    ) -> User:
        if await self.get_user_by_email(email):
            raise Conflict("User already exists", {"email": email.lower().strip()})

        user = User(
            email=email.lower().strip(),
            password_hash=hash_password(password),
            name=name.strip(),
            role=role.value,
            is_active=True,
        )
        self.session.add(user)
        return user

    async def register_founder(
        self,
        email: str,
        password: str,
        name: str,
        company_name: str,
        created_by: User,
        industry: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> User:
        """
        Register a founder account with its FounderProfile.

        Args:
            email: Login email, normalised to lower case
            password: Initial plain text password
            name: Display name
            company_name: Founder's company
            created_by: Super-admin performing the registration
            industry: Optional industry label (used by industry distribution)
            notes: Optional free-form notes

        Returns:
            The created User with founder_profile populated

        Raises:
            Conflict: If the email is already registered
        """
        user = await self._create_user(email, password, name, UserRole.FOUNDER)
        user.founder_profile = FounderProfile(
            company_name=company_name.strip(),
            industry=industry.strip() if industry else None,
            notes=notes,
        )
        await self.session.flush()

        await self._log_registration(user, created_by)
        return user

    async def register_admin(
        self,
        email: str,
        password: str,
        name: str,
        created_by: User,
        bio: Optional[str] = None,
    ) -> User:
        """
        Register an admin account with its AdminProfile.

        Raises:
            Conflict: If the email is already registered
        """
        user = await self._create_user(email, password, name, UserRole.ADMIN)
        user.admin_profile = AdminProfile(bio=bio)
        await self.session.flush()

        await self._log_registration(user, created_by)
        return user

    async def _log_registration(self, user: User, created_by: User) -> None:
        await self.activity.record(
            actor_id=created_by.id,
            role=created_by.role,
            action=ActivityAction.USER_REGISTERED,
            metadata={
                "created_user_id": user.id,
                "user_role": user.role,
                "user_name": user.name,
                "user_email": user.email,
            },
        )
        logger.info(
            "User registered",
            extra={"user_id": str(user.id), "role": user.role},
        )

    async def authenticate(
        self,
        email: str,
        password: str,
    ) -> Optional[tuple[User, IssuedToken]]:
        """
        Authenticate a user and issue an access token.

        Args:
            email: User's email
            password: Plain text password

        Returns:
            Tuple of (User, IssuedToken) if successful, None otherwise
        """
        user = await self.get_user_by_email(email)
        if not user:
            return None

        if not verify_password(password, user.password_hash):
            return None

        if not user.is_active:
            return None

        token = self.jwt_manager.create_access_token(
            user_id=user.id,
            email=user.email,
            role=UserRole(user.role).value,
        )

        # First successful login counts as verification of the account
        if user.verified_at is None:
            user.verified_at = datetime.now(timezone.utc)

        await self.activity.record(
            actor_id=user.id,
            role=user.role,
            action=ActivityAction.USER_LOGGED_IN,
            metadata={"user_email": user.email},
        )

        return user, token

    async def get_user_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        """Get a user by ID."""
        query = select(User).where(User.id == user_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get a user by email."""
        query = select(User).where(User.email == email.lower().strip())
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_profile(
        self,
        user_id: uuid.UUID,
    ) -> tuple[User, Optional[Union[FounderProfile, AdminProfile]]]:
        """
        Get a user together with its role-selected profile.

        Raises:
            NotFound: If the user does not exist
        """
        user = await self.get_user_by_id(user_id)
        if not user:
            raise NotFound("User not found", {"user_id": str(user_id)})
        return user, user.profile

    async def list_by_role(self, role: UserRole) -> List[User]:
        """All users with a role, newest first."""
        query = (
            select(User)
            .where(User.role == role.value)
            .order_by(User.created_at.desc())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def request_password_reset(self, email: str) -> tuple[User, str]:
        """
        Issue a single-use reset token for the account behind email.

        Only the token's sha256 digest is stored; a newer request replaces
        any earlier token.

        Returns:
            Tuple of (User, raw token) for the reset email

        Raises:
            NotFound: If no user has this email
        """
        user = await self.get_user_by_email(email)
        if not user:
            raise NotFound("User not found", {"email": email.lower().strip()})

        token = secrets.token_hex(32)
        user.reset_token_hash = _digest(token)
        user.reset_token_expires_at = datetime.now(timezone.utc) + timedelta(
            minutes=get_settings().password_reset_expire_minutes
        )
        await self.session.flush()

        await self.activity.record(
            actor_id=user.id,
            role=user.role,
            action=ActivityAction.PASSWORD_RESET_REQUESTED,
            metadata={"user_email": user.email},
        )
        logger.info("Password reset requested", extra={"user_id": str(user.id)})
        return user, token

    async def reset_password(self, token: str, new_password: str) -> User:
        """
        Set a new password using a token from request_password_reset.

        The token is cleared, so it cannot be used twice. Completing a reset
        also verifies the account.

        Raises:
            InvalidFormat: If the token is unknown, used or expired
        """
        now = datetime.now(timezone.utc)
        result = await self.session.execute(
            select(User).where(
                User.reset_token_hash == _digest(token),
                User.reset_token_expires_at > now,
            )
        )
        user = result.scalar_one_or_none()
        if not user:
            raise InvalidFormat("Invalid or expired reset token")

        user.password_hash = hash_password(new_password)
        user.reset_token_hash = None
        user.reset_token_expires_at = None
        if user.verified_at is None:
            user.verified_at = now
        await self.session.flush()

        await self.activity.record(
            actor_id=user.id,
            role=user.role,
            action=ActivityAction.PASSWORD_RESET,
            metadata={"user_email": user.email},
        )
        logger.info("Password reset", extra={"user_id": str(user.id)})
        return user

    async def list_founders_with_post_stats(self) -> List[Dict[str, Any]]:
        """
        Every founder, newest first, with post counts computed at read time.

        total is pending + scheduled + approved; rejected and posted posts
        are not counted.
        """
        pending = func.sum(case((Post.status == PostStatus.PENDING.value, 1), else_=0))
        scheduled = func.sum(case((Post.status == PostStatus.SCHEDULED.value, 1), else_=0))
        approved = func.sum(case((Post.status == PostStatus.APPROVED.value, 1), else_=0))
        counts = (
            select(
                Post.founder_id.label("founder_id"),
                pending.label("pending"),
                scheduled.label("scheduled"),
                approved.label("approved"),
            )
            .group_by(Post.founder_id)
            .subquery()
        )
        query = (
            select(
                User,
                func.coalesce(counts.c.pending, 0),
                func.coalesce(counts.c.scheduled, 0),
                func.coalesce(counts.c.approved, 0),
            )
            .outerjoin(counts, counts.c.founder_id == User.id)
            .where(User.role == UserRole.FOUNDER.value)
            .order_by(User.created_at.desc())
        )
        result = await self.session.execute(query)

        founders = []
        for user, pending_count, scheduled_count, approved_count in result.all():
            profile = user.founder_profile
            stats = {
                "pending": int(pending_count),
                "scheduled": int(scheduled_count),
                "approved": int(approved_count),
            }
            stats["total"] = sum(stats.values())
            founders.append({
                "id": user.id,
                "name": user.name,
                "email": user.email,
                "role": user.role,
                "verified": user.verified_at is not None,
                "company_name": profile.company_name if profile else None,
                "industry": profile.industry if profile else None,
                "created_at": user.created_at,
                "updated_at": user.updated_at,
                "post_stats": stats,
            })
        return founders


def _digest(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()
