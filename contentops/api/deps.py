"""
FastAPI dependencies for authentication, authorization, and database sessions.
"""

import uuid
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from contentops.database import SessionFactory, get_db, get_session_factory
from contentops.kernel.identity.identity_service import IdentityService
from contentops.kernel.identity.jwt import verify_access_token
from contentops.kernel.models.user import User, UserRole
from contentops.kernel.notifications import (
    LocalObjectStorage,
    NotificationSender,
    ObjectStorage,
    get_notification_sender,
)
from contentops.kernel.permissions.permission_service import (
    AuthorizationService,
    Resource,
    ResourceClass,
)
from contentops.logging_config import actor_id_var


# Security scheme
security = HTTPBearer(auto_error=False)

DbSession = Annotated[AsyncSession, Depends(get_db)]
SessionFactoryDep = Annotated[SessionFactory, Depends(get_session_factory)]


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: DbSession,
) -> User:
    """Get current authenticated user or raise 401."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = verify_access_token(credentials.credentials)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    identity_service = IdentityService(db)
    user = await identity_service.get_user_by_id(uuid.UUID(payload.sub))

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled",
        )

    # Logs for the rest of the request carry the actor
    actor_id_var.set(str(user.id))
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


def get_request_id(request: Request) -> Optional[str]:
    """Get request correlation ID (set by RequestIdMiddleware)."""
    return getattr(request.state, "request_id", None)


class ResourceGate:
    """
    Dependency class that runs the authorization decision for a resource class
    with no founder attached (dashboards, user management).

    Usage:
        @router.get("/stats")
        async def stats(user: PlatformViewer):
            ...
    """

    def __init__(self, resource_class: ResourceClass):
        self.resource_class = resource_class

    async def __call__(self, user: CurrentUser, db: DbSession) -> User:
        await AuthorizationService(db).authorize(user, Resource(self.resource_class))
        return user


async def require_staff(user: CurrentUser) -> User:
    """Require an admin or super-admin (founders never upload or author)."""
    if user.role not in (UserRole.ADMIN.value, UserRole.SUPER_ADMIN.value):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin or super-admin access required",
        )
    return user


UserManager = Annotated[User, Depends(ResourceGate(ResourceClass.USER_MANAGEMENT))]
PlatformViewer = Annotated[User, Depends(ResourceGate(ResourceClass.PLATFORM_DASHBOARD))]
DashboardAdmin = Annotated[User, Depends(ResourceGate(ResourceClass.OWN_DASHBOARD))]
StaffUser = Annotated[User, Depends(require_staff)]


def get_notifier() -> NotificationSender:
    """Notification sender for the request (overridable in tests)."""
    return get_notification_sender()


def get_object_storage() -> ObjectStorage:
    """Object storage for uploaded post images."""
    return LocalObjectStorage()


Notifier = Annotated[NotificationSender, Depends(get_notifier)]
Storage = Annotated[ObjectStorage, Depends(get_object_storage)]
