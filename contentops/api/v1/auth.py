"""
Authentication and user registration endpoints.
"""

from typing import List

from fastapi import APIRouter, HTTPException, status

from contentops.api.deps import CurrentUser, DbSession, Notifier, UserManager
from contentops.config import get_settings
from contentops.kernel.events.activity_logger import ActivityLogger
from contentops.kernel.identity.identity_service import IdentityService
from contentops.kernel.models.activity_log import ActivityAction
from contentops.kernel.models.user import User, UserRole
from contentops.kernel.notifications import NotificationSender, TemplateKind, notify_safely
from contentops.schemas.auth import (
    AdminRegister,
    ForgotPasswordRequest,
    FounderRegister,
    FounderStatsResponse,
    ResetPasswordRequest,
    TokenResponse,
    UserLogin,
    UserResponse,
)
from contentops.schemas.common import SuccessResponse

router = APIRouter()


async def _welcome(db: DbSession, notifier: NotificationSender, user: User, created_by: User) -> None:
    sent = await notify_safely(
        notifier,
        TemplateKind.WELCOME,
        user.email,
        {"name": user.name, "role": user.role},
    )
    if sent:
        await ActivityLogger(db).record(
            actor_id=created_by.id,
            role=created_by.role,
            action=ActivityAction.WELCOME_EMAIL_SENT,
            metadata={"recipient_id": user.id, "recipient_email": user.email},
        )


@router.post("/login", response_model=TokenResponse)
async def login(data: UserLogin, db: DbSession):
    """
    Authenticate with email and password and return an access token.
    """
    identity_service = IdentityService(db)

    result = await identity_service.authenticate(email=data.email, password=data.password)
    if not result:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    user, token = result
    return TokenResponse(
        access_token=token.access_token,
        token_type=token.token_type,
        expires_in=token.expires_in,
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(user: CurrentUser):
    """Get current user's profile."""
    return UserResponse.model_validate(user)


@router.post("/register/founder", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register_founder(
    data: FounderRegister,
    user: UserManager,
    db: DbSession,
    notifier: Notifier,
):
    """
    Create a founder account (super-admin only). A welcome email is sent
    best-effort; a delivery failure does not fail the registration.
    """
    founder = await IdentityService(db).register_founder(
        email=data.email,
        password=data.password,
        name=data.name,
        company_name=data.company_name,
        created_by=user,
        industry=data.industry,
        notes=data.notes,
    )
    await _welcome(db, notifier, founder, user)
    return UserResponse.model_validate(founder)


@router.post("/register/admin", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register_admin(
    data: AdminRegister,
    user: UserManager,
    db: DbSession,
    notifier: Notifier,
):
    """Create an admin account (super-admin only)."""
    admin = await IdentityService(db).register_admin(
        email=data.email,
        password=data.password,
        name=data.name,
        created_by=user,
        bio=data.bio,
    )
    await _welcome(db, notifier, admin, user)
    return UserResponse.model_validate(admin)


@router.get("/admins", response_model=List[UserResponse])
async def list_admins(user: UserManager, db: DbSession):
    """All admin accounts, newest first."""
    admins = await IdentityService(db).list_by_role(UserRole.ADMIN)
    return [UserResponse.model_validate(a) for a in admins]


@router.get("/founders", response_model=List[UserResponse])
async def list_founders(user: UserManager, db: DbSession):
    """All founder accounts, newest first."""
    founders = await IdentityService(db).list_by_role(UserRole.FOUNDER)
    return [UserResponse.model_validate(f) for f in founders]


@router.get("/founders/stats", response_model=List[FounderStatsResponse])
async def list_founders_with_post_stats(user: UserManager, db: DbSession):
    """All founders with their pending, scheduled and approved post counts."""
    return await IdentityService(db).list_founders_with_post_stats()


@router.post("/forgot-password", response_model=SuccessResponse)
async def forgot_password(data: ForgotPasswordRequest, db: DbSession, notifier: Notifier):
    """
    Email a password reset link. The token is stored even if the email
    cannot be delivered; asking again issues a fresh one.
    """
    account, token = await IdentityService(db).request_password_reset(data.email)
    await notify_safely(
        notifier,
        TemplateKind.PASSWORD_RESET,
        account.email,
        {
            "name": account.name,
            "token": token,
            "expires_in_minutes": get_settings().password_reset_expire_minutes,
        },
    )
    return SuccessResponse(message="Password reset email sent")


@router.post("/reset-password", response_model=SuccessResponse)
async def reset_password(data: ResetPasswordRequest, db: DbSession):
    await IdentityService(db).reset_password(data.token, data.password)
    return SuccessResponse(message="Password has been reset")
