"""
Authentication and user registration schemas.
"""

import uuid
from datetime import datetime
from typing import Literal, Optional, Union

from pydantic import BaseModel, EmailStr, Field, field_validator


def _check_password(v: str) -> str:
    if len(v) < 8:
        raise ValueError("Password must be at least 8 characters")
    if not any(c.isalpha() for c in v):
        raise ValueError("Password must contain at least one letter")
    if not any(c.isdigit() for c in v):
        raise ValueError("Password must contain at least one digit")
    return v


class UserLogin(BaseModel):
    """Login request."""

    email: EmailStr
    password: str


class FounderRegister(BaseModel):
    """Founder registration by a super-admin."""

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    name: str = Field(..., min_length=1, max_length=255)
    company_name: str = Field(..., min_length=1, max_length=255)
    industry: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _check_password(v)


class AdminRegister(BaseModel):
    """Admin registration by a super-admin."""

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    name: str = Field(..., min_length=1, max_length=255)
    bio: Optional[str] = None

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _check_password(v)


class FounderProfileResponse(BaseModel):
    kind: Literal["founder"] = "founder"
    company_name: str
    industry: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class AdminProfileResponse(BaseModel):
    kind: Literal["admin"] = "admin"
    bio: Optional[str] = None

    class Config:
        from_attributes = True


class UserResponse(BaseModel):
    """User with its role-selected profile (None for super-admins)."""

    id: uuid.UUID
    email: str
    name: str
    role: str
    is_active: bool
    verified_at: Optional[datetime] = None
    created_at: datetime
    profile: Optional[Union[FounderProfileResponse, AdminProfileResponse]] = None

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    """Authentication token response."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    """New password plus the token from the reset email."""

    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _check_password(v)


class PostStats(BaseModel):
    total: int
    scheduled: int
    approved: int
    pending: int


class FounderStatsResponse(BaseModel):
    """A founder with the post counts the super-admin roster shows."""

    id: uuid.UUID
    name: str
    email: str
    role: str
    verified: bool
    company_name: Optional[str] = None
    industry: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    post_stats: PostStats
