"""
Identity Core - Authentication and user management.
"""

from contentops.kernel.identity.password import PasswordHasher, verify_password, hash_password
from contentops.kernel.identity.jwt import (
    JWTManager,
    IssuedToken,
    AccessTokenPayload,
    create_access_token,
    verify_access_token,
)
from contentops.kernel.identity.identity_service import IdentityService

__all__ = [
    "PasswordHasher",
    "verify_password",
    "hash_password",
    "JWTManager",
    "IssuedToken",
    "AccessTokenPayload",
    "create_access_token",
    "verify_access_token",
    "IdentityService",
]
