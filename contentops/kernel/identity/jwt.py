"""
JWT access tokens for bearer authentication.

Token blacklisting is an external collaborator; this module only issues and
verifies signed access tokens.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from pydantic import BaseModel

from contentops.config import get_settings


class AccessTokenPayload(BaseModel):
    """Decoded access token claims."""

    sub: str  # User ID
    email: str
    role: str
    exp: datetime
    iat: datetime
    jti: str


class IssuedToken(BaseModel):
    """A freshly signed access token."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int  # Seconds until expiry


class JWTManager:
    """Creates and verifies signed access tokens."""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        access_token_expire_minutes: Optional[int] = None,
    ):
        settings = get_settings()
        self.secret_key = secret_key or settings.secret_key
        self.algorithm = algorithm or settings.algorithm
        self.access_token_expire_minutes = (
            access_token_expire_minutes or settings.access_token_expire_minutes
        )

    def create_access_token(
        self,
        user_id: uuid.UUID,
        email: str,
        role: str,
        expires_delta: Optional[timedelta] = None,
    ) -> IssuedToken:
        """
        Sign a new access token.

        Args:
            user_id: Subject of the token
            email: User's email
            role: User's role value (super-admin, admin, founder)
            expires_delta: Override for the configured lifetime

        Returns:
            IssuedToken with the encoded token and its lifetime in seconds
        """
        now = datetime.now(timezone.utc)
        lifetime = expires_delta or timedelta(minutes=self.access_token_expire_minutes)
        claims = {
            "sub": str(user_id),
            "email": email,
            "role": role,
            "exp": now + lifetime,
            "iat": now,
            "jti": str(uuid.uuid4()),
            "type": "access",
        }
        token = jwt.encode(claims, self.secret_key, algorithm=self.algorithm)
        return IssuedToken(access_token=token, expires_in=int(lifetime.total_seconds()))

    def verify_access_token(self, token: str) -> Optional[AccessTokenPayload]:
        """
        Decode an access token.

        Returns:
            AccessTokenPayload if the signature and expiry are valid, None otherwise
        """
        try:
            claims = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None

        if claims.get("type") != "access":
            return None

        return AccessTokenPayload(
            sub=claims["sub"],
            email=claims["email"],
            role=claims["role"],
            exp=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
            iat=datetime.fromtimestamp(claims["iat"], tz=timezone.utc),
            jti=claims["jti"],
        )


def create_access_token(
    user_id: uuid.UUID,
    email: str,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> IssuedToken:
    """Sign an access token with the configured settings."""
    return JWTManager().create_access_token(user_id, email, role, expires_delta)


def verify_access_token(token: str) -> Optional[AccessTokenPayload]:
    """Verify an access token with the configured settings."""
    return JWTManager().verify_access_token(token)
