"""
Password hashing with bcrypt.

The hashing algorithm is a collaborator of the identity core; callers only
see hash() and verify().
"""

from typing import Optional

import bcrypt

from contentops.config import get_settings

# bcrypt ignores everything past 72 bytes
_BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """bcrypt password hasher with a configurable work factor."""

    def __init__(self, rounds: Optional[int] = None):
        self.rounds = rounds or get_settings().bcrypt_rounds

    @staticmethod
    def _encode(password: str) -> bytes:
        return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]

    def hash(self, password: str) -> str:
        """
        Hash a password.

        Args:
            password: Plain text password

        Returns:
            bcrypt hash as text, safe to store in User.password_hash
        """
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(self._encode(password), salt).decode("utf-8")

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """Check a password against a stored hash. A malformed hash never matches."""
        try:
            return bcrypt.checkpw(self._encode(plain_password), hashed_password.encode("utf-8"))
        except ValueError:
            return False


def hash_password(password: str) -> str:
    """Hash a password with the configured work factor."""
    return PasswordHasher().hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password."""
    return PasswordHasher().verify(plain_password, hashed_password)
