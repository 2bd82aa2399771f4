"""Unit tests for password hashing."""

from contentops.kernel.identity.password import (
    PasswordHasher,
    hash_password,
    verify_password,
)


class TestPasswordHasher:
    """Tests for PasswordHasher."""

    def test_hash_creates_different_hashes(self):
        """Same password should create different hashes (due to salt)."""
        hasher = PasswordHasher(rounds=4)
        hash1 = hasher.hash("TestPassword123")
        hash2 = hasher.hash("TestPassword123")

        assert hash1 != hash2
        assert hash1.startswith("$2b$04$")

    def test_verify_correct_password(self):
        hasher = PasswordHasher(rounds=4)
        hashed = hasher.hash("TestPassword123")

        assert hasher.verify("TestPassword123", hashed) is True

    def test_verify_wrong_password(self):
        hasher = PasswordHasher(rounds=4)
        hashed = hasher.hash("TestPassword123")

        assert hasher.verify("WrongPassword", hashed) is False

    def test_malformed_hash_never_matches(self):
        assert PasswordHasher(rounds=4).verify("anything", "not-a-bcrypt-hash") is False

    def test_rounds_default_to_settings(self):
        # conftest sets BCRYPT_ROUNDS=4
        assert PasswordHasher().rounds == 4

    def test_convenience_functions(self):
        hashed = hash_password("TestPassword123")

        assert verify_password("TestPassword123", hashed) is True
        assert verify_password("wrong", hashed) is False
