"""Tests for password hashing."""

import pytest

from agency_desk.auth.passwords import MAX_PASSWORD_BYTES, PasswordHasher, password_error


class TestPasswordHasher:
    """Test bcrypt hashing."""

    def test_hash_verifies(self, hasher: PasswordHasher):
        password_hash = hasher.hash("secret1")

        assert password_hash.startswith("$2b$04$")
        assert hasher.verify("secret1", password_hash)

    def test_wrong_password(self, hasher: PasswordHasher):
        assert not hasher.verify("secret2", hasher.hash("secret1"))

    def test_salted(self, hasher: PasswordHasher):
        """Test the same password hashes differently each time."""
        assert hasher.hash("secret1") != hasher.hash("secret1")

    def test_malformed_hash(self, hasher: PasswordHasher):
        """Test unusable hashes fail verification instead of raising."""
        assert hasher.verify("secret1", "") is False
        assert hasher.verify("secret1", "not-a-hash") is False

    def test_longest_accepted_password(self, hasher: PasswordHasher):
        password = "x" * MAX_PASSWORD_BYTES

        assert password_error(password) is None
        assert hasher.verify(password, hasher.hash(password))


class TestPasswordError:
    """Test the new-password rules."""

    @pytest.mark.parametrize("password", ["secret1", "x" * 72, "é" * 36])
    def test_acceptable(self, password: str):
        assert password_error(password) is None

    @pytest.mark.parametrize("password", [None, "", "12345"])
    def test_too_short(self, password):
        assert password_error(password) == "Password must be at least 6 characters long."

    @pytest.mark.parametrize("password", ["x" * 73, "é" * 37])
    def test_too_long(self, password: str):
        """Test the limit counts UTF-8 bytes, not characters."""
        assert password_error(password) == "Password must be at most 72 bytes long."
