"""Password hashing with bcrypt.

Plaintext passwords are hashed on receipt and never stored or logged.
"""

import bcrypt

MIN_PASSWORD_LENGTH = 6
# bcrypt only accepts this many bytes of input
MAX_PASSWORD_BYTES = 72


def password_error(password: str | None) -> str | None:
    """Return why a new password is unacceptable, or None if it is fine."""
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters long."
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return f"Password must be at most {MAX_PASSWORD_BYTES} bytes long."
    return None


class PasswordHasher:
    """Hash and verify secrets with a salted bcrypt digest."""

    def __init__(self, rounds: int = 12):
        """Initialize hasher.

        Args:
            rounds: bcrypt cost factor (4-31). Tests use the minimum.
        """
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """Hash a password with a fresh salt.

        Returns:
            The bcrypt hash as a string, suitable for storage.
        """
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Verify a password against a stored hash.

        Returns False for empty or malformed hashes instead of raising.
        """
        if not password_hash:
            return False
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            return False
