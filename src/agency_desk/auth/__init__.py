"""Auth module: password hashing and business account authentication."""

from agency_desk.auth.passwords import (
    MAX_PASSWORD_BYTES,
    MIN_PASSWORD_LENGTH,
    PasswordHasher,
    password_error,
)
from agency_desk.auth.interfaces import AuthEvent, AuthResult, IAuthProvider
from agency_desk.auth.local import LocalAuthProvider

__all__ = [
    "AuthEvent",
    "AuthResult",
    "IAuthProvider",
    "LocalAuthProvider",
    "MAX_PASSWORD_BYTES",
    "MIN_PASSWORD_LENGTH",
    "PasswordHasher",
    "password_error",
]
