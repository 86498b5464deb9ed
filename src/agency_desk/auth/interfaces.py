"""Authentication provider interface and data types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable


class AuthEvent(str, Enum):
    """Auth state change events."""

    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"


@dataclass
class AuthResult:
    """Result of an auth call. Exactly one of ``data`` and ``error`` is set."""

    data: dict[str, Any] | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, message: str) -> "AuthResult":
        return cls(error=message)


AuthListener = Callable[[AuthEvent, dict[str, Any] | None], None]


class IAuthProvider(ABC):
    """Abstract interface for business account authentication."""

    @abstractmethod
    def sign_up(
        self, email: str, password: str, profile: dict[str, Any] | None = None
    ) -> AuthResult:
        """Register credentials.

        Args:
            email: Login email.
            password: Plaintext password; only its hash is kept.
            profile: Optional metadata (business and owner name).

        Returns:
            Result whose data holds ``{"user": {...}}``.
        """
        ...

    @abstractmethod
    def sign_in(self, email: str, password: str) -> AuthResult:
        """Verify credentials and start a session."""
        ...

    @abstractmethod
    def sign_out(self) -> AuthResult:
        """End the current session."""
        ...

    @abstractmethod
    def on_auth_state_change(self, callback: AuthListener) -> Callable[[], None]:
        """Subscribe to sign-in/sign-out events.

        Returns:
            A function that removes the subscription.
        """
        ...
