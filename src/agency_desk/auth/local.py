"""Auth provider backed by the local database."""

from typing import Any, Callable

from agency_desk.auth.interfaces import AuthEvent, AuthListener, AuthResult, IAuthProvider
from agency_desk.auth.passwords import PasswordHasher, password_error
from agency_desk.common.logging import get_logger
from agency_desk.storage.interfaces import BackendError, IBackendStore

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid login credentials"


class LocalAuthProvider(IAuthProvider):
    """Email/password auth with bcrypt hashes stored in the backend.

    Emails are matched case-insensitively. Listener errors are logged and do
    not affect the auth call that triggered them.
    """

    def __init__(self, backend: IBackendStore, hasher: PasswordHasher | None = None):
        """Initialize provider.

        Args:
            backend: Store holding auth users.
            hasher: Password hasher (defaults to cost 12).
        """
        self.backend = backend
        self.hasher = hasher or PasswordHasher()
        self._listeners: list[AuthListener] = []
        self._current_user: dict[str, Any] | None = None

    @property
    def current_user(self) -> dict[str, Any] | None:
        """The signed-in user, if any."""
        return self._current_user

    def sign_up(
        self, email: str, password: str, profile: dict[str, Any] | None = None
    ) -> AuthResult:
        email = email.strip().lower()
        if not email or "@" not in email:
            return AuthResult.failure("A valid email address is required.")
        problem = password_error(password)
        if problem:
            return AuthResult.failure(problem)
        if self.backend.get_auth_user_by_email(email) is not None:
            return AuthResult.failure("User already registered")

        try:
            user = self.backend.create_auth_user(email, self.hasher.hash(password))
        except BackendError as e:
            logger.warning("sign_up_failed", email=email, error=str(e))
            return AuthResult.failure(str(e))

        data = {"user": {**user.to_dict(), "metadata": dict(profile or {})}}
        self._set_user(data["user"], AuthEvent.SIGNED_IN)
        logger.info("signed_up", user_id=user.id)
        return AuthResult(data=data)

    def sign_in(self, email: str, password: str) -> AuthResult:
        user = self.backend.get_auth_user_by_email(email.strip().lower())
        if user is None or not self.hasher.verify(password, user.password_hash):
            logger.info("sign_in_rejected", email=email.strip().lower())
            return AuthResult.failure(INVALID_CREDENTIALS)

        data = {"user": user.to_dict()}
        self._set_user(data["user"], AuthEvent.SIGNED_IN)
        logger.info("signed_in", user_id=user.id)
        return AuthResult(data=data)

    def sign_out(self) -> AuthResult:
        user = self._current_user
        self._set_user(None, AuthEvent.SIGNED_OUT)
        if user:
            logger.info("signed_out", user_id=user["id"])
        return AuthResult(data={})

    def on_auth_state_change(self, callback: AuthListener) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _set_user(self, user: dict[str, Any] | None, event: AuthEvent) -> None:
        self._current_user = user
        for listener in list(self._listeners):
            try:
                listener(event, user)
            except Exception as e:
                logger.error("auth_listener_failed", auth_event=event.value, error=str(e))
