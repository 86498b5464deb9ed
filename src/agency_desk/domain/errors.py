"""Error taxonomy for back-office operations.

Every error carries a message that is safe to show to the user. Callers of
the desk catch ``DeskError`` and surface ``str(error)``.
"""


class DeskError(Exception):
    """Base class for recoverable back-office errors."""


class ValidationError(DeskError):
    """A required field is missing or a value is invalid."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class DuplicateError(DeskError):
    """A value that must be unique within a tenant already exists."""


class DuplicateUsernameError(DuplicateError):
    """An agent username clashes (case-insensitively) within a tenant."""

    def __init__(self, username: str):
        super().__init__("An agent with this username already exists in your business.")
        self.username = username


class DuplicateSettingError(DuplicateError):
    """A setting value clashes (case-insensitively) within its list."""

    def __init__(self, value: str):
        super().__init__(f'"{value}" already exists.')
        self.value = value


class NotFoundError(DeskError):
    """An edit or delete referenced a record absent from the store."""


class AuthorizationError(DeskError):
    """The actor may not perform the operation (e.g. an inactive agent login)."""


class EmptyExportError(ValidationError):
    """A CSV export was requested for zero records."""

    def __init__(self) -> None:
        super().__init__("No data to export.")
