"""Backend store interface and data types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from agency_desk.common.time_utils import utc_now
from agency_desk.domain.models import Business
from agency_desk.domain.store import EntityStore


class BackendError(Exception):
    """Exception for persistence failures."""

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message)
        self.operation = operation


@dataclass
class AuthUser:
    """Stored sign-in credentials."""

    id: str
    email: str
    password_hash: str
    created_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary. The password hash is never included."""
        return {"id": self.id, "email": self.email, "created_at": self.created_at.isoformat()}


class IBackendStore(ABC):
    """Abstract interface for tenant persistence."""

    # --- Auth users ---

    @abstractmethod
    def create_auth_user(self, email: str, password_hash: str) -> AuthUser:
        """Create sign-in credentials.

        Raises:
            BackendError: If the email is already registered.
        """
        ...

    @abstractmethod
    def get_auth_user_by_email(self, email: str) -> AuthUser | None:
        """Get credentials by email (case-insensitive)."""
        ...

    # --- Businesses ---

    @abstractmethod
    def find_business_by_email(self, email: str) -> Business | None:
        """Get a business by its contact email (case-insensitive)."""
        ...

    @abstractmethod
    def get_business(self, business_id: str) -> Business | None:
        """Get a business by id."""
        ...

    @abstractmethod
    def create_business(self, business: Business) -> Business:
        """Insert a new business."""
        ...

    @abstractmethod
    def update_business(self, business_id: str, **fields: Any) -> Business:
        """Update profile fields of a business."""
        ...

    # --- Tenant data ---

    @abstractmethod
    def load_store(self) -> EntityStore:
        """Load every tenant's entries, agents and settings."""
        ...

    @abstractmethod
    def save_tenant(self, store: EntityStore, tenant_id: str) -> None:
        """Persist one tenant's slice of the store atomically."""
        ...
