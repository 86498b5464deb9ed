"""Storage module: database schema and access layer."""

from agency_desk.storage.database import Database
from agency_desk.storage.interfaces import AuthUser, BackendError, IBackendStore

__all__ = [
    "AuthUser",
    "BackendError",
    "Database",
    "IBackendStore",
]
