"""Domain module: entities, errors, the entity store and its reducers."""

from agency_desk.domain.errors import (
    AuthorizationError,
    DeskError,
    DuplicateError,
    DuplicateSettingError,
    DuplicateUsernameError,
    EmptyExportError,
    NotFoundError,
    ValidationError,
)
from agency_desk.domain.models import (
    AgentDraft,
    AgentRole,
    AgentStatus,
    Business,
    Category,
    Entry,
    EntryDraft,
    ManagedAgent,
    RedeemType,
    ReferralCode,
    SettingList,
    Source,
    TenantContext,
    TenantSettings,
    UserRole,
    source_for_code,
)
from agency_desk.domain.store import EntityStore, TenantView

__all__ = [
    "AgentDraft",
    "AgentRole",
    "AgentStatus",
    "AuthorizationError",
    "Business",
    "Category",
    "DeskError",
    "DuplicateError",
    "DuplicateSettingError",
    "DuplicateUsernameError",
    "EmptyExportError",
    "Entry",
    "EntryDraft",
    "EntityStore",
    "ManagedAgent",
    "NotFoundError",
    "RedeemType",
    "ReferralCode",
    "SettingList",
    "Source",
    "TenantContext",
    "TenantSettings",
    "TenantView",
    "UserRole",
    "ValidationError",
    "source_for_code",
]
