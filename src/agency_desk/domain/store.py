"""Immutable in-memory entity store.

The store is a value: every mutation produces a new ``EntityStore`` and the
previous one stays valid. Reports read through a ``TenantView``, which only
ever exposes a single tenant's records.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Iterable, Mapping

from agency_desk.domain.models import Entry, ManagedAgent, TenantContext, TenantSettings


@dataclass(frozen=True)
class TenantView:
    """Read-only, tenant-scoped slice of the store."""

    tenant_id: str
    entries: tuple[Entry, ...]
    agents: tuple[ManagedAgent, ...]
    settings: TenantSettings


@dataclass(frozen=True)
class EntityStore:
    """All entries, agents and settings held in memory."""

    entries: tuple[Entry, ...] = ()
    agents: tuple[ManagedAgent, ...] = ()
    settings: Mapping[str, TenantSettings] = field(
        default_factory=lambda: MappingProxyType({})
    )
    last_entry_id: int = 0

    # --- Reads ---

    def entries_for_tenant(self, tenant_id: str) -> tuple[Entry, ...]:
        """All entries of one tenant, in insertion order."""
        return tuple(e for e in self.entries if e.business_id == tenant_id)

    def agents_for_tenant(self, tenant_id: str) -> tuple[ManagedAgent, ...]:
        """All managed agents of one tenant, in registration order."""
        return tuple(a for a in self.agents if a.business_id == tenant_id)

    def settings_for_tenant(self, tenant_id: str) -> TenantSettings:
        """Option lists of one tenant, falling back to the defaults."""
        return self.settings.get(tenant_id, TenantSettings())

    def view(self, ctx: TenantContext) -> TenantView:
        """Build the tenant-scoped read handle for a context."""
        return TenantView(
            tenant_id=ctx.tenant_id,
            entries=self.entries_for_tenant(ctx.tenant_id),
            agents=self.agents_for_tenant(ctx.tenant_id),
            settings=self.settings_for_tenant(ctx.tenant_id),
        )

    def next_entry_id(self) -> int:
        """Next entry id: one past the highest id ever issued.

        Single-writer only. Ids are unique store-wide and a deleted id is
        never handed out again.
        """
        highest = max((e.id for e in self.entries), default=0)
        return max(highest, self.last_entry_id, 0) + 1

    # --- Copy-on-write helpers ---

    def with_entries(self, entries: Iterable[Entry]) -> "EntityStore":
        entries = tuple(entries)
        highest = max((e.id for e in entries), default=0)
        return replace(
            self, entries=entries, last_entry_id=max(self.last_entry_id, highest)
        )

    def with_agents(self, agents: Iterable[ManagedAgent]) -> "EntityStore":
        return replace(self, agents=tuple(agents))

    def with_settings(self, tenant_id: str, settings: TenantSettings) -> "EntityStore":
        merged = dict(self.settings)
        merged[tenant_id] = settings
        return replace(self, settings=MappingProxyType(merged))
