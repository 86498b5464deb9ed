"""Back-office facade: holds the current store and persists every change.

Each mutation runs a pure reducer, saves the tenant's new data through the
backend and only then swaps the new store in. If the reducer or the save
raises, the desk keeps its previous store.
"""

from pathlib import Path
from typing import Any

from agency_desk.auth.passwords import PasswordHasher
from agency_desk.common.logging import get_logger
from agency_desk.common.time_utils import today as current_date
from agency_desk.domain import mutations
from agency_desk.domain.errors import AuthorizationError, NotFoundError
from agency_desk.domain.models import (
    AgentDraft,
    AgentRole,
    Entry,
    EntryDraft,
    ManagedAgent,
    SettingList,
    TenantContext,
    TenantSettings,
    UserRole,
)
from agency_desk.domain.store import EntityStore, TenantView
from agency_desk.reporting.export import export_csv, export_filename, report_records
from agency_desk.reporting.filters import (
    DailyFilters,
    MonthlyFilters,
    ProgressFilters,
    ReferralFilters,
)
from agency_desk.reporting.reports import (
    AgentProgressReport,
    DailyReport,
    MonthlyReport,
    ReferralReport,
    build_daily_report,
    build_monthly_report,
    build_progress_report,
    build_referral_report,
)
from agency_desk.storage.csv_import import ImportResult, import_entries, read_csv_file
from agency_desk.storage.interfaces import IBackendStore

logger = get_logger(__name__)


def _require_admin(ctx: TenantContext) -> None:
    if ctx.role is not UserRole.ADMIN:
        raise AuthorizationError("Only an admin can perform this action.")


class AgencyDesk:
    """Single-writer owner of the entity store."""

    def __init__(
        self,
        store: EntityStore | None = None,
        backend: IBackendStore | None = None,
        hasher: PasswordHasher | None = None,
    ):
        """Initialize desk.

        Args:
            store: Initial store (empty if not given).
            backend: Persistence backend; changes stay in memory when None.
            hasher: Password hasher for agent credentials.
        """
        self._store = store or EntityStore()
        self.backend = backend
        self.hasher = hasher or PasswordHasher()

    @classmethod
    def from_backend(
        cls, backend: IBackendStore, hasher: PasswordHasher | None = None
    ) -> "AgencyDesk":
        """Create a desk over the data currently held by a backend."""
        return cls(store=backend.load_store(), backend=backend, hasher=hasher)

    @property
    def store(self) -> EntityStore:
        """The current store value."""
        return self._store

    def view(self, ctx: TenantContext) -> TenantView:
        """Tenant-scoped read handle."""
        return self._store.view(ctx)

    def _commit(self, ctx: TenantContext, store: EntityStore, event: str, **fields: Any) -> None:
        if self.backend is not None:
            self.backend.save_tenant(store, ctx.tenant_id)
        self._store = store
        logger.info(event, tenant_id=ctx.tenant_id, actor=ctx.actor, **fields)

    # --- Entries ---

    def submit_entry(self, ctx: TenantContext, draft: EntryDraft) -> Entry:
        """Record a new entry. Admins and entry agents may submit."""
        store, entry = mutations.submit_entry(self._store, ctx, draft)
        self._commit(
            ctx,
            store,
            "entry_submitted",
            entry_id=entry.id,
            category=entry.category.value,
            amount=entry.amount,
        )
        return entry

    def edit_entry(self, ctx: TenantContext, entry: Entry) -> Entry:
        _require_admin(ctx)
        store, updated = mutations.edit_entry(self._store, ctx, entry)
        self._commit(ctx, store, "entry_edited", entry_id=updated.id)
        return updated

    def delete_entry(self, ctx: TenantContext, entry_id: int) -> Entry:
        _require_admin(ctx)
        store, removed = mutations.delete_entry(self._store, ctx, entry_id)
        self._commit(ctx, store, "entry_deleted", entry_id=removed.id)
        return removed

    def delete_entries_for_month(self, ctx: TenantContext, month: str) -> int:
        """Delete the tenant's entries for a month.

        Returns:
            Number of entries removed.
        """
        _require_admin(ctx)
        store, removed = mutations.delete_entries_for_month(self._store, ctx, month)
        self._commit(ctx, store, "monthly_entries_deleted", month=month, removed=removed)
        return removed

    def import_entries_csv(
        self, ctx: TenantContext, path: str | Path, overwrite: bool = False
    ) -> ImportResult:
        """Import entries from a CSV file.

        Valid rows are kept even when other rows fail. If no row imports,
        nothing is saved and the tenant's existing entries stay, even in
        overwrite mode.
        """
        _require_admin(ctx)
        result = import_entries(self._store, ctx, read_csv_file(path), overwrite=overwrite)
        if result.imported:
            self._commit(
                ctx,
                result.store,
                "csv_import_committed",
                path=str(path),
                imported=len(result.imported),
                failed=len(result.errors),
            )
        return result

    # --- Agents ---

    def register_agent(self, ctx: TenantContext, draft: AgentDraft) -> ManagedAgent:
        _require_admin(ctx)
        store, agent = mutations.register_agent(self._store, ctx, draft, self.hasher)
        self._commit(ctx, store, "agent_registered", agent_id=agent.id, username=agent.username)
        return agent

    def update_agent(
        self,
        ctx: TenantContext,
        agent_id: str,
        *,
        agent_name: str,
        username: str,
        role: AgentRole | str,
    ) -> ManagedAgent:
        _require_admin(ctx)
        store, agent = mutations.update_agent(
            self._store, ctx, agent_id, agent_name=agent_name, username=username, role=role
        )
        self._commit(ctx, store, "agent_updated", agent_id=agent.id)
        return agent

    def set_agent_status(self, ctx: TenantContext, agent_id: str, active: bool) -> ManagedAgent:
        _require_admin(ctx)
        store, agent = mutations.set_agent_status(self._store, ctx, agent_id, active)
        self._commit(ctx, store, "agent_status_changed", agent_id=agent.id, status=agent.status.value)
        return agent

    def reset_agent_password(
        self, ctx: TenantContext, agent_id: str, new_password: str
    ) -> ManagedAgent:
        _require_admin(ctx)
        store, agent = mutations.reset_agent_password(
            self._store, ctx, agent_id, new_password, self.hasher
        )
        self._commit(ctx, store, "agent_password_reset", agent_id=agent.id)
        return agent

    def delete_agent(self, ctx: TenantContext, agent_id: str) -> ManagedAgent:
        _require_admin(ctx)
        store, agent = mutations.delete_agent(self._store, ctx, agent_id)
        self._commit(ctx, store, "agent_deleted", agent_id=agent.id)
        return agent

    def authenticate_agent(
        self, ctx: TenantContext, agent_id: str, password: str
    ) -> ManagedAgent:
        """Check an agent's credentials for an entry-agent sign-in.

        Raises:
            NotFoundError: If the agent does not belong to the tenant.
            AuthorizationError: If the agent is inactive or the password is wrong.
        """
        agent = next((a for a in self.view(ctx).agents if a.id == agent_id), None)
        if agent is None:
            raise NotFoundError("Agent not found. Please refresh.")
        if not agent.is_active:
            logger.info("agent_login_rejected", tenant_id=ctx.tenant_id, agent_id=agent_id, reason="inactive")
            raise AuthorizationError("Your access has been disabled. Please contact admin.")
        if not self.hasher.verify(password, agent.password_hash):
            logger.info("agent_login_rejected", tenant_id=ctx.tenant_id, agent_id=agent_id, reason="password")
            raise AuthorizationError("Incorrect password.")
        logger.info("agent_logged_in", tenant_id=ctx.tenant_id, agent_id=agent_id)
        return agent

    # --- Settings ---

    def add_setting_value(
        self, ctx: TenantContext, key: SettingList | str, value: str
    ) -> TenantSettings:
        _require_admin(ctx)
        store, settings = mutations.add_setting_value(self._store, ctx, SettingList(key), value)
        self._commit(ctx, store, "setting_added", setting_list=SettingList(key).value, value=value.strip())
        return settings

    def edit_setting_value(
        self, ctx: TenantContext, key: SettingList | str, index: int, value: str
    ) -> TenantSettings:
        _require_admin(ctx)
        store, settings = mutations.edit_setting_value(
            self._store, ctx, SettingList(key), index, value
        )
        self._commit(ctx, store, "setting_edited", setting_list=SettingList(key).value, index=index)
        return settings

    def delete_setting_value(
        self, ctx: TenantContext, key: SettingList | str, index: int
    ) -> TenantSettings:
        _require_admin(ctx)
        store, settings = mutations.delete_setting_value(self._store, ctx, SettingList(key), index)
        self._commit(ctx, store, "setting_deleted", setting_list=SettingList(key).value, index=index)
        return settings

    # --- Reports ---

    def daily_report(self, ctx: TenantContext, filters: DailyFilters | None = None) -> DailyReport:
        return build_daily_report(self.view(ctx), filters or DailyFilters.cleared(current_date()))

    def monthly_report(
        self, ctx: TenantContext, filters: MonthlyFilters | None = None
    ) -> MonthlyReport:
        return build_monthly_report(self.view(ctx), filters or MonthlyFilters.for_today(current_date()))

    def referral_report(
        self, ctx: TenantContext, filters: ReferralFilters | None = None
    ) -> ReferralReport:
        view = self.view(ctx)
        return build_referral_report(
            view, filters or ReferralFilters.spanning(view.entries, current_date())
        )

    def progress_report(
        self, ctx: TenantContext, filters: ProgressFilters | None = None
    ) -> AgentProgressReport:
        return build_progress_report(
            self.view(ctx), filters or ProgressFilters.for_today(current_date())
        )

    def export_report(self, report: Any, directory: str | Path) -> Path:
        """Export a report's rows to CSV under its default file name.

        Raises:
            EmptyExportError: If the report has no rows. No file is created.
        """
        return export_csv(report_records(report), Path(directory) / export_filename(report))
