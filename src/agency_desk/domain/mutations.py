"""Validated create/update/delete reducers.

Each reducer takes the current store and a tenant context and returns a new
store together with the affected record. A reducer that raises leaves the
caller's store untouched, so a failed operation never half-applies.
"""

import math
import uuid
from dataclasses import replace
from enum import Enum
from typing import TypeVar

from agency_desk.auth.passwords import PasswordHasher, password_error
from agency_desk.common.time_utils import in_month, is_month_key, parse_date
from agency_desk.domain.errors import (
    DuplicateSettingError,
    DuplicateUsernameError,
    NotFoundError,
    ValidationError,
)
from agency_desk.domain.models import (
    AgentDraft,
    AgentRole,
    AgentStatus,
    Category,
    Entry,
    EntryDraft,
    ManagedAgent,
    RedeemType,
    ReferralCode,
    SettingList,
    TenantContext,
    TenantSettings,
    source_for_code,
)
from agency_desk.domain.store import EntityStore

E = TypeVar("E", bound=Enum)


def _coerce(enum_cls: type[E], value: object, field: str) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Invalid {field.replace('_', ' ')}: {value}", field=field) from None


def _require_text(value: str | None, field: str, label: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{label} is required.", field=field)
    return text


def _check_option(settings: TenantSettings, key: SettingList, value: str, field: str) -> None:
    if value not in settings.values(key):
        raise ValidationError(f"Unknown {key.singular.lower()}: {value!r}", field=field)


def _check_amount(amount: float) -> float:
    if not math.isfinite(amount):
        raise ValidationError("Amount must be a finite number.", field="amount")
    if amount < 0:
        raise ValidationError("Amount cannot be negative.", field="amount")
    return amount


def _check_password(password: str | None) -> str:
    problem = password_error(password)
    if problem:
        raise ValidationError(problem, field="password")
    return password


# --- Entries ---


def submit_entry(
    store: EntityStore, ctx: TenantContext, draft: EntryDraft
) -> tuple[EntityStore, Entry]:
    """Validate a draft and append it as a new entry.

    Freeplay and Redeem entries always carry an amount of 0. The source is
    derived from the referral code, and option fields must belong to the
    tenant's configured lists.
    """
    username = _require_text(draft.username, "username", "Username")
    category = _coerce(Category, draft.category, "category")

    if category is Category.RECHARGE:
        if draft.amount is None:
            raise ValidationError("Amount is required for a recharge.", field="amount")
        try:
            amount = float(draft.amount)
        except (TypeError, ValueError):
            raise ValidationError("Amount must be a number.", field="amount") from None
        _check_amount(amount)
    else:
        amount = 0.0

    try:
        points_load = int(draft.points_load)
    except (TypeError, ValueError):
        raise ValidationError("Points load must be a whole number.", field="points_load") from None
    if points_load < 0:
        raise ValidationError("Points load cannot be negative.", field="points_load")

    try:
        entry_date = parse_date(draft.date)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date: {draft.date}", field="date") from None

    settings = store.settings_for_tenant(ctx.tenant_id)
    payment_method = draft.payment_method
    if category is Category.FREEPLAY and not payment_method and settings.payment_methods:
        payment_method = settings.payment_methods[0]

    _check_option(settings, SettingList.PAGE_NAMES, draft.page_name, "page_name")
    _check_option(settings, SettingList.PLATFORMS, draft.platform, "platform")
    _check_option(settings, SettingList.PAYMENT_METHODS, payment_method, "payment_method")
    _check_option(settings, SettingList.PLAYER_HISTORIES, draft.player_history, "player_history")

    referral_code = _coerce(ReferralCode, draft.referral_code, "referral_code")

    entry = Entry(
        id=store.next_entry_id(),
        business_id=ctx.tenant_id,
        date=entry_date,
        agent_name=(draft.agent_name or ctx.actor).strip(),
        category=category,
        page_name=draft.page_name,
        username=username,
        amount=amount,
        points_load=points_load,
        platform=draft.platform,
        source=source_for_code(referral_code),
        referral_code=referral_code,
        redeem_type=_coerce(RedeemType, draft.redeem_type, "redeem_type"),
        payment_method=payment_method,
        player_history=draft.player_history,
    )
    return store.with_entries((*store.entries, entry)), entry


def _entry_index(store: EntityStore, ctx: TenantContext, entry_id: int) -> int:
    for index, entry in enumerate(store.entries):
        if entry.id == entry_id and entry.business_id == ctx.tenant_id:
            return index
    raise NotFoundError(f"Entry {entry_id} not found.")


def edit_entry(
    store: EntityStore, ctx: TenantContext, entry: Entry
) -> tuple[EntityStore, Entry]:
    """Replace an existing entry of the tenant with a full new record."""
    index = _entry_index(store, ctx, entry.id)
    _require_text(entry.username, "username", "Username")
    _check_amount(entry.amount)
    if entry.points_load < 0:
        raise ValidationError("Points load cannot be negative.", field="points_load")

    updated = replace(
        entry,
        business_id=ctx.tenant_id,
        username=entry.username.strip(),
        source=source_for_code(entry.referral_code),
    )
    entries = list(store.entries)
    entries[index] = updated
    return store.with_entries(entries), updated


def delete_entry(
    store: EntityStore, ctx: TenantContext, entry_id: int
) -> tuple[EntityStore, Entry]:
    """Remove one entry of the tenant."""
    index = _entry_index(store, ctx, entry_id)
    removed = store.entries[index]
    entries = store.entries[:index] + store.entries[index + 1 :]
    return store.with_entries(entries), removed


def delete_entries_for_month(
    store: EntityStore, ctx: TenantContext, month: str
) -> tuple[EntityStore, int]:
    """Remove the tenant's entries dated within a "YYYY-MM" month.

    Other tenants' entries for the same month are kept.
    """
    if not is_month_key(month):
        raise ValidationError(f"Invalid month: {month!r} (expected YYYY-MM)", field="month")

    kept = tuple(
        e
        for e in store.entries
        if not (e.business_id == ctx.tenant_id and in_month(e.date, month))
    )
    return store.with_entries(kept), len(store.entries) - len(kept)


# --- Agents ---


def _agent_index(store: EntityStore, ctx: TenantContext, agent_id: str) -> int:
    for index, agent in enumerate(store.agents):
        if agent.id == agent_id and agent.business_id == ctx.tenant_id:
            return index
    raise NotFoundError("Agent not found.")


def _check_username_free(
    store: EntityStore, ctx: TenantContext, username: str, exclude_id: str | None = None
) -> None:
    folded = username.casefold()
    for agent in store.agents_for_tenant(ctx.tenant_id):
        if agent.id != exclude_id and agent.username.casefold() == folded:
            raise DuplicateUsernameError(username)


def _replace_agent(store: EntityStore, index: int, agent: ManagedAgent) -> EntityStore:
    agents = list(store.agents)
    agents[index] = agent
    return store.with_agents(agents)


def register_agent(
    store: EntityStore, ctx: TenantContext, draft: AgentDraft, hasher: PasswordHasher
) -> tuple[EntityStore, ManagedAgent]:
    """Create a new active agent for the tenant."""
    agent_name = _require_text(draft.agent_name, "agent_name", "Agent name")
    username = _require_text(draft.username, "username", "Username")
    password = _check_password(draft.password)
    role = _coerce(AgentRole, draft.role, "role")
    _check_username_free(store, ctx, username)

    agent = ManagedAgent(
        id=f"agent_{uuid.uuid4().hex}",
        business_id=ctx.tenant_id,
        agent_name=agent_name,
        username=username,
        password_hash=hasher.hash(password),
        role=role,
        status=AgentStatus.ACTIVE,
    )
    return store.with_agents((*store.agents, agent)), agent


def update_agent(
    store: EntityStore,
    ctx: TenantContext,
    agent_id: str,
    *,
    agent_name: str,
    username: str,
    role: AgentRole | str,
) -> tuple[EntityStore, ManagedAgent]:
    """Update an agent's display name, username and role."""
    index = _agent_index(store, ctx, agent_id)
    agent_name = _require_text(agent_name, "agent_name", "Agent name")
    username = _require_text(username, "username", "Username")
    _check_username_free(store, ctx, username, exclude_id=agent_id)

    updated = replace(
        store.agents[index],
        agent_name=agent_name,
        username=username,
        role=_coerce(AgentRole, role, "role"),
    )
    return _replace_agent(store, index, updated), updated


def set_agent_status(
    store: EntityStore, ctx: TenantContext, agent_id: str, active: bool
) -> tuple[EntityStore, ManagedAgent]:
    """Activate or deactivate an agent."""
    index = _agent_index(store, ctx, agent_id)
    status = AgentStatus.ACTIVE if active else AgentStatus.INACTIVE
    updated = replace(store.agents[index], status=status)
    return _replace_agent(store, index, updated), updated


def reset_agent_password(
    store: EntityStore,
    ctx: TenantContext,
    agent_id: str,
    new_password: str,
    hasher: PasswordHasher,
) -> tuple[EntityStore, ManagedAgent]:
    """Replace an agent's password."""
    password = _check_password(new_password)
    index = _agent_index(store, ctx, agent_id)
    updated = replace(store.agents[index], password_hash=hasher.hash(password))
    return _replace_agent(store, index, updated), updated


def delete_agent(
    store: EntityStore, ctx: TenantContext, agent_id: str
) -> tuple[EntityStore, ManagedAgent]:
    """Remove an agent. Entries keep the agent name as a historical snapshot."""
    index = _agent_index(store, ctx, agent_id)
    removed = store.agents[index]
    return store.with_agents(store.agents[:index] + store.agents[index + 1 :]), removed


# --- Settings ---


def _sort_key(value: str) -> tuple[str, str]:
    return value.casefold(), value


def _check_setting_free(
    values: tuple[str, ...], value: str, exclude_index: int | None = None
) -> None:
    folded = value.casefold()
    for i, existing in enumerate(values):
        if i != exclude_index and existing.casefold() == folded:
            raise DuplicateSettingError(value)


def _check_index(values: tuple[str, ...], index: int, key: SettingList) -> None:
    if not 0 <= index < len(values):
        raise NotFoundError(f"{key.singular} #{index} not found.")


def _with_values(
    store: EntityStore, ctx: TenantContext, key: SettingList, values: tuple[str, ...]
) -> tuple[EntityStore, TenantSettings]:
    settings = replace(store.settings_for_tenant(ctx.tenant_id), **{key.value: values})
    return store.with_settings(ctx.tenant_id, settings), settings


def add_setting_value(
    store: EntityStore, ctx: TenantContext, key: SettingList, value: str
) -> tuple[EntityStore, TenantSettings]:
    """Append a value to a tenant list and re-sort it alphabetically."""
    key = SettingList(key)
    value = _require_text(value, "value", "Value")
    values = store.settings_for_tenant(ctx.tenant_id).values(key)
    _check_setting_free(values, value)
    return _with_values(store, ctx, key, tuple(sorted((*values, value), key=_sort_key)))


def edit_setting_value(
    store: EntityStore, ctx: TenantContext, key: SettingList, index: int, value: str
) -> tuple[EntityStore, TenantSettings]:
    """Replace the value at an index, keeping its position."""
    key = SettingList(key)
    value = _require_text(value, "value", "Value")
    values = store.settings_for_tenant(ctx.tenant_id).values(key)
    _check_index(values, index, key)
    _check_setting_free(values, value, exclude_index=index)
    updated = values[:index] + (value,) + values[index + 1 :]
    return _with_values(store, ctx, key, updated)


def delete_setting_value(
    store: EntityStore, ctx: TenantContext, key: SettingList, index: int
) -> tuple[EntityStore, TenantSettings]:
    """Remove the value at an index."""
    key = SettingList(key)
    values = store.settings_for_tenant(ctx.tenant_id).values(key)
    _check_index(values, index, key)
    return _with_values(store, ctx, key, values[:index] + values[index + 1 :])
