"""Domain entities for the back office."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any

from agency_desk.common.time_utils import utc_now


class Category(str, Enum):
    """Transaction category."""

    RECHARGE = "Recharge"
    FREEPLAY = "Freeplay"
    REDEEM = "Redeem"


class Source(str, Enum):
    """Traffic source, derived from the referral code."""

    REFERRAL = "Referral"
    ADS = "Ads"
    RANDOM = "Random"


class ReferralCode(str, Enum):
    """Marketing attribution codes."""

    FR2K = "FR2K"
    FR3L = "FR3L"
    UM303 = "UM303"
    HM303 = "HM303"
    BN303 = "BN303"
    AS303 = "AS303"
    JF303 = "JF303"
    HA303 = "HA303"
    MZ303 = "MZ303"
    SH303 = "SH303"
    C2218 = "2218"
    C786 = "786"
    TP303 = "TP303"
    AL303 = "AL303"
    PT303 = "PT303"
    ADS = "ADS"
    RANDOM = "Random"


class RedeemType(str, Enum):
    """Whether the player was already paid or newly paid."""

    ALREADY_PAID = "Already Paid"
    NEW_PAID = "New Paid"


class AgentRole(str, Enum):
    """Access role assigned to a managed agent (informational)."""

    VIEWER = "Viewer"
    EDITOR = "Editor"
    FULL_ACCESS = "Full Access"


class AgentStatus(str, Enum):
    """Whether a managed agent may sign in."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class UserRole(str, Enum):
    """Role chosen after a business signs in."""

    ADMIN = "Admin"
    ENTRY_AGENT = "Entry Agent"


class SettingList(str, Enum):
    """The four tenant-configurable option lists."""

    PAGE_NAMES = "page_names"
    PLATFORMS = "platforms"
    PAYMENT_METHODS = "payment_methods"
    PLAYER_HISTORIES = "player_histories"

    @property
    def singular(self) -> str:
        """Human label for a single value of this list."""
        return {
            SettingList.PAGE_NAMES: "Page Name",
            SettingList.PLATFORMS: "Platform",
            SettingList.PAYMENT_METHODS: "Payment Method",
            SettingList.PLAYER_HISTORIES: "Player History Option",
        }[self]


def source_for_code(code: ReferralCode) -> Source:
    """Derive the traffic source for a referral code.

    ADS maps to Ads, Random maps to Random, every other code is a Referral.
    """
    if code is ReferralCode.ADS:
        return Source.ADS
    if code is ReferralCode.RANDOM:
        return Source.RANDOM
    return Source.REFERRAL


DEFAULT_PAGE_NAMES = ("Gaming Slots", "Orion Era", "Jeetwin", "BetHub", "Nolimit Slots", "CashDock")
DEFAULT_PLATFORMS = (
    "Orion Star", "Juwa", "FireKirin", "Gamevault", "Ultra Panda", "Cash Machine",
    "Bigwinner", "Dragon Dynasty", "VB Link", "Game Room", "River Sweep", "Moolah",
    "Yolo", "Panda Master", "Mafia City", "Cameroom", "Milkyway", "Random",
)
DEFAULT_PAYMENT_METHODS = ("Chime", "CashApp", "Apple Pay", "PayPal")
DEFAULT_PLAYER_HISTORIES = ("Already Paid", "New Paid", "New Freeplay", "Null")


@dataclass(frozen=True)
class Entry:
    """One recorded player transaction."""

    id: int
    business_id: str
    date: date
    agent_name: str
    category: Category
    page_name: str
    username: str
    amount: float
    points_load: int
    platform: str
    source: Source
    referral_code: ReferralCode
    redeem_type: RedeemType
    payment_method: str
    player_history: str

    @property
    def month(self) -> str:
        """The "YYYY-MM" key of the entry date."""
        return self.date.isoformat()[:7]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (export order)."""
        return {
            "id": self.id,
            "business_id": self.business_id,
            "date": self.date.isoformat(),
            "agent_name": self.agent_name,
            "category": self.category.value,
            "page_name": self.page_name,
            "username": self.username,
            "amount": self.amount,
            "points_load": self.points_load,
            "platform": self.platform,
            "source": self.source.value,
            "referral_code": self.referral_code.value,
            "redeem_type": self.redeem_type.value,
            "payment_method": self.payment_method,
            "player_history": self.player_history,
        }


@dataclass
class EntryDraft:
    """Submission payload for a new entry."""

    date: date
    category: Category
    username: str
    page_name: str
    platform: str
    referral_code: ReferralCode
    amount: float | None = None
    points_load: int = 0
    redeem_type: RedeemType = RedeemType.ALREADY_PAID
    payment_method: str = ""
    player_history: str = ""
    agent_name: str | None = None  # Defaults to the submitting actor


@dataclass(frozen=True)
class ManagedAgent:
    """A tenant's staff user who submits entries."""

    id: str
    business_id: str
    agent_name: str
    username: str
    password_hash: str
    role: AgentRole = AgentRole.VIEWER
    status: AgentStatus = AgentStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status is AgentStatus.ACTIVE

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary. The password hash is never included."""
        return {
            "id": self.id,
            "business_id": self.business_id,
            "agent_name": self.agent_name,
            "username": self.username,
            "role": self.role.value,
            "status": self.status.value,
        }


@dataclass
class AgentDraft:
    """Registration payload for a new agent."""

    agent_name: str
    username: str
    password: str
    role: AgentRole = AgentRole.VIEWER


@dataclass(frozen=True)
class TenantSettings:
    """Per-tenant option lists offered at entry time."""

    page_names: tuple[str, ...] = DEFAULT_PAGE_NAMES
    platforms: tuple[str, ...] = DEFAULT_PLATFORMS
    payment_methods: tuple[str, ...] = DEFAULT_PAYMENT_METHODS
    player_histories: tuple[str, ...] = DEFAULT_PLAYER_HISTORIES

    def values(self, key: SettingList) -> tuple[str, ...]:
        """Get the values of one list."""
        return getattr(self, key.value)

    def to_dict(self) -> dict[str, list[str]]:
        return {key.value: list(self.values(key)) for key in SettingList}


@dataclass
class Business:
    """A tenant account."""

    id: str
    business_name: str
    owner_name: str
    email: str
    phone: str = ""
    logo_url: str | None = None
    auth_user_id: str | None = None
    created_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "business_name": self.business_name,
            "owner_name": self.owner_name,
            "email": self.email,
            "phone": self.phone,
            "logo_url": self.logo_url,
            "auth_user_id": self.auth_user_id,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class TenantContext:
    """Explicit tenant/session scope threaded through every desk call."""

    tenant_id: str
    actor: str
    role: UserRole = UserRole.ADMIN
