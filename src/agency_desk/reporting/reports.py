"""Report view-models and the pure functions that build them.

Every builder reads from a ``TenantView`` and a filter value and returns a
dataclass with a ``to_dict()`` suitable for JSON output, CSV export or an AI
summary prompt. Nothing here mutates the store.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Sequence

from agency_desk.common.time_utils import in_month
from agency_desk.domain.models import (
    Category,
    Entry,
    ManagedAgent,
    RedeemType,
    ReferralCode,
    source_for_code,
)
from agency_desk.domain.store import TenantView
from agency_desk.reporting.aggregation import (
    BreakdownItem,
    Page,
    by_date,
    by_page,
    by_payment_method,
    by_platform,
    by_referral_code,
    filter_date_range,
    group_and_sum,
    most_frequent,
    of_category,
    paginate,
    sort_breakdown,
    sum_amount,
    sum_points,
    top_by_frequency,
)
from agency_desk.reporting.filters import (
    DailyFilters,
    MonthlyFilters,
    ProgressFilters,
    ReferralFilters,
)

DAILY_TOP_N = 7
MONTHLY_PLATFORM_TOP_N = 10
REFERRAL_TOP_PLATFORMS = 2
HIGHLIGHT_TIERS = 3


def newest_first(entries: Iterable[Entry]) -> list[Entry]:
    """Listing order used by every report table: date desc, then id desc."""
    return sorted(entries, key=lambda e: (e.date, e.id), reverse=True)


def _recharges(entries: Iterable[Entry]) -> list[Entry]:
    return of_category(entries, Category.RECHARGE)


def _items(items: Iterable[Any]) -> list[dict[str, Any]]:
    return [item.to_dict() for item in items]


# --- Daily ---


@dataclass
class DailyReport:
    """Daily activity for one date and optional equality filters."""

    filters: DailyFilters
    total_recharge: float = 0.0
    total_freeplay: float = 0.0
    total_points: int = 0
    by_page: list[BreakdownItem] = field(default_factory=list)
    by_referral_code: list[BreakdownItem] = field(default_factory=list)
    by_platform: list[BreakdownItem] = field(default_factory=list)
    entries: list[Entry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.filters.on_date.isoformat() if self.filters.on_date else None,
            "total_recharge": self.total_recharge,
            "total_freeplay": self.total_freeplay,
            "total_points": self.total_points,
            "entry_count": len(self.entries),
            "by_page": _items(self.by_page),
            "by_referral_code": _items(self.by_referral_code),
            "by_platform": _items(self.by_platform),
        }


def build_daily_report(
    view: TenantView, filters: DailyFilters, top_n: int = DAILY_TOP_N
) -> DailyReport:
    """Build the daily report.

    The three breakdowns only consider recharges with a positive amount.
    """
    entries = newest_first(e for e in view.entries if filters.matches(e))
    loads = [e for e in _recharges(entries) if e.amount > 0]

    return DailyReport(
        filters=filters,
        total_recharge=sum_amount(entries, Category.RECHARGE),
        total_freeplay=sum_amount(entries, Category.FREEPLAY),
        total_points=sum_points(entries),
        by_page=group_and_sum(loads, by_page, top_n=top_n),
        by_referral_code=group_and_sum(loads, by_referral_code, top_n=top_n),
        by_platform=group_and_sum(loads, by_platform, top_n=top_n),
        entries=entries,
    )


# --- Monthly ---


@dataclass(frozen=True)
class PaymentMethodStats:
    """Recharge volume through one payment method."""

    name: str
    total_amount: float
    transaction_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "total_amount": self.total_amount,
            "transaction_count": self.transaction_count,
        }


@dataclass
class MonthlyReport:
    """Totals and breakdowns for one calendar month."""

    filters: MonthlyFilters
    total_recharge: float = 0.0
    total_freeplay: float = 0.0
    total_points: int = 0
    entry_count: int = 0
    payment_methods: list[PaymentMethodStats] = field(default_factory=list)
    top_payment_method: PaymentMethodStats | None = None
    freeplay_ratio: float = 0.0
    platform_points: list[BreakdownItem] = field(default_factory=list)
    page: Page | None = None
    entries: list[Entry] = field(default_factory=list)

    @property
    def payment_method_stats(self) -> dict[str, PaymentMethodStats]:
        """Payment method stats keyed by method name."""
        return {stats.name: stats for stats in self.payment_methods}

    def to_dict(self) -> dict[str, Any]:
        return {
            "month": self.filters.month,
            "total_recharge": self.total_recharge,
            "total_freeplay": self.total_freeplay,
            "total_points": self.total_points,
            "entry_count": self.entry_count,
            "payment_methods": _items(self.payment_methods),
            "top_payment_method": (
                self.top_payment_method.to_dict() if self.top_payment_method else None
            ),
            "freeplay_ratio": round(self.freeplay_ratio, 2),
            "platform_points": _items(self.platform_points),
        }


def payment_method_stats(entries: Iterable[Entry]) -> list[PaymentMethodStats]:
    """Recharge amount and count per payment method, largest amount first."""
    totals: dict[str, float] = defaultdict(float)
    counts: dict[str, int] = defaultdict(int)
    for entry in _recharges(entries):
        totals[entry.payment_method] += entry.amount
        counts[entry.payment_method] += 1
    return [
        PaymentMethodStats(name=item.key, total_amount=item.value, transaction_count=counts[item.key])
        for item in sort_breakdown(dict(totals))
    ]


def build_monthly_report(
    view: TenantView,
    filters: MonthlyFilters,
    platform_top_n: int = MONTHLY_PLATFORM_TOP_N,
) -> MonthlyReport:
    """Build the monthly report.

    The top payment method is the one with the largest recharge amount;
    ties go to the alphabetically first method name.
    """
    entries = newest_first(e for e in view.entries if in_month(e.date, filters.month))
    total_recharge = sum_amount(entries, Category.RECHARGE)
    total_freeplay = sum_amount(entries, Category.FREEPLAY)
    methods = payment_method_stats(entries)

    return MonthlyReport(
        filters=filters,
        total_recharge=total_recharge,
        total_freeplay=total_freeplay,
        total_points=sum_points(entries),
        entry_count=len(entries),
        payment_methods=methods,
        top_payment_method=methods[0] if methods else None,
        freeplay_ratio=(total_freeplay / total_recharge * 100) if total_recharge > 0 else 0.0,
        platform_points=group_and_sum(entries, by_platform, value="points", top_n=platform_top_n),
        page=paginate(entries, filters.current_page, filters.rows_per_page),
        entries=entries,
    )


# --- Referral ---


@dataclass
class ReferralSummary:
    """Performance of one referral code over a date range."""

    code: ReferralCode
    entry_count: int = 0
    total_recharge: float = 0.0
    total_freeplay: float = 0.0
    new_paid_count: int = 0
    already_paid_count: int = 0
    average_recharge: float = 0.0
    most_used_platforms: list[str] = field(default_factory=list)
    daily_recharge: list[BreakdownItem] = field(default_factory=list)
    page_platform_usage: dict[str, dict[str, int]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "entry_count": self.entry_count,
            "total_recharge": self.total_recharge,
            "total_freeplay": self.total_freeplay,
            "new_paid_count": self.new_paid_count,
            "already_paid_count": self.already_paid_count,
            "average_recharge": round(self.average_recharge, 2),
            "most_used_platforms": list(self.most_used_platforms),
            "daily_recharge": _items(self.daily_recharge),
            "page_platform_usage": {k: dict(v) for k, v in self.page_platform_usage.items()},
        }


@dataclass
class ReferralReport:
    """Referral code intelligence, optionally compared with a second code."""

    filters: ReferralFilters
    summary: ReferralSummary
    compare: ReferralSummary | None = None
    log: Page | None = None
    log_entries: list[Entry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "start_date": self.filters.start_date.isoformat(),
            "end_date": self.filters.end_date.isoformat(),
            "summary": self.summary.to_dict(),
            "compare": self.compare.to_dict() if self.compare else None,
            "log_count": len(self.log_entries),
        }


def daily_recharge_series(entries: Iterable[Entry]) -> list[BreakdownItem]:
    """Recharge amount per day, in chronological order."""
    totals: dict[str, float] = defaultdict(float)
    for entry in _recharges(entries):
        totals[by_date(entry)] += entry.amount
    return [BreakdownItem(key=day, value=totals[day]) for day in sorted(totals)]


def page_platform_usage(entries: Iterable[Entry]) -> dict[str, dict[str, int]]:
    """Entry counts cross-tabulated by page name and platform."""
    table: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
    for entry in entries:
        table[entry.page_name][entry.platform] += 1
    return {page: dict(sorted(table[page].items())) for page in sorted(table)}


def summarize_referral(code: ReferralCode, entries: Sequence[Entry]) -> ReferralSummary:
    """Summary statistics for the entries of one referral code."""
    total_recharge = sum_amount(entries, Category.RECHARGE)
    return ReferralSummary(
        code=code,
        entry_count=len(entries),
        total_recharge=total_recharge,
        total_freeplay=sum_amount(entries, Category.FREEPLAY),
        new_paid_count=sum(1 for e in entries if e.redeem_type is RedeemType.NEW_PAID),
        already_paid_count=sum(1 for e in entries if e.redeem_type is RedeemType.ALREADY_PAID),
        average_recharge=total_recharge / len(entries) if entries else 0.0,
        most_used_platforms=top_by_frequency((e.platform for e in entries), REFERRAL_TOP_PLATFORMS),
        daily_recharge=daily_recharge_series(entries),
        page_platform_usage=page_platform_usage(entries),
    )


def _code_entries(
    entries: Iterable[Entry], code: ReferralCode, start: date, end: date
) -> list[Entry]:
    return newest_first(
        e for e in filter_date_range(entries, start, end) if e.referral_code is code
    )


def build_referral_report(view: TenantView, filters: ReferralFilters) -> ReferralReport:
    """Build the referral report.

    The detailed log only keeps entries whose stored source agrees with the
    selected code (ADS -> Ads, Random -> Random, anything else -> Referral).
    """
    entries = _code_entries(view.entries, filters.code, filters.start_date, filters.end_date)

    compare = None
    if filters.compare_code is not None and filters.compare_code is not filters.code:
        compare_entries = _code_entries(
            view.entries, filters.compare_code, filters.start_date, filters.end_date
        )
        compare = summarize_referral(filters.compare_code, compare_entries)

    expected_source = source_for_code(filters.code)
    log_entries = [e for e in entries if e.source is expected_source]

    return ReferralReport(
        filters=filters,
        summary=summarize_referral(filters.code, entries),
        compare=compare,
        log=paginate(log_entries, filters.current_page, filters.rows_per_page),
        log_entries=log_entries,
    )


# --- Agent progress ---


@dataclass(frozen=True)
class ReferralBreakdownItem:
    """Players and recharge volume an agent brought in through one code."""

    referral_code: str
    player_count: int
    total_recharge: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "referral_code": self.referral_code,
            "player_count": self.player_count,
            "total_recharge": self.total_recharge,
        }


@dataclass
class AgentStats:
    """One leaderboard row."""

    agent_id: str
    agent_name: str
    total_recharge: float = 0.0
    freeplay_given: float = 0.0
    recharge_count: int = 0
    freeplay_count: int = 0
    players_served: int = 0
    points_loaded: int = 0
    top_platform: str | None = None
    top_referral_code: str | None = None
    top_page_name: str | None = None
    page_breakdown: list[BreakdownItem] = field(default_factory=list)
    platform_breakdown: list[BreakdownItem] = field(default_factory=list)
    referral_breakdown: list[ReferralBreakdownItem] = field(default_factory=list)
    rank: int = 0
    highlight_tier: int | None = None

    def export_row(self) -> dict[str, Any]:
        """Flat row for CSV export (no drill-down breakdowns)."""
        return {
            "agent_name": self.agent_name,
            "total_recharge": self.total_recharge,
            "freeplay_given": self.freeplay_given,
            "platform": self.top_platform or "N/A",
            "recharge_count": self.recharge_count,
            "freeplay_count": self.freeplay_count,
            "total_players_served": self.players_served,
            "referral_code_used": self.top_referral_code or "N/A",
            "page_name": self.top_page_name or "N/A",
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "agent_id": self.agent_id,
            "rank": self.rank,
            "highlight_tier": self.highlight_tier,
            "points_loaded": self.points_loaded,
            **self.export_row(),
            "page_breakdown": _items(self.page_breakdown),
            "platform_breakdown": _items(self.platform_breakdown),
            "referral_breakdown": _items(self.referral_breakdown),
        }


@dataclass(frozen=True)
class PaymentShare:
    """Share of recharge transactions through one payment method."""

    name: str
    count: int
    percent: float

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "count": self.count, "percent": round(self.percent, 1)}


@dataclass
class AgentProgressReport:
    """Agent leaderboard for a date range."""

    filters: ProgressFilters
    rows: list[AgentStats] = field(default_factory=list)
    top_performer: AgentStats | None = None
    payment_share: list[PaymentShare] = field(default_factory=list)
    entry_count: int = 0

    def search(self, term: str) -> list[AgentStats]:
        """Rows whose agent name contains ``term`` (case-insensitive).

        Rows keep the rank and highlight tier of the full leaderboard.
        """
        needle = term.strip().casefold()
        return [row for row in self.rows if needle in row.agent_name.casefold()]

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.filters.mode.value,
            "start_date": self.filters.start_date.isoformat(),
            "end_date": self.filters.end_date.isoformat(),
            "entry_count": self.entry_count,
            "top_performer": self.top_performer.agent_name if self.top_performer else None,
            "payment_share": _items(self.payment_share),
            "agents": _items(self.rows),
        }


def referral_breakdown(recharges: Iterable[Entry]) -> list[ReferralBreakdownItem]:
    """Distinct players and recharge total per referral code."""
    players: dict[str, set[str]] = defaultdict(set)
    totals: dict[str, float] = defaultdict(float)
    for entry in recharges:
        players[entry.referral_code.value].add(entry.username)
        totals[entry.referral_code.value] += entry.amount
    return [
        ReferralBreakdownItem(
            referral_code=item.key,
            player_count=len(players[item.key]),
            total_recharge=item.value,
        )
        for item in sort_breakdown(dict(totals))
    ]


def agent_stats(agent: ManagedAgent, entries: Sequence[Entry]) -> AgentStats:
    """Aggregate one agent's entries (already restricted to the date range)."""
    own = [e for e in entries if e.agent_name == agent.agent_name]
    recharges = _recharges(own)
    freeplays = of_category(own, Category.FREEPLAY)

    return AgentStats(
        agent_id=agent.id,
        agent_name=agent.agent_name,
        total_recharge=sum_amount(recharges),
        freeplay_given=sum_amount(freeplays),
        recharge_count=len(recharges),
        freeplay_count=len(freeplays),
        players_served=len({e.username for e in own}),
        points_loaded=sum_points(own),
        top_platform=most_frequent(e.platform for e in own),
        top_referral_code=most_frequent(e.referral_code.value for e in own),
        top_page_name=most_frequent(e.page_name for e in own),
        page_breakdown=group_and_sum(recharges, by_page),
        platform_breakdown=group_and_sum(recharges, by_platform, value="count"),
        referral_breakdown=referral_breakdown(recharges),
    )


def payment_share(entries: Iterable[Entry]) -> list[PaymentShare]:
    """Recharge transaction counts per payment method, with percentages."""
    counts = group_and_sum(_recharges(entries), by_payment_method, value="count")
    total = sum(item.value for item in counts)
    return [
        PaymentShare(
            name=item.key,
            count=int(item.value),
            percent=(item.value / total * 100) if total else 0.0,
        )
        for item in counts
    ]


def build_progress_report(view: TenantView, filters: ProgressFilters) -> AgentProgressReport:
    """Build the agent progress leaderboard.

    Every agent of the tenant gets a row, including agents without entries.
    Rows are ranked by total recharge descending; agents with equal totals
    keep their registration order. The top three rows with a positive total
    get a highlight tier.
    """
    entries = filter_date_range(view.entries, filters.start_date, filters.end_date)
    rows = sorted(
        (agent_stats(agent, entries) for agent in view.agents),
        key=lambda row: -row.total_recharge,
    )
    for rank, row in enumerate(rows):
        row.rank = rank
        if rank < HIGHLIGHT_TIERS and row.total_recharge > 0:
            row.highlight_tier = rank + 1

    top = rows[0] if rows and rows[0].total_recharge > 0 else None
    return AgentProgressReport(
        filters=filters,
        rows=rows,
        top_performer=top,
        payment_share=payment_share(entries),
        entry_count=len(entries),
    )
