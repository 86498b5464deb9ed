"""Per-report filter state and its transitions.

Filter state is ephemeral and immutable; every update returns a new value.
"""

from dataclasses import dataclass, replace
from datetime import date, timedelta
from enum import Enum
from typing import Any, Iterable

from agency_desk.common.time_utils import format_month, is_month_key, parse_date, start_of_month
from agency_desk.domain.errors import ValidationError
from agency_desk.domain.models import Category, Entry, ReferralCode

ROWS_PER_PAGE_OPTIONS = (10, 25, 50)


def _rows_per_page(value: Any) -> int:
    try:
        rows = int(value)
    except (TypeError, ValueError):
        rows = 0
    if rows not in ROWS_PER_PAGE_OPTIONS:
        raise ValidationError(
            f"Rows per page must be one of {', '.join(map(str, ROWS_PER_PAGE_OPTIONS))}.",
            field="rows_per_page",
        )
    return rows


def _page_number(value: Any) -> int:
    try:
        return max(int(value), 1)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid page number: {value}", field="current_page") from None


def _date(value: Any, field: str) -> date:
    try:
        return parse_date(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date: {value}", field=field) from None


def _unknown(name: str) -> ValueError:
    return ValueError(f"Unknown filter: {name}")


# --- Daily ---


@dataclass(frozen=True)
class DailyFilters:
    """Daily report filters. Empty strings (and a None date) mean "any"."""

    on_date: date | None = None
    agent: str = ""
    platform: str = ""
    page_name: str = ""
    payment_method: str = ""
    category: str = ""

    @classmethod
    def cleared(cls, today: date) -> "DailyFilters":
        """Default filters: today's date, nothing else selected."""
        return cls(on_date=today)

    def matches(self, entry: Entry) -> bool:
        """All set filters are AND-combined equality checks."""
        return (
            (self.on_date is None or entry.date == self.on_date)
            and (not self.agent or entry.agent_name == self.agent)
            and (not self.platform or entry.platform == self.platform)
            and (not self.page_name or entry.page_name == self.page_name)
            and (not self.payment_method or entry.payment_method == self.payment_method)
            and (not self.category or entry.category.value == self.category)
        )


def update_daily_filters(filters: DailyFilters, name: str, value: Any) -> DailyFilters:
    """Set one daily filter."""
    if name == "on_date":
        return replace(filters, on_date=_date(value, "on_date") if value else None)
    if name == "category":
        if value and value not in {c.value for c in Category}:
            raise ValidationError(f"Invalid category: {value}", field="category")
        return replace(filters, category=value or "")
    if name in ("agent", "platform", "page_name", "payment_method"):
        return replace(filters, **{name: value or ""})
    raise _unknown(name)


# --- Monthly ---


@dataclass(frozen=True)
class MonthlyFilters:
    """Monthly report filters."""

    month: str
    current_page: int = 1
    rows_per_page: int = 10

    @classmethod
    def for_today(cls, today: date, rows_per_page: int = 10) -> "MonthlyFilters":
        return cls(month=format_month(today), rows_per_page=rows_per_page)


def update_monthly_filters(filters: MonthlyFilters, name: str, value: Any) -> MonthlyFilters:
    """Set one monthly filter. Changing month or page size resets to page 1."""
    if name == "month":
        if not is_month_key(str(value)):
            raise ValidationError(f"Invalid month: {value!r} (expected YYYY-MM)", field="month")
        return replace(filters, month=str(value), current_page=1)
    if name == "rows_per_page":
        return replace(filters, rows_per_page=_rows_per_page(value), current_page=1)
    if name == "current_page":
        return replace(filters, current_page=_page_number(value))
    raise _unknown(name)


# --- Referral ---


@dataclass(frozen=True)
class ReferralFilters:
    """Referral report filters.

    ``compare_code`` is None when no comparison is selected; it never equals
    ``code``.
    """

    start_date: date
    end_date: date
    code: ReferralCode = ReferralCode.FR2K
    compare_code: ReferralCode | None = None
    current_page: int = 1
    rows_per_page: int = 10

    @classmethod
    def spanning(cls, entries: Iterable[Entry], today: date) -> "ReferralFilters":
        """Default filters covering the full date span of the given entries."""
        dates = [e.date for e in entries]
        return cls(start_date=min(dates, default=today), end_date=max(dates, default=today))


def update_referral_filters(filters: ReferralFilters, name: str, value: Any) -> ReferralFilters:
    """Set one referral filter.

    Main filters reset pagination. Selecting the same code for both the
    primary and the compare slot clears the compare selection.
    """
    if name == "code":
        code = _referral_code(value, "code")
        updated = replace(filters, code=code, current_page=1)
        if updated.compare_code is code:
            updated = replace(updated, compare_code=None)
        return updated
    if name == "compare_code":
        compare = _referral_code(value, "compare_code") if value else None
        if compare is filters.code:
            compare = None
        return replace(filters, compare_code=compare, current_page=1)
    if name in ("start_date", "end_date"):
        return replace(filters, **{name: _date(value, name)}, current_page=1)
    if name == "rows_per_page":
        return replace(filters, rows_per_page=_rows_per_page(value), current_page=1)
    if name == "current_page":
        return replace(filters, current_page=_page_number(value))
    raise _unknown(name)


def _referral_code(value: Any, field: str) -> ReferralCode:
    try:
        return ReferralCode(value)
    except ValueError:
        raise ValidationError(f"Invalid referral code: {value}", field=field) from None


# --- Agent progress ---


class ProgressMode(str, Enum):
    """Date range presets for the agent progress report."""

    LAST_7_DAYS = "7days"
    LAST_15_DAYS = "15days"
    MONTH = "month"
    CUSTOM = "custom"


@dataclass(frozen=True)
class ProgressFilters:
    """Agent progress date range."""

    start_date: date
    end_date: date
    mode: ProgressMode = ProgressMode.MONTH

    @classmethod
    def for_today(cls, today: date) -> "ProgressFilters":
        """Current calendar month to date."""
        return cls(start_date=start_of_month(today), end_date=today)


def select_progress_mode(
    filters: ProgressFilters, mode: ProgressMode | str, today: date
) -> ProgressFilters:
    """Switch preset; non-custom presets recompute the range from ``today``."""
    mode = ProgressMode(mode)
    if mode is ProgressMode.CUSTOM:
        return replace(filters, mode=mode)
    if mode is ProgressMode.MONTH:
        start = start_of_month(today)
    else:
        days_back = 6 if mode is ProgressMode.LAST_7_DAYS else 14
        start = today - timedelta(days=days_back)
    return ProgressFilters(start_date=start, end_date=today, mode=mode)


def set_progress_date(filters: ProgressFilters, part: str, value: Any) -> ProgressFilters:
    """Edit one end of the range directly; this always switches to custom."""
    if part not in ("start_date", "end_date"):
        raise _unknown(part)
    return replace(filters, **{part: _date(value, part)}, mode=ProgressMode.CUSTOM)
