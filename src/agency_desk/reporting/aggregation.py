"""Shared aggregation helpers used by every report.

All functions are pure. Ties are always broken by key in ascending
lexicographic order, so results never depend on input order.
"""

import math
from collections import Counter, defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Iterable, Sequence, TypeVar

from agency_desk.domain.models import Category, Entry

T = TypeVar("T")

KeySelector = Callable[[Entry], str]


def by_page(entry: Entry) -> str:
    return entry.page_name


def by_platform(entry: Entry) -> str:
    return entry.platform


def by_payment_method(entry: Entry) -> str:
    return entry.payment_method


def by_referral_code(entry: Entry) -> str:
    return entry.referral_code.value


def by_date(entry: Entry) -> str:
    return entry.date.isoformat()


@dataclass(frozen=True)
class BreakdownItem:
    """One group of a breakdown."""

    key: str
    value: float

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.key, "value": self.value}


@dataclass(frozen=True)
class Page:
    """One page of a paginated listing."""

    items: tuple
    current_page: int
    rows_per_page: int
    total_items: int
    total_pages: int

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [
                item.to_dict() if hasattr(item, "to_dict") else item for item in self.items
            ],
            "current_page": self.current_page,
            "rows_per_page": self.rows_per_page,
            "total_items": self.total_items,
            "total_pages": self.total_pages,
        }


def of_category(entries: Iterable[Entry], category: Category) -> list[Entry]:
    """Entries of a single category."""
    return [e for e in entries if e.category is category]


def sum_amount(entries: Iterable[Entry], category: Category | None = None) -> float:
    """Sum of amounts, optionally restricted to one category."""
    return sum(e.amount for e in entries if category is None or e.category is category)


def sum_points(entries: Iterable[Entry]) -> int:
    """Sum of points loaded."""
    return sum(e.points_load for e in entries)


def sort_breakdown(totals: dict[str, float], top_n: int | None = None) -> list[BreakdownItem]:
    """Sort aggregated values descending (key ascending on ties)."""
    items = sorted(totals.items(), key=lambda kv: (-kv[1], kv[0]))
    if top_n is not None:
        items = items[:top_n]
    return [BreakdownItem(key=k, value=v) for k, v in items]


def group_and_sum(
    entries: Iterable[Entry],
    key: KeySelector,
    value: str = "amount",
    top_n: int | None = None,
) -> list[BreakdownItem]:
    """Partition entries by a key and aggregate each group.

    Args:
        entries: Entries to aggregate.
        key: Key selector (e.g. ``by_page``).
        value: "amount", "points" or "count".
        top_n: Optional truncation after sorting.

    Returns:
        Breakdown sorted by aggregated value descending.
    """
    totals: dict[str, float] = defaultdict(float)
    for entry in entries:
        if value == "amount":
            totals[key(entry)] += entry.amount
        elif value == "points":
            totals[key(entry)] += entry.points_load
        elif value == "count":
            totals[key(entry)] += 1
        else:
            raise ValueError(f"Unknown aggregate: {value}")
    if value != "amount":
        totals = {k: int(v) for k, v in totals.items()}
    return sort_breakdown(dict(totals), top_n)


def filter_date_range(entries: Iterable[Entry], start: date, end: date) -> list[Entry]:
    """Entries dated within [start, end], both ends inclusive."""
    return [e for e in entries if start <= e.date <= end]


def most_frequent(labels: Iterable[str]) -> str | None:
    """Most common label; ties go to the lexicographically smallest label.

    Returns None for an empty input.
    """
    counts = Counter(labels)
    if not counts:
        return None
    return min(counts.items(), key=lambda kv: (-kv[1], kv[0]))[0]


def top_by_frequency(labels: Iterable[str], n: int) -> list[str]:
    """The ``n`` most frequent labels, same tie-break as ``most_frequent``."""
    counts = Counter(labels)
    return [k for k, _ in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))[:n]]


def paginate(items: Sequence[T], page: int, rows_per_page: int) -> Page:
    """Slice a sequence into one page.

    ``total_pages`` is at least 1, and the requested page is clamped into
    ``[1, total_pages]``.
    """
    if rows_per_page <= 0:
        raise ValueError("rows_per_page must be positive")
    total = len(items)
    total_pages = max(math.ceil(total / rows_per_page), 1)
    current = min(max(page, 1), total_pages)
    start = (current - 1) * rows_per_page
    return Page(
        items=tuple(items[start : start + rows_per_page]),
        current_page=current,
        rows_per_page=rows_per_page,
        total_items=total,
        total_pages=total_pages,
    )
