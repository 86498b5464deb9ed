"""Tests for report filter transitions."""

from datetime import date

import pytest

from agency_desk.domain.errors import ValidationError
from agency_desk.domain.models import ReferralCode
from agency_desk.reporting.filters import (
    DailyFilters,
    MonthlyFilters,
    ProgressFilters,
    ProgressMode,
    ReferralFilters,
    select_progress_mode,
    set_progress_date,
    update_daily_filters,
    update_monthly_filters,
    update_referral_filters,
)

TODAY = date(2024, 5, 20)


class TestDailyFilters:
    """Tests for daily filters."""

    def test_cleared_defaults_to_today(self):
        filters = DailyFilters.cleared(TODAY)
        assert filters == DailyFilters(on_date=TODAY)

    def test_set_date_from_string(self):
        filters = update_daily_filters(DailyFilters(), "on_date", "2024-05-01")
        assert filters.on_date == date(2024, 5, 1)

    def test_empty_date_means_any(self):
        filters = update_daily_filters(DailyFilters(on_date=TODAY), "on_date", "")
        assert filters.on_date is None

    def test_invalid_category(self):
        with pytest.raises(ValidationError):
            update_daily_filters(DailyFilters(), "category", "Bonus")

    def test_unknown_filter(self):
        with pytest.raises(ValueError):
            update_daily_filters(DailyFilters(), "colour", "red")

    def test_matches_combines_filters(self, make_entry):
        """Test every set filter must match."""
        filters = DailyFilters(on_date=date(2024, 5, 10), platform="Juwa", category="Recharge")

        assert filters.matches(make_entry())
        assert not filters.matches(make_entry(platform="Yolo"))
        assert not filters.matches(make_entry(date=date(2024, 5, 11)))


class TestMonthlyFilters:
    """Tests for monthly filters."""

    def test_for_today(self):
        assert MonthlyFilters.for_today(TODAY).month == "2024-05"

    def test_month_change_resets_page(self):
        filters = MonthlyFilters(month="2024-05", current_page=4)

        updated = update_monthly_filters(filters, "month", "2024-04")

        assert updated.month == "2024-04"
        assert updated.current_page == 1

    def test_rows_per_page_resets_page(self):
        filters = MonthlyFilters(month="2024-05", current_page=3)

        updated = update_monthly_filters(filters, "rows_per_page", "25")

        assert updated.rows_per_page == 25
        assert updated.current_page == 1

    @pytest.mark.parametrize("rows", [0, 30, "many"])
    def test_rows_per_page_options(self, rows):
        with pytest.raises(ValidationError):
            update_monthly_filters(MonthlyFilters(month="2024-05"), "rows_per_page", rows)

    def test_invalid_month(self):
        with pytest.raises(ValidationError):
            update_monthly_filters(MonthlyFilters(month="2024-05"), "month", "2024-13")

    def test_page_navigation_keeps_other_filters(self):
        updated = update_monthly_filters(MonthlyFilters(month="2024-05"), "current_page", 2)
        assert updated == MonthlyFilters(month="2024-05", current_page=2)


class TestReferralFilters:
    """Tests for referral filters."""

    @pytest.fixture
    def filters(self) -> ReferralFilters:
        return ReferralFilters(start_date=date(2024, 5, 1), end_date=date(2024, 5, 31))

    def test_spanning_covers_entries(self, make_entry):
        entries = [make_entry(date=date(2024, 4, 3)), make_entry(date=date(2024, 5, 9))]

        filters = ReferralFilters.spanning(entries, TODAY)

        assert filters.start_date == date(2024, 4, 3)
        assert filters.end_date == date(2024, 5, 9)

    def test_spanning_without_entries(self):
        filters = ReferralFilters.spanning([], TODAY)
        assert filters.start_date == filters.end_date == TODAY

    def test_compare_same_as_code_is_cleared(self, filters: ReferralFilters):
        """Test comparing a code with itself is not allowed."""
        updated = update_referral_filters(filters, "compare_code", "FR2K")
        assert updated.compare_code is None

    def test_code_matching_compare_clears_compare(self, filters: ReferralFilters):
        """Test switching the primary code onto the compare code clears it."""
        filters = update_referral_filters(filters, "compare_code", "ADS")
        assert filters.compare_code is ReferralCode.ADS

        updated = update_referral_filters(filters, "code", "ADS")

        assert updated.code is ReferralCode.ADS
        assert updated.compare_code is None

    def test_main_filters_reset_page(self, filters: ReferralFilters):
        filters = update_referral_filters(filters, "current_page", 3)
        assert filters.current_page == 3

        updated = update_referral_filters(filters, "start_date", "2024-05-05")

        assert updated.start_date == date(2024, 5, 5)
        assert updated.current_page == 1

    def test_invalid_code(self, filters: ReferralFilters):
        with pytest.raises(ValidationError):
            update_referral_filters(filters, "code", "NOPE")


class TestProgressFilters:
    """Tests for agent progress presets."""

    def test_for_today_is_month_to_date(self):
        filters = ProgressFilters.for_today(TODAY)

        assert filters.start_date == date(2024, 5, 1)
        assert filters.end_date == TODAY
        assert filters.mode is ProgressMode.MONTH

    @pytest.mark.parametrize(
        "mode,start",
        [
            ("7days", date(2024, 5, 14)),
            ("15days", date(2024, 5, 6)),
            ("month", date(2024, 5, 1)),
        ],
    )
    def test_presets(self, mode: str, start: date):
        """Test presets count today as the last day of the range."""
        filters = select_progress_mode(ProgressFilters.for_today(TODAY), mode, TODAY)

        assert filters.start_date == start
        assert filters.end_date == TODAY

    def test_custom_keeps_range(self):
        filters = ProgressFilters(date(2024, 1, 1), date(2024, 1, 31))

        updated = select_progress_mode(filters, ProgressMode.CUSTOM, TODAY)

        assert (updated.start_date, updated.end_date) == (date(2024, 1, 1), date(2024, 1, 31))
        assert updated.mode is ProgressMode.CUSTOM

    def test_editing_a_date_switches_to_custom(self):
        filters = set_progress_date(ProgressFilters.for_today(TODAY), "start_date", "2024-04-01")

        assert filters.start_date == date(2024, 4, 1)
        assert filters.mode is ProgressMode.CUSTOM

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            select_progress_mode(ProgressFilters.for_today(TODAY), "yearly", TODAY)
