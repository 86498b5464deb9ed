"""Tests for the shared aggregation helpers."""

import random
from datetime import date

import pytest

from agency_desk.domain.models import Category
from agency_desk.reporting.aggregation import (
    BreakdownItem,
    by_page,
    by_platform,
    filter_date_range,
    group_and_sum,
    most_frequent,
    paginate,
    sum_amount,
    top_by_frequency,
)


class TestGroupAndSum:
    """Tests for group_and_sum."""

    def test_sums_and_sorts_descending(self, make_entry):
        """Test groups are summed and sorted by value."""
        entries = [
            make_entry(page_name="Jeetwin", amount=10),
            make_entry(page_name="BetHub", amount=30),
            make_entry(page_name="Jeetwin", amount=25),
        ]

        result = group_and_sum(entries, by_page)

        assert result == [BreakdownItem("Jeetwin", 35), BreakdownItem("BetHub", 30)]

    def test_ties_break_by_key(self, make_entry):
        """Test equal values are ordered by key ascending."""
        entries = [
            make_entry(platform="Yolo", amount=20),
            make_entry(platform="Juwa", amount=20),
            make_entry(platform="Moolah", amount=20),
        ]

        result = group_and_sum(entries, by_platform)

        assert [item.key for item in result] == ["Juwa", "Moolah", "Yolo"]

    def test_independent_of_input_order(self, make_entry):
        """Test any permutation of the input gives the same breakdown."""
        entries = [
            make_entry(platform=platform, amount=amount)
            for platform, amount in [
                ("Juwa", 10), ("Yolo", 10), ("Moolah", 5), ("Juwa", 5), ("Milkyway", 15),
            ]
        ]
        expected = group_and_sum(entries, by_platform)

        rng = random.Random(7)
        for _ in range(5):
            shuffled = entries[:]
            rng.shuffle(shuffled)
            assert group_and_sum(shuffled, by_platform) == expected

    def test_top_n_truncates(self, make_entry):
        """Test top_n keeps only the largest groups."""
        entries = [make_entry(page_name=name, amount=i) for i, name in enumerate("ABCDE", 1)]

        result = group_and_sum(entries, by_page, top_n=2)

        assert [item.key for item in result] == ["E", "D"]

    def test_count_and_points(self, make_entry):
        """Test count and points aggregates produce integers."""
        entries = [
            make_entry(platform="Juwa", points_load=100),
            make_entry(platform="Juwa", points_load=50),
            make_entry(platform="Yolo", points_load=500),
        ]

        counts = group_and_sum(entries, by_platform, value="count")
        points = group_and_sum(entries, by_platform, value="points")

        assert counts == [BreakdownItem("Juwa", 2), BreakdownItem("Yolo", 1)]
        assert points == [BreakdownItem("Yolo", 500), BreakdownItem("Juwa", 150)]
        assert isinstance(counts[0].value, int)

    def test_unknown_aggregate(self, make_entry):
        """Test an unknown aggregate name raises ValueError."""
        with pytest.raises(ValueError):
            group_and_sum([make_entry()], by_page, value="median")

    def test_empty_input(self):
        """Test no entries gives an empty breakdown."""
        assert group_and_sum([], by_page) == []


class TestFrequency:
    """Tests for most_frequent and top_by_frequency."""

    def test_most_frequent(self):
        assert most_frequent(["Juwa", "Yolo", "Juwa"]) == "Juwa"

    def test_tie_goes_to_smallest_label(self):
        """Test a tie picks the lexicographically smallest label."""
        assert most_frequent(["Yolo", "Juwa", "Moolah", "Yolo", "Juwa"]) == "Juwa"

    def test_empty_returns_none(self):
        assert most_frequent([]) is None

    def test_top_by_frequency(self):
        labels = ["b", "a", "c", "c", "b", "d"]
        assert top_by_frequency(labels, 2) == ["b", "c"]


class TestPaginate:
    """Tests for paginate."""

    def test_slices_requested_page(self):
        page = paginate(list(range(23)), page=3, rows_per_page=10)

        assert page.items == (20, 21, 22)
        assert page.total_pages == 3
        assert page.total_items == 23
        assert page.has_previous is True
        assert page.has_next is False

    def test_page_is_clamped(self):
        """Test out-of-range pages are clamped."""
        assert paginate(list(range(5)), page=9, rows_per_page=2).current_page == 3
        assert paginate(list(range(5)), page=0, rows_per_page=2).current_page == 1

    def test_empty_has_one_page(self):
        """Test an empty listing still reports one page."""
        page = paginate([], page=1, rows_per_page=10)

        assert page.total_pages == 1
        assert page.items == ()
        assert page.has_next is False

    def test_rejects_non_positive_size(self):
        with pytest.raises(ValueError):
            paginate([1], page=1, rows_per_page=0)


class TestFiltering:
    """Tests for range and category helpers."""

    def test_date_range_inclusive(self, make_entry):
        """Test both ends of the range are included."""
        entries = [make_entry(date=date(2024, 5, day)) for day in (1, 5, 10, 11)]

        result = filter_date_range(entries, date(2024, 5, 5), date(2024, 5, 10))

        assert [e.date.day for e in result] == [5, 10]

    def test_sum_amount_by_category(self, make_entry):
        entries = [
            make_entry(amount=10),
            make_entry(amount=15),
            make_entry(category=Category.FREEPLAY, amount=5),
        ]

        assert sum_amount(entries, Category.RECHARGE) == 25
        assert sum_amount(entries) == 30
