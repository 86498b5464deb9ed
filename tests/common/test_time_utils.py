"""Tests for date utilities."""

from datetime import UTC, date, datetime

import pytest

from agency_desk.common.time_utils import (
    format_month,
    in_month,
    is_month_key,
    parse_date,
    start_of_month,
    utc_now,
)


class TestParseDate:
    """Tests for parse_date."""

    def test_parses_iso_string(self):
        assert parse_date("2024-05-01") == date(2024, 5, 1)

    def test_strips_whitespace(self):
        assert parse_date(" 2024-05-01 ") == date(2024, 5, 1)

    def test_passes_dates_through(self):
        d = date(2024, 5, 1)
        assert parse_date(d) is d

    def test_truncates_datetimes(self):
        assert parse_date(datetime(2024, 5, 1, 23, 59, tzinfo=UTC)) == date(2024, 5, 1)

    def test_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_date("05/01/2024")


class TestMonthHelpers:
    """Tests for month key helpers."""

    def test_format_month_pads(self):
        assert format_month(date(2024, 3, 9)) == "2024-03"

    @pytest.mark.parametrize("value", ["2024-01", "1999-12"])
    def test_valid_month_keys(self, value: str):
        assert is_month_key(value)

    @pytest.mark.parametrize("value", ["2024-13", "2024-1", "24-01", "2024-00", "2024-01-01"])
    def test_invalid_month_keys(self, value: str):
        assert not is_month_key(value)

    def test_in_month(self):
        assert in_month(date(2024, 5, 31), "2024-05")
        assert not in_month(date(2024, 6, 1), "2024-05")

    def test_start_of_month(self):
        assert start_of_month(date(2024, 5, 17)) == date(2024, 5, 1)


def test_utc_now_is_aware():
    """Test utc_now returns a timezone-aware datetime."""
    assert utc_now().tzinfo is not None
