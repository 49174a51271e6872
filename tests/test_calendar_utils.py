"""
Tests for the calendar / proration utilities.
"""

from datetime import date, datetime

import pandas as pd
import pytest

from revenue_goals.goal_tracking.calendar_utils import (
    add_days, calendar_day_difference, days_in_month, end_of_day, end_of_month,
    inclusive_day_count, is_weekend, iter_days, normalize_to_noon, start_of_day,
    start_of_month, start_of_week, start_of_year, to_iso_key, yesterday_of,
)


class TestNormalization:
    """Test noon normalization and ISO keys."""

    @pytest.mark.parametrize("value", [
        date(2024, 3, 2),
        datetime(2024, 3, 2, 0, 0),
        datetime(2024, 3, 2, 23, 59, 59),
        pd.Timestamp("2024-03-02 07:30"),
        "2024-03-02",
    ])
    def test_normalize_to_noon_keeps_calendar_day(self, value):
        """Every supported input maps to 12:00 of the same day."""
        assert normalize_to_noon(value) == datetime(2024, 3, 2, 12, 0)

    def test_iso_key(self):
        assert to_iso_key(datetime(2024, 1, 5, 23, 0)) == "2024-01-05"

    def test_day_bounds(self):
        assert start_of_day(date(2024, 3, 2)) == datetime(2024, 3, 2)
        assert end_of_day(date(2024, 3, 2)) == datetime(2024, 3, 2, 23, 59, 59, 999000)

    def test_unsupported_value(self):
        with pytest.raises(TypeError):
            normalize_to_noon(12345)


class TestMonthAndWeek:
    """Test month / week boundaries."""

    def test_days_in_month(self):
        assert days_in_month(date(2024, 2, 10)) == 29
        assert days_in_month(date(2023, 2, 10)) == 28
        assert days_in_month(date(2024, 1, 31)) == 31

    def test_is_weekend(self):
        assert is_weekend(date(2024, 3, 2))      # Saturday
        assert is_weekend(date(2024, 3, 3))      # Sunday
        assert not is_weekend(date(2024, 3, 4))  # Monday

    def test_start_of_week_defaults_to_monday(self):
        """Sunday belongs to the week that started the previous Monday."""
        assert start_of_week(date(2024, 3, 3)) == datetime(2024, 2, 26)
        assert start_of_week(date(2024, 3, 4)) == datetime(2024, 3, 4)

    def test_start_of_week_sunday_start(self):
        assert start_of_week(date(2024, 3, 3), week_starts_on=6) == datetime(2024, 3, 3)

    def test_month_and_year_bounds(self):
        assert start_of_month(date(2024, 3, 17)) == datetime(2024, 3, 1)
        assert end_of_month(date(2024, 2, 3)) == datetime(2024, 2, 29, 23, 59, 59, 999000)
        assert start_of_year(date(2024, 3, 17)) == datetime(2024, 1, 1)


class TestDayCounting:
    """Test day arithmetic."""

    def test_calendar_day_difference_ignores_time(self):
        assert calendar_day_difference(datetime(2024, 3, 3, 0, 1), datetime(2024, 3, 2, 23, 59)) == 1

    def test_inclusive_day_count(self):
        assert inclusive_day_count(date(2024, 3, 1), date(2024, 3, 31)) == 31
        assert inclusive_day_count(date(2024, 3, 1), date(2024, 3, 1)) == 1
        assert inclusive_day_count(date(2024, 3, 2), date(2024, 3, 1)) == 0

    def test_inclusive_day_count_with_end_of_day(self):
        """End-of-day bounds count as one calendar day, not two."""
        assert inclusive_day_count(start_of_day(date(2024, 3, 10)), end_of_day(date(2024, 3, 12))) == 3

    def test_iter_days(self):
        days = list(iter_days(date(2024, 2, 27), date(2024, 3, 2)))
        assert len(days) == 5
        assert days[0] == datetime(2024, 2, 27, 12)
        assert days[-1] == datetime(2024, 3, 2, 12)
        assert all(d.hour == 12 for d in days)

    def test_iter_days_empty_when_reversed(self):
        assert list(iter_days(date(2024, 3, 2), date(2024, 3, 1))) == []

    def test_add_days_across_month(self):
        assert add_days(date(2024, 2, 28), 2) == datetime(2024, 3, 1, 12)
        assert add_days(date(2024, 3, 1), -1) == datetime(2024, 2, 29, 12)

    def test_yesterday_of(self):
        assert yesterday_of(date(2024, 1, 1)) == datetime(2023, 12, 31, 12)
