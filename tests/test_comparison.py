"""
Tests for the comparison period resolver.
"""

from datetime import date, datetime, timedelta

import pytest

from revenue_goals.goal_tracking.calendar_utils import end_of_day, start_of_day
from revenue_goals.goal_tracking.comparison import (
    ComparisonSettings, comparison_label, resolve_comparison_period,
)
from revenue_goals.goal_tracking.filters import DateRange, FilterState, effective_date_range


def day_range(start: date, end: date) -> DateRange:
    return DateRange(start_of_day(start), end_of_day(end))


class TestResolveComparisonPeriod:
    """Test period derivation."""

    def test_disabled(self):
        settings = ComparisonSettings(enabled=False)
        assert resolve_comparison_period(settings, day_range(date(2024, 3, 1), date(2024, 3, 5))) is None

    def test_three_day_range(self):
        """[Mar 10, Mar 12] compares against [Mar 7, Mar 9]."""
        period = resolve_comparison_period(
            ComparisonSettings(enabled=True),
            day_range(date(2024, 3, 10), date(2024, 3, 12)),
        )

        assert period.start == datetime(2024, 3, 7)
        assert period.end == datetime(2024, 3, 9, 23, 59, 59, 999000)
        assert period.label == "3 previous days"
        assert period.duration_days == 3

    @pytest.mark.parametrize("start,end", [
        (date(2024, 3, 2), date(2024, 3, 2)),
        (date(2024, 3, 1), date(2024, 3, 7)),
        (date(2024, 2, 1), date(2024, 3, 15)),
        (date(2023, 12, 25), date(2024, 1, 3)),
    ])
    def test_adjacent_and_same_length(self, start, end):
        period = resolve_comparison_period(ComparisonSettings(enabled=True), day_range(start, end))

        assert period.end.date() == start - timedelta(days=1)
        assert period.duration_days == (end - start).days + 1

    def test_custom_range_used_verbatim(self):
        settings = ComparisonSettings(enabled=True).with_custom_range(date(2023, 3, 1), date(2023, 3, 31))

        period = resolve_comparison_period(settings, day_range(date(2024, 3, 1), date(2024, 3, 2)))

        assert period.start == datetime(2023, 3, 1)
        assert period.end == datetime(2023, 3, 31, 23, 59, 59, 999000)
        assert period.label == "Custom Period"

    def test_half_custom_range_ignored(self):
        settings = ComparisonSettings(enabled=True, custom_start=date(2023, 3, 1))

        period = resolve_comparison_period(settings, day_range(date(2024, 3, 2), date(2024, 3, 2)))

        assert period.label == "Previous Day"

    def test_unbounded_range(self):
        settings = ComparisonSettings(enabled=True)
        assert resolve_comparison_period(settings, DateRange(start=datetime(2024, 3, 1))) is None
        assert resolve_comparison_period(settings, DateRange()) is None

    def test_mtd_preset(self):
        """MTD on Mar 13 (13 days) compares against Feb 17 - Feb 29."""
        rng = effective_date_range(FilterState(date_preset='mtd'), date(2024, 3, 13))

        period = resolve_comparison_period(ComparisonSettings(enabled=True), rng)

        assert period.start == datetime(2024, 2, 17)
        assert period.end.date() == date(2024, 2, 29)
        assert period.label == "Previous Period"


class TestComparisonSettings:
    """Test settings transitions and labels."""

    def test_transitions(self):
        settings = ComparisonSettings().toggle().with_custom_range(date(2024, 1, 1), date(2024, 1, 2))

        assert settings.enabled
        assert settings.without_custom_range().custom_start is None
        assert settings.without_custom_range().enabled
        assert settings.cleared() == ComparisonSettings()

    @pytest.mark.parametrize("days,label", [
        (1, "Previous Day"),
        (2, "2 previous days"),
        (7, "7 previous days"),
        (8, "Previous Period"),
        (31, "Previous Period"),
    ])
    def test_labels(self, days, label):
        assert comparison_label(days) == label
