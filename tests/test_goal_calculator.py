"""
Tests for goal proration, the segment adjustment rule and goal-table helpers.
"""

from datetime import date

import pytest

from revenue_goals.goal_tracking.calendar_utils import days_in_month, iter_days
from revenue_goals.goal_tracking.goal_calculator import (
    adjusted_daily_goal, adjustment_factor, build_daily_goal_map, daily_base_goal,
    empty_line_goal, goals_frame, group_monthly_goal, line_adjusted_daily_goal_for_date,
    line_monthly_goal, monthly_goals_array, sum_adjusted_daily_goals_for_range,
    total_adjusted_daily_goal, total_base_daily_goal, total_monthly_goal,
    total_yearly_goal, update_goal_for_month,
)
from revenue_goals.goal_tracking.models import GoalValidationError, LineGoal, LineMetaInfo


class TestProration:
    """Test base daily goals."""

    def test_january_base_goal(self, plain_line):
        """31000 in a 31-day month is 1000 per day."""
        assert daily_base_goal(plain_line, date(2024, 1, 15)) == pytest.approx(1000.0)

    def test_january_sum_equals_target(self, plain_line):
        total = sum(daily_base_goal(plain_line, d) for d in iter_days(date(2024, 1, 1), date(2024, 1, 31)))
        assert total == pytest.approx(31000.0)

    @pytest.mark.parametrize("month", range(1, 13))
    def test_every_day_gets_target_over_days(self, month):
        line = LineMetaInfo("Z", "G", "OTHER", {month: 12345.0})
        first = date(2024, month, 1)
        n_days = days_in_month(first)
        last = date(2024, month, n_days)

        values = [daily_base_goal(line, d) for d in iter_days(first, last)]

        assert all(v == pytest.approx(12345.0 / n_days) for v in values)
        assert sum(values) == pytest.approx(12345.0)

    def test_missing_month_is_zero(self):
        line = LineMetaInfo("Z", "G", "OTHER", {1: 100.0})
        assert daily_base_goal(line, date(2024, 2, 1)) == 0.0


class TestSegmentAdjustment:
    """Test the weekday/weekend adjustment rule."""

    def test_air_conditioning_saturday(self, ac_line):
        assert adjusted_daily_goal(ac_line, date(2024, 1, 6)) == pytest.approx(500.0)

    def test_air_conditioning_tuesday(self, ac_line):
        assert adjusted_daily_goal(ac_line, date(2024, 1, 2)) == pytest.approx(1200.0)

    def test_every_day_of_january(self, ac_line, plain_line):
        for day in iter_days(date(2024, 1, 1), date(2024, 1, 31)):
            base = daily_base_goal(ac_line, day)
            expected = base * (0.5 if day.weekday() >= 5 else 1.2)
            assert adjusted_daily_goal(ac_line, day) == pytest.approx(expected)
            assert adjusted_daily_goal(plain_line, day) == pytest.approx(daily_base_goal(plain_line, day))

    @pytest.mark.parametrize("segment", ["", "OTHER", "air conditioning", "RETAIL"])
    def test_other_segments_not_adjusted(self, segment):
        assert adjustment_factor(segment, date(2024, 1, 6)) == 1.0
        assert adjustment_factor(segment, date(2024, 1, 2)) == 1.0


class TestTotals:
    """Test totals across lines and ranges."""

    def test_range_sum_matches_day_by_day(self, ac_line, plain_line):
        lines = [ac_line, plain_line]
        start, end = date(2024, 1, 20), date(2024, 3, 10)

        expected = sum(total_adjusted_daily_goal(lines, d) for d in iter_days(start, end))

        assert sum_adjusted_daily_goals_for_range(lines, start, end) == pytest.approx(expected)

    def test_range_sum_zero_when_reversed(self, plain_line):
        assert sum_adjusted_daily_goals_for_range([plain_line], date(2024, 1, 5), date(2024, 1, 4)) == 0.0

    def test_range_sum_zero_without_lines(self):
        assert sum_adjusted_daily_goals_for_range([], date(2024, 1, 1), date(2024, 1, 31)) == 0.0

    def test_empty_inputs(self):
        assert total_adjusted_daily_goal([], date(2024, 1, 1)) == 0.0
        assert total_base_daily_goal([], date(2024, 1, 1)) == 0.0
        assert total_monthly_goal([], 1) == 0.0
        assert total_yearly_goal([]) == 0.0
        assert monthly_goals_array([]) == [0.0] * 12

    def test_monthly_and_yearly(self, ac_line, plain_line):
        lines = [ac_line, plain_line]
        assert total_monthly_goal(lines, 3) == 62000.0
        assert total_yearly_goal(lines) == 62000.0 * 12
        assert monthly_goals_array(lines) == [62000.0] * 12

    def test_total_base_vs_adjusted(self, ac_line, plain_line):
        saturday = date(2024, 1, 6)
        assert total_base_daily_goal([ac_line, plain_line], saturday) == pytest.approx(2000.0)
        assert total_adjusted_daily_goal([ac_line, plain_line], saturday) == pytest.approx(1500.0)

    def test_build_daily_goal_map(self, ac_line):
        goal_map = build_daily_goal_map([ac_line], [date(2024, 1, 6), "2024-01-02"])
        assert goal_map == {
            "2024-01-06": pytest.approx(500.0),
            "2024-01-02": pytest.approx(1200.0),
        }

    def test_line_adjusted_daily_goal_for_date(self, ac_line, plain_line):
        lines = [ac_line, plain_line]
        assert line_adjusted_daily_goal_for_date(lines, "Y", date(2024, 1, 2)) == pytest.approx(1200.0)
        assert line_adjusted_daily_goal_for_date(lines, "missing", date(2024, 1, 2)) == 0.0


class TestGoalTable:
    """Test goal-table helpers."""

    @pytest.fixture
    def table(self):
        return [
            LineGoal("A", "North", {1: 100.0, 2: 200.0}),
            LineGoal("B", "North", {1: 50.0}),
            LineGoal("C", "South", {1: 10.0}),
        ]

    def test_empty_line_goal(self):
        goal = empty_line_goal("New", "G")
        assert goal.monthly_targets == {month: 0.0 for month in range(1, 13)}
        assert goal.yearly_target == 0.0

    def test_lookups(self, table):
        assert line_monthly_goal(table, "A", 2) == 200.0
        assert line_monthly_goal(table, "missing", 2) == 0.0
        assert group_monthly_goal(table, "North", 1) == 150.0

    def test_update_returns_new_list(self, table):
        updated = update_goal_for_month(table, "A", 3, 300)

        assert updated[0].target_for_month(3) == 300.0
        assert table[0].target_for_month(3) == 0.0

    def test_update_unknown_line_logs_warning(self, table, caplog):
        updated = update_goal_for_month(table, "missing", 1, 10)

        assert [g.monthly_targets for g in updated] == [g.monthly_targets for g in table]
        assert "missing" in caplog.text

    @pytest.mark.parametrize("month,value", [(0, 10), (13, 10), (1, -5), (1, "abc"), (1, None), ("march", 10), (None, 10)])
    def test_update_rejects_invalid(self, table, month, value):
        with pytest.raises(GoalValidationError):
            update_goal_for_month(table, "A", month, value)

    def test_goals_frame(self, table):
        df = goals_frame(table)

        assert list(df.columns) == ['line', 'group', 'Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
                                    'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec', 'yearly']
        assert df.loc[df['line'] == 'A', 'yearly'].iloc[0] == 300.0

    def test_goals_frame_empty(self):
        assert goals_frame([]).empty
