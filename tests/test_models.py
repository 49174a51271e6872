"""
Tests for the record frame and value objects.
"""

from datetime import date, datetime

import pandas as pd
import pytest

from revenue_goals.goal_tracking.models import (
    DailyDataPoint, GoalValidationError, LineGoal, RecordValidationError,
    RevenueRecord, frame_to_records, records_to_frame, safe_divide, safe_percent,
)


class TestRecordsToFrame:
    """Test record frame construction."""

    def test_from_value_objects(self):
        records = [RevenueRecord(date(2024, 3, 1), "A", "North", "OTHER", 10.0)]

        df = records_to_frame(records)

        assert list(df.columns) == ["date", "line", "group", "segment", "amount"]
        assert df.loc[0, 'date'] == pd.Timestamp("2024-03-01 12:00")

    def test_missing_group_and_segment_default(self):
        df = records_to_frame([{'date': "2024-03-01", 'line': "A", 'amount': 5}])

        assert df.loc[0, 'group'] == "OTHER"
        assert df.loc[0, 'segment'] == "OTHER"
        assert df.loc[0, 'amount'] == 5.0

    def test_timezone_and_time_dropped(self):
        frame = pd.DataFrame({
            'date': pd.to_datetime(["2024-03-01 23:30"]).tz_localize("UTC"),
            'line': ["A"],
            'amount': [1.0],
        })

        assert records_to_frame(frame).loc[0, 'date'] == pd.Timestamp("2024-03-01 12:00")

    def test_empty_inputs(self):
        assert records_to_frame(None).empty
        assert records_to_frame([]).empty
        assert records_to_frame(pd.DataFrame()).empty

    def test_missing_columns(self):
        with pytest.raises(RecordValidationError):
            records_to_frame([{'date': "2024-03-01", 'amount': 1.0}])

    def test_negative_amount_skipped(self, caplog):
        df = records_to_frame([
            {'date': "2024-03-01", 'line': "A", 'amount': -1.0},
            {'date': "2024-03-02", 'line': "B", 'amount': 4.0},
        ])

        assert df['line'].tolist() == ["B"]
        assert df.index.tolist() == [0]
        assert "negative amounts" in caplog.text

    def test_only_negative_amounts_give_empty_frame(self):
        df = records_to_frame([{'date': "2024-03-01", 'line': "A", 'amount': -1.0}])

        assert df.empty
        assert list(df.columns) == ["date", "line", "group", "segment", "amount"]

    def test_input_frame_not_modified(self):
        frame = pd.DataFrame({'date': ["2024-03-01"], 'line': ["A"], 'amount': [1.0]})

        records_to_frame(frame)

        assert list(frame.columns) == ['date', 'line', 'amount']

    def test_frame_to_records(self):
        df = records_to_frame([{'date': date(2024, 3, 1), 'line': "A", 'group': "G", 'segment': "S", 'amount': 2}])

        assert frame_to_records(df) == [RevenueRecord(date(2024, 3, 1), "A", "G", "S", 2.0)]


class TestValueObjects:
    """Test value-object helpers."""

    def test_line_goal_targets(self):
        goal = LineGoal("A", "G", {1: 100.0, 2: None})

        assert goal.target_for_month(1) == 100.0
        assert goal.target_for_month(2) == 0.0
        assert goal.target_for_month(3) == 0.0
        assert goal.yearly_target == 100.0

    def test_iso_dates(self):
        assert RevenueRecord(date(2024, 3, 1), "A", "G", "S", 1.0).iso_date == "2024-03-01"
        assert DailyDataPoint(datetime(2024, 3, 1, 12), 1.0).iso_date == "2024-03-01"

    def test_goal_validation_error_fields(self):
        error = GoalValidationError("A", 13, 5)
        assert (error.line, error.month, error.value) == ("A", 13, 5)
        assert "month 13" in str(error)

    def test_safe_division(self):
        assert safe_divide(1.0, 0) == 0.0
        assert safe_divide(1.0, float('nan')) == 0.0
        assert safe_percent(1.0, 4.0) == 25.0
