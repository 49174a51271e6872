# revenue_goals/goal_tracking/models.py
"""
Data Model for Goal Tracking

Value objects shared by every goal-tracking component:
- RevenueRecord: one dated revenue amount for a line
- LineGoal / LineMetaInfo: monthly targets per line (+ resolved segment)
- RevenueLine: line registry entry (line -> group, segment)
- DailyDataPoint: chart-ready daily aggregate

Also holds the record-frame conversion used by the aggregator and the
custom exceptions raised at the input edges.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Union

import pandas as pd

from .calendar_utils import normalize_to_noon, to_iso_key
from .constants import DEFAULT_GROUP, DEFAULT_SEGMENT, MONTHS_IN_YEAR, RECORD_COLUMNS

logger = logging.getLogger(__name__)


# ==================== CUSTOM EXCEPTIONS ====================

class RevenueGoalsError(Exception):
    """Base exception for goal tracking errors"""
    pass


class RecordValidationError(RevenueGoalsError):
    """Raised when a record collection cannot be turned into a record frame"""
    pass


class GoalValidationError(RevenueGoalsError):
    """Raised when a goal edit is invalid"""
    def __init__(self, line: str, month: int, value: Any):
        self.line = line
        self.month = month
        self.value = value
        super().__init__(
            f"Invalid goal for '{line}' month {month}: {value!r}. "
            f"Month must be 1-12 and the target a non-negative number."
        )


class EntryValidationError(RevenueGoalsError):
    """Raised when a manual revenue entry is invalid"""
    pass


# ==================== VALUE OBJECTS ====================

@dataclass(frozen=True)
class RevenueRecord:
    """One day of revenue for one line."""
    date: date
    line: str
    group: str
    segment: str
    amount: float

    @property
    def iso_date(self) -> str:
        return to_iso_key(self.date)


@dataclass(frozen=True)
class RevenueLine:
    """Registry entry: which group and segment a line belongs to."""
    line: str
    group: str = DEFAULT_GROUP
    segment: str = DEFAULT_SEGMENT


@dataclass
class LineGoal:
    """
    Monthly targets of one line for one year.

    Attributes:
        line: Line identifier
        group: Organizational group of the line
        monthly_targets: month (1-12) -> target amount; missing months count as 0
    """
    line: str
    group: str
    monthly_targets: Dict[int, float] = field(default_factory=dict)

    def target_for_month(self, month: int) -> float:
        return float(self.monthly_targets.get(month, 0) or 0)

    @property
    def yearly_target(self) -> float:
        return float(sum(self.target_for_month(m) for m in range(1, MONTHS_IN_YEAR + 1)))


@dataclass(frozen=True)
class LineMetaInfo:
    """LineGoal enriched with the segment resolved from the line registry."""
    line: str
    group: str
    segment: str
    monthly_targets: Dict[int, float] = field(default_factory=dict)

    def target_for_month(self, month: int) -> float:
        return float(self.monthly_targets.get(month, 0) or 0)

    @property
    def yearly_target(self) -> float:
        return float(sum(self.target_for_month(m) for m in range(1, MONTHS_IN_YEAR + 1)))


@dataclass
class DailyDataPoint:
    """
    Revenue of one calendar day, split by line and group.

    goal is None unless the adjusted daily goal for the day is positive.
    """
    date: datetime
    total: float
    goal: Optional[float] = None
    by_line: Dict[str, float] = field(default_factory=dict)
    by_group: Dict[str, float] = field(default_factory=dict)

    @property
    def iso_date(self) -> str:
        return to_iso_key(self.date)


# ==================== HELPERS ====================

def safe_divide(numerator: float, denominator: float) -> float:
    """numerator / denominator, or 0 when the result would not be finite."""
    if not denominator:
        return 0.0
    result = numerator / denominator
    return result if math.isfinite(result) else 0.0


def safe_percent(numerator: float, denominator: float) -> float:
    return safe_divide(numerator, denominator) * 100


RecordsInput = Union[pd.DataFrame, Iterable[Union[RevenueRecord, Dict[str, Any]]], None]


def empty_records_frame() -> pd.DataFrame:
    """Record frame with the expected columns and dtypes, no rows."""
    return pd.DataFrame({
        'date': pd.Series(dtype='datetime64[ns]'),
        'line': pd.Series(dtype='object'),
        'group': pd.Series(dtype='object'),
        'segment': pd.Series(dtype='object'),
        'amount': pd.Series(dtype='float64'),
    })


def normalize_date_column(series: pd.Series) -> pd.Series:
    """Parse a date column and pin every value to 12:00 of its day."""
    parsed = pd.to_datetime(series)
    if getattr(parsed.dt, 'tz', None) is not None:
        parsed = parsed.dt.tz_localize(None)
    return parsed.dt.normalize() + pd.Timedelta(hours=12)


def records_to_frame(records: RecordsInput) -> pd.DataFrame:
    """
    Build the record frame used by every aggregation.

    Args:
        records: DataFrame with at least date/line/amount columns, or an
                 iterable of RevenueRecord / dicts with the same keys

    Returns:
        DataFrame[date, line, group, segment, amount], date noon-normalized

    Raises:
        RecordValidationError: required columns missing
    """
    if records is None:
        return empty_records_frame()

    if isinstance(records, pd.DataFrame):
        df = records.copy()
    else:
        rows = []
        for record in records:
            if isinstance(record, RevenueRecord):
                rows.append({
                    'date': record.date,
                    'line': record.line,
                    'group': record.group,
                    'segment': record.segment,
                    'amount': record.amount,
                })
            else:
                rows.append(dict(record))
        if not rows:
            return empty_records_frame()
        df = pd.DataFrame(rows)

    if df.empty:
        return empty_records_frame()

    missing = [c for c in ('date', 'line', 'amount') if c not in df.columns]
    if missing:
        raise RecordValidationError(f"Record frame missing columns: {missing}")

    if 'group' not in df.columns:
        df['group'] = DEFAULT_GROUP
    if 'segment' not in df.columns:
        df['segment'] = DEFAULT_SEGMENT

    df['group'] = df['group'].fillna(DEFAULT_GROUP)
    df['segment'] = df['segment'].fillna(DEFAULT_SEGMENT)
    df['amount'] = pd.to_numeric(df['amount'], errors='coerce').fillna(0.0).astype(float)

    negative = df['amount'] < 0
    if negative.any():
        bad = df.loc[negative, ['date', 'line', 'amount']].head(3).to_dict('records')
        logger.warning(f"Skipping {int(negative.sum())} records with negative amounts: {bad}")
        df = df.loc[~negative].copy()
        if df.empty:
            return empty_records_frame()

    df['date'] = normalize_date_column(df['date'])

    return df[RECORD_COLUMNS].reset_index(drop=True)


def frame_to_records(df: pd.DataFrame) -> List[RevenueRecord]:
    """Inverse of records_to_frame, for callers that want value objects."""
    return [
        RevenueRecord(
            date=normalize_to_noon(row.date).date(),
            line=row.line,
            group=row.group,
            segment=row.segment,
            amount=float(row.amount),
        )
        for row in df.itertuples(index=False)
    ]


__all__ = [
    'RevenueGoalsError',
    'RecordValidationError',
    'GoalValidationError',
    'EntryValidationError',
    'RevenueRecord',
    'RevenueLine',
    'LineGoal',
    'LineMetaInfo',
    'DailyDataPoint',
    'safe_divide',
    'safe_percent',
    'empty_records_frame',
    'normalize_date_column',
    'records_to_frame',
    'frame_to_records',
]
