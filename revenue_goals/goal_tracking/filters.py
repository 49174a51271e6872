# revenue_goals/goal_tracking/filters.py
"""
Filters for Goal Tracking

Entity filters (line / group / segment), date-range presets and the
filter-state transitions of the dashboard:
- Presets: yesterday / wtd / mtd / all (all = custom start/end)
- Choosing a preset other than 'all' clears the custom dates
- Editing a custom date switches back to 'all'

Filtering logic works on the record frame (see models.records_to_frame).
Empty selections mean "no restriction": OR within a dimension, AND across.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Dict, FrozenSet, Iterable, List, Optional

import pandas as pd

from ..config import config
from .calendar_utils import (
    DateLike, end_of_day, start_of_day, start_of_month, start_of_week,
    yesterday_of,
)
from .constants import DATE_PRESETS, PRESET_ALL, PRESET_MTD, PRESET_WTD, PRESET_YESTERDAY
from .models import RevenueLine

logger = logging.getLogger(__name__)

ENTITY_COLUMNS = {
    'lines': 'line',
    'groups': 'group',
    'segments': 'segment',
}

DATE_KEYS = ('date_start', 'date_end')


# =============================================================================
# FILTER VALUES
# =============================================================================

@dataclass(frozen=True)
class Filters:
    """
    Active filters.

    Attributes:
        lines / groups / segments: Selected values (empty = all)
        date_start / date_end: Custom range bounds, only used by the 'all' preset
    """
    lines: FrozenSet[str] = field(default_factory=frozenset)
    groups: FrozenSet[str] = field(default_factory=frozenset)
    segments: FrozenSet[str] = field(default_factory=frozenset)
    date_start: Optional[date] = None
    date_end: Optional[date] = None

    def __post_init__(self):
        for key in ENTITY_COLUMNS:
            object.__setattr__(self, key, frozenset(getattr(self, key) or ()))

    @property
    def has_entity_filter(self) -> bool:
        return bool(self.lines or self.groups or self.segments)

    @property
    def has_custom_range(self) -> bool:
        return self.date_start is not None and self.date_end is not None


@dataclass(frozen=True)
class DateRange:
    """Inclusive datetime range; either bound may be open (None)."""
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @property
    def is_bounded(self) -> bool:
        return self.start is not None and self.end is not None

    def contains(self, value: datetime) -> bool:
        if self.start is not None and value < self.start:
            return False
        if self.end is not None and value > self.end:
            return False
        return True


@dataclass(frozen=True)
class FilterState:
    """Filters plus the active date preset; replaced wholesale on every change."""
    filters: Filters = field(default_factory=Filters)
    date_preset: str = PRESET_ALL

    def __post_init__(self):
        if self.date_preset not in DATE_PRESETS:
            raise ValueError(f"Unknown date preset '{self.date_preset}'. Expected one of {DATE_PRESETS}")

    # ---------- transitions ----------

    def update_filter(self, key: str, value) -> 'FilterState':
        """Replace one filter value; editing a date switches the preset to 'all'."""
        if key in ENTITY_COLUMNS:
            value = frozenset(value or ())
        elif key not in DATE_KEYS:
            raise ValueError(f"Unknown filter '{key}'")

        filters = replace(self.filters, **{key: value})
        preset = PRESET_ALL if key in DATE_KEYS else self.date_preset
        return FilterState(filters=filters, date_preset=preset)

    def toggle_filter_value(self, key: str, value: str) -> 'FilterState':
        """Add the value to an entity filter, or remove it if already selected."""
        if key not in ENTITY_COLUMNS:
            raise ValueError(f"Unknown entity filter '{key}'")
        current = getattr(self.filters, key)
        updated = current - {value} if value in current else current | {value}
        return FilterState(filters=replace(self.filters, **{key: updated}), date_preset=self.date_preset)

    def with_date_preset(self, preset: str) -> 'FilterState':
        """Select a preset; anything but 'all' clears the custom dates."""
        filters = self.filters
        if preset != PRESET_ALL:
            filters = replace(filters, date_start=None, date_end=None)
        return FilterState(filters=filters, date_preset=preset)

    def cleared(self) -> 'FilterState':
        return FilterState()


# =============================================================================
# DATE RANGE
# =============================================================================

def effective_date_range(state: FilterState, today: DateLike) -> DateRange:
    """
    Resolve the date range of the active preset.

    - yesterday: [D-1 00:00, D-1 23:59:59.999]
    - wtd: [Monday of the current week, end of today]
    - mtd: [1st of the current month, end of today]
    - all: custom date_start / date_end (either may be open)
    """
    preset = state.date_preset

    if preset == PRESET_YESTERDAY:
        yesterday = yesterday_of(today)
        return DateRange(start_of_day(yesterday), end_of_day(yesterday))

    if preset == PRESET_WTD:
        week_start = start_of_week(today, config.get_app_setting("WEEK_STARTS_ON", 0))
        return DateRange(week_start, end_of_day(today))

    if preset == PRESET_MTD:
        return DateRange(start_of_month(today), end_of_day(today))

    filters = state.filters
    return DateRange(
        start=start_of_day(filters.date_start) if filters.date_start is not None else None,
        end=end_of_day(filters.date_end) if filters.date_end is not None else None,
    )


# =============================================================================
# FRAME FILTERING
# =============================================================================

def apply_multiselect_filter(
    df: pd.DataFrame,
    column: str,
    selected: Iterable[str]
) -> pd.DataFrame:
    """
    Keep rows whose column value is among the selected values.

    An empty selection leaves the frame untouched.
    """
    selected = list(selected)
    if df.empty or not selected:
        return df

    if column not in df.columns:
        logger.warning(f"Column '{column}' not found in DataFrame")
        return df

    return df[df[column].isin(selected)]


def apply_entity_filters(df: pd.DataFrame, filters: Filters) -> pd.DataFrame:
    """Apply line, group and segment filters."""
    for key, column in ENTITY_COLUMNS.items():
        df = apply_multiselect_filter(df, column, getattr(filters, key))
    return df


def apply_date_range(df: pd.DataFrame, date_range: DateRange) -> pd.DataFrame:
    """Keep rows dated within the range (inclusive, open bounds ignored)."""
    if df.empty:
        return df

    mask = pd.Series(True, index=df.index)
    if date_range.start is not None:
        mask &= df['date'] >= pd.Timestamp(date_range.start)
    if date_range.end is not None:
        mask &= df['date'] <= pd.Timestamp(date_range.end)
    return df[mask]


def filter_between(df: pd.DataFrame, start: DateLike, end: DateLike) -> pd.DataFrame:
    """Rows from start of day `start` to end of day `end`."""
    return apply_date_range(df, DateRange(start_of_day(start), end_of_day(end)))


# =============================================================================
# OPTIONS & SUMMARY
# =============================================================================

def get_filter_options(df: pd.DataFrame, registry: Iterable[RevenueLine] = ()) -> Dict:
    """
    Distinct values for the filter dropdowns.

    Falls back to the line registry when there are no records.

    Returns:
        Dict with lines, groups, segments (sorted lists) and min_date / max_date
    """
    if df.empty:
        registry = list(registry)
        return {
            'lines': sorted({line.line for line in registry}),
            'groups': sorted({line.group for line in registry}),
            'segments': sorted({line.segment for line in registry}),
            'min_date': None,
            'max_date': None,
        }

    return {
        'lines': sorted(df['line'].dropna().unique().tolist()),
        'groups': sorted(df['group'].dropna().unique().tolist()),
        'segments': sorted(df['segment'].dropna().unique().tolist()),
        'min_date': df['date'].min().to_pydatetime(),
        'max_date': df['date'].max().to_pydatetime(),
    }


def has_active_filters(state: FilterState, comparison_enabled: bool = False) -> bool:
    """True when anything differs from the cleared state."""
    filters = state.filters
    return (
        filters.has_entity_filter
        or filters.date_start is not None
        or filters.date_end is not None
        or state.date_preset != PRESET_ALL
        or comparison_enabled
    )


def get_filter_summary(state: FilterState) -> str:
    """Human-readable summary of the active filters."""
    parts: List[str] = []
    filters = state.filters
    for key in ENTITY_COLUMNS:
        values = sorted(getattr(filters, key))
        if values:
            parts.append(f"{key.title()}: {', '.join(values)}")

    if state.date_preset != PRESET_ALL:
        parts.append(f"Period: {state.date_preset.upper()}")
    elif filters.date_start or filters.date_end:
        start = filters.date_start.isoformat() if filters.date_start else '...'
        end = filters.date_end.isoformat() if filters.date_end else '...'
        parts.append(f"Period: {start} to {end}")

    return " | ".join(parts) if parts else "No filters"


__all__ = [
    'Filters',
    'DateRange',
    'FilterState',
    'effective_date_range',
    'apply_multiselect_filter',
    'apply_entity_filters',
    'apply_date_range',
    'filter_between',
    'get_filter_options',
    'has_active_filters',
    'get_filter_summary',
]
