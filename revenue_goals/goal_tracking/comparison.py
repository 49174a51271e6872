# revenue_goals/goal_tracking/comparison.py
"""
Comparison Period Resolver

Derives the period the current view is compared against:
- custom start/end when the user picked one ("Custom Period")
- otherwise the block of days immediately before the current range,
  with the same number of calendar days
"""

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional

from .calendar_utils import add_days, end_of_day, inclusive_day_count, start_of_day
from .constants import (
    LABEL_CUSTOM_PERIOD, LABEL_PREVIOUS_DAY, LABEL_PREVIOUS_DAYS,
    LABEL_PREVIOUS_PERIOD, SHORT_COMPARISON_MAX_DAYS,
)
from .filters import DateRange

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComparisonSettings:
    """Comparison toggle plus an optional user-picked range."""
    enabled: bool = False
    custom_start: Optional[date] = None
    custom_end: Optional[date] = None

    def toggle(self) -> 'ComparisonSettings':
        return replace(self, enabled=not self.enabled)

    def with_custom_range(self, start: Optional[date], end: Optional[date]) -> 'ComparisonSettings':
        return replace(self, custom_start=start, custom_end=end)

    def without_custom_range(self) -> 'ComparisonSettings':
        return replace(self, custom_start=None, custom_end=None)

    def cleared(self) -> 'ComparisonSettings':
        return ComparisonSettings()


@dataclass(frozen=True)
class ComparisonPeriod:
    start: datetime
    end: datetime
    label: str

    @property
    def duration_days(self) -> int:
        return inclusive_day_count(self.start, self.end)

    def as_range(self) -> DateRange:
        return DateRange(self.start, self.end)


def comparison_label(duration_days: int) -> str:
    if duration_days == 1:
        return LABEL_PREVIOUS_DAY
    if duration_days <= SHORT_COMPARISON_MAX_DAYS:
        return LABEL_PREVIOUS_DAYS.format(days=duration_days)
    return LABEL_PREVIOUS_PERIOD


def resolve_comparison_period(
    settings: ComparisonSettings,
    current_range: DateRange
) -> Optional[ComparisonPeriod]:
    """
    Resolve the comparison period.

    Args:
        settings: Comparison toggle and custom range
        current_range: Effective date range of the current view

    Returns:
        ComparisonPeriod, or None when comparison is disabled or the current
        range is unbounded (no prior period can be derived)
    """
    if not settings.enabled:
        return None

    if settings.custom_start is not None and settings.custom_end is not None:
        return ComparisonPeriod(
            start=start_of_day(settings.custom_start),
            end=end_of_day(settings.custom_end),
            label=LABEL_CUSTOM_PERIOD,
        )

    if not current_range.is_bounded:
        logger.debug("Comparison skipped: current period has no start/end")
        return None

    # Whole calendar days, so an end-of-day bound does not add an extra day
    duration_days = inclusive_day_count(current_range.start, current_range.end)
    if duration_days <= 0:
        logger.warning(f"Comparison skipped: empty current range {current_range}")
        return None

    comparison_end = end_of_day(add_days(current_range.start, -1))
    comparison_start = start_of_day(add_days(comparison_end, -(duration_days - 1)))

    return ComparisonPeriod(
        start=comparison_start,
        end=comparison_end,
        label=comparison_label(duration_days),
    )


__all__ = [
    'ComparisonSettings',
    'ComparisonPeriod',
    'comparison_label',
    'resolve_comparison_period',
]
