# revenue_goals/goal_tracking/goal_calculator.py
"""
Goal Calculator

Turns monthly line targets into daily and period goal amounts:
- Base daily goal: monthly target / days in month
- Segment adjustment: weekday/weekend multipliers from SEGMENT_ADJUSTMENT_RULES
- Period sums: day-by-day totals over a date range (each day uses its own
  month's target and its own weekday adjustment)

Also includes the goal-table helpers used by the goal editor
(per-line / per-group lookups and month edits).
"""

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Sequence

import pandas as pd

from .calendar_utils import (
    DateLike, days_in_month, is_weekend, iter_days, normalize_to_noon,
    to_date, to_iso_key,
)
from .constants import MONTH_ORDER, MONTHS_IN_YEAR, SEGMENT_ADJUSTMENT_RULES
from .models import GoalValidationError, LineGoal, LineMetaInfo

logger = logging.getLogger(__name__)


# =========================================================================
# SINGLE LINE
# =========================================================================

def daily_base_goal(line: LineMetaInfo, day: DateLike) -> float:
    """Monthly target of the day's month spread evenly over its days."""
    d = to_date(day)
    monthly_target = line.target_for_month(d.month)
    n_days = days_in_month(d)
    return monthly_target / n_days if n_days > 0 else 0.0


def adjustment_factor(segment: str, day: DateLike) -> float:
    """
    Goal multiplier for a segment on a given day.

    Only segments listed in SEGMENT_ADJUSTMENT_RULES are adjusted;
    every other value (including '') gets 1.0.
    """
    rule = SEGMENT_ADJUSTMENT_RULES.get(segment)
    if rule is None:
        return 1.0
    return rule['weekend'] if is_weekend(day) else rule['weekday']


def adjusted_daily_goal(line: LineMetaInfo, day: DateLike) -> float:
    return daily_base_goal(line, day) * adjustment_factor(line.segment, day)


# =========================================================================
# TOTALS ACROSS LINES
# =========================================================================

def total_adjusted_daily_goal(lines: Sequence[LineMetaInfo], day: DateLike) -> float:
    if not lines:
        return 0.0
    normalized = normalize_to_noon(day)
    return sum(adjusted_daily_goal(line, normalized) for line in lines)


def total_base_daily_goal(lines: Sequence[LineMetaInfo], day: DateLike) -> float:
    if not lines:
        return 0.0
    normalized = normalize_to_noon(day)
    return sum(daily_base_goal(line, normalized) for line in lines)


def total_monthly_goal(lines: Sequence[LineMetaInfo], month: int) -> float:
    if not lines:
        return 0.0
    return sum(line.target_for_month(month) for line in lines)


def total_yearly_goal(lines: Sequence[LineMetaInfo]) -> float:
    if not lines:
        return 0.0
    return sum(line.yearly_target for line in lines)


def monthly_goals_array(lines: Sequence[LineMetaInfo]) -> List[float]:
    """Total goal for each month, January first."""
    return [total_monthly_goal(lines, month) for month in range(1, MONTHS_IN_YEAR + 1)]


def sum_adjusted_daily_goals_for_range(
    lines: Sequence[LineMetaInfo],
    start: DateLike,
    end: DateLike
) -> float:
    """
    Sum of total_adjusted_daily_goal for every day in [start, end].

    Returns 0 when there are no lines or start is after end.
    """
    if not lines:
        return 0.0
    start_day = normalize_to_noon(start)
    end_day = normalize_to_noon(end)
    if start_day > end_day:
        return 0.0

    return sum(total_adjusted_daily_goal(lines, day) for day in iter_days(start_day, end_day))


def build_daily_goal_map(
    lines: Sequence[LineMetaInfo],
    dates: Iterable[DateLike]
) -> Dict[str, float]:
    """ISO date -> adjusted daily goal, one entry per input date."""
    goal_map = {}
    for day in dates:
        normalized = normalize_to_noon(day)
        goal_map[to_iso_key(normalized)] = total_adjusted_daily_goal(lines, normalized)
    return goal_map


def line_adjusted_daily_goal_for_date(
    lines: Sequence[LineMetaInfo],
    line_name: str,
    day: DateLike
) -> float:
    """Adjusted daily goal of one line by name; 0 for unknown lines."""
    for line in lines:
        if line.line == line_name:
            return adjusted_daily_goal(line, day)
    return 0.0


# =========================================================================
# GOAL TABLE HELPERS
# =========================================================================

def empty_line_goal(line: str, group: str) -> LineGoal:
    """Goal entry with a zero target for every month."""
    return LineGoal(
        line=line,
        group=group,
        monthly_targets={month: 0.0 for month in range(1, MONTHS_IN_YEAR + 1)},
    )


def line_monthly_goal(goals: Iterable[LineGoal], line_name: str, month: int) -> float:
    for goal in goals:
        if goal.line == line_name:
            return goal.target_for_month(month)
    return 0.0


def group_monthly_goal(goals: Iterable[LineGoal], group: str, month: int) -> float:
    return sum(goal.target_for_month(month) for goal in goals if goal.group == group)


def update_goal_for_month(
    goals: List[LineGoal],
    line_name: str,
    month: int,
    value: float
) -> List[LineGoal]:
    """
    Set one month's target of one line.

    Returns a new goal list; the input list is not modified.

    Raises:
        GoalValidationError: month outside 1-12 or negative/non-numeric value
    """
    try:
        month_number = int(month)
        target = float(value)
    except (TypeError, ValueError):
        raise GoalValidationError(line_name, month, value)
    if not 1 <= month_number <= MONTHS_IN_YEAR:
        raise GoalValidationError(line_name, month, value)
    if target < 0:
        raise GoalValidationError(line_name, month, value)

    updated = []
    found = False
    for goal in goals:
        if goal.line == line_name:
            found = True
            targets = dict(goal.monthly_targets)
            targets[month_number] = target
            goal = replace(goal, monthly_targets=targets)
        updated.append(goal)

    if not found:
        logger.warning(f"No goal entry for line '{line_name}', edit ignored")
    return updated


def goals_frame(goals: Iterable[LineGoal]) -> pd.DataFrame:
    """
    Goal table as a DataFrame: one row per line, Jan-Dec columns plus yearly total.
    """
    rows = []
    for goal in goals:
        row = {'line': goal.line, 'group': goal.group}
        for month, label in enumerate(MONTH_ORDER, start=1):
            row[label] = goal.target_for_month(month)
        row['yearly'] = goal.yearly_target
        rows.append(row)

    columns = ['line', 'group', *MONTH_ORDER, 'yearly']
    if not rows:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(rows, columns=columns)


__all__ = [
    'daily_base_goal',
    'adjustment_factor',
    'adjusted_daily_goal',
    'total_adjusted_daily_goal',
    'total_base_daily_goal',
    'total_monthly_goal',
    'total_yearly_goal',
    'monthly_goals_array',
    'sum_adjusted_daily_goals_for_range',
    'build_daily_goal_map',
    'line_adjusted_daily_goal_for_date',
    'empty_line_goal',
    'line_monthly_goal',
    'group_monthly_goal',
    'update_goal_for_month',
    'goals_frame',
]
