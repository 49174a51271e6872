# revenue_goals/goal_tracking/pace.py
"""
Pace Projection

Chart-ready pace series for the active date preset:
- yesterday: single summary (D-1 realized vs. daily goal)
- wtd:       7 weekday points + cumulative week with forecast to week end
- mtd / custom: one point per day of the reference month + cumulative month
- all:       12 monthly points of the reference year + cumulative year

Future days are filled from the seasonality forecast model; past days
show realized values only.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, List, Optional, Sequence

import pandas as pd

from ..config import config
from .calendar_utils import (
    DateLike, add_days, days_in_month as month_length, iter_days, normalize_to_noon,
    start_of_week, to_date, to_iso_key,
)
from .constants import (
    DAYS_IN_WEEK, MONTH_ORDER, MONTHS_IN_YEAR, PACE_MODE_DUAL, PACE_MODE_SINGLE,
    PACE_TITLES, PRESET_ALL, PRESET_MTD, PRESET_WTD, PRESET_YESTERDAY, WEEKDAY_ORDER,
)
from .forecast import (
    SeasonalityFactors, average_daily_amount, blended_seasonality, build_forecast_model,
    project_cumulative,
)
from .models import DailyDataPoint, safe_divide, safe_percent

logger = logging.getLogger(__name__)

SERIES_VALUE_COLUMNS = ['realized', 'goal', 'projection']


@dataclass
class PaceSeries:
    """
    One pace chart.

    data columns: label, realized, goal, projection (NaN where not shown)
    """
    data: pd.DataFrame
    goal: float
    title: str
    realized: float = 0.0
    projection: float = 0.0


@dataclass
class PaceResult:
    mode: str
    goal: float
    realized: float
    projection: float
    title: str
    reference_date: datetime
    daily: Optional[PaceSeries] = None
    cumulative: Optional[PaceSeries] = None

    @property
    def percent_of_goal(self) -> float:
        """Projected attainment (realized / goal in single mode)."""
        return safe_percent(self.projection, self.goal)

    @property
    def gap(self) -> float:
        return self.realized - self.goal


def _series_frame(rows: List[Dict]) -> pd.DataFrame:
    frame = pd.DataFrame(rows, columns=['label', *SERIES_VALUE_COLUMNS])
    for column in SERIES_VALUE_COLUMNS:
        frame[column] = frame[column].astype(float)
    return frame


def pace_reference_date(
    daily_data: Sequence[DailyDataPoint],
    reference_year: Optional[int] = None,
    reference_month: Optional[int] = None,
    current_day: int = 0,
    today: Optional[DateLike] = None
) -> datetime:
    """Latest daily point, else the given year/month/day, else today (all at noon)."""
    if daily_data:
        return normalize_to_noon(max(point.date for point in daily_data))
    if reference_year and reference_month:
        day = min(max(current_day or 1, 1), month_length(date(reference_year, reference_month, 1)))
        return normalize_to_noon(date(reference_year, reference_month, day))
    return normalize_to_noon(today if today is not None else date.today())


def build_pace(
    daily_data: Sequence[DailyDataPoint],
    monthly_goal: float,
    days_in_month: int,
    current_day: int,
    date_preset: str = PRESET_MTD,
    yearly_goal: float = 0.0,
    reference_year: Optional[int] = None,
    reference_month: Optional[int] = None,
    historical_daily_data: Optional[Sequence[DailyDataPoint]] = None,
    seasonality_factors: Optional[SeasonalityFactors] = None,
    today: Optional[DateLike] = None
) -> PaceResult:
    """
    Build the pace series for a preset.

    Args:
        daily_data: Daily points of the current view (already filtered)
        monthly_goal: Goal of the reference month
        days_in_month / current_day: Month length and D-1 day number
        date_preset: yesterday / wtd / mtd / all
        yearly_goal: Used by 'all'; falls back to monthly_goal x 12
        historical_daily_data: Longer history for the forecast model
        seasonality_factors: Precomputed factors (derived from history otherwise)
    """
    reference_date = pace_reference_date(
        daily_data, reference_year, reference_month, current_day, today
    )
    daily_goal = safe_divide(monthly_goal, days_in_month)
    logger.debug(f"Pace '{date_preset}' at {reference_date:%Y-%m-%d}, {len(daily_data)} daily points")

    totals: Dict[str, float] = {}
    for point in daily_data:
        key = to_iso_key(point.date)
        totals[key] = totals.get(key, 0.0) + point.total

    if date_preset == PRESET_YESTERDAY:
        realized = totals.get(to_iso_key(reference_date), 0.0)
        return PaceResult(
            mode=PACE_MODE_SINGLE,
            goal=daily_goal,
            realized=realized,
            projection=realized,
            title=PACE_TITLES['yesterday'],
            reference_date=reference_date,
        )

    history = historical_daily_data if historical_daily_data else daily_data
    model = build_forecast_model(
        history,
        reference_date,
        average_daily_amount(daily_data, fallback=daily_goal),
        seasonality_factors,
    )

    if date_preset == PRESET_WTD:
        return _week_pace(totals, daily_goal, reference_date, model)

    if date_preset == PRESET_ALL:
        source = historical_daily_data if historical_daily_data is not None else daily_data
        return _year_pace(source, monthly_goal, yearly_goal, reference_date, model)

    return _month_pace(totals, monthly_goal, daily_goal, current_day, reference_date, model)


def pace_from_snapshot(
    snapshot,
    seasonality_factors: Optional[SeasonalityFactors] = None,
    seasonality_by: Optional[str] = None
) -> PaceResult:
    """
    Pace for a MetricsSnapshot, using its goal metrics and history.

    seasonality_by ('line' or 'group') blends per-line or per-group factors
    from the entity-filtered records, weighted by their revenue.
    """
    goal_metrics = snapshot.goal_metrics
    if seasonality_factors is None and seasonality_by:
        seasonality_factors = blended_seasonality(
            snapshot.filtered_data,
            seasonality_by,
            pace_reference_date(snapshot.daily_data, snapshot.reference_day.year,
                                goal_metrics.current_month, goal_metrics.current_day,
                                snapshot.reference_day),
        )
    return build_pace(
        daily_data=snapshot.daily_data,
        monthly_goal=goal_metrics.monthly_goal,
        days_in_month=goal_metrics.days_in_month,
        current_day=goal_metrics.current_day,
        date_preset=snapshot.date_preset,
        yearly_goal=goal_metrics.yearly_goal,
        reference_year=snapshot.reference_day.year,
        reference_month=goal_metrics.current_month,
        historical_daily_data=snapshot.historical_daily_data,
        seasonality_factors=seasonality_factors,
        today=snapshot.reference_day,
    )


# =============================================================================
# PER-MODE SERIES
# =============================================================================

def _week_pace(totals, daily_goal, reference_date, model) -> PaceResult:
    week_starts_on = config.get_app_setting("WEEK_STARTS_ON", 0)
    week_start = start_of_week(reference_date, week_starts_on)
    week_days = [add_days(week_start, i) for i in range(DAYS_IN_WEEK)]
    labels = [WEEKDAY_ORDER[(week_starts_on + i) % DAYS_IN_WEEK] for i in range(DAYS_IN_WEEK)]

    daily_rows, cumulative_rows = [], []
    running = 0.0
    for i, day in enumerate(week_days):
        actual = totals.get(to_iso_key(day))
        is_past = day <= reference_date
        daily_rows.append({
            'label': labels[i],
            'realized': actual if is_past else None,
            'goal': daily_goal,
            'projection': None if is_past else model.forecast_for_date(day).p50,
        })
        running += actual or 0.0
        cumulative_rows.append({
            'label': labels[i],
            'realized': running if is_past else None,
            'goal': daily_goal * (i + 1),
            'projection': None,
        })

    current_index = (reference_date.weekday() - week_starts_on) % DAYS_IN_WEEK
    realized_total = cumulative_rows[current_index]['realized'] or 0.0
    projected = [realized_total] + project_cumulative(
        realized_total, model, week_days[current_index + 1:]
    )
    for offset, value in enumerate(projected):
        cumulative_rows[current_index + offset]['projection'] = value

    projection_total = cumulative_rows[-1]['projection'] or realized_total
    weekly_goal = daily_goal * DAYS_IN_WEEK

    return PaceResult(
        mode=PACE_MODE_DUAL,
        goal=weekly_goal,
        realized=realized_total,
        projection=projection_total,
        title=PACE_TITLES['week_cumulative'],
        reference_date=reference_date,
        daily=PaceSeries(_series_frame(daily_rows), daily_goal, PACE_TITLES['week_daily']),
        cumulative=PaceSeries(
            _series_frame(cumulative_rows), weekly_goal, PACE_TITLES['week_cumulative'],
            realized=realized_total, projection=projection_total,
        ),
    )


def _month_pace(totals, monthly_goal, daily_goal, current_day, reference_date, model) -> PaceResult:
    days_in_month = month_length(reference_date)
    current_day = min(max(int(current_day or 0), 0), days_in_month)
    month_days = [
        normalize_to_noon(date(reference_date.year, reference_date.month, day))
        for day in range(1, days_in_month + 1)
    ]

    daily_rows, cumulative_rows = [], []
    running = 0.0
    for number, day in enumerate(month_days, start=1):
        actual = totals.get(to_iso_key(day))
        is_past = number <= current_day
        daily_rows.append({
            'label': number,
            'realized': actual if is_past else None,
            'goal': daily_goal,
            'projection': None if is_past else model.forecast_for_date(day).p50,
        })
        running += actual or 0.0
        cumulative_rows.append({
            'label': number,
            'realized': running if is_past else None,
            'goal': daily_goal * number,
            'projection': None,
        })

    realized_total = 0.0
    if current_day > 0:
        realized_total = cumulative_rows[current_day - 1]['realized'] or 0.0
        cumulative_rows[current_day - 1]['projection'] = realized_total
    for offset, value in enumerate(project_cumulative(realized_total, model, month_days[current_day:])):
        cumulative_rows[current_day + offset]['projection'] = value

    projection_total = (cumulative_rows[-1]['projection'] if cumulative_rows else None) or realized_total

    return PaceResult(
        mode=PACE_MODE_DUAL,
        goal=monthly_goal,
        realized=realized_total,
        projection=projection_total,
        title=PACE_TITLES['month_cumulative'],
        reference_date=reference_date,
        daily=PaceSeries(_series_frame(daily_rows), daily_goal, PACE_TITLES['month_daily']),
        cumulative=PaceSeries(
            _series_frame(cumulative_rows), monthly_goal, PACE_TITLES['month_cumulative'],
            realized=realized_total, projection=projection_total,
        ),
    )


def _year_pace(source, monthly_goal, yearly_goal, reference_date, model) -> PaceResult:
    yearly_goal = yearly_goal or monthly_goal * MONTHS_IN_YEAR
    month_goal = yearly_goal / MONTHS_IN_YEAR
    year = reference_date.year
    current_month = reference_date.month

    monthly_totals = {month: 0.0 for month in range(1, MONTHS_IN_YEAR + 1)}
    for point in source:
        point_day = to_date(point.date)
        if point_day.year == year:
            monthly_totals[point_day.month] += point.total

    # Forecast for the rest of the year, after the reference date
    monthly_forecast = {month: 0.0 for month in range(1, MONTHS_IN_YEAR + 1)}
    for day in iter_days(add_days(reference_date, 1), date(year, 12, 31)):
        monthly_forecast[day.month] += model.forecast_for_date(day).p50

    monthly_rows, cumulative_rows = [], []
    running = 0.0
    for month in range(1, MONTHS_IN_YEAR + 1):
        actual = monthly_totals[month]
        monthly_rows.append({
            'label': MONTH_ORDER[month - 1],
            'realized': actual if month <= current_month else None,
            'goal': month_goal,
            'projection': actual + monthly_forecast[month] if month >= current_month else None,
        })
        running += actual
        cumulative_rows.append({
            'label': MONTH_ORDER[month - 1],
            'realized': running if month <= current_month else None,
            'goal': month_goal * month,
            'projection': None,
        })

    realized_total = cumulative_rows[current_month - 1]['realized'] or 0.0
    projected = realized_total
    for month in range(current_month, MONTHS_IN_YEAR + 1):
        projected += monthly_forecast[month]
        cumulative_rows[month - 1]['projection'] = projected

    projection_total = cumulative_rows[-1]['projection'] or realized_total

    return PaceResult(
        mode=PACE_MODE_DUAL,
        goal=yearly_goal,
        realized=realized_total,
        projection=projection_total,
        title=PACE_TITLES['year_cumulative'],
        reference_date=reference_date,
        daily=PaceSeries(_series_frame(monthly_rows), month_goal, PACE_TITLES['year_monthly']),
        cumulative=PaceSeries(
            _series_frame(cumulative_rows), yearly_goal, PACE_TITLES['year_cumulative'],
            realized=realized_total, projection=projection_total,
        ),
    )


__all__ = [
    'PaceSeries',
    'PaceResult',
    'pace_reference_date',
    'build_pace',
    'pace_from_snapshot',
]
