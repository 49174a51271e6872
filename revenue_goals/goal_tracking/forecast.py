# revenue_goals/goal_tracking/forecast.py
"""
Seasonality & Forecast Engine

Builds a deterministic daily forecast from historical daily totals:

    p50(date) = fallback_average x weekday_factor(date) x month_factor(date)

- weekday_factor: mean total of that weekday / overall mean daily total
- month_factor:   mean daily total of that month-of-year / overall mean
Both default to 1.0 when history is too short, so the model degrades to the
flat fallback average instead of failing.

Only history strictly before the reference date (the last closed day) feeds
the factors.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from ..config import config
from .calendar_utils import DateLike, normalize_to_noon, to_date
from .constants import (
    MIN_DAYS_PER_MONTH_SAMPLE, MIN_MONTHS_FOR_SEASONALITY, MIN_WEEKDAY_SAMPLES,
)
from .models import DailyDataPoint, safe_divide

logger = logging.getLogger(__name__)

ObservationsInput = Union[pd.DataFrame, Sequence[DailyDataPoint], Sequence[tuple], None]


@dataclass(frozen=True)
class SeasonalityFactors:
    """
    Multipliers relative to the overall mean daily total.

    Attributes:
        weekday: weekday (0 = Monday) -> factor
        month: month of year (1-12) -> factor
    """
    weekday: Dict[int, float] = field(default_factory=dict)
    month: Dict[int, float] = field(default_factory=dict)

    def weekday_factor(self, day: DateLike) -> float:
        return self.weekday.get(to_date(day).weekday(), 1.0)

    def month_factor(self, day: DateLike) -> float:
        return self.month.get(to_date(day).month, 1.0)

    @property
    def is_neutral(self) -> bool:
        return not self.weekday and not self.month


@dataclass(frozen=True)
class ForecastPoint:
    """Point estimate for one day."""
    p50: float


@dataclass(frozen=True)
class ForecastModel:
    """Stateless forecast built from history; rebuild when inputs change."""
    reference_date: datetime
    fallback_average: float
    factors: SeasonalityFactors
    history_days: int = 0

    def forecast_for_date(self, day: DateLike) -> ForecastPoint:
        value = (
            self.fallback_average
            * self.factors.weekday_factor(day)
            * self.factors.month_factor(day)
        )
        return ForecastPoint(p50=float(value))


# =========================================================================
# HISTORY
# =========================================================================

def daily_totals(
    observations: ObservationsInput,
    reference_date: Optional[DateLike] = None,
    include_reference: bool = True
) -> pd.Series:
    """
    Sum observations per calendar day.

    Args:
        observations: DataFrame with date + amount (or total) columns,
                      DailyDataPoints, or (date, amount) tuples
        reference_date: Drop days after this date when given
        include_reference: Keep the reference day itself

    Returns:
        Series indexed by day (midnight Timestamps), sorted ascending
    """
    if observations is None:
        return pd.Series(dtype='float64')

    if isinstance(observations, pd.DataFrame):
        if observations.empty:
            return pd.Series(dtype='float64')
        value_col = 'amount' if 'amount' in observations.columns else 'total'
        frame = observations[['date', value_col]].rename(columns={value_col: 'amount'})
    else:
        rows = []
        for obs in observations:
            if isinstance(obs, DailyDataPoint):
                rows.append({'date': obs.date, 'amount': obs.total})
            else:
                rows.append({'date': obs[0], 'amount': obs[1]})
        if not rows:
            return pd.Series(dtype='float64')
        frame = pd.DataFrame(rows)

    days = pd.to_datetime(frame['date']).dt.normalize()
    totals = frame['amount'].astype(float).groupby(days).sum().sort_index()

    if reference_date is not None:
        cutoff = pd.Timestamp(to_date(reference_date))
        if include_reference:
            totals = totals[totals.index <= cutoff]
        else:
            totals = totals[totals.index < cutoff]

    return totals


def compute_seasonality_factors(
    totals: pd.Series,
    min_history_days: Optional[int] = None
) -> SeasonalityFactors:
    """
    Derive weekday and month-of-year factors from daily totals.

    Returns neutral factors when there are fewer than min_history_days
    observed days or the overall mean is not positive.
    """
    if min_history_days is None:
        min_history_days = config.get_app_setting("FORECAST_MIN_HISTORY_DAYS", 14)

    if totals.empty or len(totals) < min_history_days:
        logger.debug(f"Seasonality skipped: {len(totals)} history days < {min_history_days}")
        return SeasonalityFactors()

    overall_mean = float(totals.mean())
    if not np.isfinite(overall_mean) or overall_mean <= 0:
        return SeasonalityFactors()

    index = pd.DatetimeIndex(totals.index)

    # Weekday factors
    weekday_stats = totals.groupby(index.weekday).agg(['mean', 'count'])
    weekday = {
        int(wd): safe_divide(float(row['mean']), overall_mean)
        for wd, row in weekday_stats.iterrows()
        if row['count'] >= MIN_WEEKDAY_SAMPLES
    }

    # Month-of-year factors
    month = {}
    distinct_months = len(set(zip(index.year, index.month)))
    if distinct_months >= MIN_MONTHS_FOR_SEASONALITY:
        month_stats = totals.groupby(index.month).agg(['mean', 'count'])
        month = {
            int(m): safe_divide(float(row['mean']), overall_mean)
            for m, row in month_stats.iterrows()
            if row['count'] >= MIN_DAYS_PER_MONTH_SAMPLE
        }

    return SeasonalityFactors(weekday=weekday, month=month)


def compute_seasonality_by(
    frame: pd.DataFrame,
    column: str,
    reference_date: Optional[DateLike] = None,
    min_history_days: Optional[int] = None
) -> Dict[str, SeasonalityFactors]:
    """
    Seasonality factors per line or per group.

    Args:
        frame: Record frame (date, amount and the grouping column)
        column: 'line' or 'group'
    """
    if frame is None or frame.empty or column not in frame.columns:
        return {}

    result = {}
    for key, part in frame.groupby(column):
        totals = daily_totals(part, reference_date, include_reference=False)
        result[str(key)] = compute_seasonality_factors(totals, min_history_days)
    return result


def blend_seasonality_factors(
    factors_by_key: Dict[str, SeasonalityFactors],
    weights: Dict[str, float]
) -> SeasonalityFactors:
    """
    Weighted average of per-line / per-group factors.

    A key without a factor for some weekday or month contributes 1.0 there.
    Keys with no positive weight are ignored.
    """
    weighted = {
        key: float(weights.get(key, 0.0) or 0.0)
        for key in factors_by_key
    }
    weighted = {key: w for key, w in weighted.items() if w > 0}
    total_weight = sum(weighted.values())
    if total_weight <= 0:
        return SeasonalityFactors()

    def _blend(attr: str) -> Dict[int, float]:
        keys = set()
        for key in weighted:
            keys.update(getattr(factors_by_key[key], attr))
        return {
            k: sum(getattr(factors_by_key[key], attr).get(k, 1.0) * w for key, w in weighted.items()) / total_weight
            for k in sorted(keys)
        }

    return SeasonalityFactors(weekday=_blend('weekday'), month=_blend('month'))


def blended_seasonality(
    frame: pd.DataFrame,
    column: str,
    reference_date: DateLike,
    min_history_days: Optional[int] = None
) -> SeasonalityFactors:
    """
    Factors per line or group, blended by each one's revenue before the
    reference date.
    """
    by_key = compute_seasonality_by(frame, column, reference_date, min_history_days)
    if not by_key:
        return SeasonalityFactors()

    cutoff = pd.Timestamp(to_date(reference_date))
    history = frame[pd.to_datetime(frame['date']).dt.normalize() < cutoff]
    weights = history.groupby(column)['amount'].sum()
    weights.index = weights.index.astype(str)

    logger.debug(f"Blending seasonality over {len(by_key)} {column} values")
    return blend_seasonality_factors(by_key, weights.to_dict())


def average_daily_amount(
    daily_points: Iterable[DailyDataPoint],
    fallback: float = 0.0
) -> float:
    """Mean of the positive daily totals, or fallback when there are none."""
    values = [point.total for point in daily_points if point.total > 0]
    if values:
        return float(np.mean(values))
    return float(fallback)


# =========================================================================
# MODEL
# =========================================================================

def build_forecast_model(
    observations: ObservationsInput,
    reference_date: DateLike,
    fallback_average: float,
    seasonality_factors: Optional[SeasonalityFactors] = None,
    min_history_days: Optional[int] = None
) -> ForecastModel:
    """
    Build the forecast model.

    Args:
        observations: Historical daily observations
        reference_date: Last closed day; it and later observations are ignored
        fallback_average: Average daily amount the factors scale
        seasonality_factors: Precomputed factors (skip derivation when given)
        min_history_days: Override for FORECAST_MIN_HISTORY_DAYS
    """
    totals = daily_totals(observations, reference_date, include_reference=False)

    if seasonality_factors is None:
        factors = compute_seasonality_factors(totals, min_history_days)
    else:
        factors = seasonality_factors

    return ForecastModel(
        reference_date=normalize_to_noon(reference_date),
        fallback_average=float(fallback_average or 0.0),
        factors=factors,
        history_days=int(len(totals)),
    )


def project_cumulative(
    realized_to_date: float,
    model: ForecastModel,
    dates: Iterable[DateLike]
) -> List[float]:
    """
    Running projection: realized total plus forecasts of the remaining days.

    Returns one cumulative value per date.
    """
    running = float(realized_to_date)
    projection = []
    for day in dates:
        running += model.forecast_for_date(day).p50
        projection.append(running)
    return projection


__all__ = [
    'SeasonalityFactors',
    'ForecastPoint',
    'ForecastModel',
    'daily_totals',
    'compute_seasonality_factors',
    'compute_seasonality_by',
    'blend_seasonality_factors',
    'blended_seasonality',
    'average_daily_amount',
    'build_forecast_model',
    'project_cumulative',
]
