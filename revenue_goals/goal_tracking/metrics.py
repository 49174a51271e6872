# revenue_goals/goal_tracking/metrics.py
"""
KPI and Goal Calculations for Revenue Tracking

Handles all metric calculations:
- Entity / date filtering of the record frame
- KPIs (filtered revenue vs. total revenue)
- Goal metrics for day / week / month / year, always referenced to D-1
- Data-entry coverage per window
- Per-line goal table for the D-1 month
- Daily chart series, comparison series and breakdowns

Every call to compute() is a full recompute from one consistent
(records, goals, filters) snapshot; nothing is patched incrementally.
"""

import logging
import time
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence

import pandas as pd

from ..config import config
from .calendar_utils import (
    DateLike, add_days, days_in_month, inclusive_day_count, normalize_to_noon,
    start_of_month, start_of_week, start_of_year, to_date, yesterday_of,
)
from .comparison import ComparisonPeriod, ComparisonSettings, resolve_comparison_period
from .constants import (
    ADJUSTED_SEGMENT, DAYS_IN_WEEK, MONTHS_IN_YEAR, PRESET_ALL,
    SHARE_OTHERS_LABEL, SHARE_SELECTED_LABEL,
)
from .filters import (
    DateRange, FilterState, apply_date_range, apply_entity_filters,
    effective_date_range, filter_between, get_filter_options, has_active_filters,
)
from .goal_calculator import (
    build_daily_goal_map, monthly_goals_array, sum_adjusted_daily_goals_for_range,
    total_adjusted_daily_goal, total_base_daily_goal, total_monthly_goal,
    total_yearly_goal,
)
from .line_registry import build_line_meta_info, filter_lines_by_filters
from .models import (
    DailyDataPoint, LineGoal, LineMetaInfo, RecordsInput, RevenueLine,
    records_to_frame, safe_divide, safe_percent,
)

logger = logging.getLogger(__name__)

COMPANY_GOAL_COLUMNS = [
    'line', 'group', 'segment', 'realized', 'monthly_goal',
    'proportional_goal', 'percent_of_goal', 'gap',
]


# =============================================================================
# RESULT TYPES
# =============================================================================

@dataclass(frozen=True)
class KPIs:
    realized_filtered: float = 0.0
    realized_total: float = 0.0
    percent_of_total: float = 0.0


@dataclass(frozen=True)
class CoverageMetrics:
    """Days with at least one record vs. days in the window."""
    observed: int = 0
    expected: int = 0
    percent: float = 0.0


@dataclass(frozen=True)
class GoalMetrics:
    """
    Goal attainment snapshot. Reference day is always D-1 (yesterday).

    Month: monthly_goal, proportional_goal, realized, realized_month, gaps, percents
    Week:  week_start..week_end, weekly_goal, expected_weekly, realized_week
    Day:   daily_goal_base, daily_goal_adjusted, realized_day
    Year:  yearly_goal, monthly_goals_array, realized_year
    """
    monthly_goal: float = 0.0
    proportional_goal: float = 0.0
    realized: float = 0.0
    realized_month: float = 0.0
    gap_proportional: float = 0.0
    gap_total: float = 0.0
    percent_of_goal: float = 0.0
    percent_of_proportional: float = 0.0
    days_in_month: int = 0
    current_day: int = 0
    # Week
    week_start: Optional[date] = None
    week_end: Optional[date] = None
    days_in_week: int = 0
    weekly_goal: float = 0.0
    expected_weekly: float = 0.0
    realized_week: float = 0.0
    # Day
    daily_goal_base: float = 0.0
    daily_goal_adjusted: float = 0.0
    realized_day: float = 0.0
    # Year
    yearly_goal: float = 0.0
    monthly_goals_array: List[float] = field(default_factory=lambda: [0.0] * MONTHS_IN_YEAR)
    realized_year: float = 0.0
    months_in_year: int = MONTHS_IN_YEAR
    current_month: int = 0
    is_single_segment: bool = False
    coverage: Dict[str, CoverageMetrics] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class MetricsSnapshot:
    """Everything the presentation layer needs for one filter state."""
    date_preset: str
    effective_date_range: DateRange
    filtered_data: pd.DataFrame
    date_filtered_data: pd.DataFrame
    kpis: KPIs
    goal_metrics: GoalMetrics
    company_goal_data: pd.DataFrame
    daily_data: List[DailyDataPoint]
    comparison_period: Optional[ComparisonPeriod]
    comparison_daily_data: Optional[List[DailyDataPoint]]
    group_breakdown: pd.DataFrame
    segment_breakdown: pd.DataFrame
    line_breakdown: pd.DataFrame
    historical_daily_data: List[DailyDataPoint]
    filter_options: Dict[str, Any]
    share_data: List[Dict[str, Any]]
    segment_share_data: List[Dict[str, Any]]
    line_share_data: List[Dict[str, Any]]
    lines_in_data: List[str]
    groups_in_data: List[str]
    chart_lines: List[str]
    has_active_filters: bool
    reference_day: date

    @property
    def comparison_label(self) -> Optional[str]:
        return self.comparison_period.label if self.comparison_period else None


# =============================================================================
# AGGREGATION HELPERS
# =============================================================================

def sum_amount(df: pd.DataFrame) -> float:
    if df.empty:
        return 0.0
    return float(df['amount'].sum())


def breakdown_by(df: pd.DataFrame, column: str) -> pd.DataFrame:
    """Total amount per value of column, largest first."""
    if df.empty:
        return pd.DataFrame({column: pd.Series(dtype='object'), 'total': pd.Series(dtype='float64')})

    summary = df.groupby(column, as_index=False)['amount'].sum()
    summary.columns = [column, 'total']
    return summary.sort_values('total', ascending=False, kind='mergesort').reset_index(drop=True)


def build_daily_data(
    df: pd.DataFrame,
    lines: Sequence[LineMetaInfo] = ()
) -> List[DailyDataPoint]:
    """
    One point per calendar day present in df, sorted ascending.

    goal is filled from the adjusted daily goal of `lines` when positive.
    """
    if df.empty:
        return []

    days = df['date'].dt.normalize().rename('day')
    totals = df.groupby(days)['amount'].sum().sort_index()

    by_line: Dict[pd.Timestamp, Dict[str, float]] = {}
    for (day, line), value in df.groupby([days, df['line']])['amount'].sum().items():
        by_line.setdefault(day, {})[line] = float(value)

    by_group: Dict[pd.Timestamp, Dict[str, float]] = {}
    for (day, group), value in df.groupby([days, df['group']])['amount'].sum().items():
        by_group.setdefault(day, {})[group] = float(value)

    goal_map = build_daily_goal_map(lines, totals.index) if lines else {}

    points = []
    for day, total in totals.items():
        goal = goal_map.get(day.strftime('%Y-%m-%d'), 0.0)
        points.append(DailyDataPoint(
            date=normalize_to_noon(day),
            total=float(total),
            goal=goal if goal > 0 else None,
            by_line=by_line.get(day, {}),
            by_group=by_group.get(day, {}),
        ))
    return points


def coverage_for_window(df: pd.DataFrame, start: DateLike, end: DateLike) -> CoverageMetrics:
    """Distinct days with records in [start, end] vs. calendar days in it."""
    expected = inclusive_day_count(start, end)
    window = filter_between(df, start, end)
    observed = int(window['date'].dt.normalize().nunique()) if not window.empty else 0
    observed = min(observed, expected)
    return CoverageMetrics(
        observed=observed,
        expected=expected,
        percent=safe_divide(observed, expected),
    )


def share_slices(breakdown: pd.DataFrame, column: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """
    Pie slices from a breakdown; with a limit, the tail is rolled into 'Others'.
    """
    if breakdown.empty:
        return []

    slices = [
        {'name': row[column], 'value': float(row['total'])}
        for _, row in breakdown.iterrows()
    ]
    if limit is None or len(slices) <= limit:
        return slices

    head, rest = slices[:limit], slices[limit:]
    rest_total = sum(s['value'] for s in rest)
    if rest_total > 0:
        head.append({'name': SHARE_OTHERS_LABEL, 'value': rest_total})
    return head


# =============================================================================
# METRICS
# =============================================================================

class RevenueMetrics:
    """
    Goal and KPI calculations for the revenue dashboard.

    Usage:
        metrics = RevenueMetrics(records, line_goals, registry, today=date(2024, 3, 3))

        snapshot = metrics.compute(FilterState(date_preset='mtd'))
        snapshot.goal_metrics.percent_of_proportional
        snapshot.company_goal_data
    """

    def __init__(
        self,
        records: RecordsInput,
        line_goals: Optional[Iterable[LineGoal]] = None,
        registry: Optional[Iterable[RevenueLine]] = None,
        today: Optional[DateLike] = None
    ):
        """
        Initialize with data.

        Args:
            records: Revenue records (DataFrame or iterable of RevenueRecord/dicts)
            line_goals: Monthly targets per line
            registry: Line registry used to resolve each goal line's segment
            today: Calendar day treated as "today"; D-1 is derived from it
        """
        self.records_df = records_to_frame(records)
        self.line_goals = list(line_goals or [])
        self.registry = list(registry or [])
        self.line_meta = build_line_meta_info(self.line_goals, self.registry)
        self.today = to_date(today if today is not None else date.today())
        self.reference_day = to_date(yesterday_of(self.today))

    # =========================================================================
    # MAIN ENTRY POINT
    # =========================================================================

    def compute(
        self,
        state: Optional[FilterState] = None,
        comparison: Optional[ComparisonSettings] = None
    ) -> MetricsSnapshot:
        """
        Compute every derived structure for a filter state.

        Args:
            state: Filters + date preset (defaults to no filters, 'all')
            comparison: Comparison toggle / custom range (defaults to disabled)

        Returns:
            MetricsSnapshot
        """
        start_time = time.perf_counter()
        state = state or FilterState()
        comparison = comparison or ComparisonSettings()
        filters = state.filters

        date_range = effective_date_range(state, self.today)
        entity_df = apply_entity_filters(self.records_df, filters)
        filtered_df = apply_date_range(entity_df, date_range)
        date_filtered_df = apply_date_range(self.records_df, date_range)
        lines = filter_lines_by_filters(self.line_meta, filters)

        kpis = self.calculate_kpis(filtered_df, date_filtered_df)
        goal_metrics = self.calculate_goal_metrics(state, date_range, filtered_df, entity_df, lines)
        company_goal_data = self.calculate_company_goal_data(entity_df, lines)
        daily_data = build_daily_data(filtered_df, lines)

        comparison_period = resolve_comparison_period(comparison, date_range)
        comparison_daily_data = None
        if comparison_period is not None:
            comparison_df = apply_date_range(entity_df, comparison_period.as_range())
            comparison_daily_data = build_daily_data(comparison_df, lines)

        group_breakdown = breakdown_by(filtered_df, 'group')
        segment_breakdown = breakdown_by(filtered_df, 'segment')
        line_breakdown = breakdown_by(filtered_df, 'line')

        snapshot = MetricsSnapshot(
            date_preset=state.date_preset,
            effective_date_range=date_range,
            filtered_data=filtered_df,
            date_filtered_data=date_filtered_df,
            kpis=kpis,
            goal_metrics=goal_metrics,
            company_goal_data=company_goal_data,
            daily_data=daily_data,
            comparison_period=comparison_period,
            comparison_daily_data=comparison_daily_data,
            group_breakdown=group_breakdown,
            segment_breakdown=segment_breakdown,
            line_breakdown=line_breakdown,
            historical_daily_data=build_daily_data(entity_df, lines),
            filter_options=get_filter_options(self.records_df, self.registry),
            share_data=self.calculate_share_data(kpis),
            segment_share_data=share_slices(breakdown_by(date_filtered_df, 'segment'), 'segment'),
            line_share_data=share_slices(
                line_breakdown, 'line', config.get_app_setting("LINE_SHARE_LIMIT", 6)
            ),
            lines_in_data=line_breakdown['line'].tolist(),
            groups_in_data=group_breakdown['group'].tolist(),
            chart_lines=sorted(filters.lines) if len(filters.lines) > 1 else [],
            has_active_filters=has_active_filters(state, comparison.enabled),
            reference_day=self.reference_day,
        )

        if config.is_feature_enabled("DEBUG_TIMING"):
            logger.debug(
                f"compute({state.date_preset}) {time.perf_counter() - start_time:.3f}s "
                f"→ {len(filtered_df):,} filtered rows, {len(lines)} goal lines"
            )

        return snapshot

    # =========================================================================
    # KPIs
    # =========================================================================

    @staticmethod
    def calculate_kpis(filtered_df: pd.DataFrame, date_filtered_df: pd.DataFrame) -> KPIs:
        realized_filtered = sum_amount(filtered_df)
        realized_total = sum_amount(date_filtered_df)
        return KPIs(
            realized_filtered=realized_filtered,
            realized_total=realized_total,
            percent_of_total=safe_percent(realized_filtered, realized_total),
        )

    @staticmethod
    def calculate_share_data(kpis: KPIs) -> List[Dict[str, Any]]:
        """Selected revenue vs. the rest of the date-filtered revenue."""
        return [
            {'name': SHARE_SELECTED_LABEL, 'value': kpis.realized_filtered},
            {'name': SHARE_OTHERS_LABEL, 'value': kpis.realized_total - kpis.realized_filtered},
        ]

    # =========================================================================
    # GOAL METRICS
    # =========================================================================

    def calculate_goal_metrics(
        self,
        state: FilterState,
        date_range: DateRange,
        filtered_df: pd.DataFrame,
        entity_df: pd.DataFrame,
        lines: Sequence[LineMetaInfo]
    ) -> GoalMetrics:
        """
        Goal attainment referenced to D-1.

        Monthly goal modes:
        - custom start/end: adjusted daily goals summed over the literal range
        - 'all' with data: adjusted daily goals of every distinct day in the data
        - otherwise: the D-1 month's target

        In the first two modes the period is the proration, so the
        proportional goal equals the monthly goal.
        """
        ref = self.reference_day
        month_start = start_of_month(ref)
        filters = state.filters

        # === Month ===
        if state.date_preset == PRESET_ALL and filters.has_custom_range:
            monthly_goal = sum_adjusted_daily_goals_for_range(lines, filters.date_start, filters.date_end)
            proportional_goal = monthly_goal
        elif state.date_preset == PRESET_ALL and not filtered_df.empty:
            unique_days = pd.DatetimeIndex(filtered_df['date'].dt.normalize().unique())
            monthly_goal = sum(total_adjusted_daily_goal(lines, day) for day in unique_days)
            proportional_goal = monthly_goal
        else:
            monthly_goal = total_monthly_goal(lines, ref.month)
            proportional_goal = sum_adjusted_daily_goals_for_range(lines, month_start, ref)

        realized = sum_amount(filtered_df)
        realized_month = sum_amount(filter_between(entity_df, month_start, ref))

        # === Week ===
        week_start = to_date(start_of_week(ref, config.get_app_setting("WEEK_STARTS_ON", 0)))
        week_end = to_date(add_days(week_start, DAYS_IN_WEEK - 1))
        days_in_week = min(max(inclusive_day_count(week_start, ref), 0), DAYS_IN_WEEK)

        # === Year ===
        realized_year = sum_amount(filter_between(entity_df, start_of_year(ref), ref))

        return GoalMetrics(
            monthly_goal=monthly_goal,
            proportional_goal=proportional_goal,
            realized=realized,
            realized_month=realized_month,
            gap_proportional=realized - proportional_goal,
            gap_total=realized - monthly_goal,
            percent_of_goal=safe_percent(realized, monthly_goal),
            percent_of_proportional=safe_percent(realized, proportional_goal),
            days_in_month=days_in_month(ref),
            current_day=ref.day,
            week_start=week_start,
            week_end=week_end,
            days_in_week=days_in_week,
            weekly_goal=sum_adjusted_daily_goals_for_range(lines, week_start, week_end),
            expected_weekly=sum_adjusted_daily_goals_for_range(lines, week_start, ref),
            realized_week=sum_amount(filter_between(entity_df, week_start, ref)),
            daily_goal_base=total_base_daily_goal(lines, ref),
            daily_goal_adjusted=total_adjusted_daily_goal(lines, ref),
            realized_day=sum_amount(filter_between(entity_df, ref, ref)),
            yearly_goal=total_yearly_goal(lines),
            monthly_goals_array=monthly_goals_array(lines),
            realized_year=realized_year,
            current_month=ref.month,
            is_single_segment=bool(lines) and all(line.segment == ADJUSTED_SEGMENT for line in lines),
            coverage=self.calculate_coverage(date_range, filtered_df, entity_df),
        )

    def coverage_reference_date(self, date_range: DateRange, filtered_df: pd.DataFrame) -> date:
        """Latest filtered record date, else end of the effective range, else today."""
        if not filtered_df.empty:
            return to_date(filtered_df['date'].max())
        if date_range.end is not None:
            return to_date(date_range.end)
        return self.today

    def calculate_coverage(
        self,
        date_range: DateRange,
        filtered_df: pd.DataFrame,
        entity_df: pd.DataFrame
    ) -> Dict[str, CoverageMetrics]:
        """Data-entry completeness for the day/week/month/year ending at the reference date."""
        ref = self.coverage_reference_date(date_range, filtered_df)
        return {
            'day': coverage_for_window(entity_df, ref, ref),
            'week': coverage_for_window(
                entity_df, start_of_week(ref, config.get_app_setting("WEEK_STARTS_ON", 0)), ref
            ),
            'month': coverage_for_window(entity_df, start_of_month(ref), ref),
            'year': coverage_for_window(entity_df, start_of_year(ref), ref),
        }

    # =========================================================================
    # PER-LINE GOAL TABLE
    # =========================================================================

    def calculate_company_goal_data(
        self,
        entity_df: pd.DataFrame,
        lines: Sequence[LineMetaInfo]
    ) -> pd.DataFrame:
        """
        Per-line goal status for the D-1 month.

        Returns:
            DataFrame[line, group, segment, realized, monthly_goal,
                      proportional_goal, percent_of_goal, gap];
            only lines with a goal or revenue
        """
        ref = self.reference_day
        month_start = start_of_month(ref)
        month_df = filter_between(entity_df, month_start, ref)
        realized_by_line = month_df.groupby('line')['amount'].sum().to_dict() if not month_df.empty else {}

        rows = []
        for line in lines:
            realized = float(realized_by_line.get(line.line, 0.0))
            monthly_goal = line.target_for_month(ref.month)
            proportional_goal = sum_adjusted_daily_goals_for_range([line], month_start, ref)
            rows.append({
                'line': line.line,
                'group': line.group,
                'segment': line.segment,
                'realized': realized,
                'monthly_goal': monthly_goal,
                'proportional_goal': proportional_goal,
                'percent_of_goal': safe_percent(realized, monthly_goal),
                'gap': realized - proportional_goal,
            })

        result = pd.DataFrame(rows, columns=COMPANY_GOAL_COLUMNS)
        if result.empty:
            return result
        return result[(result['monthly_goal'] > 0) | (result['realized'] > 0)].reset_index(drop=True)


__all__ = [
    'KPIs',
    'CoverageMetrics',
    'GoalMetrics',
    'MetricsSnapshot',
    'RevenueMetrics',
    'sum_amount',
    'breakdown_by',
    'build_daily_data',
    'coverage_for_window',
    'share_slices',
]
