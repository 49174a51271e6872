# revenue_goals/goal_tracking/__init__.py
"""
Goal Tracking Module

Revenue goal-attainment engine: calendar-aware goal proration, D-1
(yesterday) reference semantics, segment-based goal adjustment and a
deterministic seasonality forecast.

Components:
- calendar_utils: Noon-normalized date math
- models: Records, goals, registry entries, daily points, exceptions
- line_registry: Line -> group/segment registry and LineMetaInfo resolution
- goal_calculator: Daily / period goals with the segment adjustment rule
- forecast: Seasonality factors and forecast model
- filters: Filter state, presets and frame filtering
- comparison: Comparison period resolver
- metrics: KPI and goal metric aggregation (RevenueMetrics)
- pace: Pace / projection series per preset
- data_entry: Manual entry windows and merge

Usage:
    from revenue_goals.goal_tracking import (
        RevenueMetrics,
        FilterState,
        ComparisonSettings,
        build_pace,
    )
"""

from .models import (
    RevenueGoalsError,
    RecordValidationError,
    GoalValidationError,
    EntryValidationError,
    RevenueRecord,
    RevenueLine,
    LineGoal,
    LineMetaInfo,
    DailyDataPoint,
    records_to_frame,
)
from .line_registry import (
    add_line,
    update_line,
    remove_line,
    ensure_goal_lines,
    build_line_meta_info,
)
from .goal_calculator import (
    daily_base_goal,
    adjusted_daily_goal,
    total_adjusted_daily_goal,
    total_monthly_goal,
    sum_adjusted_daily_goals_for_range,
    update_goal_for_month,
    goals_frame,
)
from .forecast import (
    SeasonalityFactors,
    ForecastModel,
    compute_seasonality_factors,
    blended_seasonality,
    build_forecast_model,
)
from .filters import Filters, DateRange, FilterState, effective_date_range
from .comparison import ComparisonSettings, ComparisonPeriod, resolve_comparison_period
from .metrics import KPIs, CoverageMetrics, GoalMetrics, MetricsSnapshot, RevenueMetrics
from .pace import PaceResult, build_pace, pace_from_snapshot
from .data_entry import EntryDay, default_entry_days, apply_entry, merge_entries

# Constants
from .constants import (
    ADJUSTED_SEGMENT,
    DEFAULT_SEGMENT,
    SEGMENT_ADJUSTMENT_RULES,
    DATE_PRESETS,
    PRESET_YESTERDAY,
    PRESET_WTD,
    PRESET_MTD,
    PRESET_ALL,
)

__all__ = [
    # Classes
    'RevenueMetrics',
    'MetricsSnapshot',
    'GoalMetrics',
    'CoverageMetrics',
    'KPIs',
    'Filters',
    'DateRange',
    'FilterState',
    'ComparisonSettings',
    'ComparisonPeriod',
    'SeasonalityFactors',
    'ForecastModel',
    'PaceResult',
    'EntryDay',
    'RevenueRecord',
    'RevenueLine',
    'LineGoal',
    'LineMetaInfo',
    'DailyDataPoint',

    # Exceptions
    'RevenueGoalsError',
    'RecordValidationError',
    'GoalValidationError',
    'EntryValidationError',

    # Functions
    'records_to_frame',
    'add_line',
    'update_line',
    'remove_line',
    'ensure_goal_lines',
    'build_line_meta_info',
    'daily_base_goal',
    'adjusted_daily_goal',
    'total_adjusted_daily_goal',
    'total_monthly_goal',
    'sum_adjusted_daily_goals_for_range',
    'update_goal_for_month',
    'goals_frame',
    'compute_seasonality_factors',
    'blended_seasonality',
    'build_forecast_model',
    'effective_date_range',
    'resolve_comparison_period',
    'build_pace',
    'pace_from_snapshot',
    'default_entry_days',
    'apply_entry',
    'merge_entries',

    # Constants
    'ADJUSTED_SEGMENT',
    'DEFAULT_SEGMENT',
    'SEGMENT_ADJUSTMENT_RULES',
    'DATE_PRESETS',
    'PRESET_YESTERDAY',
    'PRESET_WTD',
    'PRESET_MTD',
    'PRESET_ALL',
]

__version__ = '1.0.0'
