# revenue_goals/goal_tracking/constants.py
"""
Constants for Goal Tracking Module

Centralized configuration for:
- Segment definitions and goal adjustment rules
- Date-range presets
- Comparison labels
- Forecast thresholds
- Record column names
"""

# =====================================================================
# SEGMENTS
# =====================================================================

# Segment whose daily goals follow the weekday/weekend adjustment rule
ADJUSTED_SEGMENT = "AIR CONDITIONING"

# Segment (and group) assigned to lines missing from the registry
DEFAULT_SEGMENT = "OTHER"
DEFAULT_GROUP = "OTHER"

# =====================================================================
# GOAL ADJUSTMENT RULES
# =====================================================================

# segment -> {'weekend': factor, 'weekday': factor}
# Segments not listed here get factor 1.0 every day.
SEGMENT_ADJUSTMENT_RULES = {
    ADJUSTED_SEGMENT: {
        "weekend": 0.5,
        "weekday": 1.2,
    },
}

# =====================================================================
# DATE PRESETS
# =====================================================================

PRESET_YESTERDAY = "yesterday"
PRESET_WTD = "wtd"
PRESET_MTD = "mtd"
PRESET_ALL = "all"

DATE_PRESETS = [PRESET_YESTERDAY, PRESET_WTD, PRESET_MTD, PRESET_ALL]

# =====================================================================
# COMPARISON LABELS
# =====================================================================

LABEL_CUSTOM_PERIOD = "Custom Period"
LABEL_PREVIOUS_DAY = "Previous Day"
LABEL_PREVIOUS_DAYS = "{days} previous days"
LABEL_PREVIOUS_PERIOD = "Previous Period"

# Durations up to this many days get the "N previous days" label
SHORT_COMPARISON_MAX_DAYS = 7

# =====================================================================
# CALENDAR
# =====================================================================

MONTHS_IN_YEAR = 12
DAYS_IN_WEEK = 7

MONTH_ORDER = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"
]

WEEKDAY_ORDER = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

# =====================================================================
# FORECAST
# =====================================================================

# Weekday factor needs this many observations of the weekday
MIN_WEEKDAY_SAMPLES = 2

# Month-of-year factors need this many distinct months of history...
MIN_MONTHS_FOR_SEASONALITY = 3

# ...and each month needs this many observed days to get its own factor
MIN_DAYS_PER_MONTH_SAMPLE = 7

# =====================================================================
# SHARE CHARTS
# =====================================================================

SHARE_SELECTED_LABEL = "Selected"
SHARE_OTHERS_LABEL = "Others"

# =====================================================================
# DATA ENTRY
# =====================================================================

ENTRY_PRESET_YESTERDAY = "yesterday"
ENTRY_PRESET_WEEK = "week"
ENTRY_PRESET_MONTH = "month"

ENTRY_PRESETS = [ENTRY_PRESET_YESTERDAY, ENTRY_PRESET_WEEK, ENTRY_PRESET_MONTH]

LABEL_TODAY = "Today"
LABEL_YESTERDAY = "Yesterday"

# =====================================================================
# RECORD COLUMNS
# =====================================================================

RECORD_COLUMNS = ["date", "line", "group", "segment", "amount"]

# Pace chart modes
PACE_MODE_SINGLE = "single"
PACE_MODE_DUAL = "dual"

PACE_TITLES = {
    "yesterday": "Yesterday",
    "week_daily": "Daily Pace of the Week",
    "week_cumulative": "Cumulative Pace of the Week",
    "month_daily": "Daily Pace of the Month",
    "month_cumulative": "Cumulative Pace of the Month",
    "year_monthly": "Monthly Pace of the Year",
    "year_cumulative": "Cumulative Pace of the Year",
}
