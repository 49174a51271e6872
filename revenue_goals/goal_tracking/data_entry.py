# revenue_goals/goal_tracking/data_entry.py
"""
Manual Revenue Entry

Day windows for the entry grid and the merge of manually entered amounts
into the record frame:
- Default window depends on the weekday (Monday shows the weekend)
- Presets: yesterday / week (Mon-Sun) / month (1st-last), with prev/next navigation
- Entries are keyed (line, 'YYYY-MM-DD') and override recorded amounts
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple

import pandas as pd

from ..config import config
from .calendar_utils import (
    DateLike, calendar_day_difference, days_in_month, end_of_month, to_date,
    to_iso_key,
)
from .constants import (
    DAYS_IN_WEEK, ENTRY_PRESET_MONTH, ENTRY_PRESET_WEEK, ENTRY_PRESET_YESTERDAY,
    ENTRY_PRESETS, LABEL_TODAY, LABEL_YESTERDAY, WEEKDAY_ORDER,
)
from .line_registry import registry_map
from .models import EntryValidationError, RecordsInput, RevenueLine, records_to_frame

logger = logging.getLogger(__name__)

EntryKey = Tuple[str, str]
Entries = Dict[EntryKey, float]


@dataclass(frozen=True)
class EntryDay:
    """One column of the entry grid."""
    date: date
    label: str
    is_today: bool = False
    is_yesterday: bool = False

    @property
    def iso_date(self) -> str:
        return self.date.isoformat()


def day_label(day: DateLike, today: DateLike) -> str:
    """'Today', 'Yesterday' or the short weekday name."""
    diff = calendar_day_difference(today, day)
    if diff == 0:
        return LABEL_TODAY
    if diff == 1:
        return LABEL_YESTERDAY
    return WEEKDAY_ORDER[to_date(day).weekday()]


def _entry_day(day: date, today: date) -> EntryDay:
    diff = calendar_day_difference(today, day)
    return EntryDay(
        date=day,
        label=day_label(day, today),
        is_today=diff == 0,
        is_yesterday=diff == 1,
    )


# =============================================================================
# DAY WINDOWS
# =============================================================================

def default_entry_days(today: DateLike) -> List[EntryDay]:
    """
    Days shown when no range is picked.

    Monday: Friday, Saturday, Sunday
    Sunday: Saturday
    Tuesday-Saturday: Monday through yesterday
    """
    today = to_date(today)
    weekday = today.weekday()

    if weekday == 0:
        offsets = [3, 2, 1]
    elif weekday == 6:
        offsets = [1]
    else:
        offsets = list(range(weekday, 0, -1))

    return [_entry_day(today - timedelta(days=offset), today) for offset in offsets]


def custom_entry_days(start: DateLike, end: DateLike, today: DateLike) -> List[EntryDay]:
    """Every day of [start, end], capped at MAX_ENTRY_DAYS."""
    today = to_date(today)
    current = to_date(start)
    last = to_date(end)
    max_days = config.get_app_setting("MAX_ENTRY_DAYS", 90)

    days = []
    while current <= last and len(days) < max_days:
        days.append(_entry_day(current, today))
        current += timedelta(days=1)

    if current <= last:
        logger.warning(f"Entry range {to_iso_key(start)}..{to_iso_key(end)} truncated to {max_days} days")
    return days


def entry_preset_range(preset: str, today: DateLike) -> Tuple[date, date]:
    """Start/end dates of an entry preset relative to today."""
    today = to_date(today)

    if preset == ENTRY_PRESET_YESTERDAY:
        yesterday = today - timedelta(days=1)
        return yesterday, yesterday

    if preset == ENTRY_PRESET_WEEK:
        monday = today - timedelta(days=today.weekday())
        return monday, monday + timedelta(days=DAYS_IN_WEEK - 1)

    if preset == ENTRY_PRESET_MONTH:
        return today.replace(day=1), to_date(end_of_month(today))

    raise ValueError(f"Unknown entry preset '{preset}'. Expected one of {ENTRY_PRESETS}")


def detect_entry_preset(start: DateLike, end: DateLike) -> Optional[str]:
    """
    Which preset a range corresponds to, if any.

    Month is checked first (starts on the 1st, ends in the same month),
    then week (starts Monday, ends Sunday or within 6 days), then a single day.
    """
    start, end = to_date(start), to_date(end)
    span = calendar_day_difference(end, start)

    if start.day == 1 and (start.year, start.month) == (end.year, end.month):
        return ENTRY_PRESET_MONTH
    if start.weekday() == 0 and (end.weekday() == 6 or span <= DAYS_IN_WEEK - 1):
        return ENTRY_PRESET_WEEK
    if span == 0:
        return ENTRY_PRESET_YESTERDAY
    return None


def shift_entry_range(
    preset: Optional[str],
    start: DateLike,
    end: DateLike,
    direction: int
) -> Tuple[date, date]:
    """
    Move a range one period back (direction=-1) or forward (+1).

    yesterday: one day; week: one Mon-Sun week; month: one full month;
    no preset: by the length of the range.
    """
    if direction not in (-1, 1):
        raise ValueError(f"direction must be -1 or 1, got {direction}")

    start, end = to_date(start), to_date(end)

    if preset == ENTRY_PRESET_YESTERDAY:
        day = start + timedelta(days=direction)
        return day, day

    if preset == ENTRY_PRESET_WEEK:
        monday = start + timedelta(days=direction * DAYS_IN_WEEK)
        return monday, monday + timedelta(days=DAYS_IN_WEEK - 1)

    if preset == ENTRY_PRESET_MONTH:
        month_index = start.year * 12 + (start.month - 1) + direction
        first = date(month_index // 12, month_index % 12 + 1, 1)
        return first, first.replace(day=days_in_month(first))

    length = calendar_day_difference(end, start) + 1
    offset = timedelta(days=direction * length)
    return start + offset, end + offset


# =============================================================================
# ENTRIES
# =============================================================================

def apply_entry(entries: Entries, line: str, day: DateLike, amount: Optional[float]) -> Entries:
    """
    Set or clear one manual entry; returns a new mapping.

    Raises:
        EntryValidationError: negative or non-numeric amount
    """
    key = (line, to_iso_key(day))
    updated = dict(entries)

    if amount is None:
        updated.pop(key, None)
        return updated

    try:
        value = float(amount)
    except (TypeError, ValueError):
        raise EntryValidationError(f"Amount for {line} on {key[1]} is not a number: {amount!r}")
    if value < 0:
        raise EntryValidationError(f"Amount for {line} on {key[1]} cannot be negative: {value}")

    updated[key] = value
    return updated


def merge_entries(
    records: RecordsInput,
    entries: Entries,
    registry: List[RevenueLine]
) -> pd.DataFrame:
    """
    Overlay manual entries on the record frame.

    An entry replaces the amount of an existing (line, day) record; otherwise
    a new noon-dated record is created from the line's registry entry.
    Entries for lines missing from the registry are skipped.

    Returns:
        Record frame (see models.records_to_frame)
    """
    df = records_to_frame(records)
    if not entries:
        return df

    lines = registry_map(registry)
    keys = df['line'] + ':' + df['date'].dt.strftime('%Y-%m-%d')
    new_rows = []
    skipped = 0

    for (line, iso_day), amount in entries.items():
        match = keys == f"{line}:{iso_day}"
        if match.any():
            df.loc[match, 'amount'] = float(amount)
            continue

        info = lines.get(line)
        if info is None:
            skipped += 1
            logger.warning(f"Entry for unknown line '{line}' on {iso_day} skipped")
            continue

        new_rows.append({
            'date': iso_day,
            'line': line,
            'group': info.group,
            'segment': info.segment,
            'amount': float(amount),
        })

    if new_rows:
        df = pd.concat([df, records_to_frame(new_rows)], ignore_index=True)

    logger.debug(f"Merged {len(entries)} entries ({len(new_rows)} new, {skipped} skipped)")
    return df


__all__ = [
    'EntryDay',
    'Entries',
    'day_label',
    'default_entry_days',
    'custom_entry_days',
    'entry_preset_range',
    'detect_entry_preset',
    'shift_entry_range',
    'apply_entry',
    'merge_entries',
]
