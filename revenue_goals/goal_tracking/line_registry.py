# revenue_goals/goal_tracking/line_registry.py
"""
Line Registry

Keeps the list of revenue lines (line -> group, segment) and resolves the
segment of every goal line into LineMetaInfo.

All operations return new lists; callers replace their registry wholesale.
"""

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from .constants import DEFAULT_GROUP, DEFAULT_SEGMENT
from .models import LineGoal, LineMetaInfo, RevenueLine

logger = logging.getLogger(__name__)


def normalize_line(line: RevenueLine) -> RevenueLine:
    """Strip surrounding whitespace from every field."""
    return RevenueLine(
        line=(line.line or '').strip(),
        group=(line.group or '').strip(),
        segment=(line.segment or '').strip(),
    )


def dedupe_lines(lines: Iterable[RevenueLine]) -> List[RevenueLine]:
    """One entry per line name (last one wins); blank names are dropped."""
    by_name: Dict[str, RevenueLine] = {}
    for line in lines:
        if not line.line:
            continue
        by_name[line.line] = line
    return list(by_name.values())


def registry_map(lines: Iterable[RevenueLine]) -> Dict[str, RevenueLine]:
    return {line.line: line for line in lines}


def add_line(lines: List[RevenueLine], new_line: RevenueLine) -> List[RevenueLine]:
    """
    Add a line to the registry.

    Blank names and names already registered leave the registry unchanged.
    The result is sorted by line name.
    """
    normalized = normalize_line(new_line)
    if not normalized.line:
        logger.warning("Ignoring revenue line with blank name")
        return list(lines)
    if any(existing.line == normalized.line for existing in lines):
        return list(lines)
    return sorted([*lines, normalized], key=lambda line: line.line)


def update_line(
    lines: List[RevenueLine],
    line_name: str,
    group: Optional[str] = None,
    segment: Optional[str] = None
) -> List[RevenueLine]:
    """Change the group and/or segment of one line."""
    updated = []
    for line in lines:
        if line.line == line_name:
            changes = {}
            if group is not None:
                changes['group'] = group
            if segment is not None:
                changes['segment'] = segment
            line = normalize_line(replace(line, **changes))
        updated.append(line)
    return updated


def remove_line(lines: List[RevenueLine], line_name: str) -> List[RevenueLine]:
    return [line for line in lines if line.line != line_name]


def ensure_goal_lines(lines: List[RevenueLine], goals: Iterable[LineGoal]) -> List[RevenueLine]:
    """
    Register every goal line missing from the registry.

    Missing lines get the goal's group (or OTHER) and the OTHER segment.
    """
    by_name = registry_map(lines)
    for goal in goals:
        if goal.line not in by_name:
            by_name[goal.line] = RevenueLine(
                line=goal.line,
                group=goal.group or DEFAULT_GROUP,
                segment=DEFAULT_SEGMENT,
            )
    return list(by_name.values())


def build_line_meta_info(
    goals: Iterable[LineGoal],
    lines: Iterable[RevenueLine]
) -> List[LineMetaInfo]:
    """
    Resolve the segment of each goal line from the registry.

    Lines unknown to the registry (or registered with a blank segment)
    fall back to the OTHER segment.
    """
    by_name = registry_map(lines)
    result = []
    for goal in goals:
        registered = by_name.get(goal.line)
        segment = registered.segment if registered and registered.segment else DEFAULT_SEGMENT
        result.append(LineMetaInfo(
            line=goal.line,
            group=goal.group,
            segment=segment,
            monthly_targets=dict(goal.monthly_targets),
        ))
    return result


def filter_lines_by_filters(lines: Iterable[LineMetaInfo], filters) -> List[LineMetaInfo]:
    """
    Keep the goal lines matching the entity filters.

    Empty filter sets mean no restriction; OR within a dimension,
    AND across dimensions.
    """
    result = []
    for line in lines:
        if filters.lines and line.line not in filters.lines:
            continue
        if filters.groups and line.group not in filters.groups:
            continue
        if filters.segments and line.segment not in filters.segments:
            continue
        result.append(line)
    return result


__all__ = [
    'normalize_line',
    'dedupe_lines',
    'registry_map',
    'add_line',
    'update_line',
    'remove_line',
    'ensure_goal_lines',
    'build_line_meta_info',
    'filter_lines_by_filters',
]
