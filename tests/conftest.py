"""Pytest configuration and shared fixtures."""

from datetime import date
from typing import Any, Dict, List

import pytest

from revenue_goals.config import config
from revenue_goals.goal_tracking.models import LineGoal, LineMetaInfo, RevenueLine


@pytest.fixture
def today() -> date:
    """Sunday 2024-03-03, so D-1 is Saturday 2024-03-02."""
    return date(2024, 3, 3)


@pytest.fixture
def registry() -> List[RevenueLine]:
    """Three lines: one air-conditioning store, two regular stores."""
    return [
        RevenueLine("Store A", "North", "AIR CONDITIONING"),
        RevenueLine("Store B", "North", "OTHER"),
        RevenueLine("Store C", "South", "OTHER"),
    ]


@pytest.fixture
def goals() -> List[LineGoal]:
    """Store A: 31000/month, Store B: 3100/month, Store C: no goal."""
    return [
        LineGoal("Store A", "North", {month: 31000.0 for month in range(1, 13)}),
        LineGoal("Store B", "North", {month: 3100.0 for month in range(1, 13)}),
    ]


@pytest.fixture
def records(registry) -> List[Dict[str, Any]]:
    """
    Revenue around the D-1 boundary.

    2024-02-29: A 999          (previous month)
    2024-03-01: A 1000, B 100, C 50
    2024-03-02: A 400,  B 150, C 25   (D-1)
    2024-03-03: A 700          (today)
    """
    meta = {line.line: line for line in registry}

    def record(day: date, line: str, amount: float) -> Dict[str, Any]:
        return {
            'date': day,
            'line': line,
            'group': meta[line].group,
            'segment': meta[line].segment,
            'amount': amount,
        }

    return [
        record(date(2024, 2, 29), "Store A", 999.0),
        record(date(2024, 3, 1), "Store A", 1000.0),
        record(date(2024, 3, 1), "Store B", 100.0),
        record(date(2024, 3, 1), "Store C", 50.0),
        record(date(2024, 3, 2), "Store A", 400.0),
        record(date(2024, 3, 2), "Store B", 150.0),
        record(date(2024, 3, 2), "Store C", 25.0),
        record(date(2024, 3, 3), "Store A", 700.0),
    ]


@pytest.fixture
def plain_line() -> LineMetaInfo:
    """Non-adjusted line with 31000 every month."""
    return LineMetaInfo("X", "G1", "OTHER", {month: 31000.0 for month in range(1, 13)})


@pytest.fixture
def ac_line() -> LineMetaInfo:
    """Air-conditioning line with 31000 every month."""
    return LineMetaInfo("Y", "G1", "AIR CONDITIONING", {month: 31000.0 for month in range(1, 13)})


@pytest.fixture
def reset_config(monkeypatch):
    """Restore the environment and reload settings after the test."""
    yield monkeypatch
    monkeypatch.undo()
    config.reload()
