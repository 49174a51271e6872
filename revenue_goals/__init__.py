# revenue_goals/__init__.py
"""
Revenue Goals Package

Shared pieces:
- config: Configuration management (.env + environment) and logging setup
- goal_tracking: Goal / KPI computation engine

Usage:
    from revenue_goals import config, configure_logging
    from revenue_goals.goal_tracking import RevenueMetrics, FilterState
"""

from .config import (
    config,
    Config,
    APP_CONFIG,
    configure_logging,
)

__all__ = [
    'config',
    'Config',
    'APP_CONFIG',
    'configure_logging',
]

__version__ = '1.0.0'
