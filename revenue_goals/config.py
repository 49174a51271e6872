# revenue_goals/config.py
"""
Centralized Configuration Management

Version: 1.0.0
Features:
- Settings loaded from a local .env file (python-dotenv) or the process environment
- Singleton pattern for efficiency
- Type-safe getters with defaults
- Logging setup shared by every entry point
"""

import os
import logging
from pathlib import Path
from dotenv import load_dotenv
from typing import Dict, Any, Optional

# Initialize logger
logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _env_int(name: str, default: int) -> int:
    """Read an integer env var, falling back to default on bad input"""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid integer for {name}={raw!r}, using {default}")
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """
    Centralized configuration management

    Usage:
        from revenue_goals.config import config

        # Get app settings
        min_days = config.get_app_setting("FORECAST_MIN_HISTORY_DAYS", 14)

        # Check feature flags
        if config.is_feature_enabled("DEBUG_TIMING"):
            ...
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._load_config()
        self._initialized = True

    def _load_config(self):
        """Load .env (if any) then read application settings"""
        self._env_path = self._load_env_file()
        self._load_app_config()
        self._log_config_status()

    def _load_env_file(self) -> Optional[Path]:
        """Find and load the first .env file available"""
        env_paths = [
            Path.cwd() / ".env",
            Path(__file__).parent.parent / ".env",
        ]

        for env_path in env_paths:
            if env_path.exists():
                load_dotenv(env_path)
                logger.info(f"Loaded .env from: {env_path}")
                return env_path
        return None

    def _load_app_config(self):
        """Load application-specific settings"""
        self._app_config = {
            # Logging
            "LOG_LEVEL": os.getenv("LOG_LEVEL", "INFO").upper(),

            # Calendar
            "WEEK_STARTS_ON": _env_int("WEEK_STARTS_ON", 0),

            # Forecast
            "FORECAST_MIN_HISTORY_DAYS": _env_int("FORECAST_MIN_HISTORY_DAYS", 14),

            # Data entry
            "MAX_ENTRY_DAYS": _env_int("MAX_ENTRY_DAYS", 90),

            # Share charts
            "LINE_SHARE_LIMIT": _env_int("LINE_SHARE_LIMIT", 6),

            # Feature flags
            "ENABLE_DEBUG_TIMING": _env_bool("ENABLE_DEBUG_TIMING", False),
        }

    def _log_config_status(self):
        """Log configuration status"""
        logger.debug(f".env: {self._env_path or 'Not found'}")
        logger.debug(f"Forecast min history days: {self._app_config['FORECAST_MIN_HISTORY_DAYS']}")

    def reload(self):
        """Re-read the environment (used after env changes, e.g. in tests)"""
        self._load_config()

    # ==================== PUBLIC GETTERS ====================

    def get_app_setting(self, key: str, default: Any = None) -> Any:
        """Get application setting with default"""
        return self._app_config.get(key, default)

    def is_feature_enabled(self, feature: str) -> bool:
        """Check if feature is enabled"""
        key = f"ENABLE_{feature.upper()}"
        return bool(self._app_config.get(key, False))

    # ==================== PROPERTIES ====================

    @property
    def app_config(self) -> Dict[str, Any]:
        return self._app_config.copy()

    @property
    def log_level(self) -> str:
        return self._app_config["LOG_LEVEL"]


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging the same way for every entry point.

    Args:
        level: Level name; defaults to the LOG_LEVEL setting
    """
    level_name = (level or config.log_level).upper()
    log_level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=log_level, format=LOG_FORMAT)
    logging.getLogger().setLevel(log_level)


# ==================== SINGLETON INSTANCE ====================

config = Config()

APP_CONFIG = config.app_config

__all__ = [
    'config',
    'Config',
    'APP_CONFIG',
    'LOG_FORMAT',
    'configure_logging',
]
