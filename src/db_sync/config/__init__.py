"""Configuration: YAML loading and config models.

Usage:
    >>> from db_sync.config import load_config, AppConfig
"""

from db_sync.config.loader import load_config, parse_config
from db_sync.config.models import AppConfig, DataSourceConfig, LogSettings, SyncSettings

__all__ = [
    "load_config",
    "parse_config",
    "AppConfig",
    "DataSourceConfig",
    "SyncSettings",
    "LogSettings",
]
