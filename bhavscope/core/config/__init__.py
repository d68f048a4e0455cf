"""Configuration management module."""

from bhavscope.core.config.settings import (
    BhavscopeConfig,
    ConfigManager,
    HistoryConfig,
    LoggingConfig,
    StoreConfig,
    get_default_config,
    load_config_from_env,
)

__all__ = [
    "BhavscopeConfig",
    "ConfigManager",
    "HistoryConfig",
    "LoggingConfig",
    "StoreConfig",
    "get_default_config",
    "load_config_from_env",
]
