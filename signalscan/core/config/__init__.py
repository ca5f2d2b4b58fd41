"""Configuration management module."""

from signalscan.core.config.settings import (
    BatchConfig,
    ConfigManager,
    LoggingConfig,
    ProviderConfig,
    SignalConfig,
    SignalScanConfig,
    get_default_config,
    load_config_from_env,
)

__all__ = [
    "ConfigManager",
    "SignalScanConfig",
    "ProviderConfig",
    "BatchConfig",
    "SignalConfig",
    "LoggingConfig",
    "get_default_config",
    "load_config_from_env",
]
