"""Statusboard configuration system."""

from statusboard.config.loader import find_config_file, load_config
from statusboard.config.models import AuthConfig, DisplaySettings, ServiceEntry, StatusboardConfig

__all__ = [
    "AuthConfig",
    "DisplaySettings",
    "ServiceEntry",
    "StatusboardConfig",
    "load_config",
    "find_config_file",
]
