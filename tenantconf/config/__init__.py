"""
Configuration Management

YAML-based settings with environment variable overrides.
"""

from tenantconf.config.settings import Settings, get_settings, reset_settings
from tenantconf.config.loader import ConfigLoader

__all__ = [
    "Settings",
    "get_settings",
    "reset_settings",
    "ConfigLoader",
]
