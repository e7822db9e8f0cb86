"""Core interfaces package."""

from tenantconf.core.interfaces.storage import (
    ConfigStorageProvider,
    ConfigurationData,
    ConfigRequest,
    ConfigValue,
    FlatConfigRecord,
)

__all__ = [
    "ConfigStorageProvider",
    "ConfigurationData",
    "ConfigRequest",
    "ConfigValue",
    "FlatConfigRecord",
]
