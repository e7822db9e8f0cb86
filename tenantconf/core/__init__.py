"""
tenantconf Core Package

This package contains the storage interface, the configuration hierarchy
model and the exception hierarchy shared by all adapters.
"""

from tenantconf.core.interfaces.storage import (
    ConfigStorageProvider,
    ConfigurationData,
    ConfigRequest,
    ConfigValue,
    FlatConfigRecord,
    build_composite_key,
)

from tenantconf.core.exceptions import (
    # Base
    TenantConfError,
    ErrorContext,
    # Configuration errors
    ConfigurationError,
    BackendSelectionError,
    # Storage errors
    StorageError,
    SourceUnavailableError,
    ReloadError,
    BackendError,
    # Helpers
    is_recoverable,
    wrap_exception,
)

__all__ = [
    # Interfaces
    "ConfigStorageProvider",
    "ConfigurationData",
    "ConfigRequest",
    "ConfigValue",
    "FlatConfigRecord",
    "build_composite_key",
    # Exceptions
    "TenantConfError",
    "ErrorContext",
    "ConfigurationError",
    "BackendSelectionError",
    "StorageError",
    "SourceUnavailableError",
    "ReloadError",
    "BackendError",
    "is_recoverable",
    "wrap_exception",
]
