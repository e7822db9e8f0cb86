"""
Storage Container

Process-wide holder for the active configuration storage provider.

The provider is created lazily on first access from the service settings
and cached until reset. Tests (or embedding applications) can install any
ConfigStorageProvider with set_storage().
"""

import logging
from typing import TYPE_CHECKING, Optional

from tenantconf.core.interfaces.storage import ConfigStorageProvider

if TYPE_CHECKING:
    from tenantconf.config.settings import Settings

logger = logging.getLogger(__name__)


class StorageContainer:
    """
    Lazy singleton holder for the storage provider.

    At most one provider is cached at a time. Selection happens once, on the
    first get_storage() after construction or reset().
    """

    _instance: Optional["StorageContainer"] = None

    def __init__(self, settings: Optional["Settings"] = None):
        self._settings = settings
        self._storage: Optional[ConfigStorageProvider] = None

    @classmethod
    def get_instance(cls) -> "StorageContainer":
        """Get the process-wide container."""
        if cls._instance is None:
            cls._instance = StorageContainer()
        return cls._instance

    def configure(self, settings: "Settings") -> None:
        """Use these settings for the next provider selection."""
        self._settings = settings

    def get_storage(self) -> ConfigStorageProvider:
        """
        Get the storage provider, creating it from settings if needed.

        Raises:
            BackendSelectionError: If the configured provider is unknown
            SourceUnavailableError: If the file provider cannot load its document
        """
        if self._storage is None:
            from tenantconf.adapters.storage.factory import StorageFactory
            from tenantconf.config.settings import get_settings

            settings = self._settings or get_settings()
            self._storage = StorageFactory.from_settings(settings)
            logger.info(f"Storage provider selected: {self._storage.provider_name}")
        return self._storage

    def set_storage(self, storage: ConfigStorageProvider) -> None:
        """Install a specific provider (tests, explicit injection)."""
        self._storage = storage

    def has_storage(self) -> bool:
        return self._storage is not None

    def reset(self) -> None:
        """Drop the cached provider; the next access selects again."""
        self._storage = None


def get_config_storage() -> ConfigStorageProvider:
    """Convenience function to get the active storage provider."""
    return StorageContainer.get_instance().get_storage()


def set_config_storage(storage: ConfigStorageProvider) -> None:
    StorageContainer.get_instance().set_storage(storage)


def reset_config_storage() -> None:
    StorageContainer.get_instance().reset()
