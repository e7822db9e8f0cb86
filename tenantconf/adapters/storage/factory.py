"""
Storage Factory

Creates configuration storage providers based on configuration.
"""

import logging
from typing import TYPE_CHECKING, Any

from tenantconf.core.exceptions import BackendSelectionError
from tenantconf.core.interfaces.storage import ConfigStorageProvider
from tenantconf.adapters.storage.file_adapter import FileStorageAdapter
from tenantconf.adapters.storage.dynamodb_adapter import DynamoDBStorageAdapter

if TYPE_CHECKING:
    from tenantconf.config.settings import Settings

logger = logging.getLogger(__name__)


class StorageFactory:
    """
    Factory for creating configuration storage providers.

    Example:
        ```python
        storage = StorageFactory.create("file", config_path="data/configurations.json")

        storage = StorageFactory.from_config({
            "provider": "dynamodb",
            "table_name": "ConfigurationsTable",
            "endpoint_url": "http://localhost:8000",
        })
        ```
    """

    _providers: dict[str, type[ConfigStorageProvider]] = {
        "file": FileStorageAdapter,
        "json": FileStorageAdapter,
        "dynamodb": DynamoDBStorageAdapter,
    }

    @classmethod
    def register(cls, name: str, provider_class: type[ConfigStorageProvider]) -> None:
        """Register a new provider type."""
        cls._providers[name.lower()] = provider_class

    @classmethod
    def create(
        cls,
        provider: str,
        **kwargs: Any,
    ) -> ConfigStorageProvider:
        """
        Create a storage provider instance.

        Args:
            provider: Provider name (file, dynamodb)
            **kwargs: Provider-specific configuration

        Returns:
            Configured ConfigStorageProvider instance

        Raises:
            BackendSelectionError: If the provider is not registered
            SourceUnavailableError: If the file provider cannot load its document
        """
        provider_lower = provider.lower()

        if provider_lower not in cls._providers:
            raise BackendSelectionError(provider, available=cls.list_providers())

        logger.info(f"StorageFactory: creating {provider_lower} configuration storage")
        return cls._providers[provider_lower](**kwargs)

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> ConfigStorageProvider:
        """Create a provider from configuration dictionary."""
        config = config.copy()
        provider = config.pop("provider", "file")
        return cls.create(provider, **config)

    @classmethod
    def from_settings(cls, settings: "Settings") -> ConfigStorageProvider:
        """Create the provider selected by the service settings."""
        return cls.from_config(settings.get_storage_config())

    @classmethod
    def list_providers(cls) -> list[str]:
        """List all registered provider names."""
        return sorted(cls._providers.keys())
