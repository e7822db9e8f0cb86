"""
Storage Factory Tests

Run: pytest tenantconf/tests/adapters/test_factory.py -v
"""

import pytest

from tenantconf.adapters.storage import DynamoDBStorageAdapter, FileStorageAdapter, StorageFactory
from tenantconf.config.settings import Settings
from tenantconf.core.exceptions import BackendSelectionError
from tenantconf.tests.fakes import InMemoryStorage


class TestStorageFactory:
    """Tests for provider selection."""

    def test_create_file_provider(self, config_file):
        storage = StorageFactory.create("file", config_path=str(config_file))
        assert isinstance(storage, FileStorageAdapter)

    def test_provider_name_is_case_insensitive(self, config_file):
        storage = StorageFactory.create("JSON", config_path=str(config_file))
        assert storage.provider_name == "file"

    def test_unknown_provider(self):
        with pytest.raises(BackendSelectionError) as exc_info:
            StorageFactory.create("redis")
        assert "dynamodb" in exc_info.value.available

    def test_from_config_defaults_to_file(self, config_file):
        config = {"config_path": str(config_file)}
        storage = StorageFactory.from_config(config)
        assert isinstance(storage, FileStorageAdapter)
        assert config == {"config_path": str(config_file)}

    def test_from_settings_selects_dynamodb(self):
        settings = Settings()
        settings.storage.use_dynamodb = True
        settings.storage.dynamodb.table_name = "TenantConfigs"
        settings.storage.dynamodb.endpoint_url = "http://localhost:8000"

        storage = StorageFactory.from_settings(settings)

        assert isinstance(storage, DynamoDBStorageAdapter)
        assert storage.table_name == "TenantConfigs"

    def test_register_custom_provider(self):
        StorageFactory.register("Memory", InMemoryStorage)
        try:
            assert "memory" in StorageFactory.list_providers()
            assert isinstance(StorageFactory.create("memory"), InMemoryStorage)
        finally:
            StorageFactory._providers.pop("memory", None)
