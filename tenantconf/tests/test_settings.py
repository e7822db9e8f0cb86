"""
Settings and Config Loader Tests

Run: pytest tenantconf/tests/test_settings.py -v
"""

import pytest

from tenantconf.config.loader import ConfigLoader
from tenantconf.config.settings import DEFAULT_CONFIG_FILE, Settings, get_settings, reset_settings


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "USE_DYNAMODB", "CONFIG_FILE_PATH", "AWS_REGION", "DYNAMODB_ENDPOINT",
        "DYNAMODB_TABLE_NAME", "AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY",
        "PORT", "HOST", "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield monkeypatch
    reset_settings()


class TestSettings:
    """Tests for the settings model."""

    def test_defaults_select_file_provider(self, clean_env):
        settings = Settings()
        assert settings.storage_provider == "file"
        assert settings.server.port == 3000
        assert settings.get_storage_config() == {"provider": "file", "config_path": DEFAULT_CONFIG_FILE}

    def test_prefixed_env_overrides(self, clean_env):
        clean_env.setenv("TENANTCONF_STORAGE__USE_DYNAMODB", "true")
        clean_env.setenv("TENANTCONF_SERVER__PORT", "8080")

        settings = Settings()

        assert settings.storage_provider == "dynamodb"
        assert settings.server.port == 8080

    def test_config_file_env_fallback(self, clean_env):
        clean_env.setenv("CONFIG_FILE_PATH", "/srv/configs.json")
        assert Settings().get_storage_config()["config_path"] == "/srv/configs.json"

    def test_dynamodb_config_env_fallbacks(self, clean_env):
        clean_env.setenv("AWS_REGION", "eu-west-1")
        clean_env.setenv("DYNAMODB_ENDPOINT", "http://localhost:8000")

        config = Settings().get_dynamodb_config()

        assert config["region"] == "eu-west-1"
        assert config["endpoint_url"] == "http://localhost:8000"
        assert config["table_name"] == "ConfigurationsTable"
        assert config["tenant_index"] == "tenant-index"
        assert config["raise_on_error"] is False

    def test_default_yaml_uses_plain_env_names(self, clean_env):
        clean_env.setenv("USE_DYNAMODB", "true")
        clean_env.setenv("DYNAMODB_TABLE_NAME", "TenantConfigs")

        settings = get_settings()

        assert settings.storage.use_dynamodb is True
        assert settings.get_dynamodb_config()["table_name"] == "TenantConfigs"
        assert settings.get_dynamodb_config()["endpoint_url"] is None

    def test_get_settings_is_cached(self, clean_env):
        assert get_settings() is get_settings()


class TestConfigLoader:
    """Tests for YAML loading."""

    def test_env_substitution_with_defaults(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TC_TEST_PORT", "9000")
        monkeypatch.delenv("TC_TEST_HOST", raising=False)
        path = tmp_path / "settings.yaml"
        path.write_text("server:\n  port: ${TC_TEST_PORT:3000}\n  host: ${TC_TEST_HOST:127.0.0.1}\n")

        data = ConfigLoader(str(tmp_path)).load_yaml("settings.yaml")

        assert data == {"server": {"port": 9000, "host": "127.0.0.1"}}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigLoader(str(tmp_path)).load_yaml("absent.yaml")

    def test_load_multiple_deep_merges(self, tmp_path):
        (tmp_path / "base.yaml").write_text("server:\n  port: 3000\n  host: 0.0.0.0\n")
        (tmp_path / "local.yaml").write_text("server:\n  port: 4000\n")

        data = ConfigLoader(str(tmp_path)).load_multiple(["base.yaml", "local.yaml", "missing.yaml"])

        assert data == {"server": {"port": 4000, "host": "0.0.0.0"}}

    def test_include(self, tmp_path):
        (tmp_path / "dynamo.yaml").write_text("table_name: TenantConfigs\n")
        (tmp_path / "main.yaml").write_text("storage:\n  dynamodb: '!include dynamo.yaml'\n")

        data = ConfigLoader(str(tmp_path)).load_yaml("main.yaml")

        assert data["storage"]["dynamodb"] == {"table_name": "TenantConfigs"}

    def test_validate_config(self, tmp_path, monkeypatch):
        monkeypatch.delenv("DYNAMODB_TABLE_NAME", raising=False)
        loader = ConfigLoader(str(tmp_path))

        assert loader.validate_config({"storage": {"use_dynamodb": True}}) == [
            "DynamoDB table name not configured"
        ]
        assert loader.validate_config({"storage": {"config_file_path": "missing.json"}}) == [
            "Configuration file not found: missing.json"
        ]
        assert loader.validate_config({}) == []

    def test_from_yaml_logs_settings_issues(self, tmp_path, caplog, monkeypatch):
        monkeypatch.delenv("DYNAMODB_TABLE_NAME", raising=False)
        path = tmp_path / "settings.yaml"
        path.write_text("storage:\n  config_file_path: /nowhere/configs.json\n")

        with caplog.at_level("WARNING", logger="tenantconf.config.settings"):
            settings = Settings.from_yaml(str(path))

        assert settings.storage.config_file_path == "/nowhere/configs.json"
        assert any("Configuration file not found" in message for message in caplog.messages)
