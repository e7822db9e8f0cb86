"""
Settings Model

Pydantic-based settings with YAML and environment variable support.
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


DEFAULT_CONFIG_FILE = os.path.join("data", "configurations.json")


class ServerSettings(BaseModel):
    """HTTP server settings."""
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: list[str] = ["*"]
    debug: bool = False
    log_level: str = "INFO"


class DynamoDBSettings(BaseModel):
    """DynamoDB backend settings."""
    region: Optional[str] = None
    endpoint_url: Optional[str] = None
    table_name: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    tenant_index: str = "tenant-index"
    connect_timeout: int = 5
    read_timeout: int = 10
    max_attempts: int = 1
    raise_on_error: bool = False


class StorageSettings(BaseModel):
    """Storage backend selection."""
    use_dynamodb: bool = False
    config_file_path: Optional[str] = None
    dynamodb: DynamoDBSettings = Field(default_factory=DynamoDBSettings)


class LoggingSettings(BaseModel):
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


class Settings(BaseSettings):
    """
    Main settings class.

    Loads configuration from:
    1. Default values
    2. YAML config file
    3. Environment variables (TENANTCONF_ prefix)

    Example:
        ```python
        settings = get_settings()
        print(settings.storage.use_dynamodb)
        print(settings.server.port)
        ```
    """

    server: ServerSettings = Field(default_factory=ServerSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = {
        "env_prefix": "TENANTCONF_",
        "env_nested_delimiter": "__",
        "extra": "ignore",
    }

    @classmethod
    def from_yaml(cls, path: str) -> "Settings":
        """Load settings from YAML file."""
        from tenantconf.config.loader import ConfigLoader

        loader = ConfigLoader()
        data = loader.load_yaml(path)
        for issue in loader.validate_config(data):
            logger.warning(f"Settings file {path}: {issue}")
        return cls(**data)

    @property
    def storage_provider(self) -> str:
        return "dynamodb" if self.storage.use_dynamodb else "file"

    def get_dynamodb_config(self) -> dict[str, Any]:
        """Connection parameters for the DynamoDB backend, with AWS env fallbacks."""
        dynamo = self.storage.dynamodb
        return {
            "region": dynamo.region or os.getenv("AWS_REGION", "us-east-1"),
            "endpoint_url": dynamo.endpoint_url or os.getenv("DYNAMODB_ENDPOINT"),
            "table_name": dynamo.table_name or os.getenv("DYNAMODB_TABLE_NAME", "ConfigurationsTable"),
            "access_key_id": dynamo.access_key_id or os.getenv("AWS_ACCESS_KEY_ID"),
            "secret_access_key": dynamo.secret_access_key or os.getenv("AWS_SECRET_ACCESS_KEY"),
            "tenant_index": dynamo.tenant_index,
            "connect_timeout": dynamo.connect_timeout,
            "read_timeout": dynamo.read_timeout,
            "max_attempts": dynamo.max_attempts,
            "raise_on_error": dynamo.raise_on_error,
        }

    def get_storage_config(self) -> dict[str, Any]:
        """Get configuration for the active storage backend."""
        if self.storage_provider == "dynamodb":
            return {"provider": "dynamodb", **self.get_dynamodb_config()}
        return {
            "provider": "file",
            "config_path": (
                self.storage.config_file_path
                or os.getenv("CONFIG_FILE_PATH")
                or DEFAULT_CONFIG_FILE
            ),
        }


# Singleton settings instance
_settings: Optional[Settings] = None


def get_settings(config_path: Optional[str] = None) -> Settings:
    """
    Get the settings singleton.

    Args:
        config_path: Optional path to YAML config file

    Returns:
        Settings instance
    """
    global _settings

    if _settings is None:
        if config_path and Path(config_path).exists():
            _settings = Settings.from_yaml(config_path)
        else:
            default_path = Path(__file__).parent / "default.yaml"
            if default_path.exists():
                _settings = Settings.from_yaml(str(default_path))
            else:
                _settings = Settings()

    return _settings


def reset_settings() -> None:
    """Reset settings singleton (for testing)."""
    global _settings
    _settings = None
