"""
File Storage Adapter

Implements the ConfigStorageProvider interface over a single JSON document.
The whole tree is held in memory; reads never touch the disk.
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Optional

from tenantconf.adapters.storage.base import BaseStorageAdapter
from tenantconf.config.settings import DEFAULT_CONFIG_FILE
from tenantconf.core import hierarchy
from tenantconf.core.exceptions import ReloadError, SourceUnavailableError
from tenantconf.core.interfaces.storage import (
    ConfigRequest,
    ConfigurationData,
    ConfigValue,
)

logger = logging.getLogger(__name__)


def _reject_constant(name: str) -> Any:
    """NaN and Infinity are accepted by the json module but are not JSON."""
    raise ValueError(f"Invalid JSON constant: {name}")


class FileStorageAdapter(BaseStorageAdapter):
    """
    JSON file storage adapter.

    The document is parsed once at construction. A read, parse or shape
    failure there raises SourceUnavailableError, so a half-loaded adapter
    never exists.

    Example:
        ```python
        adapter = FileStorageAdapter(config_path="data/configurations.json")
        regions = await adapter.get_cloud_regions("tenant1")
        ```
    """

    def __init__(
        self,
        config_path: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self._config_path = Path(config_path or DEFAULT_CONFIG_FILE)

        try:
            self._data: ConfigurationData = self._read_document()
        except (OSError, ValueError) as e:
            logger.error(f"Error loading configuration data from {self._config_path}: {e}")
            raise SourceUnavailableError(
                f"Failed to load configuration data from {self._config_path}",
                source=str(self._config_path),
                provider=self.provider_name,
                cause=e,
            ) from e

        logger.info(
            f"Loaded {hierarchy.count_leaves(self._data)} configs for "
            f"{len(self._data)} tenants from {self._config_path}"
        )

    @property
    def provider_name(self) -> str:
        return "file"

    @property
    def config_path(self) -> Path:
        return self._config_path

    def _read_document(self) -> ConfigurationData:
        """
        Read, parse and shape-check the source document.

        Raises:
            OSError: If the file cannot be read
            ValueError: If it is not valid JSON (json.JSONDecodeError) or does
                not have the configuration shape
        """
        raw = self._config_path.read_text(encoding="utf-8")
        return hierarchy.validate_tree(json.loads(raw, parse_constant=_reject_constant))

    async def get_config(self, request: ConfigRequest) -> Optional[ConfigValue]:
        try:
            return hierarchy.lookup(self._data, request)
        except Exception as e:
            # Absence returns None above; reaching here means the tree itself is broken
            logger.error(
                f"Backend failure in file.get_config for "
                f"{request.tenant}/{request.cloud_region}/{request.service}/{request.config_name}: {e}"
            )
            return None

    async def get_all_configs(self) -> ConfigurationData:
        return copy.deepcopy(self._data)

    async def get_tenants(self) -> list[str]:
        return hierarchy.list_tenants(self._data)

    async def get_cloud_regions(self, tenant: str) -> list[str]:
        return hierarchy.list_cloud_regions(self._data, tenant)

    async def get_services(self, tenant: str, cloud_region: str) -> list[str]:
        return hierarchy.list_services(self._data, tenant, cloud_region)

    async def get_config_names(
        self,
        tenant: str,
        cloud_region: str,
        service: str,
    ) -> list[str]:
        return hierarchy.list_config_names(self._data, tenant, cloud_region, service)

    async def reload_config(self) -> None:
        """
        Re-read the source file and swap in the new tree.

        The new tree is fully built before the single reference assignment,
        so readers see either the old or the new data.

        Raises:
            ReloadError: If the file cannot be read or parsed; the previous
                tree stays in place
        """
        try:
            data = self._read_document()
        except (OSError, ValueError) as e:
            logger.error(f"Reload of {self._config_path} failed, keeping previous data: {e}")
            raise ReloadError(
                f"Failed to reload configuration data from {self._config_path}",
                source=str(self._config_path),
                provider=self.provider_name,
                cause=e,
            ) from e

        self._data = data
        logger.info(f"Reloaded configuration data from {self._config_path}")
