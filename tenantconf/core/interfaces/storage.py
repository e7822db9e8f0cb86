"""
Configuration Storage Provider Interface

Defines the contract for all configuration storage backends (JSON file, DynamoDB).
This interface ensures identical lookup semantics regardless of where the
tenant -> cloud region -> service -> config hierarchy is stored.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional, Union


# tenant -> {"cloud": {region -> {"services": {service -> {"configs": {name -> value}}}}}}
ConfigurationData = dict[str, Any]

ConfigScalar = Union[str, int, float]

SORT_KEY = "config"
KEY_SEPARATOR = "#"


@dataclass(frozen=True)
class ConfigValue:
    """
    A single configuration leaf.

    Attributes:
        value: The configured value (string or number)
        unit: Optional unit of measure (e.g. "req/s")
        description: Optional human-readable description
    """
    value: ConfigScalar
    unit: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConfigValue":
        return cls(
            value=data["value"],
            unit=data.get("unit"),
            description=data.get("description"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize, omitting optional fields that are not set."""
        result: dict[str, Any] = {"value": self.value}
        if self.unit is not None:
            result["unit"] = self.unit
        if self.description is not None:
            result["description"] = self.description
        return result


@dataclass(frozen=True)
class ConfigRequest:
    """
    Exact 4-level address of a configuration value.

    Segments are case-sensitive and used as given.
    """
    tenant: str
    cloud_region: str
    service: str
    config_name: str

    def composite_key(self) -> str:
        """
        Primary key used by flat key-value stores.

        Raises:
            ValueError: If a segment contains the key separator
        """
        return build_composite_key(
            self.tenant, self.cloud_region, self.service, self.config_name
        )


@dataclass(frozen=True)
class FlatConfigRecord:
    """
    One configuration leaf stored as a flat key-value record.

    The primary key is the "#"-joined path, the sort key is constant and
    the path segments are denormalized as attributes for scans and indexes.
    """
    tenant: str
    cloud_region: str
    service: str
    config_name: str
    value: ConfigScalar
    unit: Optional[str] = None
    description: Optional[str] = None

    @property
    def path(self) -> str:
        """Readable location of the leaf, safe to build for any segments."""
        return "/".join((self.tenant, self.cloud_region, self.service, self.config_name))

    @property
    def pk(self) -> str:
        return build_composite_key(
            self.tenant, self.cloud_region, self.service, self.config_name
        )

    @property
    def sk(self) -> str:
        return SORT_KEY

    def to_config_value(self) -> ConfigValue:
        return ConfigValue(value=self.value, unit=self.unit, description=self.description)

    def to_item(self) -> dict[str, Any]:
        item: dict[str, Any] = {
            "pk": self.pk,
            "sk": self.sk,
            "tenant": self.tenant,
            "cloudRegion": self.cloud_region,
            "service": self.service,
            "configName": self.config_name,
            "value": self.value,
        }
        if self.unit is not None:
            item["unit"] = self.unit
        if self.description is not None:
            item["description"] = self.description
        return item

    @classmethod
    def from_item(cls, item: dict[str, Any]) -> "FlatConfigRecord":
        """
        Build a record from a stored item.

        Raises:
            KeyError: If a required attribute is missing
        """
        return cls(
            tenant=item["tenant"],
            cloud_region=item["cloudRegion"],
            service=item["service"],
            config_name=item["configName"],
            value=item["value"],
            unit=item.get("unit"),
            description=item.get("description"),
        )


def build_composite_key(
    tenant: str,
    cloud_region: str,
    service: str,
    config_name: str,
) -> str:
    """
    Join the four path segments into the flat-store primary key.

    Raises:
        ValueError: If a segment contains the separator
    """
    segments = (tenant, cloud_region, service, config_name)
    for segment in segments:
        if KEY_SEPARATOR in segment:
            raise ValueError(f"Key segment {segment!r} must not contain {KEY_SEPARATOR!r}")
    return KEY_SEPARATOR.join(segments)


class ConfigStorageProvider(ABC):
    """
    Abstract base class for configuration storage providers.

    All backends (file, DynamoDB, in-memory fakes) must implement this interface.
    Every traversal method treats a missing intermediate level as an empty
    result, never as an exception.

    Example:
        ```python
        storage = FileStorageAdapter(config_path="data/configurations.json")
        value = await storage.get_config(
            ConfigRequest("tenant1", "us-east-1", "api-gateway", "rate-limit")
        )
        ```
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of this provider (e.g., 'file', 'dynamodb')."""
        pass

    @abstractmethod
    async def get_config(self, request: ConfigRequest) -> Optional[ConfigValue]:
        """
        Retrieve a specific configuration value.

        Args:
            request: Exact tenant/region/service/name address

        Returns:
            The stored value, or None if any level is absent
        """
        pass

    @abstractmethod
    async def get_all_configs(self) -> ConfigurationData:
        """
        Retrieve all configuration data as the nested tree.

        Returns:
            A snapshot the caller owns
        """
        pass

    @abstractmethod
    async def get_tenants(self) -> list[str]:
        """Get all available tenants."""
        pass

    @abstractmethod
    async def get_cloud_regions(self, tenant: str) -> list[str]:
        """Get all cloud regions for a tenant (empty if the tenant is absent)."""
        pass

    @abstractmethod
    async def get_services(self, tenant: str, cloud_region: str) -> list[str]:
        """Get all services for a tenant and cloud region."""
        pass

    @abstractmethod
    async def get_config_names(
        self,
        tenant: str,
        cloud_region: str,
        service: str,
    ) -> list[str]:
        """Get all configuration names for a tenant, cloud region and service."""
        pass

    @abstractmethod
    async def reload_config(self) -> None:
        """
        Re-ingest the source of truth.

        Behavior is backend specific: the file backend re-reads its document,
        live stores have nothing to reload.
        """
        pass

    async def health_check(self) -> bool:
        """
        Verify the provider is working correctly.

        Returns:
            True if healthy, False otherwise
        """
        try:
            await self.get_tenants()
            return True
        except Exception:
            return False

    async def close(self) -> None:
        """Release any client held by the provider."""
        return None
