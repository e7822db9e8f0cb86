"""
DynamoDB Storage Adapter

Implements the ConfigStorageProvider interface over a DynamoDB table where
every config leaf is one flat item:

    pk          = "<tenant>#<cloudRegion>#<service>#<configName>"
    sk          = "config"
    tenant, cloudRegion, service, configName, value, unit?, description?

Point lookups use the primary key directly. Listing tenants, services and
config names scans the table; listing regions queries the tenant GSI.
Nothing is cached: every call reads the table.
"""

import asyncio
import logging
from decimal import Decimal
from typing import Any, Optional

import aioboto3
from botocore.config import Config

from tenantconf.adapters.storage.base import BaseStorageAdapter
from tenantconf.core import hierarchy
from tenantconf.core.interfaces.storage import (
    SORT_KEY,
    ConfigRequest,
    ConfigurationData,
    ConfigValue,
    FlatConfigRecord,
)
from tenantconf.observability import traced

logger = logging.getLogger(__name__)

DEFAULT_TABLE_NAME = "ConfigurationsTable"
DEFAULT_TENANT_INDEX = "tenant-index"


def to_dynamo_value(value: Any) -> Any:
    """DynamoDB rejects float; numbers are written as Decimal."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    return value


def from_dynamo_value(value: Any) -> Any:
    """Numbers are read back as Decimal; integral ones become int."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value


def _path_of(entry: Any) -> tuple[str, str, str, str]:
    return (entry.tenant, entry.cloud_region, entry.service, entry.config_name)


def _equality_filter(**attributes: str) -> dict[str, Any]:
    """Build an AND-ed equality expression with placeholder names and values."""
    return {
        "expression": " AND ".join(f"#{name} = :{name}" for name in attributes),
        "names": {f"#{name}": name for name in attributes},
        "values": {f":{name}": value for name, value in attributes.items()},
    }


class DynamoDBStorageAdapter(BaseStorageAdapter):
    """
    DynamoDB storage adapter.

    Backend failures (network, throttling, malformed items) are logged and
    degrade to an empty result unless raise_on_error is set.

    Example:
        ```python
        # DynamoDB Local
        adapter = DynamoDBStorageAdapter(
            table_name="ConfigurationsTable",
            endpoint_url="http://localhost:8000",
        )
        value = await adapter.get_config(ConfigRequest("tenant1", "us-east-1", "api-gateway", "rate-limit"))
        await adapter.close()
        ```
    """

    def __init__(
        self,
        table_name: Optional[str] = None,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        tenant_index: str = DEFAULT_TENANT_INDEX,
        connect_timeout: int = 5,
        read_timeout: int = 10,
        max_attempts: int = 1,
        table: Any = None,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self._table_name = table_name or DEFAULT_TABLE_NAME
        self._region = region or "us-east-1"
        self._endpoint_url = endpoint_url or None
        self._tenant_index = tenant_index
        self._client_config = Config(
            connect_timeout=connect_timeout,
            read_timeout=read_timeout,
            retries={"max_attempts": max_attempts},
        )

        self._table = table
        self._resource_cm: Any = None
        self._connect_lock: Optional[asyncio.Lock] = None
        self._session: Any = None

        if table is None:
            session_kwargs: dict[str, Any] = {"region_name": self._region}
            if access_key_id and secret_access_key:
                session_kwargs["aws_access_key_id"] = access_key_id
                session_kwargs["aws_secret_access_key"] = secret_access_key
            self._session = aioboto3.Session(**session_kwargs)

        logger.info(
            f"DynamoDB storage configured: table={self._table_name} "
            f"region={self._region} endpoint={self._endpoint_url or 'aws'}"
        )

    @property
    def provider_name(self) -> str:
        return "dynamodb"

    @property
    def table_name(self) -> str:
        return self._table_name

    # -------------------------------------------------------------------------
    # CONNECTION MANAGEMENT
    # -------------------------------------------------------------------------

    async def connect(self) -> Any:
        """Open the DynamoDB resource and return the table handle."""
        if self._table is not None:
            return self._table

        if self._connect_lock is None:
            self._connect_lock = asyncio.Lock()

        async with self._connect_lock:
            if self._table is None:
                resource_kwargs: dict[str, Any] = {"config": self._client_config}
                if self._endpoint_url:
                    resource_kwargs["endpoint_url"] = self._endpoint_url

                self._resource_cm = self._session.resource("dynamodb", **resource_kwargs)
                resource = await self._resource_cm.__aenter__()
                self._table = await resource.Table(self._table_name)

        return self._table

    async def close(self) -> None:
        """Close the DynamoDB resource. Safe to call multiple times."""
        if self._resource_cm is not None:
            await self._resource_cm.__aexit__(None, None, None)
            self._resource_cm = None
            self._table = None

    async def _collect(self, method: str, **kwargs: Any) -> list[dict[str, Any]]:
        """Run a scan or query, following LastEvaluatedKey through every page."""
        table = await self.connect()
        operation = getattr(table, method)

        items: list[dict[str, Any]] = []
        while True:
            response = await operation(**kwargs)
            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return items
            kwargs["ExclusiveStartKey"] = last_key

    async def _distinct(
        self,
        attribute: str,
        method: str = "scan",
        key_condition: Optional[dict[str, str]] = None,
        filter_on: Optional[dict[str, str]] = None,
        index_name: Optional[str] = None,
    ) -> list[str]:
        """Distinct values of one attribute across matching items."""
        names = {f"#{attribute}": attribute}
        values: dict[str, Any] = {}
        kwargs: dict[str, Any] = {"ProjectionExpression": f"#{attribute}"}

        if index_name:
            kwargs["IndexName"] = index_name
        if key_condition:
            condition = _equality_filter(**key_condition)
            kwargs["KeyConditionExpression"] = condition["expression"]
            names.update(condition["names"])
            values.update(condition["values"])
        if filter_on:
            condition = _equality_filter(**filter_on)
            kwargs["FilterExpression"] = condition["expression"]
            names.update(condition["names"])
            values.update(condition["values"])

        kwargs["ExpressionAttributeNames"] = names
        if values:
            kwargs["ExpressionAttributeValues"] = values

        items = await self._collect(method, **kwargs)
        return list(dict.fromkeys(item[attribute] for item in items))

    @staticmethod
    def _record_from_item(item: dict[str, Any]) -> FlatConfigRecord:
        return FlatConfigRecord.from_item(
            {key: from_dynamo_value(value) for key, value in item.items()}
        )

    # -------------------------------------------------------------------------
    # READ OPERATIONS
    # -------------------------------------------------------------------------

    @traced("get_config")
    async def get_config(self, request: ConfigRequest) -> Optional[ConfigValue]:
        try:
            key = request.composite_key()
        except ValueError:
            # put_config never writes such keys, so nothing can match
            return None

        try:
            table = await self.connect()
            response = await table.get_item(Key={"pk": key, "sk": SORT_KEY})
            item = response.get("Item")
            if not item:
                return None
            record = self._record_from_item(item)
        except Exception as e:
            return self._degrade(e, "get_config", None)

        if _path_of(record) != _path_of(request):
            logger.warning(f"Item {key} is stored under path {record.path}, ignoring it")
            return None
        return record.to_config_value()

    @traced("get_all_configs")
    async def get_all_configs(self) -> ConfigurationData:
        try:
            items = await self._collect("scan")
            return hierarchy.build_tree(self._record_from_item(item) for item in items)
        except Exception as e:
            return self._degrade(e, "get_all_configs", {})

    @traced("get_tenants")
    async def get_tenants(self) -> list[str]:
        try:
            return await self._distinct("tenant")
        except Exception as e:
            return self._degrade(e, "get_tenants", [])

    @traced("get_cloud_regions")
    async def get_cloud_regions(self, tenant: str) -> list[str]:
        try:
            return await self._distinct(
                "cloudRegion",
                method="query",
                key_condition={"tenant": tenant},
                index_name=self._tenant_index,
            )
        except Exception as e:
            return self._degrade(e, "get_cloud_regions", [])

    @traced("get_services")
    async def get_services(self, tenant: str, cloud_region: str) -> list[str]:
        try:
            return await self._distinct(
                "service",
                filter_on={"tenant": tenant, "cloudRegion": cloud_region},
            )
        except Exception as e:
            return self._degrade(e, "get_services", [])

    @traced("get_config_names")
    async def get_config_names(
        self,
        tenant: str,
        cloud_region: str,
        service: str,
    ) -> list[str]:
        try:
            return await self._distinct(
                "configName",
                filter_on={"tenant": tenant, "cloudRegion": cloud_region, "service": service},
            )
        except Exception as e:
            return self._degrade(e, "get_config_names", [])

    async def reload_config(self) -> None:
        # Data is always read live from the table
        return None

    # -------------------------------------------------------------------------
    # WRITE OPERATIONS (migration tooling only)
    # -------------------------------------------------------------------------

    @traced("put_config")
    async def put_config(
        self,
        tenant: str,
        cloud_region: str,
        service: str,
        config_name: str,
        config: ConfigValue,
    ) -> bool:
        """
        Upsert one config leaf by its composite key.

        Segments containing the key separator are rejected.

        Returns:
            True if written, False if rejected or the write failed
        """
        record = FlatConfigRecord(
            tenant=tenant,
            cloud_region=cloud_region,
            service=service,
            config_name=config_name,
            value=config.value,
            unit=config.unit,
            description=config.description,
        )
        try:
            item = {key: to_dynamo_value(value) for key, value in record.to_item().items()}
        except ValueError as e:
            logger.error(f"Rejected config {record.path}: {e}")
            return False

        try:
            table = await self.connect()
            await table.put_item(Item=item)
            return True
        except Exception as e:
            return self._degrade(e, "put_config", False)
