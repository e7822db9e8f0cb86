"""
Pytest Configuration and Shared Fixtures

This file is automatically loaded by pytest and provides:
- Fake storage implementations for isolated testing
- Shared fixtures for common test scenarios

Run tests:
    pytest tenantconf/tests/ -v
    pytest tenantconf/tests/ -v --cov=tenantconf  # with coverage
"""

import copy
import json
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
from botocore.exceptions import ClientError

from tenantconf.adapters.storage.dynamodb_adapter import DynamoDBStorageAdapter
from tenantconf.adapters.storage.file_adapter import FileStorageAdapter
from tenantconf.core import hierarchy
from tenantconf.core.container import StorageContainer
from tenantconf.core.interfaces.storage import (
    ConfigRequest,
    ConfigStorageProvider,
    ConfigurationData,
    ConfigValue,
)
from tenantconf.observability import metrics


SAMPLE_DATA: ConfigurationData = {
    "tenant1": {
        "cloud": {
            "us-east-1": {
                "services": {
                    "api-gateway": {
                        "configs": {
                            "rate-limit": {"value": 100, "unit": "req/s"},
                            "timeout": {
                                "value": 30,
                                "unit": "seconds",
                                "description": "Upstream request timeout",
                            },
                        }
                    },
                    "database": {
                        "configs": {
                            "engine": {"value": "postgres"},
                        }
                    },
                }
            },
            "eu-west-1": {
                "services": {
                    "api-gateway": {
                        "configs": {
                            "rate-limit": {"value": 80, "unit": "req/s"},
                        }
                    }
                }
            },
        }
    },
    "tenant2": {
        "cloud": {
            "us-west-2": {
                "services": {
                    "cache": {
                        "configs": {
                            "ttl": {"value": 3600, "unit": "seconds"},
                            "eviction-ratio": {"value": 0.75},
                        }
                    }
                }
            }
        }
    },
}


# =============================================================================
# IN-MEMORY STORAGE
# =============================================================================

class InMemoryStorage(ConfigStorageProvider):
    """
    Storage provider over a dict, for route and container tests.

    Usage:
        storage = InMemoryStorage()
        storage.set_data({...})
        storage.set_failing(True)  # every call raises RuntimeError
    """

    def __init__(self, data: Optional[ConfigurationData] = None):
        self._data = copy.deepcopy(data if data is not None else SAMPLE_DATA)
        self._failing = False
        self.closed = False
        self.reload_count = 0

    @property
    def provider_name(self) -> str:
        return "memory"

    # Test helpers
    def set_data(self, data: ConfigurationData) -> None:
        self._data = copy.deepcopy(data)

    def set_failing(self, failing: bool) -> None:
        self._failing = failing

    def _check(self) -> None:
        if self._failing:
            raise RuntimeError("storage unavailable")

    # ConfigStorageProvider interface implementation
    async def get_config(self, request: ConfigRequest) -> Optional[ConfigValue]:
        self._check()
        return hierarchy.lookup(self._data, request)

    async def get_all_configs(self) -> ConfigurationData:
        self._check()
        return copy.deepcopy(self._data)

    async def get_tenants(self) -> List[str]:
        self._check()
        return hierarchy.list_tenants(self._data)

    async def get_cloud_regions(self, tenant: str) -> List[str]:
        self._check()
        return hierarchy.list_cloud_regions(self._data, tenant)

    async def get_services(self, tenant: str, cloud_region: str) -> List[str]:
        self._check()
        return hierarchy.list_services(self._data, tenant, cloud_region)

    async def get_config_names(self, tenant: str, cloud_region: str, service: str) -> List[str]:
        self._check()
        return hierarchy.list_config_names(self._data, tenant, cloud_region, service)

    async def reload_config(self) -> None:
        self.reload_count += 1

    async def close(self) -> None:
        self.closed = True


# =============================================================================
# FAKE DYNAMODB TABLE
# =============================================================================

def _client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": f"simulated {code}"}}, operation)


class FakeDynamoTable:
    """
    In-memory stand-in for an aioboto3 DynamoDB Table resource.

    Supports the calls the adapter makes (get_item, put_item, scan, query)
    with equality expressions of the form "#attr = :attr", projections and
    pagination through LastEvaluatedKey.
    """

    def __init__(self, page_size: int = 1000):
        self.items: Dict[tuple, Dict[str, Any]] = {}
        self.page_size = page_size
        self.calls: List[tuple] = []
        self._failures: Dict[str, str] = {}

    # Test helpers
    def fail(self, method: str, code: str = "ProvisionedThroughputExceededException") -> None:
        """Make every call to `method` raise a ClientError."""
        self._failures[method] = code

    def recover(self) -> None:
        self._failures.clear()

    def add_raw_item(self, item: Dict[str, Any]) -> None:
        self.items[(item["pk"], item["sk"])] = dict(item)

    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]

    def _enter(self, method: str, kwargs: Dict[str, Any]) -> None:
        self.calls.append((method, kwargs))
        if method in self._failures:
            raise _client_error(self._failures[method], method)

    # Table API
    async def get_item(self, Key: Dict[str, Any], **kwargs) -> Dict[str, Any]:
        self._enter("get_item", {"Key": Key})
        item = self.items.get((Key["pk"], Key["sk"]))
        return {"Item": dict(item)} if item else {}

    async def put_item(self, Item: Dict[str, Any], **kwargs) -> Dict[str, Any]:
        self._enter("put_item", {"Item": Item})
        for value in Item.values():
            if isinstance(value, float):
                raise TypeError("Float types are not supported. Use Decimal types instead.")
        self.add_raw_item(Item)
        return {}

    async def scan(self, **kwargs) -> Dict[str, Any]:
        self._enter("scan", kwargs)
        return self._page(kwargs)

    async def query(self, **kwargs) -> Dict[str, Any]:
        self._enter("query", kwargs)
        if "KeyConditionExpression" not in kwargs:
            raise _client_error("ValidationException", "Query")
        return self._page(kwargs)

    def _page(self, kwargs: Dict[str, Any]) -> Dict[str, Any]:
        keys = sorted(self.items)
        start = 0
        if "ExclusiveStartKey" in kwargs:
            last = kwargs["ExclusiveStartKey"]
            start = keys.index((last["pk"], last["sk"])) + 1

        page_keys = keys[start:start + self.page_size]
        names = kwargs.get("ExpressionAttributeNames", {})
        values = kwargs.get("ExpressionAttributeValues", {})
        conditions = {placeholder[1:]: value for placeholder, value in values.items()}

        result = []
        for key in page_keys:
            item = self.items[key]
            if all(item.get(attr) == value for attr, value in conditions.items()):
                result.append(self._project(item, kwargs.get("ProjectionExpression"), names))

        response: Dict[str, Any] = {"Items": result, "Count": len(result)}
        if start + self.page_size < len(keys):
            last_key = page_keys[-1]
            response["LastEvaluatedKey"] = {"pk": last_key[0], "sk": last_key[1]}
        return response

    @staticmethod
    def _project(item: Dict[str, Any], projection: Optional[str], names: Dict[str, str]) -> Dict[str, Any]:
        if not projection:
            return dict(item)
        attributes = [names.get(part.strip(), part.strip()) for part in projection.split(",")]
        return {attr: item[attr] for attr in attributes if attr in item}


def seed_table(table: FakeDynamoTable, data: ConfigurationData) -> None:
    """Load a nested tree into the fake table the way the migration writes it."""
    for record in hierarchy.iter_records(data):
        item = record.to_item()
        if isinstance(item["value"], (int, float)):
            item["value"] = Decimal(str(item["value"]))
        table.add_raw_item(item)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def sample_data() -> ConfigurationData:
    return copy.deepcopy(SAMPLE_DATA)


@pytest.fixture
def config_file(tmp_path: Path, sample_data: ConfigurationData) -> Path:
    path = tmp_path / "configurations.json"
    path.write_text(json.dumps(sample_data), encoding="utf-8")
    return path


@pytest.fixture
def file_storage(config_file: Path) -> FileStorageAdapter:
    return FileStorageAdapter(config_path=str(config_file))


@pytest.fixture
def fake_table(sample_data: ConfigurationData) -> FakeDynamoTable:
    table = FakeDynamoTable()
    seed_table(table, sample_data)
    return table


@pytest.fixture
def dynamo_storage(fake_table: FakeDynamoTable) -> DynamoDBStorageAdapter:
    return DynamoDBStorageAdapter(table_name="TestTable", table=fake_table)


@pytest.fixture
def memory_storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture(autouse=True)
def reset_global_state():
    """Keep the process-wide container and metrics clean between tests."""
    StorageContainer.get_instance().reset()
    metrics.reset()
    yield
    StorageContainer.get_instance().reset()
    metrics.reset()
