"""
Configuration Hierarchy Helpers

Traversal, shape checking and flat <-> nested conversion for the
tenant -> cloud region -> service -> config tree.

Nested shape:
    {
        "<tenant>": {
            "cloud": {
                "<region>": {
                    "services": {
                        "<service>": {
                            "configs": {
                                "<name>": {"value": 100, "unit": "req/s"}
                            }
                        }
                    }
                }
            }
        }
    }
"""

import math
from collections.abc import Iterable, Iterator
from typing import Any, Optional

from tenantconf.core.interfaces.storage import (
    ConfigRequest,
    ConfigurationData,
    ConfigValue,
    FlatConfigRecord,
)


class InvalidHierarchyError(ValueError):
    """Raised when a document does not have the 4-level configuration shape."""

    def __init__(self, path: list[str], reason: str):
        self.path = path
        self.reason = reason
        location = "/".join(path) if path else "<root>"
        super().__init__(f"Invalid configuration at {location}: {reason}")


# ============================================================================
# Traversal
# ============================================================================

def _child(node: Any, container_key: str, name: str) -> Optional[dict[str, Any]]:
    """Step one level down, returning None when the branch is absent."""
    if not isinstance(node, dict):
        return None
    children = node.get(container_key)
    if not isinstance(children, dict):
        return None
    child = children.get(name)
    return child if isinstance(child, dict) else None


def find_region(data: ConfigurationData, tenant: str, cloud_region: str) -> Optional[dict[str, Any]]:
    return _child(data.get(tenant), "cloud", cloud_region)


def find_service(
    data: ConfigurationData,
    tenant: str,
    cloud_region: str,
    service: str,
) -> Optional[dict[str, Any]]:
    return _child(find_region(data, tenant, cloud_region), "services", service)


def lookup(data: ConfigurationData, request: ConfigRequest) -> Optional[ConfigValue]:
    """Follow the 4-level path; any missing level yields None."""
    service = find_service(data, request.tenant, request.cloud_region, request.service)
    leaf = _child(service, "configs", request.config_name)
    if leaf is None:
        return None
    return ConfigValue.from_dict(leaf)


def list_tenants(data: ConfigurationData) -> list[str]:
    return list(data.keys())


def list_cloud_regions(data: ConfigurationData, tenant: str) -> list[str]:
    tenant_node = data.get(tenant)
    if not isinstance(tenant_node, dict):
        return []
    return list(tenant_node.get("cloud", {}).keys())


def list_services(data: ConfigurationData, tenant: str, cloud_region: str) -> list[str]:
    region = find_region(data, tenant, cloud_region)
    if region is None:
        return []
    return list(region.get("services", {}).keys())


def list_config_names(
    data: ConfigurationData,
    tenant: str,
    cloud_region: str,
    service: str,
) -> list[str]:
    service_node = find_service(data, tenant, cloud_region, service)
    if service_node is None:
        return []
    return list(service_node.get("configs", {}).keys())


# ============================================================================
# Shape checking
# ============================================================================

def _require_mapping(node: Any, path: list[str], key: str) -> dict[str, Any]:
    if not isinstance(node, dict):
        raise InvalidHierarchyError(path, "expected an object")
    children = node.get(key)
    if not isinstance(children, dict):
        raise InvalidHierarchyError(path, f"missing '{key}' object")
    return children


def _check_leaf(leaf: Any, path: list[str]) -> None:
    if not isinstance(leaf, dict):
        raise InvalidHierarchyError(path, "config entry must be an object")
    if "value" not in leaf:
        raise InvalidHierarchyError(path, "config entry has no 'value'")
    value = leaf["value"]
    # bool is an int subclass but not a valid config value
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise InvalidHierarchyError(path, "'value' must be a string or a number")
    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidHierarchyError(path, "'value' must be a finite number")
    for optional in ("unit", "description"):
        if leaf.get(optional) is not None and not isinstance(leaf[optional], str):
            raise InvalidHierarchyError(path, f"'{optional}' must be a string")


def validate_tree(data: Any) -> ConfigurationData:
    """
    Check that a parsed document has the nested configuration shape.

    Returns:
        The same document, for chaining

    Raises:
        InvalidHierarchyError: On the first structural problem found
    """
    if not isinstance(data, dict):
        raise InvalidHierarchyError([], "root must be an object")

    for tenant, tenant_node in data.items():
        regions = _require_mapping(tenant_node, [tenant], "cloud")
        for region, region_node in regions.items():
            services = _require_mapping(region_node, [tenant, region], "services")
            for service, service_node in services.items():
                configs = _require_mapping(service_node, [tenant, region, service], "configs")
                for name, leaf in configs.items():
                    _check_leaf(leaf, [tenant, region, service, name])
    return data


# ============================================================================
# Flat <-> nested
# ============================================================================

def build_tree(records: Iterable[FlatConfigRecord]) -> ConfigurationData:
    """
    Group flat records into the nested shape.

    Intermediate nodes are created on first encounter and reused afterwards,
    so records sharing a tenant, region or service land in the same branch.
    """
    tree: ConfigurationData = {}
    for record in records:
        tenant_node = tree.setdefault(record.tenant, {"cloud": {}})
        region_node = tenant_node["cloud"].setdefault(record.cloud_region, {"services": {}})
        service_node = region_node["services"].setdefault(record.service, {"configs": {}})
        service_node["configs"][record.config_name] = record.to_config_value().to_dict()
    return tree


def iter_records(data: ConfigurationData) -> Iterator[FlatConfigRecord]:
    """Yield one flat record per leaf of a nested tree."""
    for tenant, tenant_node in data.items():
        for region, region_node in tenant_node.get("cloud", {}).items():
            for service, service_node in region_node.get("services", {}).items():
                for name, leaf in service_node.get("configs", {}).items():
                    config = ConfigValue.from_dict(leaf)
                    yield FlatConfigRecord(
                        tenant=tenant,
                        cloud_region=region,
                        service=service,
                        config_name=name,
                        value=config.value,
                        unit=config.unit,
                        description=config.description,
                    )


def count_leaves(data: ConfigurationData) -> int:
    return sum(1 for _ in iter_records(data))
