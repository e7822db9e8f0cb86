"""
API Schemas

Pydantic models describing the HTTP payloads (used for OpenAPI docs).
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, Field

from tenantconf.core.interfaces.storage import ConfigRequest, ConfigValue


class ConfigValueModel(BaseModel):
    """A configuration leaf."""
    value: Union[int, float, str] = Field(..., examples=[100])
    unit: Optional[str] = Field(None, examples=["req/s"])
    description: Optional[str] = Field(None, examples=["Maximum requests per second"])


class ConfigResponse(BaseModel):
    """Result of a single configuration lookup."""
    tenant: str = Field(..., examples=["tenant1"])
    cloudRegion: str = Field(..., examples=["us-east-1"])
    service: str = Field(..., examples=["api-gateway"])
    configName: str = Field(..., examples=["rate-limit"])
    config: Optional[ConfigValueModel] = None
    found: bool


class HealthResponse(BaseModel):
    """Liveness payload."""
    status: str = Field(..., examples=["healthy"])
    timestamp: str
    uptime: float
    version: str
    backend: str
    message: Optional[str] = None


class ErrorResponse(BaseModel):
    detail: str


def build_config_response(
    request: ConfigRequest,
    config: Optional[ConfigValue],
) -> dict[str, Any]:
    """Serialize a lookup result with camelCase keys, omitting unset optional fields."""
    return {
        "tenant": request.tenant,
        "cloudRegion": request.cloud_region,
        "service": request.service,
        "configName": request.config_name,
        "config": config.to_dict() if config is not None else None,
        "found": config is not None,
    }
