"""
Configuration Routes

Read-only lookup of tenant configuration.
"""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from tenantconf.core.interfaces.storage import ConfigRequest, ConfigStorageProvider
from tenantconf.observability import get_logger
from tenantconf.server.dependencies import get_storage
from tenantconf.server.schemas import ConfigResponse, ErrorResponse, build_config_response

router = APIRouter(tags=["config"])
log = get_logger(__name__)


@router.get(
    "/config/{tenant}/cloud/{cloudRegion}/service/{service}/config/{configName}",
    response_model=ConfigResponse,
    responses={
        404: {"model": ConfigResponse, "description": "Configuration not found"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
    summary="Get a configuration value",
)
async def get_config(
    tenant: str,
    cloudRegion: str,
    service: str,
    configName: str,
    storage: ConfigStorageProvider = Depends(get_storage),
):
    """Look up one config by tenant, cloud region, service and config name."""
    request = ConfigRequest(
        tenant=tenant,
        cloud_region=cloudRegion,
        service=service,
        config_name=configName,
    )
    req_log = log.with_context(
        tenant=tenant,
        cloud_region=cloudRegion,
        service=service,
        config_name=configName,
    )

    req_log.info("Processing config request", event="business.config.get")

    try:
        config = await storage.get_config(request)
    except Exception as e:
        req_log.exception(
            "Error retrieving configuration",
            event="business.config.error",
            error=str(e),
        )
        raise HTTPException(
            status_code=500,
            detail="Internal server error while retrieving configuration",
        )

    if config is None:
        req_log.warning("Config not found", event="business.config.not_found")
        return JSONResponse(status_code=404, content=build_config_response(request, None))

    req_log.info("Config found and returned", event="business.config.found")
    return JSONResponse(status_code=200, content=build_config_response(request, config))


@router.get(
    "/config",
    responses={500: {"model": ErrorResponse, "description": "Internal server error"}},
    summary="Get all configurations",
)
async def get_all_configs(storage: ConfigStorageProvider = Depends(get_storage)):
    """Return the whole tenant -> cloud -> service -> config tree."""
    log.info("Processing get all configs request", event="business.config.get_all")

    try:
        all_configs = await storage.get_all_configs()
    except Exception as e:
        log.exception(
            "Error retrieving all configurations",
            event="business.config.get_all.error",
            error=str(e),
        )
        raise HTTPException(
            status_code=500,
            detail="Internal server error while retrieving configurations",
        )

    log.info(
        "All configs retrieved successfully",
        event="business.config.get_all.success",
        tenant_count=len(all_configs),
    )
    return JSONResponse(status_code=200, content=all_configs)
