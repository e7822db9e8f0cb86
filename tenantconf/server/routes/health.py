"""
System Routes

Liveness check and the root redirect to the API docs.
"""

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from tenantconf import __version__
from tenantconf.core.interfaces.storage import ConfigStorageProvider
from tenantconf.observability import get_logger
from tenantconf.server.dependencies import get_storage
from tenantconf.server.schemas import HealthResponse

router = APIRouter(tags=["system"])
log = get_logger(__name__)

_started_at = time.monotonic()


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health_check(storage: ConfigStorageProvider = Depends(get_storage)):
    """Report that the process is up. Does not probe the backend."""
    log.debug("Processing health check", event="system.health.check")
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        uptime=round(time.monotonic() - _started_at, 3),
        version=__version__,
        backend=storage.provider_name,
        message="Service is running",
    )


@router.get("/", include_in_schema=False)
async def root():
    return RedirectResponse(url="/docs")
