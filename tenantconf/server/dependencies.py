"""FastAPI dependencies."""

from fastapi import Request

from tenantconf.core.interfaces.storage import ConfigStorageProvider


def get_storage(request: Request) -> ConfigStorageProvider:
    """Return the storage provider resolved for this application at startup."""
    return request.app.state.storage
