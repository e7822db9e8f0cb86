"""
Main Server Entry Point

Builds the FastAPI application and runs it with uvicorn.
"""

import argparse
import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tenantconf import __version__
from tenantconf.config.settings import Settings, get_settings
from tenantconf.core.container import StorageContainer
from tenantconf.core.exceptions import TenantConfError
from tenantconf.core.interfaces.storage import ConfigStorageProvider
from tenantconf.observability import metrics, setup_logging
from tenantconf.server.middleware import add_request_logging
from tenantconf.server.routes import config as config_routes
from tenantconf.server.routes import health as health_routes

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[ConfigStorageProvider] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Service settings (defaults to get_settings())
        storage: Storage provider to serve from; when omitted it is resolved
            from the StorageContainer at startup
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "storage", None) is None:
            container = StorageContainer.get_instance()
            container.configure(settings)
            app.state.storage = container.get_storage()
        logger.info(f"Serving configuration from {app.state.storage.provider_name} backend")

        yield

        await app.state.storage.close()
        stats = metrics.get_timing_stats()
        if stats["count"]:
            logger.info(
                f"Storage timings over last {stats['count']} calls: "
                f"avg={stats['avg_ms']:.2f}ms max={stats['max_ms']:.2f}ms "
                f"success_rate={stats['success_rate']:.0%}"
            )
        logger.info("Server closed gracefully")

    app = FastAPI(
        title="Tenant Config Service API",
        description="Loads configurations by tenant, cloud region, and service",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.storage = storage

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    add_request_logging(app)

    app.include_router(health_routes.router)
    app.include_router(config_routes.router)

    return app


def run_server(
    config_path: Optional[str] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
    use_dynamodb: bool = False,
    config_file: Optional[str] = None,
) -> None:
    """
    Run the tenantconf HTTP server.

    The storage backend is built before the server starts listening, so a
    source that cannot be loaded stops the process with exit status 1.

    Args:
        config_path: Path to a YAML settings file
        host: Override server host
        port: Override server port
        use_dynamodb: Serve from DynamoDB instead of the JSON file
        config_file: Override the JSON configuration document path
    """
    settings = get_settings(config_path)

    if host:
        settings.server.host = host
    if port:
        settings.server.port = port
    if use_dynamodb:
        settings.storage.use_dynamodb = True
    if config_file:
        settings.storage.config_file_path = config_file

    setup_logging(settings.logging.level.upper(), settings.logging.format)

    try:
        container = StorageContainer.get_instance()
        container.configure(settings)
        storage = container.get_storage()
    except TenantConfError as e:
        logger.error(f"Startup failed: {e}")
        sys.exit(1)

    app = create_app(settings, storage)

    server = uvicorn.Server(
        uvicorn.Config(
            app,
            host=settings.server.host,
            port=settings.server.port,
            log_level=settings.server.log_level.lower(),
        )
    )

    display_host = "localhost" if settings.server.host == "0.0.0.0" else settings.server.host
    base_url = f"http://{display_host}:{settings.server.port}"
    logger.info("Starting tenantconf server")
    logger.info(f"API documentation: {base_url}/docs")
    logger.info(f"Health check: {base_url}/health")
    logger.info(
        f"Example config: {base_url}/config/tenant1/cloud/us-east-1/service/api-gateway/config/rate-limit"
    )

    try:
        asyncio.run(server.serve())
    except KeyboardInterrupt:
        logger.info("Server stopped")


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Tenant configuration service")
    parser.add_argument("--config", "-c", help="Path to YAML settings file")
    parser.add_argument("--host", "-H", help="Server host")
    parser.add_argument("--port", "-p", type=int, help="Server port")
    parser.add_argument("--use-dynamodb", action="store_true", help="Serve from DynamoDB")
    parser.add_argument("--config-file", help="Path to the JSON configuration document")

    args = parser.parse_args(argv)

    run_server(
        config_path=args.config,
        host=args.host,
        port=args.port,
        use_dynamodb=args.use_dynamodb,
        config_file=args.config_file,
    )


if __name__ == "__main__":
    main()
