"""DockGate main application."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dockgate import __version__
from dockgate.api import public_router, router, stream_router
from dockgate.api.deps import validate_auth_config
from dockgate.config import HEARTBEAT_INTERVAL_SECONDS, Settings, settings
from dockgate.integrations import EngineClient
from dockgate.middleware import access_log_middleware
from dockgate.observability import attach_sink, configure_logging, detach_sink
from dockgate.services import Services, build_services

configure_logging(settings.log_level)
logger = logging.getLogger("dockgate")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    services: Services = app.state.services
    logger.info("Starting DockGate server...")
    logger.info(f"Environment: {services.settings.env.value}")
    logger.info(f"Docker engine: {services.settings.docker_base_url}")

    # Fail fast if insecure
    validate_auth_config(services.settings)

    # Route application logs to live observers
    handler = attach_sink(services.sink)
    services.sink.bind_loop(asyncio.get_running_loop())

    await services.sweeper.start()
    logger.info("Task sweep started")
    logger.info(f"Max concurrent tasks: {services.scheduler.max_concurrent}")

    yield

    logger.info("Shutting down DockGate server...")
    await services.sweeper.stop()
    await services.broadcast.close()
    await services.scheduler.shutdown()
    services.engine.close()
    logger.info("Shutdown complete")

    detach_sink(handler)
    services.sink.unbind_loop()


def create_app(
    app_settings: Optional[Settings] = None,
    engine: Optional[EngineClient] = None,
    services: Optional[Services] = None,
    heartbeat_interval: float = HEARTBEAT_INTERVAL_SECONDS,
) -> FastAPI:
    """Build a DockGate application with its own service container."""
    if app_settings is None:
        app_settings = settings
    if services is None:
        services = build_services(
            app_settings,
            engine=engine,
            heartbeat_interval=heartbeat_interval,
        )

    app = FastAPI(
        title="DockGate",
        description="Asynchronous Docker engine control plane with live log streaming",
        version=__version__,
        lifespan=lifespan,
        debug=services.settings.debug,
    )
    app.state.services = services

    app.middleware("http")(access_log_middleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=services.settings.cors_allowed_origins,
        allow_credentials=services.settings.cors_allow_credentials,
        allow_methods=services.settings.cors_allowed_methods,
        allow_headers=services.settings.cors_allowed_headers,
    )

    app.include_router(public_router)
    app.include_router(router)
    app.include_router(stream_router)
    return app


app = create_app()


def main():
    """Entry point for the application."""
    uvicorn.run(
        "dockgate.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
