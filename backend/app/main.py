############################################################
#
# etlive - ET Live Data Server
#
# main.py: FastAPI application entry point and configuration
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""FastAPI application entry point."""

import os
import signal
import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from backend.app.api import api_router
from backend.app.core.collector.exceptions import ConfigError
from backend.app.core.collector.service import CollectorService
from backend.app.logging_config import (
    bind_request_context,
    clear_request_context,
    get_logger,
    setup_logging,
)
from backend.app.settings import Settings, get_settings

# Setup logging first
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan manager."""
    logger.info("Starting ET Live Data Server...")

    collector: Optional[CollectorService] = app.state.collector
    if collector is None:
        try:
            collector = CollectorService.from_settings(app.state.settings)
        except ConfigError as e:
            logger.critical("node_config_error", error=str(e))
            raise
        app.state.collector = collector

    await collector.start()
    logger.info("ET Live Data Server started successfully")

    yield

    # Shutdown
    logger.info("Shutting down ET Live Data Server...")
    await collector.stop()
    logger.info("ET Live Data Server shutdown complete")


class RequestIDMiddleware:
    """Raw ASGI middleware for request ID injection.

    Unlike @app.middleware("http") which wraps in BaseHTTPMiddleware,
    this does NOT run the handler in a separate task.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        # Extract request ID from headers
        headers = dict(scope.get("headers", []))
        request_id = (
            headers.get(b"x-request-id", b"").decode()
            or str(uuid.uuid4())
        )

        bind_request_context(request_id=request_id)

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                # Inject X-Request-ID into response headers
                response_headers = list(message.get("headers", []))
                response_headers.append(
                    (b"x-request-id", request_id.encode())
                )
                message = {**message, "headers": response_headers}
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            clear_request_context()


def create_app(
    settings: Optional[Settings] = None,
    collector: Optional[CollectorService] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to use (defaults to the cached environment settings)
        collector: Pre-built collector; when omitted the lifespan builds one
            from ``settings.nodes_config_path``
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        version=settings.app_version,
        description="Live telemetry cache for ET nodes",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.collector = collector

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.add_middleware(RequestIDMiddleware)

    # Exception handlers
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler."""
        logger.exception("unhandled_exception", error=str(exc))
        return JSONResponse(
            status_code=500,
            content={"error": {"message": "Internal server error", "type": "server_error"}},
        )

    # Include routers
    app.include_router(api_router)

    # Front end build, mounted last so the API routes take precedence
    if settings.static_dir and os.path.isdir(settings.static_dir):
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")

    return app


class CollectorAwareServer(uvicorn.Server):
    """uvicorn server that stops new polls as soon as an exit signal arrives.

    uvicorn only runs the lifespan shutdown after open connections have
    drained; triggering here stops the tick loop immediately instead.
    """

    def handle_exit(self, sig: int, frame) -> None:
        state = getattr(self.config.app, "state", None)
        collector = getattr(state, "collector", None)
        if collector is not None:
            collector.coordinator.trigger_threadsafe(signal.Signals(sig).name)
        super().handle_exit(sig, frame)


# Create application instance
app = create_app()


def main():
    """Run the application using uvicorn."""
    settings = get_settings()

    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        log_config=None,
        timeout_graceful_shutdown=settings.http_graceful_shutdown_seconds,
    )
    CollectorAwareServer(config).run()


if __name__ == "__main__":
    main()
