"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from wphub.api.connect import router as connect_router
from wphub.api.health import router as health_router
from wphub.api.sites import router as sites_router
from wphub.api.wordpress import router as wordpress_router
from wphub.auth.session import SessionProvider
from wphub.bridge import build_bridge
from wphub.config import Settings, get_settings
from wphub.errors import BridgeError, MissingParametersError
from wphub.execution.backend import ExecutionBackend
from wphub.observability.context import RequestContextMiddleware
from wphub.observability.logging import configure_logging
from wphub.storage.documents import DocumentStore

logger = logging.getLogger(__name__)


async def bridge_error_handler(request: Request, exc: BridgeError) -> JSONResponse:
    content = {"error": exc.code, "message": exc.message}
    if isinstance(exc, MissingParametersError):
        content["missing"] = exc.missing
    return JSONResponse(status_code=exc.status_code, content=content)


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"error": "invalid_request", "message": str(exc)})


def create_app(
    settings: Settings | None = None,
    *,
    store: DocumentStore | None = None,
    backend: ExecutionBackend | None = None,
    sessions: SessionProvider | None = None,
    poll_interval: float | None = None,
) -> FastAPI:
    """Build the API around one bridge instance."""
    settings = settings or get_settings()
    configure_logging(settings)

    bridge_kwargs = {"store": store, "backend": backend, "sessions": sessions}
    if poll_interval is not None:
        bridge_kwargs["poll_interval"] = poll_interval
    bridge = build_bridge(settings, **bridge_kwargs)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("[WPHub] Starting %s (%s)", settings.app_name, settings.environment)
        await bridge.start()
        yield
        await bridge.close()
        logger.info("[WPHub] Shut down")

    app = FastAPI(
        title=settings.app_name,
        description="Remote site bridge for managed WordPress installations",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.bridge = bridge

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.app_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware)

    app.add_exception_handler(BridgeError, bridge_error_handler)
    app.add_exception_handler(ValueError, value_error_handler)

    app.include_router(health_router)
    app.include_router(sites_router)
    app.include_router(connect_router)
    app.include_router(wordpress_router)

    return app
