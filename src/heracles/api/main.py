from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Sequence

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from heracles.api.routes import dashboards, health
from heracles.config import Settings, get_settings, load_dashboards
from heracles.core.errors import BackendError, BackendHTTPError, BackendUnreachable
from heracles.dashboards.models import Dashboard
from heracles.logging import configure_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings: Settings = app.state.settings
    configure_logging(settings.log_level)
    if app.state.dashboards is None:
        app.state.dashboards = load_dashboards(settings.dashboards_path)
    logger.info("dashboards_ready", count=len(app.state.dashboards))
    yield


async def backend_error_handler(request: Request, exc: BackendError) -> JSONResponse:
    logger.error(
        "panel_query_failed",
        path=request.url.path,
        error_type=type(exc).__name__,
        message=exc.message,
        **exc.details,
    )
    if isinstance(exc, BackendUnreachable):
        status_code = status.HTTP_504_GATEWAY_TIMEOUT
    else:
        status_code = status.HTTP_502_BAD_GATEWAY
    content = {"error": exc.message, "type": type(exc).__name__}
    if isinstance(exc, BackendHTTPError):
        content["backend_status"] = exc.status
    return JSONResponse(status_code=status_code, content=content)


def create_app(
    settings: Settings | None = None,
    dashboard_list: Sequence[Dashboard] | None = None,
) -> FastAPI:
    """
    Build the API application.

    Args:
        settings: Process settings (defaults to the cached environment settings)
        dashboard_list: Pre-loaded dashboards; loaded from settings at startup when omitted
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Heracles API",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.dashboards = tuple(dashboard_list) if dashboard_list is not None else None

    app.add_exception_handler(BackendError, backend_error_handler)  # type: ignore[arg-type]
    app.include_router(dashboards.router, prefix="/api", tags=["dashboards"])
    app.include_router(health.router, tags=["health"])
    return app


app = create_app()
