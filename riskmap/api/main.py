"""FastAPI application factory"""

import asyncio
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from riskmap.api.middleware import RequestIDMiddleware, MetricsMiddleware
from riskmap.api.v1 import figure
from riskmap.controller import ViewController, ViewStatus
from riskmap.infrastructure.clients.risk_api import RiskApiClient
from riskmap.infrastructure.observability.logging import setup_logging
from riskmap.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def _report_startup_outcome(task: asyncio.Task) -> None:
    """Surface anything the baseline load raised besides a handled fetch error"""
    if task.cancelled():
        return

    error = task.exception()
    if error is not None:
        logging.error(f"Baseline startup crashed: {error!r}", exc_info=error)


@asynccontextmanager
async def lifespan(app: FastAPI):
    controller: ViewController = app.state.controller

    # Baseline loads in the background so the surface is served immediately
    startup = None
    if controller.status is ViewStatus.IDLE:
        startup = asyncio.create_task(controller.start())
        startup.add_done_callback(_report_startup_outcome)
    app.state.startup_task = startup

    yield

    if startup is not None and not startup.done():
        startup.cancel()
        await asyncio.wait({startup})
    await controller.close()


def create_app(controller: ViewController | None = None) -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Risk Map Dashboard",
        description="Applicant risk map with adjustable age weight",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.controller = controller or ViewController(RiskApiClient())

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(figure.router, prefix="/v1", tags=["risk-map"])

    return app


app = create_app()
