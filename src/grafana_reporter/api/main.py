from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from grafana_reporter import __version__
from grafana_reporter.api.routes import health, reports
from grafana_reporter.config import Settings, get_settings
from grafana_reporter.logging import configure_logging
from grafana_reporter.report.service import ReportService


def create_app(settings: Settings | None = None, service: ReportService | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(settings.log_level)
        yield

    app = FastAPI(
        title="Grafana Reporter API",
        version=__version__,
        docs_url=f"{settings.api_prefix}/docs",
        openapi_url=f"{settings.api_prefix}/openapi.json",
        lifespan=lifespan,
    )
    app.state.report_service = service or ReportService.from_settings(settings)

    app.include_router(reports.router, prefix=settings.api_prefix, tags=["reports"])
    app.include_router(health.router, tags=["health"])
    return app
