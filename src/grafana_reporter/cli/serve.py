"""CLI command running the HTTP API."""

from __future__ import annotations

import structlog
import uvicorn

from grafana_reporter.api.main import create_app
from grafana_reporter.config import Settings
from grafana_reporter.core.errors import main_with_error_handling

logger = structlog.get_logger()


@main_with_error_handling()
def serve_command(settings: Settings, *, host: str = "0.0.0.0", port: int = 8881) -> int:
    app = create_app(settings)
    logger.info("http_server_starting", host=host, port=port, grafana_url=settings.grafana_url)
    uvicorn.run(app, host=host, port=port, log_level=settings.log_level.lower())
    logger.info("http_server_stopped")
    return 0
