"""Grafana HTTP API client: dashboard definitions and rendered panel images."""

from __future__ import annotations

from urllib.parse import quote, urlencode

import structlog
from circuitbreaker import CircuitBreakerError

from grafana_reporter.clients.base import BaseHTTPClient, PermanentHTTPError, RetryableHTTPError
from grafana_reporter.core.errors import GrafanaRequestError
from grafana_reporter.dashboards.models import DashboardEntity

logger = structlog.get_logger()


class GrafanaClient(BaseHTTPClient):
    """Client for the Grafana dashboard API and the image renderer."""

    async def get_dashboard(self, uid: str, auth_header: str) -> DashboardEntity:
        path = f"/api/dashboards/uid/{quote(uid, safe='')}"
        try:
            data = await self.get(path, headers={"Authorization": auth_header})
        except (RetryableHTTPError, PermanentHTTPError, CircuitBreakerError) as exc:
            raise GrafanaRequestError(
                f"failed to get Grafana dashboard: {exc}", {"dashboard_uid": uid}
            ) from exc
        logger.debug("grafana_dashboard_received", dashboard_uid=uid)
        return DashboardEntity.from_dict(data)

    def render_url(self, uid: str, slug: str, params: list[tuple[str, str]]) -> str:
        """Compose the ``/render/d-solo`` URL for a single panel."""
        path = "/".join(quote(part, safe="") for part in ("render", "d-solo", uid, slug) if part)
        return f"{self._base_url}/{path}?{urlencode(params)}"

    async def render_panel(self, url: str, auth_header: str) -> bytes:
        """Fetch one rendered panel image. Single attempt, raises ``RetryableHTTPError``."""
        logger.info("grafana_panel_requested", url=url)
        return await self.get_bytes(url, headers={"Authorization": auth_header})
