"""Concurrent download of rendered panel images.

Every panel of a structured dashboard is rendered by Grafana's image renderer
and saved as ``<scratch_dir>/<scratch_name>/<panel_id>.png``. Downloads run
concurrently behind a semaphore and are retried a fixed number of times.
The whole batch either succeeds or fails with one ``PanelFetchError``, raised
only after every download task has finished.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    stop_when_event_set,
    wait_fixed,
)

from grafana_reporter.clients.base import RetryableHTTPError
from grafana_reporter.clients.grafana import GrafanaClient
from grafana_reporter.core.errors import InvalidVariableError, PanelFetchError
from grafana_reporter.dashboards.models import Panel, StructuredDashboard
from grafana_reporter.timerange import TimeRange

logger = structlog.get_logger()

VARIABLE_PREFIX = "var-"
DEFAULT_MAX_CONCURRENT_REQUESTS = 4
FETCH_ATTEMPTS = 3
RETRY_DELAY_SECONDS = 5.0

Variables = Sequence[tuple[str, str]]


@dataclass(frozen=True)
class PanelRenderRequest:
    """A single panel image to download."""

    panel_id: int
    image_name: str
    url: str


def validate_variables(variables: Variables) -> None:
    """Reject dashboard variables that are not ``var-*`` parameters."""
    for name, _ in variables:
        if not name.startswith(VARIABLE_PREFIX):
            raise InvalidVariableError(name)


def panels_dir_path(scratch_dir: Path, scratch_name: str) -> Path:
    return scratch_dir / scratch_name


class PanelFetcher:
    """Download every panel image of a dashboard with bounded concurrency."""

    def __init__(
        self,
        client: GrafanaClient,
        *,
        scratch_dir: Path,
        theme: str = "light",
        screen_width: int = 1920,
        max_concurrent_requests: int = DEFAULT_MAX_CONCURRENT_REQUESTS,
        attempts: int = FETCH_ATTEMPTS,
        retry_delay: float = RETRY_DELAY_SECONDS,
    ) -> None:
        if max_concurrent_requests < 1:
            raise ValueError("max_concurrent_requests must be at least 1")
        self._client = client
        self._scratch_dir = scratch_dir
        self._theme = theme
        self._screen_width = screen_width
        self._max_concurrent_requests = max_concurrent_requests
        self._attempts = attempts
        self._retry_delay = retry_delay

    async def build_requests(
        self,
        dashboard: StructuredDashboard,
        time_range: TimeRange,
        variables: Variables,
    ) -> list[PanelRenderRequest]:
        """Compose one render request per panel.

        All panels are processed concurrently and all of them are awaited
        before the first error, if any, is raised.
        """
        lock = asyncio.Lock()
        requests: list[PanelRenderRequest] = []

        async def build(panel: Panel) -> None:
            params = list(variables)
            params += [
                ("panelId", str(panel.id)),
                ("theme", self._theme),
                ("from", time_range.time_from),
                ("to", time_range.time_to),
                ("width", str(panel.pixel_width(self._screen_width))),
                ("height", str(panel.pixel_height(self._screen_width))),
            ]
            url = self._client.render_url(dashboard.uid, dashboard.slug, params)
            async with lock:
                requests.append(PanelRenderRequest(panel.id, f"{panel.id}.png", url))

        results = await asyncio.gather(
            *(build(panel) for panel in dashboard.panels), return_exceptions=True
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return requests

    async def fetch_panels(
        self,
        dashboard: StructuredDashboard,
        time_range: TimeRange,
        variables: Variables,
        auth_header: str,
    ) -> Path:
        """Download and save every panel image of ``dashboard``.

        Returns the directory holding the images.

        Raises:
            InvalidVariableError: a variable is not a ``var-*`` parameter.
            PanelFetchError: at least one panel could not be downloaded.
        """
        validate_variables(variables)
        requests = await self.build_requests(dashboard, time_range, variables)
        panels_dir = panels_dir_path(self._scratch_dir, dashboard.scratch_name)

        semaphore = asyncio.Semaphore(self._max_concurrent_requests)
        # Best-effort signal: once a panel has failed for good, other panels
        # stop retrying. First attempts and attempts in flight always run.
        failed = asyncio.Event()

        async def fetch(request: PanelRenderRequest) -> None:
            async with semaphore:
                try:
                    await self._fetch_with_retry(request, panels_dir, auth_header, failed)
                except Exception:
                    failed.set()
                    raise

        results = await asyncio.gather(*(fetch(r) for r in requests), return_exceptions=True)

        failed_panels = [
            request.panel_id
            for request, result in zip(requests, results)
            if isinstance(result, BaseException)
        ]
        if failed_panels:
            logger.error(
                "panels_fetch_failed",
                request_id=dashboard.request_id,
                failed_panels=failed_panels,
                total_panels=len(requests),
            )
            raise PanelFetchError(sorted(failed_panels), len(requests))

        logger.debug("panels_saved", path=str(panels_dir), total_panels=len(requests))
        return panels_dir

    async def _fetch_with_retry(
        self,
        request: PanelRenderRequest,
        panels_dir: Path,
        auth_header: str,
        failed: asyncio.Event,
    ) -> None:
        def log_retry(retry_state: RetryCallState) -> None:
            logger.warning(
                "panel_fetch_retry",
                panel_id=request.panel_id,
                url=request.url,
                attempt=retry_state.attempt_number,
                remaining_attempts=self._attempts - retry_state.attempt_number,
                delay=self._retry_delay,
                error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
            )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._attempts) | stop_when_event_set(failed),
            wait=wait_fixed(self._retry_delay),
            retry=retry_if_exception_type((RetryableHTTPError, OSError)),
            before_sleep=log_retry,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                content = await self._client.render_panel(request.url, auth_header)
                path = await asyncio.to_thread(_save_image, panels_dir, request.image_name, content)
                logger.info("panel_saved", panel_id=request.panel_id, path=str(path))


def _save_image(panels_dir: Path, image_name: str, content: bytes) -> Path:
    panels_dir.mkdir(parents=True, exist_ok=True)
    path = panels_dir / image_name
    path.write_bytes(content)
    return path
