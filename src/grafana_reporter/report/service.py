"""Report generation service.

Ties the pipeline together: fetch the dashboard, rebuild its layout, resolve
the time range, download every panel and compile the PDF. This is the
surface consumed by the HTTP API and the CLI.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Sequence

from grafana_reporter.clients.grafana import GrafanaClient
from grafana_reporter.config.settings import Settings
from grafana_reporter.core.errors import InvalidRequestError, ReporterError
from grafana_reporter.dashboards.layout import structure_dashboard
from grafana_reporter.logging import bind_context
from grafana_reporter.report.assembler import DocumentAssembler
from grafana_reporter.report.credentials import resolve_auth_header
from grafana_reporter.report.fetcher import PanelFetcher, Variables, validate_variables
from grafana_reporter.report.templates import TemplateRegistry
from grafana_reporter.timerange import TimeRange, resolve_time_range


def is_safe_file_name(name: str) -> bool:
    """Reject empty names and names with path separators or traversal."""
    return bool(name) and "/" not in name and "\\" not in name and ".." not in name


def generate_request_id(uid: str, time_from: str, time_to: str, render_collapsed: bool) -> str:
    """Correlation id naming the downloaded PDF file.

    Slashes of snapped expressions such as ``now-1d/d`` become underscores.
    """
    suffix = "_expanded" if render_collapsed else ""
    time_part = f"{time_from}-{time_to}".replace("/", "_")
    return f"{uid}_report_{time_part}{suffix}"


def generate_scratch_id(request_id: str) -> str:
    """Per-run scratch name, so concurrent runs of the same report never share files."""
    return f"{request_id}_{uuid.uuid4().hex[:12]}"


@dataclass(frozen=True)
class GeneratedReport:
    """A compiled report."""

    request_id: str
    content: bytes
    duration: float

    @property
    def filename(self) -> str:
        return f"{self.request_id}.pdf"


class ReportService:
    """Generate dashboard reports and expose template information."""

    def __init__(
        self,
        settings: Settings,
        *,
        templates: TemplateRegistry,
        client: GrafanaClient | None = None,
        fetcher: PanelFetcher | None = None,
        assembler: DocumentAssembler | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._settings = settings
        self._templates = templates
        self._client = client or GrafanaClient(
            settings.grafana_url,
            timeout=settings.http_timeout,
            verify=settings.verify_tls,
        )
        self._fetcher = fetcher or PanelFetcher(
            self._client,
            scratch_dir=settings.scratch_dir,
            theme=settings.theme,
            screen_width=settings.screen_resolution_width,
            max_concurrent_requests=settings.max_concurrent_render_requests,
        )
        self._assembler = assembler or DocumentAssembler(
            reports_dir=settings.reports_dir,
            scratch_dir=settings.scratch_dir,
            screen_width=settings.screen_resolution_width,
            save_temp_images=settings.save_temp_images,
            pdflatex_command=settings.pdflatex_command,
        )
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @classmethod
    def from_settings(cls, settings: Settings) -> ReportService:
        templates = TemplateRegistry.from_directories(
            [settings.templates_path, settings.custom_templates_path],
            settings.default_template,
        )
        return cls(settings, templates=templates)

    @property
    def render_collapsed(self) -> bool:
        return self._settings.render_collapsed

    def list_template_names(self) -> list[str]:
        return self._templates.names()

    def get_template(self, name: str) -> str:
        return self._templates.get(name)

    def get_defaults(self) -> dict[str, str]:
        return {
            "template": self._settings.default_template,
            "from": self._settings.default_from,
            "to": self._settings.default_to,
        }

    async def generate_report(
        self,
        dashboard_uid: str,
        *,
        time_from: str | None = None,
        time_to: str | None = None,
        template: str | None = None,
        render_collapsed: bool | None = None,
        variables: Sequence[tuple[str, str]] = (),
        auth_header: str | None = None,
    ) -> GeneratedReport:
        """Generate the PDF report of a dashboard.

        Input errors (empty uid, bad variables, unknown template, bad time
        expressions, missing credentials) are raised before Grafana is
        contacted. Nothing partial is ever returned.
        """
        started = time.monotonic()
        now = self._clock()

        if not dashboard_uid:
            raise InvalidRequestError("dashboard UID can not be empty")
        variables = list(variables)
        validate_variables(variables)

        time_from = time_from or self._settings.default_from
        time_to = time_to or self._settings.default_to
        template_name = template or self._settings.default_template
        if render_collapsed is None:
            render_collapsed = self._settings.render_collapsed

        template_body = self._templates.get(template_name)
        header = resolve_auth_header(auth_header, self._settings.credentials_file)
        time_range = resolve_time_range(now, time_from, time_to)

        request_id = generate_request_id(dashboard_uid, time_from, time_to, render_collapsed)
        if not is_safe_file_name(request_id):
            raise InvalidRequestError(
                "report name is not a safe file name", {"request_id": request_id}
            )

        log = bind_context(request_id=request_id)
        log.info(
            "report_generation_started",
            dashboard_uid=dashboard_uid,
            time_from=time_from,
            time_to=time_to,
            template=template_name,
            render_collapsed=render_collapsed,
            variables=len(variables),
        )

        try:
            content = await self._run(
                dashboard_uid, template_body, time_range, variables, request_id, header, render_collapsed
            )
        except ReporterError as exc:
            log.error(
                "report_generation_failed",
                error_type=type(exc).__name__,
                message=exc.message,
                duration=round(time.monotonic() - started, 3),
            )
            raise

        duration = time.monotonic() - started
        log.info("report_generation_succeeded", filename=f"{request_id}.pdf", duration=round(duration, 3))
        return GeneratedReport(request_id=request_id, content=content, duration=duration)

    async def _run(
        self,
        dashboard_uid: str,
        template_body: str,
        time_range: TimeRange,
        variables: Variables,
        request_id: str,
        auth_header: str,
        render_collapsed: bool,
    ) -> bytes:
        entity = await self._client.get_dashboard(dashboard_uid, auth_header)
        dashboard = structure_dashboard(entity, render_collapsed)
        dashboard.request_id = request_id
        dashboard.scratch_id = generate_scratch_id(request_id)

        await self._fetcher.fetch_panels(dashboard, time_range, variables, auth_header)
        return await self._assembler.assemble(template_body, dashboard, time_range, variables)


def write_report(report: GeneratedReport, directory: Path) -> Path:
    """Persist a generated report under its own file name."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / report.filename
    path.write_bytes(report.content)
    return path
