"""CLI command generating a single report and exiting."""

from __future__ import annotations

import asyncio
from pathlib import Path
from urllib.parse import parse_qsl

import structlog

from grafana_reporter.cli.ux import spinner, success
from grafana_reporter.config import Settings
from grafana_reporter.core.errors import ValidationError, main_with_error_handling
from grafana_reporter.report.credentials import Credentials
from grafana_reporter.report.service import ReportService, write_report

logger = structlog.get_logger()


def parse_variables(query: str) -> list[tuple[str, str]]:
    """Parse ``var-a=1&var-b=2`` into ordered pairs."""
    try:
        return parse_qsl(query, keep_blank_values=True, strict_parsing=bool(query))
    except ValueError as exc:
        raise ValidationError(f"could not parse variables: {exc}", {"vars": query}) from exc


@main_with_error_handling()
def generate_report_command(
    settings: Settings,
    dashboard_uid: str,
    *,
    time_from: str | None = None,
    time_to: str | None = None,
    template: str | None = None,
    variables: str = "",
    render_collapsed: bool | None = None,
    user: str = "",
    password: str = "",
    token: str = "",
    output: str | None = None,
) -> int:
    """Generate a report and write it to ``output`` (default: the reports directory).

    Returns:
        Exit code (0 for success)
    """
    logger.info("generation_started", dashboard_uid=dashboard_uid)
    pairs = parse_variables(variables)

    auth_header = None
    if user or password or token:
        auth_header = Credentials(user=user, password=password, token=token).auth_header()

    service = ReportService.from_settings(settings)
    with spinner(f"Generating report for dashboard {dashboard_uid}..."):
        report = asyncio.run(
            service.generate_report(
                dashboard_uid,
                time_from=time_from,
                time_to=time_to,
                template=template,
                render_collapsed=render_collapsed,
                variables=pairs,
                auth_header=auth_header,
            )
        )

    directory = Path(output) if output else settings.reports_dir
    path = write_report(report, directory)
    logger.info("report_written", path=str(path), duration=round(report.duration, 3))
    success(f"Report written to {path}")
    return 0
