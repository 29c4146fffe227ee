"""Report generation: panel download, PDF assembly and the service facade."""

from grafana_reporter.report.assembler import DocumentAssembler
from grafana_reporter.report.credentials import Credentials, resolve_auth_header
from grafana_reporter.report.fetcher import PanelFetcher, PanelRenderRequest, validate_variables
from grafana_reporter.report.service import (
    GeneratedReport,
    ReportService,
    generate_request_id,
    write_report,
)
from grafana_reporter.report.templates import TemplateRegistry

__all__ = [
    "Credentials",
    "DocumentAssembler",
    "GeneratedReport",
    "PanelFetcher",
    "PanelRenderRequest",
    "ReportService",
    "TemplateRegistry",
    "generate_request_id",
    "resolve_auth_header",
    "validate_variables",
    "write_report",
]
