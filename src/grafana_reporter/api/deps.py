from __future__ import annotations

from fastapi import Request

from grafana_reporter.report.service import ReportService


def get_report_service(request: Request) -> ReportService:
    return request.app.state.report_service
