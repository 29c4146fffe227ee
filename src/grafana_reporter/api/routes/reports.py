from __future__ import annotations

from typing import NoReturn

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from grafana_reporter.api.deps import get_report_service
from grafana_reporter.core.errors import ReporterError
from grafana_reporter.report.fetcher import VARIABLE_PREFIX
from grafana_reporter.report.service import ReportService

router = APIRouter()
logger = structlog.get_logger()

_TRUE_VALUES = {"1", "t", "true"}
_FALSE_VALUES = {"0", "f", "false"}


def parse_bool(value: str | None, default: bool) -> bool:
    """Parse a boolean query parameter; unparsable values fall back to ``default``."""
    if value is None:
        return default
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return default


def _raise_http(exc: ReporterError) -> NoReturn:
    raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc


@router.api_route(
    "/report/{dashboard_uid}",
    methods=["GET", "POST"],
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}}},
)
async def generate_report(
    dashboard_uid: str,
    request: Request,
    service: ReportService = Depends(get_report_service),  # noqa: B008
) -> Response:
    """Generate the PDF report of a dashboard.

    Query parameters: ``template``, ``from``, ``to``, ``renderCollapsed`` and
    any number of ``var-*`` dashboard variables.
    """
    query = request.query_params
    variables = [(key, value) for key, value in query.multi_items() if key.startswith(VARIABLE_PREFIX)]
    render_collapsed = None
    if "renderCollapsed" in query:
        render_collapsed = parse_bool(query.get("renderCollapsed"), service.render_collapsed)

    try:
        report = await service.generate_report(
            dashboard_uid,
            time_from=query.get("from"),
            time_to=query.get("to"),
            template=query.get("template"),
            render_collapsed=render_collapsed,
            variables=variables,
            auth_header=request.headers.get("Authorization"),
        )
    except ReporterError as exc:
        _raise_http(exc)

    return Response(
        content=report.content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f"attachment; filename={report.filename}",
            "Duration": f"{report.duration:.3f}s",
        },
    )


@router.get("/templates", response_model=list[str])
async def list_templates(
    service: ReportService = Depends(get_report_service),  # noqa: B008
) -> list[str]:
    """Names of all available templates."""
    return service.list_template_names()


@router.get("/template/{name}", response_model=dict[str, str])
async def get_template(
    name: str,
    service: ReportService = Depends(get_report_service),  # noqa: B008
) -> dict[str, str]:
    try:
        return {name: service.get_template(name)}
    except ReporterError as exc:
        logger.warning("template_not_found", template=name)
        _raise_http(exc)


@router.get("/defaults", response_model=dict[str, str], status_code=status.HTTP_200_OK)
async def get_defaults(
    service: ReportService = Depends(get_report_service),  # noqa: B008
) -> dict[str, str]:
    """Default template and time range."""
    return service.get_defaults()
