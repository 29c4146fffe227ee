"""Grafana dashboard models and layout reconstruction."""

from grafana_reporter.dashboards.layout import (
    PANELS_LIMIT,
    ROWS_LIMIT,
    build_rows,
    structure_dashboard,
)
from grafana_reporter.dashboards.models import (
    GRID_WIDTH,
    DashboardEntity,
    GridPos,
    Panel,
    Row,
    StructuredDashboard,
)

__all__ = [
    # Layout
    "PANELS_LIMIT",
    "ROWS_LIMIT",
    "build_rows",
    "structure_dashboard",
    # Models
    "GRID_WIDTH",
    "DashboardEntity",
    "GridPos",
    "Panel",
    "Row",
    "StructuredDashboard",
]
