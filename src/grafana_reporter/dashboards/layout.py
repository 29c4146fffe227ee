"""Rebuild the row layout of a Grafana dashboard.

Grafana stores a dashboard as a flat list of panels where "row" panels mark
the start of a section. Collapsed rows carry their children in ``panels``;
expanded rows are followed by their children at the top level. Panels outside
of any authored row are packed left to right into synthesized rows.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

import structlog

from grafana_reporter.core.errors import CapacityError
from grafana_reporter.dashboards.models import (
    GRID_WIDTH,
    DashboardEntity,
    GridPos,
    Panel,
    Row,
    StructuredDashboard,
)

logger = structlog.get_logger()

ROWS_LIMIT = 500
PANELS_LIMIT = 1000


@dataclass
class _RowBuilder:
    title: str
    grid_pos: GridPos
    panels: list[Panel] = field(default_factory=list)

    def fits(self, panel: Panel) -> bool:
        used = sum(p.grid_pos.w for p in self.panels)
        return used + panel.grid_pos.w <= GRID_WIDTH

    def build(self) -> Row:
        return Row(title=self.title, grid_pos=self.grid_pos, panels=tuple(self.panels))


def build_rows(panels: Iterable[Panel], render_collapsed: bool) -> list[Row]:
    """Group top-level panels into rows in authoring order.

    Row panels whose collapsed flag matches ``render_collapsed`` open a new
    row with their nested panels kept verbatim; the others are dropped along
    with their children. Every other panel joins the current row when the
    total width stays within the grid, or opens a new untitled row.

    Raises:
        CapacityError: more than ``ROWS_LIMIT`` rows or ``PANELS_LIMIT`` panels.
    """
    builders: list[_RowBuilder] = []
    panels_count = 0

    for panel in panels:
        if panel.is_row:
            if panel.collapsed != render_collapsed:
                continue
            builders.append(_RowBuilder(panel.title, panel.grid_pos, list(panel.panels)))
            panels_count += len(panel.panels)
        elif builders and builders[-1].fits(panel):
            builders[-1].panels.append(panel)
            panels_count += 1
        else:
            builders.append(_RowBuilder("", panel.grid_pos, [panel]))
            panels_count += 1

        if len(builders) > ROWS_LIMIT or panels_count > PANELS_LIMIT:
            logger.error(
                "dashboard_capacity_exceeded",
                rows=len(builders),
                panels=panels_count,
            )
            raise CapacityError(len(builders), ROWS_LIMIT, panels_count, PANELS_LIMIT)

    return [builder.build() for builder in builders]


def structure_dashboard(entity: DashboardEntity, render_collapsed: bool) -> StructuredDashboard:
    """Build the structured view of a dashboard. The request id is attached later."""
    rows = build_rows(entity.panels, render_collapsed)
    logger.debug(
        "dashboard_structured",
        uid=entity.uid,
        rows=len(rows),
        panels=sum(len(row.panels) for row in rows),
    )
    return StructuredDashboard(uid=entity.uid, title=entity.title, slug=entity.slug, rows=rows)
