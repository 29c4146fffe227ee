"""Grafana dashboard data models.

Typed views over the dashboard JSON returned by ``/api/dashboards/uid/<uid>``
plus the grid geometry used to size rendered panels.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

GRID_WIDTH = 24  # Grafana lays panels out on a fixed 24 column grid
ROW_PANEL_TYPE = "row"
LAYOUT_MARGIN = 0.005


def round_half_away(value: float, precision: int) -> float:
    """Round to ``precision`` decimals, halves away from zero."""
    ratio = 10**precision
    return math.copysign(math.floor(abs(value) * ratio + 0.5), value) / ratio


@dataclass(frozen=True)
class GridPos:
    """Panel position on the dashboard grid."""

    x: int = 0
    y: int = 0
    w: int = 0
    h: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> GridPos:
        data = data or {}
        return cls(
            x=int(data.get("x", 0)),
            y=int(data.get("y", 0)),
            w=int(data.get("w", 0)),
            h=int(data.get("h", 0)),
        )


@dataclass(frozen=True)
class Panel:
    """Grafana dashboard panel, or a row grouping other panels."""

    id: int
    type: str = ""
    title: str = ""
    collapsed: bool = False
    grid_pos: GridPos = field(default_factory=GridPos)
    panels: tuple[Panel, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, with_nested: bool = True) -> Panel:
        """Parse a panel from Grafana JSON.

        Only row panels nest other panels, and only one level deep, so the
        children of a nested panel are never parsed.
        """
        nested: tuple[Panel, ...] = ()
        if with_nested:
            nested = tuple(
                cls.from_dict(child, with_nested=False) for child in data.get("panels") or []
            )
        return cls(
            id=int(data.get("id") or 0),
            type=data.get("type") or "",
            title=data.get("title") or "",
            collapsed=bool(data.get("collapsed", False)),
            grid_pos=GridPos.from_dict(data.get("gridPos")),
            panels=nested,
        )

    @property
    def is_row(self) -> bool:
        return self.type.lower() == ROW_PANEL_TYPE

    @property
    def is_leftmost(self) -> bool:
        return self.grid_pos.x == 0

    @property
    def is_rightmost(self) -> bool:
        return self.grid_pos.x + self.grid_pos.w == GRID_WIDTH

    def pixel_width(self, screen_width: int) -> int:
        return self.grid_pos.w * (screen_width // GRID_WIDTH)

    def pixel_height(self, screen_width: int) -> int:
        return self.grid_pos.h * (screen_width // GRID_WIDTH)

    def relative_width(self, screen_width: int) -> float:
        """Fraction of the page width the panel occupies, minus the layout margin."""
        return round_half_away(self.pixel_width(screen_width) / screen_width, 3) - LAYOUT_MARGIN


@dataclass(frozen=True)
class Row:
    """Horizontal group of panels, authored or synthesized by packing."""

    title: str
    grid_pos: GridPos
    panels: tuple[Panel, ...]

    @property
    def width(self) -> int:
        return sum(panel.grid_pos.w for panel in self.panels)


@dataclass
class StructuredDashboard:
    """Dashboard reorganised into rows, ready for rendering."""

    uid: str
    title: str
    slug: str
    rows: list[Row] = field(default_factory=list)
    request_id: str = ""
    # unique per run; names the scratch directory and the intermediate .tex/.pdf
    scratch_id: str = ""

    @property
    def scratch_name(self) -> str:
        return self.scratch_id or self.request_id

    @property
    def panels(self) -> list[Panel]:
        return [panel for row in self.rows for panel in row.panels]


@dataclass(frozen=True)
class DashboardEntity:
    """Dashboard as returned by the Grafana API."""

    uid: str
    title: str
    slug: str
    panels: tuple[Panel, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DashboardEntity:
        dashboard = data.get("dashboard") or {}
        meta = data.get("meta") or {}
        return cls(
            uid=dashboard.get("uid") or "",
            title=dashboard.get("title") or "",
            slug=meta.get("slug") or "",
            panels=tuple(Panel.from_dict(p) for p in dashboard.get("panels") or []),
        )
