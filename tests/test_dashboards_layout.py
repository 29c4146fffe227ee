"""Tests for dashboard row layout reconstruction."""

import pytest
from grafana_reporter.core.errors import CapacityError
from grafana_reporter.dashboards.layout import (
    PANELS_LIMIT,
    ROWS_LIMIT,
    build_rows,
    structure_dashboard,
)
from grafana_reporter.dashboards.models import GRID_WIDTH, DashboardEntity, GridPos, Panel


def panel(panel_id, w=12, h=8, x=0, y=0):
    return Panel(id=panel_id, type="timeseries", title=f"Panel {panel_id}", grid_pos=GridPos(x, y, w, h))


def row(panel_id, title, collapsed=False, children=(), y=0):
    return Panel(
        id=panel_id,
        type="row",
        title=title,
        collapsed=collapsed,
        grid_pos=GridPos(0, y, 24, 1),
        panels=tuple(children),
    )


def ids(result):
    return [[p.id for p in r.panels] for r in result]


class TestPacking:
    def test_single_panel(self):
        result = build_rows([panel(1)], render_collapsed=False)
        assert len(result) == 1
        assert result[0].title == ""
        assert result[0].grid_pos == panel(1).grid_pos

    def test_panels_fill_row_up_to_grid_width(self):
        result = build_rows([panel(1, w=12), panel(2, w=12), panel(3, w=12)], False)
        assert ids(result) == [[1, 2], [3]]

    def test_overflowing_panel_starts_new_row_with_its_position(self):
        third = panel(3, w=8, x=0, y=8)
        result = build_rows([panel(1, w=16), panel(2, w=8, x=16), third], False)
        assert ids(result) == [[1, 2], [3]]
        assert result[1].grid_pos == third.grid_pos

    def test_width_budget_resets_for_each_row(self):
        result = build_rows([panel(1, w=20), panel(2, w=20), panel(3, w=4)], False)
        assert ids(result) == [[1], [2, 3]]

    def test_arrival_order_without_repacking(self):
        # Panel 3 would fit next to panel 1, but packing never looks back.
        result = build_rows([panel(1, w=18), panel(2, w=12), panel(3, w=6)], False)
        assert ids(result) == [[1], [2, 3]]

    def test_empty_dashboard(self):
        assert build_rows([], False) == []


class TestRowPanels:
    def test_expanded_rows_group_following_panels(self):
        panels = [
            row(10, "Traffic", y=0),
            panel(1, w=12, y=1),
            panel(2, w=12, x=12, y=1),
            row(11, "Errors", y=9),
            panel(3, w=24, y=10),
        ]
        result = build_rows(panels, render_collapsed=False)
        assert [r.title for r in result] == ["Traffic", "Errors"]
        assert ids(result) == [[1, 2], [3]]
        assert result[0].grid_pos == GridPos(0, 0, 24, 1)

    def test_collapsed_rows_skipped_when_rendering_expanded(self):
        panels = [
            panel(1, w=24),
            row(10, "Hidden", collapsed=True, children=[panel(2), panel(3)]),
            row(11, "Shown"),
            panel(4),
        ]
        result = build_rows(panels, render_collapsed=False)
        assert [r.title for r in result] == ["", "Shown"]
        assert ids(result) == [[1], [4]]

    def test_collapsed_rows_rendered_with_nested_panels(self):
        children = [panel(2, w=12, x=12, y=7), panel(3, w=12, x=0, y=7)]
        panels = [
            row(10, "Hidden", collapsed=True, children=children),
            row(11, "Expanded"),
        ]
        result = build_rows(panels, render_collapsed=True)
        assert [r.title for r in result] == ["Hidden"]
        assert ids(result) == [[2, 3]]
        # nested panels keep their authoring coordinates
        assert result[0].panels[0].grid_pos == GridPos(12, 7, 12, 8)

    def test_panels_after_skipped_row_join_previous_row(self):
        panels = [panel(1, w=12), row(10, "Skipped", collapsed=False), panel(2, w=12)]
        result = build_rows(panels, render_collapsed=True)
        assert ids(result) == [[1, 2]]

    def test_panels_pack_into_seeded_row_when_room_left(self):
        panels = [row(10, "Hidden", collapsed=True, children=[panel(2, w=12)]), panel(3, w=12)]
        result = build_rows(panels, render_collapsed=True)
        assert ids(result) == [[2, 3]]

    def test_row_type_is_case_insensitive(self):
        shouty = Panel(id=10, type="ROW", title="Loud", grid_pos=GridPos(0, 0, 24, 1))
        result = build_rows([shouty, panel(1)], False)
        assert [r.title for r in result] == ["Loud"]


class TestCapacity:
    def test_row_limit_succeeds(self):
        panels = [panel(i, w=24) for i in range(ROWS_LIMIT)]
        assert len(build_rows(panels, False)) == ROWS_LIMIT

    def test_row_limit_exceeded(self):
        panels = [panel(i, w=24) for i in range(ROWS_LIMIT + 1)]
        with pytest.raises(CapacityError) as exc_info:
            build_rows(panels, False)
        message = exc_info.value.message
        assert "rows=501 (limit=500)" in message
        assert "panels=501 (limit=1000)" in message

    def test_panel_limit_succeeds(self):
        children = [panel(i, w=1) for i in range(PANELS_LIMIT)]
        result = build_rows([row(0, "Big", collapsed=True, children=children)], True)
        assert sum(len(r.panels) for r in result) == PANELS_LIMIT

    def test_panel_limit_exceeded(self):
        children = [panel(i, w=1) for i in range(PANELS_LIMIT)]
        panels = [row(0, "Big", collapsed=True, children=children), panel(5000, w=24)]
        with pytest.raises(CapacityError) as exc_info:
            build_rows(panels, True)
        assert exc_info.value.details["panels"] == PANELS_LIMIT + 1
        assert exc_info.value.details["rows"] == 2


def test_rows_never_decrease_and_packed_rows_fit_grid():
    widths = [6, 6, 12, 18, 4, 24, 3, 3, 3, 9, 12, 12, 1]
    panels = [panel(i, w=w) for i, w in enumerate(widths)]

    previous_count = 0
    for end in range(1, len(panels) + 1):
        result = build_rows(panels[:end], False)
        assert len(result) >= previous_count
        previous_count = len(result)
        assert all(r.width <= GRID_WIDTH for r in result)


def test_structure_dashboard():
    entity = DashboardEntity(
        uid="abc",
        title="Overview",
        slug="overview",
        panels=(panel(1), panel(2)),
    )
    dashboard = structure_dashboard(entity, render_collapsed=False)
    assert dashboard.uid == "abc"
    assert dashboard.title == "Overview"
    assert dashboard.slug == "overview"
    assert dashboard.request_id == ""
    assert ids(dashboard.rows) == [[1, 2]]
