"""Tests for dashboard models and grid geometry."""

import pytest
from grafana_reporter.dashboards.models import (
    DashboardEntity,
    GridPos,
    Panel,
    StructuredDashboard,
    Row,
    round_half_away,
)


def _panel(w=12, h=8, x=0, y=0, panel_id=1):
    return Panel(id=panel_id, type="timeseries", grid_pos=GridPos(x=x, y=y, w=w, h=h))


class TestGeometry:
    def test_leftmost(self):
        assert _panel(x=0).is_leftmost
        assert not _panel(x=6).is_leftmost

    def test_rightmost(self):
        assert _panel(x=12, w=12).is_rightmost
        assert _panel(x=0, w=24).is_rightmost
        assert not _panel(x=0, w=12).is_rightmost

    def test_pixel_size(self):
        panel = _panel(w=12, h=8)
        assert panel.pixel_width(1920) == 960
        assert panel.pixel_height(1920) == 640

    def test_pixel_size_uses_integer_scale(self):
        # 1000 // 24 == 41 pixels per grid unit
        panel = _panel(w=12, h=8)
        assert panel.pixel_width(1000) == 492
        assert panel.pixel_height(1000) == 328

    @pytest.mark.parametrize("resolution", [24, 480, 1200, 1920, 2400])
    def test_half_width_panel(self, resolution):
        assert _panel(w=12).relative_width(resolution) == 0.5 - 0.005

    def test_full_width_panel(self):
        assert _panel(w=24).relative_width(1920) == 1.0 - 0.005

    def test_third_width_panel_rounds_to_three_places(self):
        assert _panel(w=8).relative_width(1920) == 0.333 - 0.005


def test_round_half_away():
    assert round_half_away(0.125, 2) == 0.13
    assert round_half_away(-0.125, 2) == -0.13
    assert round_half_away(2.5, 0) == 3.0
    assert round_half_away(0.3333, 3) == 0.333


def test_row_width():
    row = Row(title="", grid_pos=GridPos(), panels=(_panel(w=6), _panel(w=10)))
    assert row.width == 16


def test_structured_dashboard_panels_in_row_order():
    first, second, third = _panel(panel_id=1), _panel(panel_id=2), _panel(panel_id=3)
    dashboard = StructuredDashboard(
        uid="abc",
        title="T",
        slug="t",
        rows=[
            Row(title="", grid_pos=GridPos(), panels=(first, second)),
            Row(title="", grid_pos=GridPos(), panels=(third,)),
        ],
    )
    assert [p.id for p in dashboard.panels] == [1, 2, 3]


def test_dashboard_entity_from_dict():
    entity = DashboardEntity.from_dict(
        {
            "dashboard": {
                "uid": "abc",
                "title": "Service Overview",
                "panels": [
                    {"id": 1, "type": "stat", "title": "Up", "gridPos": {"h": 4, "w": 6, "x": 0, "y": 0}},
                    {
                        "id": 2,
                        "type": "row",
                        "title": "Details",
                        "collapsed": True,
                        "gridPos": {"h": 1, "w": 24, "x": 0, "y": 4},
                        "panels": [
                            {"id": 3, "type": "timeseries", "gridPos": {"h": 8, "w": 12, "x": 12, "y": 5}},
                        ],
                    },
                ],
            },
            "meta": {"slug": "service-overview"},
        }
    )

    assert entity.uid == "abc"
    assert entity.title == "Service Overview"
    assert entity.slug == "service-overview"
    assert len(entity.panels) == 2

    stat, row = entity.panels
    assert stat.grid_pos == GridPos(x=0, y=0, w=6, h=4)
    assert not stat.is_row
    assert row.is_row
    assert row.collapsed
    assert row.panels[0].id == 3
    assert row.panels[0].grid_pos == GridPos(x=12, y=5, w=12, h=8)


def test_nested_panels_are_parsed_one_level_deep():
    panel = Panel.from_dict(
        {
            "id": 1,
            "type": "row",
            "panels": [{"id": 2, "type": "row", "panels": [{"id": 3, "type": "graph"}]}],
        }
    )
    assert panel.panels[0].id == 2
    assert panel.panels[0].panels == ()


def test_panel_from_dict_defaults():
    panel = Panel.from_dict({"id": 7})
    assert panel.type == ""
    assert panel.title == ""
    assert not panel.collapsed
    assert panel.grid_pos == GridPos()
    assert panel.panels == ()


def test_row_type_is_case_insensitive():
    assert Panel(id=1, type="Row").is_row
    assert Panel(id=1, type="ROW").is_row


def test_scratch_name_prefers_scratch_id():
    dashboard = StructuredDashboard(uid="abc", title="T", slug="t", request_id="abc_report_now-1h-now")
    assert dashboard.scratch_name == "abc_report_now-1h-now"
    dashboard.scratch_id = "abc_report_now-1h-now_0123456789ab"
    assert dashboard.scratch_name == "abc_report_now-1h-now_0123456789ab"


def test_panel_from_dict_null_id():
    panel = Panel.from_dict({"id": None, "type": "text", "title": None})
    assert panel.id == 0
    assert panel.title == ""
