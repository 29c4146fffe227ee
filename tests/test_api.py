"""Tests for the HTTP API."""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from grafana_reporter.api.main import create_app
from grafana_reporter.api.routes.reports import parse_bool
from grafana_reporter.config.settings import Settings
from grafana_reporter.dashboards.models import DashboardEntity, GridPos, Panel
from grafana_reporter.report.service import ReportService
from grafana_reporter.report.templates import TemplateRegistry

NOW = datetime(2024, 1, 25, 14, 43, 12, tzinfo=timezone.utc)


class FakeClient:
    def __init__(self):
        self.calls = []

    async def get_dashboard(self, uid, auth_header):
        self.calls.append((uid, auth_header))
        panel = Panel(id=1, type="stat", grid_pos=GridPos(0, 0, 24, 4))
        return DashboardEntity(uid=uid, title="Overview", slug="overview", panels=(panel,))


class FakeFetcher:
    def __init__(self):
        self.calls = []

    async def fetch_panels(self, dashboard, time_range, variables, auth_header):
        self.calls.append((dashboard, time_range, variables, auth_header))


class FakeAssembler:
    async def assemble(self, template_body, dashboard, time_range, variables):
        return b"%PDF-fake"


@pytest.fixture
def components():
    return FakeClient(), FakeFetcher(), FakeAssembler()


@pytest.fixture
def client(tmp_path, components):
    settings = Settings(
        grafana_url="https://grafana.example.com",
        credentials_file=None,
        reports_dir=tmp_path / "reports",
        scratch_dir=tmp_path,
    )
    grafana, fetcher, assembler = components
    service = ReportService(
        settings,
        templates=TemplateRegistry({"gridTemplate": "grid body", "simple": "simple body"}),
        client=grafana,
        fetcher=fetcher,
        assembler=assembler,
        clock=lambda: NOW,
    )
    return TestClient(create_app(settings, service=service))


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_list_templates(client):
    response = client.get("/api/v1/templates")
    assert response.status_code == 200
    assert response.json() == ["gridTemplate", "simple"]


def test_get_template(client):
    response = client.get("/api/v1/template/simple")
    assert response.status_code == 200
    assert response.json() == {"simple": "simple body"}


def test_get_unknown_template(client):
    response = client.get("/api/v1/template/missing")
    assert response.status_code == 404
    assert "missing" in response.json()["detail"]


def test_get_defaults(client):
    response = client.get("/api/v1/defaults")
    assert response.json() == {"template": "gridTemplate", "from": "now-30m", "to": "now"}


@pytest.mark.parametrize("method", ["get", "post"])
def test_generate_report(client, components, method):
    grafana, fetcher, _ = components

    response = getattr(client, method)(
        "/api/v1/report/uid1",
        params=[("from", "now-1h"), ("to", "now"), ("var-env", "prod"), ("var-env", "dev"), ("panelId", "9")],
        headers={"Authorization": "Bearer token"},
    )

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["content-disposition"] == "attachment; filename=uid1_report_now-1h-now.pdf"
    assert response.headers["duration"].endswith("s")
    assert response.content == b"%PDF-fake"
    assert grafana.calls == [("uid1", "Bearer token")]
    assert fetcher.calls[0][2] == [("var-env", "prod"), ("var-env", "dev")]


def test_generate_report_render_collapsed(client):
    response = client.get(
        "/api/v1/report/uid1",
        params={"renderCollapsed": "true"},
        headers={"Authorization": "Bearer token"},
    )
    assert response.headers["content-disposition"].endswith("_expanded.pdf")


def test_generate_report_invalid_time(client, components):
    response = client.get(
        "/api/v1/report/uid1",
        params={"from": "yesterday"},
        headers={"Authorization": "Bearer token"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "time value is not valid: yesterday"
    assert components[0].calls == []


def test_generate_report_unknown_template(client):
    response = client.get(
        "/api/v1/report/uid1",
        params={"template": "missing"},
        headers={"Authorization": "Bearer token"},
    )
    assert response.status_code == 404


def test_generate_report_without_credentials(client):
    response = client.get("/api/v1/report/uid1")
    assert response.status_code == 401


@pytest.mark.parametrize(
    "value,default,expected",
    [
        (None, True, True),
        ("1", False, True),
        ("TRUE", False, True),
        ("f", True, False),
        ("0", True, False),
        ("maybe", True, True),
    ],
)
def test_parse_bool(value, default, expected):
    assert parse_bool(value, default) is expected
