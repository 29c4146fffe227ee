"""CLI commands inspecting the report templates."""

from __future__ import annotations

from grafana_reporter.cli.ux import console, info, print_table
from grafana_reporter.config import Settings
from grafana_reporter.core.errors import main_with_error_handling
from grafana_reporter.report.templates import TemplateRegistry


def _load_registry(settings: Settings) -> TemplateRegistry:
    return TemplateRegistry.from_directories(
        [settings.templates_path, settings.custom_templates_path],
        settings.default_template,
    )


@main_with_error_handling()
def list_templates_command(settings: Settings) -> int:
    """Print every available template, marking the default one."""
    registry = _load_registry(settings)
    rows = [[name, "yes" if name == settings.default_template else ""] for name in registry.names()]
    print_table("Report templates", ["Name", "Default"], rows)
    return 0


@main_with_error_handling()
def show_template_command(settings: Settings, name: str) -> int:
    """Print the body of one template."""
    body = _load_registry(settings).get(name)
    info(f"Template {name}")
    console.print(body, markup=False, highlight=False)
    return 0
