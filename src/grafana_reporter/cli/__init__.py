"""
CLI commands for Grafana Reporter.
"""

from grafana_reporter.cli.generate import generate_report_command, parse_variables
from grafana_reporter.cli.serve import serve_command
from grafana_reporter.cli.templates import list_templates_command, show_template_command

__all__ = [
    "generate_report_command",
    "list_templates_command",
    "parse_variables",
    "serve_command",
    "show_template_command",
]
