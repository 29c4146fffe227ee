"""
Grafana Reporter CLI

Usage:
    grafana-reporter serve [--host HOST] [--port PORT]
    grafana-reporter generate --dashboard UID [options]
    grafana-reporter templates [NAME]

Settings are read from REPORTER_* environment variables; command line flags
override them for a single run.
"""

from __future__ import annotations

import argparse
import sys
from typing import Any, Sequence

from grafana_reporter.config import Settings, get_settings
from grafana_reporter.logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="grafana-reporter", description="Grafana dashboard PDF reports")
    parser.add_argument("--grafana", dest="grafana_url", help="Grafana endpoint to get dashboards from")
    parser.add_argument("--credentials", dest="credentials_file", help="YAML file with Grafana credentials")
    parser.add_argument("--log-level", dest="log_level", help="Log level of the application")
    parser.add_argument("--templates", dest="templates_path", help="Default templates directory")
    parser.add_argument("--custom-templates", dest="custom_templates_path", help="Custom templates directory")
    subparsers = parser.add_subparsers(dest="command")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=8881)

    generate_parser = subparsers.add_parser("generate", help="Generate one report and exit")
    generate_parser.add_argument("--dashboard", required=True, help="Dashboard UID")
    generate_parser.add_argument("--from", dest="time_from", help="Start of the time range")
    generate_parser.add_argument("--to", dest="time_to", help="End of the time range")
    generate_parser.add_argument("--template", help="Template name")
    generate_parser.add_argument("--vars", default="", help="Dashboard variables, e.g. 'var-a=1&var-b=2'")
    generate_parser.add_argument(
        "--render-collapsed",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Render collapsed rows instead of expanded ones",
    )
    generate_parser.add_argument("--user", default="", help="Grafana user")
    generate_parser.add_argument("--password", default="", help="Grafana password")
    generate_parser.add_argument("--token", default="", help="Grafana API token")
    generate_parser.add_argument("--output", help="Directory to write the PDF to")

    templates_parser = subparsers.add_parser("templates", help="List report templates")
    templates_parser.add_argument("name", nargs="?", help="Show the body of this template")

    return parser


def _settings_overrides(args: argparse.Namespace) -> dict[str, Any]:
    keys = ("grafana_url", "credentials_file", "log_level", "templates_path", "custom_templates_path")
    return {key: getattr(args, key) for key in keys if getattr(args, key) is not None}


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    overrides = _settings_overrides(args)
    settings = Settings(**overrides) if overrides else get_settings()
    configure_logging(settings.log_level)

    if args.command == "serve":
        from grafana_reporter.cli.serve import serve_command

        sys.exit(serve_command(settings, host=args.host, port=args.port))

    if args.command == "generate":
        from grafana_reporter.cli.generate import generate_report_command

        sys.exit(
            generate_report_command(
                settings,
                args.dashboard,
                time_from=args.time_from,
                time_to=args.time_to,
                template=args.template,
                variables=args.vars,
                render_collapsed=args.render_collapsed,
                user=args.user,
                password=args.password,
                token=args.token,
                output=args.output,
            )
        )

    if args.command == "templates":
        from grafana_reporter.cli.templates import list_templates_command, show_template_command

        if args.name:
            sys.exit(show_template_command(settings, args.name))
        sys.exit(list_templates_command(settings))


if __name__ == "__main__":
    main()
