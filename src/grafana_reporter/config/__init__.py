"""
Grafana Reporter configuration.

Pydantic-based settings loaded from environment variables and .env files.
"""

from grafana_reporter.config.settings import BUNDLED_TEMPLATES_PATH, Settings, get_settings

__all__ = [
    "BUNDLED_TEMPLATES_PATH",
    "Settings",
    "get_settings",
]
