"""
Application settings using Pydantic.

Provides environment-based configuration loading with REPORTER_ prefix.
"""

import tempfile
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

BUNDLED_TEMPLATES_PATH = Path(__file__).resolve().parent.parent / "templates"


class Settings(BaseSettings):
    """Application settings."""

    # Grafana
    grafana_url: str = "http://grafana-service:3000"
    credentials_file: Path | None = Path("/grafana/auth/credentials.yaml")
    verify_tls: bool = False
    http_timeout: float = 60.0

    # Report defaults
    default_template: str = "gridTemplate"
    default_from: str = "now-30m"
    default_to: str = "now"
    render_collapsed: bool = False

    # Templates
    templates_path: Path = BUNDLED_TEMPLATES_PATH
    custom_templates_path: Path = Path("templates/custom")

    # Rendering
    theme: str = "light"
    screen_resolution_width: int = 1920
    max_concurrent_render_requests: int = 4

    # Scratch artifacts
    reports_dir: Path = Path(tempfile.gettempdir()) / "reports"
    scratch_dir: Path = Path(tempfile.gettempdir())
    save_temp_images: bool = False
    pdflatex_command: str = "pdflatex"

    # Logging
    log_level: str = "info"

    # API
    api_prefix: str = "/api/v1"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "REPORTER_"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
