"""Core error types shared by every part of the reporter."""

from grafana_reporter.core.errors import (
    AssemblyError,
    CapacityError,
    ConfigurationError,
    CredentialsError,
    ExitCode,
    GrafanaRequestError,
    InvalidRequestError,
    InvalidVariableError,
    PanelFetchError,
    ProviderError,
    ReporterError,
    TemplateNotFoundError,
    TimeParseError,
    ValidationError,
)

__all__ = [
    "AssemblyError",
    "CapacityError",
    "ConfigurationError",
    "CredentialsError",
    "ExitCode",
    "GrafanaRequestError",
    "InvalidRequestError",
    "InvalidVariableError",
    "PanelFetchError",
    "ProviderError",
    "ReporterError",
    "TemplateNotFoundError",
    "TimeParseError",
    "ValidationError",
]
