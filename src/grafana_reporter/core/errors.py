"""
Unified error handling for Grafana Reporter.

Every failure raised by the report pipeline derives from ``ReporterError``
and carries an exit code used by the CLI and a status code used by the API.

Exit Codes:
- 0: Success
- 10: Configuration error
- 11: Provider error (Grafana or pdflatex failure)
- 12: Validation error
- 127: Unknown/internal error
"""

from __future__ import annotations

import functools
import sys
import traceback
from enum import IntEnum
from typing import Any, Callable, TypeVar

import structlog

logger = structlog.get_logger()


class ExitCode(IntEnum):
    """Standardized exit codes for CLI commands."""

    SUCCESS = 0
    CONFIG_ERROR = 10
    PROVIDER_ERROR = 11
    VALIDATION_ERROR = 12
    UNKNOWN_ERROR = 127


class ReporterError(Exception):
    """Base exception for report generation errors."""

    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR
    status_code: int = 500
    show_traceback: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(ReporterError):
    """Raised for configuration-related errors."""

    exit_code = ExitCode.CONFIG_ERROR


class CredentialsError(ConfigurationError):
    """Raised when no usable Grafana credentials are available."""

    status_code = 401


class ValidationError(ReporterError):
    """Raised for invalid caller input, before any network activity."""

    exit_code = ExitCode.VALIDATION_ERROR
    status_code = 400


class TimeParseError(ValidationError):
    """Raised when a time range expression cannot be resolved."""

    def __init__(self, expression: str):
        super().__init__(f"time value is not valid: {expression}", {"expression": expression})
        self.expression = expression


class InvalidVariableError(ValidationError):
    """Raised when a dashboard variable does not carry the ``var-`` prefix."""

    def __init__(self, name: str):
        super().__init__(
            f"could not read var-* parameter. Name of parameter {name!r} is not valid",
            {"variable": name},
        )
        self.name = name


class InvalidRequestError(ValidationError):
    """Raised for malformed report requests (empty uid, unsafe file names)."""


class TemplateNotFoundError(ValidationError):
    """Raised when a template name is not in the registry."""

    status_code = 404

    def __init__(self, name: str):
        super().__init__(f"template {name!r} does not exist", {"template": name})
        self.name = name


class CapacityError(ValidationError):
    """Raised when a dashboard has more rows or panels than can be rendered."""

    def __init__(self, rows: int, rows_limit: int, panels: int, panels_limit: int):
        super().__init__(
            "grafana dashboard contains too many rows/panels: "
            f"rows={rows} (limit={rows_limit}); panels={panels} (limit={panels_limit})",
            {"rows": rows, "rows_limit": rows_limit, "panels": panels, "panels_limit": panels_limit},
        )


class ProviderError(ReporterError):
    """Raised when an external service fails."""

    exit_code = ExitCode.PROVIDER_ERROR


class GrafanaRequestError(ProviderError):
    """Raised when a request to Grafana fails permanently."""


class PanelFetchError(ProviderError):
    """Raised once, after every panel task finished, if any panel failed."""

    def __init__(self, failed_panels: list[int], total: int):
        super().__init__(
            "could not get all panels successfully",
            {"failed_panels": failed_panels, "total_panels": total},
        )
        self.failed_panels = failed_panels


class AssemblyError(ProviderError):
    """Raised when the final document cannot be produced."""


# Type variable for decorated functions
F = TypeVar("F", bound=Callable[..., int])


def main_with_error_handling(
    *,
    show_traceback: bool = False,
    log_errors: bool = True,
) -> Callable[[F], F]:
    """
    Decorator for CLI main functions that provides unified error handling.

    Exit codes:
        - ReporterError subclasses: Uses the error's exit_code
        - KeyboardInterrupt: Returns 130 (standard for SIGINT)
        - Other exceptions: Returns 127 (unknown error)
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> int:
            try:
                return func(*args, **kwargs)
            except ReporterError as e:
                if log_errors:
                    logger.error(
                        "command_error",
                        error_type=type(e).__name__,
                        message=e.message,
                        exit_code=e.exit_code,
                        **e.details,
                    )
                if e.show_traceback or show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return e.exit_code
            except KeyboardInterrupt:
                if log_errors:
                    logger.info("command_interrupted")
                return 130  # Standard exit code for SIGINT
            except Exception as e:
                if log_errors:
                    logger.error(
                        "unexpected_error",
                        error_type=type(e).__name__,
                        message=str(e),
                        exit_code=ExitCode.UNKNOWN_ERROR,
                    )
                if show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return ExitCode.UNKNOWN_ERROR

        return wrapper  # type: ignore[return-value]

    return decorator
