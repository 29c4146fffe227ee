from grafana_reporter.clients.base import BaseHTTPClient, PermanentHTTPError, RetryableHTTPError
from grafana_reporter.clients.grafana import GrafanaClient

__all__ = [
    "BaseHTTPClient",
    "GrafanaClient",
    "PermanentHTTPError",
    "RetryableHTTPError",
]
