"""Grafana credentials and Authorization header resolution."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from pathlib import Path

import yaml

from grafana_reporter.core.errors import CredentialsError


@dataclass(frozen=True)
class Credentials:
    """Basic or token credentials for Grafana."""

    user: str = ""
    password: str = ""
    token: str = ""

    @classmethod
    def from_file(cls, path: Path) -> Credentials:
        """Load credentials from YAML with ``user``, ``password`` and ``apiKey`` keys."""
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except OSError as exc:
            raise CredentialsError(
                f"could not read credentials file: {exc}", {"path": str(path)}
            ) from exc
        except yaml.YAMLError as exc:
            raise CredentialsError(
                f"could not parse credentials file: {exc}", {"path": str(path)}
            ) from exc
        if not isinstance(data, dict):
            raise CredentialsError("credentials file must be a mapping", {"path": str(path)})
        return cls(
            user=str(data.get("user") or ""),
            password=str(data.get("password") or ""),
            token=str(data.get("apiKey") or ""),
        )

    def auth_header(self) -> str:
        """Token credentials win over user and password."""
        if self.token:
            return f"Bearer {self.token}"
        if self.user and self.password:
            encoded = base64.b64encode(f"{self.user}:{self.password}".encode()).decode()
            return f"Basic {encoded}"
        raise CredentialsError("credentials are not provided")


def resolve_auth_header(auth_header: str | None, credentials_file: Path | None) -> str:
    """Use the caller's header, else fall back to the credentials file."""
    if auth_header:
        return auth_header
    if credentials_file is None:
        raise CredentialsError("credentials are not provided")
    return Credentials.from_file(credentials_file).auth_header()
