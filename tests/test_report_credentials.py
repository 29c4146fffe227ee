"""Tests for Grafana credential handling."""

import base64

import pytest
from grafana_reporter.core.errors import CredentialsError
from grafana_reporter.report.credentials import Credentials, resolve_auth_header


def test_token_wins_over_basic():
    creds = Credentials(user="admin", password="secret", token="glsa_abc")
    assert creds.auth_header() == "Bearer glsa_abc"


def test_basic_auth_header():
    header = Credentials(user="admin", password="secret").auth_header()
    assert header == "Basic " + base64.b64encode(b"admin:secret").decode()


@pytest.mark.parametrize("creds", [Credentials(), Credentials(user="admin"), Credentials(password="x")])
def test_incomplete_credentials(creds):
    with pytest.raises(CredentialsError, match="credentials are not provided"):
        creds.auth_header()


def test_from_file(tmp_path):
    path = tmp_path / "credentials.yaml"
    path.write_text("user: admin\npassword: secret\napiKey: glsa_abc\n")

    creds = Credentials.from_file(path)

    assert creds == Credentials(user="admin", password="secret", token="glsa_abc")


def test_from_file_missing(tmp_path):
    with pytest.raises(CredentialsError) as exc_info:
        Credentials.from_file(tmp_path / "absent.yaml")
    assert exc_info.value.status_code == 401


def test_from_file_not_a_mapping(tmp_path):
    path = tmp_path / "credentials.yaml"
    path.write_text("- admin\n- secret\n")
    with pytest.raises(CredentialsError, match="mapping"):
        Credentials.from_file(path)


def test_from_file_invalid_yaml(tmp_path):
    path = tmp_path / "credentials.yaml"
    path.write_text("user: [unclosed\n")
    with pytest.raises(CredentialsError, match="could not parse"):
        Credentials.from_file(path)


def test_resolve_prefers_caller_header(tmp_path):
    assert resolve_auth_header("Bearer caller", tmp_path / "absent.yaml") == "Bearer caller"


def test_resolve_falls_back_to_file(tmp_path):
    path = tmp_path / "credentials.yaml"
    path.write_text("apiKey: from-file\n")
    assert resolve_auth_header(None, path) == "Bearer from-file"
    assert resolve_auth_header("", path) == "Bearer from-file"


def test_resolve_without_any_credentials():
    with pytest.raises(CredentialsError):
        resolve_auth_header(None, None)
