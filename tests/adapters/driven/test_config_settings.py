"""Tests for configuration loading and validation."""

import os
import subprocess
import sys
from pathlib import Path

import pytest

from vigil_reporter.adapters.driven.config.settings import (
    DEFAULT_INTERVAL_SEC,
    ConfigurationError,
    ReporterSettings,
    build_report_url,
    load_settings,
    validate_settings,
)

__all__ = []

VALID = {
    "endpoint_url": "http://host:8080",
    "token": "secret",
    "probe_id": "relay",
    "node_id": "socket-client",
    "replica_id": "192.168.1.10",
}


@pytest.fixture
def vigil_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> pytest.MonkeyPatch:
    """Populate every required VIGIL_* variable from an empty working directory."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("VIGIL_URL", "http://host:8080")
    monkeypatch.setenv("VIGIL_TOKEN", "secret")
    monkeypatch.setenv("VIGIL_PROBE_ID", "relay")
    monkeypatch.setenv("VIGIL_NODE_ID", "socket-client")
    monkeypatch.setenv("VIGIL_REPLICA_ID", "192.168.1.10")
    # Recorded before deletion so values loaded from .env are removed on teardown
    monkeypatch.setenv("VIGIL_INTERVAL_SECONDS", "")
    monkeypatch.delenv("VIGIL_INTERVAL_SECONDS")
    return monkeypatch


def test_build_report_url_plain_identifiers() -> None:
    assert (
        build_report_url("http://host:8080", "relay", "socket-client")
        == "http://host:8080/reporter/relay/socket-client/"
    )


def test_build_report_url_escapes_identifiers() -> None:
    """Identifiers should be query-escaped, including slashes and spaces."""
    url = build_report_url("http://host:8080", "my probe/1", "node&x=y")

    assert url == "http://host:8080/reporter/my+probe%2F1/node%26x%3Dy/"


def test_validate_settings_applies_default_interval() -> None:
    settings = validate_settings(**VALID, interval_sec=None)

    assert settings.interval_sec == DEFAULT_INTERVAL_SEC == 30.0


def test_to_config_derives_report_url() -> None:
    config = validate_settings(**VALID).to_config()

    assert config.report_url == "http://host:8080/reporter/relay/socket-client/"
    assert config.replica_id == "192.168.1.10"
    assert config.token == "secret"


@pytest.mark.parametrize("field", ["probe_id", "node_id", "replica_id"])
@pytest.mark.parametrize("value", [None, ""])
def test_validate_settings_rejects_missing_identifier(field: str, value: str | None) -> None:
    """Missing or empty identifiers should be configuration errors."""
    values = {**VALID, field: value}

    with pytest.raises(ConfigurationError, match=f"missing {field}"):
        validate_settings(**values)


@pytest.mark.parametrize("interval", [0, -5])
def test_validate_settings_rejects_non_positive_interval(interval: float) -> None:
    with pytest.raises(ConfigurationError, match="interval_sec"):
        validate_settings(**VALID, interval_sec=interval)


@pytest.mark.parametrize("url", ["not a url", "ftp://host:21"])
def test_validate_settings_rejects_invalid_endpoint(url: str) -> None:
    with pytest.raises(ConfigurationError, match="endpoint_url"):
        validate_settings(**{**VALID, "endpoint_url": url})


def test_validate_settings_accepts_ipv6_endpoint() -> None:
    settings = validate_settings(**{**VALID, "endpoint_url": "http://[::1]:8080"})

    assert settings.to_config().report_url == "http://[::1]:8080/reporter/relay/socket-client/"


def test_configuration_error_is_value_error() -> None:
    assert issubclass(ConfigurationError, ValueError)


def test_load_settings_success(vigil_env: pytest.MonkeyPatch) -> None:
    """load_settings should build settings when the environment is valid."""
    vigil_env.setenv("VIGIL_INTERVAL_SECONDS", "15")

    settings = load_settings()

    assert isinstance(settings, ReporterSettings)
    assert settings.probe_id == "relay"
    assert settings.interval_sec == 15.0


def test_load_settings_default_interval(vigil_env: pytest.MonkeyPatch) -> None:
    assert load_settings().interval_sec == 30.0


def test_load_settings_missing_variable(vigil_env: pytest.MonkeyPatch) -> None:
    vigil_env.delenv("VIGIL_REPLICA_ID")

    with pytest.raises(RuntimeError, match="VIGIL_REPLICA_ID"):
        load_settings()


@pytest.mark.parametrize("raw", ["-5", "0", "soon"])
def test_load_settings_invalid_interval(vigil_env: pytest.MonkeyPatch, raw: str) -> None:
    vigil_env.setenv("VIGIL_INTERVAL_SECONDS", raw)

    with pytest.raises(RuntimeError, match="VIGIL_INTERVAL_SECONDS must be a positive number"):
        load_settings()


def test_load_settings_empty_identifier(vigil_env: pytest.MonkeyPatch) -> None:
    vigil_env.setenv("VIGIL_NODE_ID", "")

    with pytest.raises(ConfigurationError, match="missing node_id"):
        load_settings()


def test_load_settings_reads_dotenv_from_working_directory(
    vigil_env: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    """load_settings should pick up a .env file without overriding set variables."""
    (tmp_path / ".env").write_text("VIGIL_INTERVAL_SECONDS=12\nVIGIL_PROBE_ID=from-dotenv\n")

    settings = load_settings()

    assert settings.interval_sec == 12.0
    assert settings.probe_id == "relay"


def test_importing_reporter_leaves_environment_untouched(tmp_path: Path) -> None:
    """Importing the library should never load a host's .env file."""
    (tmp_path / ".env").write_text("VIGIL_IMPORT_MARKER=from_dotenv\n")
    repo_root = Path(__file__).resolve().parents[3]
    env = {k: v for k, v in os.environ.items() if k != "VIGIL_IMPORT_MARKER"}
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(repo_root), env.get("PYTHONPATH")]))

    result = subprocess.run(
        [
            sys.executable,
            "-c",
            "import os, vigil_reporter.reporter; "
            "print(os.environ.get('VIGIL_IMPORT_MARKER', '<unset>'))",
        ],
        cwd=tmp_path,
        env=env,
        capture_output=True,
        text=True,
        check=True,
    )

    assert result.stdout.strip() == "<unset>"
