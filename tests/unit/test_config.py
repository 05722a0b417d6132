"""Tests for runtime config — env-driven settings and startup errors."""

from __future__ import annotations

import ssl
from pathlib import Path

import pytest

from pollwatch.config import WatchConfig, load_config
from pollwatch.core.errors import ConfigError, ConfigErrorKind


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Keep the developer's POLLWATCH_* variables and .env out of the tests."""
    monkeypatch.chdir(tmp_path)
    import os

    for key in list(os.environ):
        if key.startswith("POLLWATCH_"):
            monkeypatch.delenv(key)


class TestWatchConfig:
    def test_defaults(self):
        config = WatchConfig()
        assert config.poll_interval_seconds == 60
        assert config.operation_scope is None
        assert config.max_transient_failures == 3
        assert config.verify_tls is True

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("POLLWATCH_POLL_INTERVAL_SECONDS", "300")
        monkeypatch.setenv("POLLWATCH_OPERATION_SCOPE", "cluster-01")
        config = WatchConfig()
        assert config.poll_interval_seconds == 300
        assert config.operation_scope == "cluster-01"

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("POLLWATCH_MAX_TRANSIENT_FAILURES=5\n")
        assert WatchConfig().max_transient_failures == 5

    def test_masked_hides_secrets(self):
        config = WatchConfig(vcenter_password="hunter2")
        masked = config.masked()
        assert masked["vcenter_password"] == "********"
        assert "hunter2" not in str(masked)


class TestLoadConfig:
    def test_none_overrides_fall_through(self, monkeypatch):
        monkeypatch.setenv("POLLWATCH_POLL_INTERVAL_SECONDS", "120")
        config = load_config(poll_interval_seconds=None, operation_scope="rg-prod")
        assert config.poll_interval_seconds == 120
        assert config.operation_scope == "rg-prod"

    @pytest.mark.parametrize("interval", [0, -5])
    def test_non_positive_interval_is_invalid(self, interval):
        with pytest.raises(ConfigError) as excinfo:
            load_config(poll_interval_seconds=interval)
        assert excinfo.value.kind == ConfigErrorKind.INVALID
        assert "poll_interval_seconds" in excinfo.value.message

    def test_malformed_env_value_is_invalid(self, monkeypatch):
        monkeypatch.setenv("POLLWATCH_POLL_INTERVAL_SECONDS", "often")
        with pytest.raises(ConfigError) as excinfo:
            load_config()
        assert excinfo.value.kind == ConfigErrorKind.INVALID


class TestRequire:
    def test_missing_value(self):
        with pytest.raises(ConfigError) as excinfo:
            WatchConfig().require("vcenter_server")
        assert excinfo.value.kind == ConfigErrorKind.MISSING
        assert "POLLWATCH_VCENTER_SERVER" in excinfo.value.message

    def test_empty_secret_is_missing(self):
        with pytest.raises(ConfigError):
            WatchConfig(azure_token="").require("azure_token")

    def test_present_value(self):
        config = WatchConfig(vcenter_server="https://vcsa.example.com")
        assert config.require("vcenter_server") == "https://vcsa.example.com"


class TestCertificateTrust:
    def test_verify_by_default(self):
        assert WatchConfig().httpx_verify() is True

    def test_insecure(self):
        assert WatchConfig(verify_tls=False).httpx_verify() is False

    def test_missing_ca_bundle(self, tmp_path: Path):
        config = WatchConfig(ca_bundle=tmp_path / "missing.pem")
        with pytest.raises(ConfigError) as excinfo:
            config.httpx_verify()
        assert excinfo.value.kind == ConfigErrorKind.INVALID

    def test_ca_bundle_builds_context(self, tmp_path: Path, monkeypatch):
        bundle = tmp_path / "ca.pem"
        bundle.write_text("placeholder")
        seen = {}

        def fake_context(cafile=None):
            seen["cafile"] = cafile
            return ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)

        monkeypatch.setattr(ssl, "create_default_context", fake_context)
        context = WatchConfig(ca_bundle=bundle).httpx_verify()
        assert isinstance(context, ssl.SSLContext)
        assert seen["cafile"] == str(bundle)
