"""Tests for environment configuration."""

import pytest
from pydantic import ValidationError

from glidequery_core.config import (
    GlideQuerySettings,
    ServiceNowSettings,
    clamp_number,
    is_valid_instance_url,
    load_settings,
)

ENV_VARS = [
    "SERVICENOW_INSTANCE_URL",
    "SERVICENOW_USERNAME",
    "SERVICENOW_PASSWORD",
    "SERVICENOW_SCRIPT_ENDPOINT",
    "GLIDEQUERY_TIMEOUT",
    "GLIDEQUERY_MAX_SCRIPT_LENGTH",
    "GLIDEQUERY_TEST_MAX_RESULTS",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Start every test from an empty configuration."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def instance_env(monkeypatch):
    monkeypatch.setenv("SERVICENOW_INSTANCE_URL", "https://dev12345.service-now.com/")
    monkeypatch.setenv("SERVICENOW_USERNAME", "admin")
    monkeypatch.setenv("SERVICENOW_PASSWORD", "hunter2")


class TestClampNumber:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, 30000),
            ("", 30000),
            ("abc", 30000),
            ("45000", 45000),
            ("500", 1000),
            ("999999", 60000),
            (2000, 2000),
        ],
    )
    def test_clamp(self, value, expected):
        assert clamp_number(value, 30000, 1000, 60000) == expected


class TestInstanceUrl:
    @pytest.mark.parametrize(
        "url",
        [
            "https://dev12345.service-now.com",
            "https://acme.service-now.com/",
            "https://localhost",
        ],
    )
    def test_valid(self, url):
        assert is_valid_instance_url(url)

    @pytest.mark.parametrize(
        "url",
        [
            "http://dev12345.service-now.com",
            "dev12345.service-now.com",
            "https://",
            "https://bad_host!.com",
            "",
        ],
    )
    def test_invalid(self, url):
        assert not is_valid_instance_url(url)


class TestGlideQuerySettings:
    def test_defaults(self):
        settings = GlideQuerySettings()
        assert settings.timeout == 30000
        assert settings.max_script_length == 10000
        assert settings.test_max_results == 100
        assert settings.log_level == "info"

    def test_values_from_env(self, monkeypatch):
        monkeypatch.setenv("GLIDEQUERY_TIMEOUT", "45000")
        monkeypatch.setenv("GLIDEQUERY_MAX_SCRIPT_LENGTH", "20000")
        monkeypatch.setenv("GLIDEQUERY_TEST_MAX_RESULTS", "250")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        settings = GlideQuerySettings()

        assert settings.timeout == 45000
        assert settings.max_script_length == 20000
        assert settings.test_max_results == 250
        assert settings.log_level == "debug"

    def test_out_of_range_values_clamped(self, monkeypatch):
        monkeypatch.setenv("GLIDEQUERY_TIMEOUT", "120000")
        monkeypatch.setenv("GLIDEQUERY_MAX_SCRIPT_LENGTH", "10")
        monkeypatch.setenv("GLIDEQUERY_TEST_MAX_RESULTS", "5000")

        settings = GlideQuerySettings()

        assert settings.timeout == 60000
        assert settings.max_script_length == 100
        assert settings.test_max_results == 1000

    def test_unparseable_value_uses_default(self, monkeypatch):
        monkeypatch.setenv("GLIDEQUERY_TIMEOUT", "soon")
        assert GlideQuerySettings().timeout == 30000

    def test_invalid_log_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "verbose")
        with pytest.raises(ValidationError, match="Invalid LOG_LEVEL"):
            GlideQuerySettings()

    def test_catalog_uses_configured_length(self, monkeypatch):
        monkeypatch.setenv("GLIDEQUERY_MAX_SCRIPT_LENGTH", "500")
        catalog = GlideQuerySettings().catalog()
        assert catalog.max_script_length == 500
        assert "deleteMultiple" in catalog.require_confirmation


class TestServiceNowSettings:
    def test_loaded_from_env(self, instance_env):
        settings = ServiceNowSettings()
        assert settings.instance_url == "https://dev12345.service-now.com"
        assert settings.username == "admin"
        assert settings.password.get_secret_value() == "hunter2"
        assert settings.script_endpoint == "/api/now/v1/script/execute"

    def test_password_not_echoed(self, instance_env):
        assert "hunter2" not in repr(ServiceNowSettings())

    def test_http_url_rejected(self, instance_env, monkeypatch):
        monkeypatch.setenv("SERVICENOW_INSTANCE_URL", "http://dev12345.service-now.com")
        with pytest.raises(ValidationError, match="Invalid ServiceNow URL format"):
            ServiceNowSettings()

    def test_missing_credentials(self, monkeypatch):
        monkeypatch.setenv("SERVICENOW_INSTANCE_URL", "https://dev12345.service-now.com")
        with pytest.raises(ValidationError):
            ServiceNowSettings()


def test_load_settings(instance_env, monkeypatch):
    monkeypatch.setenv("GLIDEQUERY_TEST_MAX_RESULTS", "20")

    settings = load_settings()

    assert settings.servicenow.username == "admin"
    assert settings.glidequery.test_max_results == 20
