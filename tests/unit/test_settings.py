"""Unit tests for Settings and the staging flag."""

import pytest

from emarsys_client.config import (
    ENDPOINT_URL,
    MOCK_URL,
    Settings,
    parse_bool,
    resolve_staging,
)


class TestSettings:
    def test_loads_credentials_from_env(self):
        settings = Settings(_env_file=None)
        assert settings.user == "test-user"
        assert settings.secret == "test-secret"
        assert settings.has_credentials

    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.api_base_url == ENDPOINT_URL
        assert settings.request_timeout == 120.0
        assert settings.max_retries == 5
        assert settings.staging is False
        assert settings.log_level == "INFO"

    def test_mock_server_overrides_base_url(self, monkeypatch):
        monkeypatch.setenv("EMARSYS_USE_MOCK_SERVER", "true")
        assert Settings(_env_file=None).api_base_url == MOCK_URL

    def test_custom_base_url_trailing_slash(self, monkeypatch):
        monkeypatch.setenv("EMARSYS_API_BASE_URL", "https://proxy.example.com/")
        assert Settings(_env_file=None).api_base_url == "https://proxy.example.com"

    def test_missing_secret(self, monkeypatch):
        monkeypatch.delenv("EMARSYS_SECRET")
        assert not Settings(_env_file=None).has_credentials

    def test_invalid_retry_count(self, monkeypatch):
        monkeypatch.setenv("EMARSYS_MAX_RETRIES", "-1")
        with pytest.raises(ValueError):
            Settings(_env_file=None)


class TestStaging:
    def test_enabled_without_env_var(self):
        assert resolve_staging() is True

    @pytest.mark.parametrize("value", ["1", "t", "T", "true", "TRUE", "True"])
    def test_truthy_env_var(self, monkeypatch, value):
        monkeypatch.setenv("IS_STAGING", value)
        assert resolve_staging("IS_STAGING") is True

    @pytest.mark.parametrize("value", ["0", "false", "yes", ""])
    def test_falsy_or_invalid_env_var(self, monkeypatch, value):
        monkeypatch.setenv("IS_STAGING", value)
        assert resolve_staging("IS_STAGING") is False

    def test_unset_env_var(self, monkeypatch):
        monkeypatch.delenv("IS_STAGING", raising=False)
        assert resolve_staging("IS_STAGING") is False

    def test_parse_bool_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_bool("maybe")
