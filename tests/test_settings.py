"""Unit tests for environment driven configuration."""

import pytest
from pydantic import ValidationError

from settings import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("PORT", "ICON_FORGE_PORT", "ICON_FORGE_LOG_LEVEL", "ICON_FORGE_CACHE_MAX_AGE",
                 "ICON_FORGE_TEMPLATE_PATH", "ICON_FORGE_CORS_ORIGINS"):
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    """Test defaults and environment overrides."""

    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.port == 3000
        assert settings.log_level == "INFO"
        assert settings.cache_max_age == 86400
        assert settings.template_path is None
        assert settings.cors_origins == ["*"]

    def test_prefixed_environment(self, monkeypatch):
        monkeypatch.setenv("ICON_FORGE_CACHE_MAX_AGE", "3600")
        monkeypatch.setenv("ICON_FORGE_TEMPLATE_PATH", "/srv/icons/template.svg")
        monkeypatch.setenv("ICON_FORGE_CORS_ORIGINS", '["https://example.com"]')

        settings = Settings(_env_file=None)
        assert settings.cache_max_age == 3600
        assert settings.template_path == "/srv/icons/template.svg"
        assert settings.cors_origins == ["https://example.com"]

    def test_plain_port_variable(self, monkeypatch):
        monkeypatch.setenv("PORT", "8080")
        assert Settings(_env_file=None).port == 8080

    def test_prefixed_port_wins(self, monkeypatch):
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("ICON_FORGE_PORT", "9090")
        assert Settings(_env_file=None).port == 9090

    def test_log_level_normalized(self, monkeypatch):
        monkeypatch.setenv("ICON_FORGE_LOG_LEVEL", "debug")
        assert Settings(_env_file=None).log_level == "DEBUG"

    def test_invalid_log_level(self, monkeypatch):
        monkeypatch.setenv("ICON_FORGE_LOG_LEVEL", "chatty")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_negative_cache_max_age(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, cache_max_age=-1)
