"""
Unit tests for CLI settings.
"""

import pytest
from pydantic import ValidationError

from elvdoc.config import Settings, get_settings


class TestSettings:
    """Tests for Settings."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in (
            "ELVDOC_LOG_LEVEL",
            "ELVDOC_LOG_FORMAT",
            "ELVDOC_COMPRESSLEVEL",
            "ELVDOC_SOURCE_MTIME",
        ):
            monkeypatch.delenv(name, raising=False)
        get_settings.cache_clear()
        yield
        get_settings.cache_clear()

    def test_defaults(self):
        settings = Settings()

        assert settings.log_level == "INFO"
        assert settings.log_format == "text"
        assert settings.compresslevel == 9
        assert settings.source_mtime is None

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("ELVDOC_LOG_FORMAT", "json")
        monkeypatch.setenv("ELVDOC_COMPRESSLEVEL", "3")
        monkeypatch.setenv("ELVDOC_SOURCE_MTIME", "1700000000")

        settings = Settings()

        assert settings.log_format == "json"
        assert settings.compresslevel == 3
        assert settings.source_mtime == 1700000000

    def test_invalid_compresslevel(self, monkeypatch):
        monkeypatch.setenv("ELVDOC_COMPRESSLEVEL", "12")

        with pytest.raises(ValidationError):
            Settings()

    def test_invalid_log_format(self, monkeypatch):
        monkeypatch.setenv("ELVDOC_LOG_FORMAT", "xml")

        with pytest.raises(ValidationError):
            Settings()

    def test_get_settings_cached(self):
        assert get_settings() is get_settings()
