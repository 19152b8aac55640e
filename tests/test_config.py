"""
Tests for configuration loading.
"""

import pytest
from pydantic import ValidationError

from expense_ledger.config import (
    AppSettings,
    DatabaseSettings,
    get_settings,
    validate_all_settings,
)


class TestDatabaseSettings:
    """Tests for DatabaseSettings."""

    def test_default_url(self, monkeypatch):
        """Test that the default points at the local expenses database."""
        monkeypatch.delenv("EXPENSES_DB_URL", raising=False)
        assert DatabaseSettings().url == "postgresql+psycopg2:///expenses"

    def test_url_from_environment(self, monkeypatch):
        """Test the EXPENSES_DB_ prefix."""
        monkeypatch.setenv("EXPENSES_DB_URL", "sqlite:///ledger.db")
        monkeypatch.setenv("EXPENSES_DB_ECHO", "true")
        settings = DatabaseSettings()
        assert settings.url == "sqlite:///ledger.db"
        assert settings.echo is True

    def test_rejects_non_url(self, monkeypatch):
        """Test that a bare name is not accepted as a URL."""
        monkeypatch.setenv("EXPENSES_DB_URL", "expenses")
        with pytest.raises(ValidationError):
            DatabaseSettings()


class TestAppSettings:
    """Tests for AppSettings."""

    def test_log_level_normalized(self, monkeypatch):
        """Test that log levels are upper-cased."""
        monkeypatch.setenv("LOG_LEVEL", "info")
        assert AppSettings().log_level == "INFO"

    def test_unknown_log_level(self, monkeypatch):
        """Test that unknown levels are rejected."""
        monkeypatch.setenv("LOG_LEVEL", "loud")
        with pytest.raises(ValidationError):
            AppSettings()

    def test_debug_mode_overrides_level(self, monkeypatch):
        """Test that debug mode logs everything."""
        monkeypatch.setenv("DEBUG_MODE", "true")
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        assert AppSettings().effective_log_level == "DEBUG"


class TestSettingsAccess:
    """Tests for the cached root settings."""

    def test_get_settings_is_cached(self):
        """Test that settings are loaded once."""
        assert get_settings() is get_settings()

    def test_validate_all_settings(self, monkeypatch):
        """Test the startup report."""
        monkeypatch.setenv("EXPENSES_DB_URL", "not a url")
        results = validate_all_settings()
        assert results["database"] is False
        assert "database_error" in results
        assert results["app"] is True
