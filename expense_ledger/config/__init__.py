"""Configuration package."""

from expense_ledger.config.settings import (
    AppSettings,
    DatabaseSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "DatabaseSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
