"""Configuration package."""

from expense_tracker.config.settings import (
    AppSettings,
    AuthSettings,
    ClientSettings,
    DatabaseSettings,
    DEVELOPMENT_SECRET_KEY,
    InsecureSettingsError,
    Settings,
    check_secret_key,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "AuthSettings",
    "ClientSettings",
    "DatabaseSettings",
    "DEVELOPMENT_SECRET_KEY",
    "InsecureSettingsError",
    "Settings",
    "check_secret_key",
    "get_settings",
    "validate_all_settings",
]
