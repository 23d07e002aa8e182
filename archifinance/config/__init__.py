"""Configuration package."""

from archifinance.config.settings import (
    AppSettings,
    Settings,
    StorageSettings,
    SyncSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "Settings",
    "StorageSettings",
    "SyncSettings",
    "get_settings",
    "validate_all_settings",
]
