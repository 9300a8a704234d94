"""Configuration package."""

from aquaflow.config.settings import (
    GeminiSettings,
    GoogleSheetsSettings,
    RuntimeSettings,
    Settings,
    StorageSettings,
    TransliterationSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "GeminiSettings",
    "GoogleSheetsSettings",
    "RuntimeSettings",
    "Settings",
    "StorageSettings",
    "TransliterationSettings",
    "get_settings",
    "validate_all_settings",
]
