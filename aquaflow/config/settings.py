"""
Configuration Management for AquaFlow

Uses pydantic-settings for type-safe configuration from environment variables.

All infrastructure configuration is centralized here: which storage backend
to use, Gemini credentials, the transliteration endpoint and logging.

Note: the company details printed on bills (``AppSettings`` in
``aquaflow.models``) are business data, not configuration. They live in
the key-value store and are loaded through ``AppSettingsRepository``.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Key-value store backend configuration."""

    model_config = SettingsConfigDict(
        env_prefix="AQUAFLOW_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    backend: Literal["memory", "json", "google_sheets"] = Field(
        default="json",
        description="Which key-value backend to use"
    )
    data_dir: str = Field(
        default="./data",
        description="Directory for the json backend (one file per key)"
    )
    key_prefix: str = Field(
        default="aquaflow_",
        description="Prefix for every collection key"
    )


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )
    worksheet_name: str = Field(
        default="KeyValueStore",
        description="Name of the worksheet holding key/value rows"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class GeminiSettings(BaseSettings):
    """
    Gemini LLM configuration.

    The API key is optional: without it the insight generator answers
    with an explanatory message instead of calling the model.
    """

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_key: Optional[str] = Field(
        default=None,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=1024,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.4,
        ge=0.0,
        le=1.0,
        description="Model temperature"
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_key.strip())


class TransliterationSettings(BaseSettings):
    """Transliteration (Google Input Tools) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TRANSLITERATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    enabled: bool = Field(
        default=True,
        description="Turn off to skip all transliteration calls"
    )
    endpoint: str = Field(
        default="https://inputtools.google.com/request",
        description="Input tools request endpoint"
    )
    input_tool: str = Field(
        default="hi-t-i0-und",
        description="Input tool code (Hindi transliteration by default)"
    )
    debounce_seconds: float = Field(
        default=0.3,
        ge=0.0,
        le=5.0,
        description="Quiet period after the last keystroke before calling out"
    )


class RuntimeSettings(BaseSettings):
    """
    Process-level settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum log level"
    )
    log_json: bool = Field(
        default=True,
        description="Render logs as JSON (console renderer otherwise)"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def transliteration(self) -> TransliterationSettings:
        return TransliterationSettings()

    @property
    def runtime(self) -> RuntimeSettings:
        return RuntimeSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with a
    ``<name>_error`` entry for each failure. Useful for startup checks.
    """
    results = {}
    settings = get_settings()

    checks = {
        "storage": lambda: settings.storage,
        "google_sheets": lambda: settings.google_sheets,
        "gemini": lambda: settings.gemini,
        "transliteration": lambda: settings.transliteration,
        "runtime": lambda: settings.runtime,
    }
    for name, load in checks.items():
        try:
            load()
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
