"""
Configuration Management for Expense Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from expense_tracker.models.expense import MAX_NOTES_LENGTH


class ApiSettings(BaseSettings):
    """Remote expense API configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    base_url: str = Field(
        default="https://expense-app-rust.vercel.app/api/expenses",
        description="Base URL of the expenses REST API"
    )
    timeout_seconds: float = Field(
        default=15.0,
        ge=1.0,
        le=120.0,
        description="Request timeout in seconds"
    )
    retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for requests that got no response"
    )

    @field_validator('base_url')
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Only http(s) endpoints, stored without a trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"API base URL must be http(s): {v}")
        return v.rstrip("/")


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
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
        description="Minimum level for structured logs"
    )
    storage_backend: str = Field(
        default="api",
        pattern="^(api|memory)$",
        description="Where expenses live: the remote API or process memory"
    )

    # Form limits
    max_expense_amount: float = Field(
        default=100000.0,
        gt=0,
        description="Largest amount a single expense may record"
    )
    max_notes_length: int = Field(
        default=MAX_NOTES_LENGTH,
        ge=1,
        le=MAX_NOTES_LENGTH,
        description="Maximum characters in the notes field"
    )

    # Analytics / list view
    default_timeframe: str = Field(
        default="last6Months",
        pattern="^(all|last6Months|last3Months)$",
        description="Timeframe selected when the analytics page opens"
    )
    search_debounce_seconds: float = Field(
        default=0.5,
        ge=0.0,
        le=5.0,
        description="Quiet period before a search refetches"
    )
    currency_symbol: str = Field(
        default="₹",
        description="Symbol shown in front of amounts"
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

    @property
    def api(self) -> ApiSettings:
        return ApiSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


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

    Returns a dict of {setting_name: is_valid}, plus a
    {setting_name}_error entry for every failure.
    """
    results = {}

    settings = get_settings()

    for name in ("api", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
