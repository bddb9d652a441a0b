"""Configuration management for Bookxpert."""

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BALANCE_SHEET_URL = (
    "https://fssservices.bookxpert.co/GeneratedPDF/Companies/nadc/2024-2025/BalanceSheet.pdf"
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = "postgresql://localhost:5432/bookxpert"
    db_pool_min_size: int = 2
    db_pool_max_size: int = 10
    storage_backend: str = "postgres"

    # API
    host: str = "0.0.0.0"
    port: int = Field(
        default=19200,
        validation_alias=AliasChoices("port", "bookxpert_port"),
        description="API port (checks PORT, then BOOKXPERT_PORT, defaults to 19200)",
    )
    debug: bool = False

    # Remote sources
    catalogue_url: str = "https://api.restful-api.dev/objects"
    catalogue_source: str = "rest"
    balance_sheet_url: str = BALANCE_SHEET_URL
    http_timeout: float = 30.0

    # Cache policy
    prune_stale_records: bool = True

    # Logging
    log_level: str = "INFO"

    @field_validator("storage_backend")
    @classmethod
    def validate_storage_backend(cls, v: str) -> str:
        """Validate storage backend is one of the supported options."""
        valid_backends = {"postgres", "memory"}
        if v.lower() not in valid_backends:
            raise ValueError(
                f"Invalid STORAGE_BACKEND: '{v}'. "
                f"Must be one of: {', '.join(sorted(valid_backends))}"
            )
        return v.lower()

    @field_validator("catalogue_source")
    @classmethod
    def validate_catalogue_source(cls, v: str) -> str:
        """Validate catalogue source is one of the supported options."""
        valid_sources = {"rest", "mock"}
        if v.lower() not in valid_sources:
            raise ValueError(
                f"Invalid CATALOGUE_SOURCE: '{v}'. "
                f"Must be one of: {', '.join(sorted(valid_sources))}"
            )
        return v.lower()

    @model_validator(mode="after")
    def validate_timeouts(self) -> "Settings":
        """Reject timeouts that would make every remote call fail."""
        if self.http_timeout <= 0:
            raise ValueError(
                f"HTTP_TIMEOUT must be positive, got {self.http_timeout}"
            )
        return self


# Lazy settings initialization
_settings = None


def get_settings() -> Settings:
    """Get the settings instance, creating it if needed."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next access re-reads the environment."""
    global _settings
    _settings = None


# This will be accessed as a property
class SettingsProxy:
    """Proxy to provide attribute access to settings."""

    def __getattr__(self, name):
        return getattr(get_settings(), name)

    def __setattr__(self, name, value):
        setattr(get_settings(), name, value)


settings = SettingsProxy()
