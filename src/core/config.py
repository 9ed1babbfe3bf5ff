"""Configuration management for the daily task backend."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database Configuration
    sqlite_db_path: str = Field(default="./data/tasks.db", description="SQLite database file path")

    # Calendar Configuration
    timezone: str = Field(default="UTC", description="IANA timezone used to decide what 'today' is")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    environment: str = Field(default="production", description="Deployment environment name")

    # Scheduler Configuration
    enable_scheduler: bool = Field(default=True, description="Run the nightly routine materialization job")
    materialize_job_hour: int = Field(
        default=0, ge=0, le=23, description="Hour of day (local timezone) for the nightly routine job"
    )
    materialize_job_minute: int = Field(default=5, ge=0, le=59, description="Minute of the nightly routine job")

    # Search Configuration
    search_result_limit: int = Field(default=50, description="Maximum number of task search results")

    @property
    def is_production(self) -> bool:
        """Return True when running in the production environment."""
        return self.environment == "production"


# Application Constants
class Constants:
    """Application-wide constants."""

    # HTTP Status Codes
    HTTP_OK: int = 200
    HTTP_NO_CONTENT: int = 204
    HTTP_BAD_REQUEST: int = 400
    HTTP_FORBIDDEN: int = 403
    HTTP_NOT_FOUND: int = 404
    HTTP_CONFLICT: int = 409
    HTTP_SERVER_ERROR: int = 500
    HTTP_SERVICE_UNAVAILABLE: int = 503

    # Task ordering
    PRIORITY_RANK: dict[str, int] = {"high": 1, "medium": 2, "low": 3}  # noqa: RUF012
    UNKNOWN_PRIORITY_RANK: int = 999

    # Search date windows (days back from today)
    SEARCH_WEEK_DAYS: int = 7
    SEARCH_MONTH_DAYS: int = 30

    # Notification defaults
    DEFAULT_NOTIFICATION_TIME: str = "10:00:00"

    # Category defaults
    DEFAULT_CATEGORY_COLOR: str = "#64748b"

    # Wishlist defaults
    DEFAULT_WISH_LIST_TITLE: str = "Wishlist"

    # Pagination Defaults
    DEFAULT_PER_PAGE_LIMIT: int = 500  # Default pagination limit for list queries

    # Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent.parent


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
