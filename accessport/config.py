"""
Configuration management for the data access layer.

Loads and validates environment variables for the application.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    """

    # Service Configuration
    APP_NAME: str = "accessport"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Record Store Configuration
    DATABASE_URL: str = "sqlite:///./accessport.db"
    DATABASE_ECHO: bool = False
    DATABASE_POOL_PRE_PING: bool = True
    SLOW_QUERY_THRESHOLD_MS: int = 100

    # Pagination
    DEFAULT_PAGE_SIZE: int = 50
    MAX_PAGE_SIZE: int = 500

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get the cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
