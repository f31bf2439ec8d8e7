"""Application configuration using pydantic-settings."""

import logging
from functools import lru_cache

from pydantic import computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_ASYNC_DRIVERS = {
    "postgresql://": "postgresql+asyncpg://",
    "postgres://": "postgresql+asyncpg://",
    "sqlite://": "sqlite+aiosqlite://",
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "User Management Service"
    debug: bool = False
    environment: str = "development"  # development, staging, production

    # Database
    database_url: str = "sqlite:///./usermgmt.db"
    database_pool_size: int = 25
    database_max_overflow: int = 50
    database_echo: bool = False
    database_auto_create: bool = False

    # CORS
    cors_origins: list[str] = []

    # API Documentation
    api_docs_base_url: str = "https://api.example.com"

    # Observability
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalise the log level and reject names logging doesn't know."""
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @computed_field  # type: ignore[prop-decorator]
    @property
    def async_database_url(self) -> str:
        """Return the database URL qualified with its async driver."""
        url = self.database_url
        for prefix, async_prefix in _ASYNC_DRIVERS.items():
            if url.startswith(prefix):
                return async_prefix + url[len(prefix) :]
        return url

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_sqlite(self) -> bool:
        """Check if the configured database is SQLite."""
        return self.async_database_url.startswith("sqlite")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
