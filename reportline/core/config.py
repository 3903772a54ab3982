"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables and .env files.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _read_secret_file(path: str) -> str:
    try:
        content = Path(path).expanduser().read_text(encoding="utf-8").strip()
    except OSError as exc:
        msg = f"Could not read secret file '{path}'"
        raise ValueError(msg) from exc
    if not content:
        msg = f"Secret file '{path}' is empty"
        raise ValueError(msg)
    return content


class Settings(BaseSettings):
    """
    Application settings.

    All settings can be overridden via environment variables.
    For example, DATABASE_URL env var sets the DATABASE_URL field.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # =========================================================================
    # Database
    # =========================================================================
    DATABASE_URL: str = Field(
        default="postgresql+asyncpg://postgres@localhost:5432/reportline",
        description="Async PostgreSQL connection string",
    )
    DATABASE_URL_FILE: str | None = Field(
        default=None,
        description="Path to file containing DATABASE_URL",
    )
    DATABASE_POOL_SIZE: int = Field(default=10, ge=1, le=100)
    DATABASE_MAX_OVERFLOW: int = Field(default=20, ge=0, le=100)
    DATABASE_POOL_TIMEOUT_SECONDS: int = Field(
        default=30,
        ge=1,
        le=600,
        description="Seconds to wait for a DB connection from pool before timing out",
    )
    DATABASE_CONNECT_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        gt=0,
        description="Seconds allowed for establishing a new database connection",
    )
    DATABASE_STATEMENT_TIMEOUT_MS: int = Field(
        default=0,
        ge=0,
        description="Server-side statement_timeout pushed to PostgreSQL (0 = disabled)",
    )

    @model_validator(mode="after")
    def _load_secret_file_values(self) -> Settings:
        secret_mappings = {
            "DATABASE_URL": self.DATABASE_URL_FILE,
            "SECRET_KEY": self.SECRET_KEY_FILE,
        }
        for target_field, file_path in secret_mappings.items():
            if not file_path:
                continue
            setattr(self, target_field, _read_secret_file(file_path))
        return self

    @model_validator(mode="after")
    def _normalize_database_url(self) -> Settings:
        if self.DATABASE_URL.startswith("postgresql://"):
            # Runtime engines use asyncpg; normalize common sync-style URLs.
            self.DATABASE_URL = self.DATABASE_URL.replace(
                "postgresql://",
                "postgresql+asyncpg://",
                1,
            )
        return self

    # =========================================================================
    # Reports
    # =========================================================================
    REPORTS_QUERY_TIMEOUT_SECONDS: float = Field(
        default=15.0,
        gt=0,
        description="Deadline for the report listing query before it is cancelled",
    )

    # =========================================================================
    # Deployment
    # =========================================================================
    SERVERLESS: bool = Field(
        default=False,
        validation_alias=AliasChoices("SERVERLESS", "VERCEL"),
        description="Release store connections after every request (short-lived hosts)",
    )

    # =========================================================================
    # API
    # =========================================================================
    API_HOST: str = Field(default="0.0.0.0")  # nosec B104
    API_PORT: int = Field(default=8000, ge=1, le=65535)
    API_RELOAD: bool = Field(default=True)
    CORS_ORIGINS: list[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins",
    )

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> list[str]:
        """Parse CORS origins from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return list(v) if v else []

    # =========================================================================
    # Security
    # =========================================================================
    SECRET_KEY: str = Field(
        default="dev-secret-key-change-in-production",
        description="Secret key for signing session tokens",
    )
    SECRET_KEY_FILE: str | None = Field(
        default=None,
        description="Path to file containing SECRET_KEY",
    )
    SESSION_COOKIE_NAME: str = Field(
        default="reportline_session",
        description="Cookie carrying the signed session token",
    )
    SESSION_TTL_SECONDS: int = Field(
        default=60 * 60 * 24,
        ge=60,
        description="Lifetime of issued session tokens",
    )

    # =========================================================================
    # Application
    # =========================================================================
    ENVIRONMENT: str = Field(
        default="development",
        description="Environment: development, staging, production",
    )
    SQL_ECHO: bool = Field(
        default=False,
        description="Log SQL statements from SQLAlchemy engine",
    )
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="json", description="json or console")

    # =========================================================================
    # Integration Tests
    # =========================================================================
    INTEGRATION_DB_TRUNCATE_ALLOWED: bool = Field(
        default=False,
        description="Allow integration tests to wipe a database not named like a test database",
    )
    INTEGRATION_DB_TRUNCATE_ALLOW_REMOTE: bool = Field(
        default=False,
        description="Allow integration tests to wipe a database on a non-local host",
    )

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    @property
    def effective_log_level(self) -> str:
        """Log level, forced to DEBUG when SQL echo is on."""
        if self.SQL_ECHO:
            return "DEBUG"
        return self.LOG_LEVEL


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# Convenience instance
settings = get_settings()
