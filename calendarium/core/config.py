"""
Core configuration module using Pydantic Settings.

This module defines all application settings loaded from environment variables.
All configuration must go through this Settings class - NO hardcoded values.
"""

from typing import Literal
from urllib.parse import quote_plus

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are loaded from .env file or environment variables.
    Settings are validated using Pydantic with type hints.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------
    app_name: str = Field(default="Calendarium")
    version: str = Field(default="0.1.0")
    description: str = Field(
        default="Calendaring backend: sessions, roles, calendars, events and sharing"
    )
    environment: Literal["development", "staging", "production"] = Field(default="development")
    debug: bool = Field(default=False)

    # -------------------------------------------------------------------------
    # Server Configuration
    # -------------------------------------------------------------------------
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, ge=1, le=65535)

    # -------------------------------------------------------------------------
    # Session Settings
    # -------------------------------------------------------------------------
    session_ttl_minutes: int = Field(default=60, ge=1, le=1440)
    min_password_length: int = Field(default=6, ge=1)

    # Argon2id Password Hashing Configuration
    argon2_time_cost: int = Field(default=2, ge=1, le=10)
    argon2_memory_cost: int = Field(default=65536, ge=8)  # 64 MB
    argon2_parallelism: int = Field(default=4, ge=1, le=16)

    # -------------------------------------------------------------------------
    # Database Configuration
    # -------------------------------------------------------------------------
    db_user: str = Field(default="root")
    db_password: str = Field(default="")
    db_host: str = Field(default="localhost")
    db_port: int = Field(default=3306)
    db_name: str = Field(default="calendar")
    database_url: str | None = Field(
        default=None,
        description="Full SQLAlchemy URL, overrides the DB_* parts when set",
    )
    db_create_schema: bool = Field(
        default=False,
        description="Run create_all at startup (development only; use alembic upgrade head)",
    )

    # Connection Pool Settings
    db_pool_size: int = Field(default=5, ge=1, le=50)
    db_max_overflow: int = Field(default=10, ge=0, le=100)
    db_pool_recycle: int = Field(default=3600, ge=300)  # Seconds
    db_pool_pre_ping: bool = Field(default=True)
    db_pool_timeout: int = Field(default=30, ge=1)

    # -------------------------------------------------------------------------
    # CORS Settings
    # -------------------------------------------------------------------------
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        description="Comma-separated list of allowed CORS origins"
    )
    cors_allow_credentials: bool = Field(default=True)

    # -------------------------------------------------------------------------
    # Rate Limiting
    # -------------------------------------------------------------------------
    rate_limit_enabled: bool = Field(default=True)
    rate_limit_storage_uri: str = Field(default="memory://")
    rate_limit_default: str = Field(default="300/minute")
    rate_limit_login: str = Field(default="10/minute")
    rate_limit_signup: str = Field(default="5/minute")
    rate_limit_refresh: str = Field(default="30/minute")

    # -------------------------------------------------------------------------
    # Geolocation
    # -------------------------------------------------------------------------
    geolocation_enabled: bool = Field(default=True)
    geolocation_url: str = Field(default="http://ip-api.com/json/{ip}")
    geolocation_timeout: float = Field(default=5.0, gt=0, le=5.0)

    # -------------------------------------------------------------------------
    # Logging Configuration
    # -------------------------------------------------------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )
    log_format: Literal["json", "console"] = Field(default="console")
    log_file_enabled: bool = Field(default=False)
    log_file_path: str = Field(default="logs/app.log")
    log_file_max_bytes: int = Field(default=10485760)  # 10 MB
    log_file_backup_count: int = Field(default=5)

    # -------------------------------------------------------------------------
    # Testing Configuration
    # -------------------------------------------------------------------------
    test_db_user: str | None = Field(default=None)
    test_db_password: str | None = Field(default=None)
    test_db_host: str | None = Field(default=None)
    test_db_name: str | None = Field(default=None)
    test_database_url: str | None = Field(
        default=None,
        description="Separate database for testing"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept lowercase level names from the environment."""
        return v.upper() if isinstance(v, str) else v

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def cors_origins_list(self) -> list[str]:
        """Get parsed CORS origins as list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def database_url_str(self) -> str:
        """Get database URL as string, assembled from DB_* when not given."""
        if self.database_url:
            return self.database_url
        return _mysql_url(self.db_user, self.db_password, self.db_host, self.db_port, self.db_name)

    @property
    def test_database_url_str(self) -> str | None:
        """Get the test database URL, if one is configured."""
        if self.test_database_url:
            return self.test_database_url
        if self.test_db_host and self.test_db_name:
            return _mysql_url(
                self.test_db_user or self.db_user,
                self.test_db_password or "",
                self.test_db_host,
                self.db_port,
                self.test_db_name,
            )
        return None


def _mysql_url(user: str, password: str, host: str, port: int, name: str) -> str:
    return (
        f"mysql+aiomysql://{quote_plus(user)}:{quote_plus(password)}"
        f"@{host}:{port}/{name}?charset=utf8mb4"
    )


# Singleton instance of settings
# Import this instance throughout the application
settings = Settings()
