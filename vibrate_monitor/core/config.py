"""
Application configuration loaded from environment variables.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file = ".env",
        env_file_encoding = "utf-8",
        populate_by_name = True
    )

    # Database
    database_url: str = Field(default="sqlite+aiosqlite:///./vibrate.db", alias="DATABASE_URL")

    # Application
    app_name: str = Field(default="Vibrate Monitor", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    port: int = Field(default=5000, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    frontend_url: str = Field(default="http://localhost:3000", alias="FRONTEND_URL")

    # Bearer tokens
    jwt_secret: str = Field(default="change-me-in-production", alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    jwt_expires_days: int = Field(default=7, alias="JWT_EXPIRES_DAYS")

    # Bootstrap account
    super_admin_email: str = Field(default="admin@vibratemonitor.com", alias="SUPER_ADMIN_EMAIL")
    super_admin_password: str = Field(default="SuperAdmin123!", alias="SUPER_ADMIN_PASSWORD")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
